"""Persistence adapters.

Select one at construction time: :class:`RedisStore` for durable
history, :class:`InMemoryStore` or :class:`NullStore` for tests and
single-process setups.
"""

from kegscale.persistence.base import DEFAULT_RETENTION, MeasurementStore
from kegscale.persistence.memory import InMemoryStore, NullStore
from kegscale.persistence.redis_store import RedisStore

__all__ = [
    "DEFAULT_RETENTION",
    "InMemoryStore",
    "MeasurementStore",
    "NullStore",
    "RedisStore",
]
