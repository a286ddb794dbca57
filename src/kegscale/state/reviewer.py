"""Periodic background venue re-evaluation."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

_logger = logging.getLogger(__name__)

#: Seconds between re-evaluations.
DEFAULT_REVIEW_INTERVAL: float = 15.0


class VenueReviewer:
    """Daemon thread calling ``review`` every ``interval`` seconds.

    The loop sleeps on a :class:`threading.Event`, so :meth:`stop`
    interrupts the wait immediately instead of waiting out the interval.
    """

    def __init__(
        self,
        review: Callable[[], object],
        *,
        interval: float = DEFAULT_REVIEW_INTERVAL,
        name: str = "kegscale-venue-reviewer",
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._review = review
        self._interval = interval
        self._name = name
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def is_running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def start(self) -> None:
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                return
            self._stop_event.clear()
            self._thread = threading.Thread(target=self._run_loop, name=self._name, daemon=True)
            self._thread.start()
        _logger.info("Venue reviewer started (interval=%.1fs)", self._interval)

    def stop(self, timeout: float | None = 5.0) -> None:
        """Signal the loop to exit and wait for it. Safe to call repeatedly."""
        with self._lock:
            thread = self._thread
            self._thread = None
            self._stop_event.set()
        if thread is None:
            return
        thread.join(timeout=timeout)
        if thread.is_alive():
            _logger.warning("Venue reviewer did not stop within %.1fs", timeout or 0.0)
        else:
            _logger.info("Venue reviewer stopped")

    def _run_loop(self) -> None:
        while not self._stop_event.wait(self._interval):
            _logger.debug("Venue review tick")
            try:
                self._review()
            except Exception:
                _logger.exception("Venue review failed, retrying in %.1fs", self._interval)
