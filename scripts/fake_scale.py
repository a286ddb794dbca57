#!/usr/bin/env python3
"""Fake keg scale for manual testing of a running kegscale service.

Posts telemetry to ``/api/scale/message`` the way the firmware does:
a ``push`` with the current weight every ``--push-every`` messages and
``ping`` otherwise. The weight slowly drains to imitate beer being
poured.

Example::

    KEGSCALE_AUTH_TOKEN=dev kegscale serve &
    python scripts/fake_scale.py --token dev --interval 2
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import random
import sys
from pathlib import Path

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

import aiohttp  # noqa: E402

from kegscale.parser import parse_scale_message  # noqa: E402

_LOG = logging.getLogger("fake_scale")


def _build_message(kind: str, message_id: int, rssi: float, weight: float) -> str:
    value = f"{weight:.2f}" if kind == "push" else ""
    raw = f"{kind}|{message_id}|{rssi:.1f}|{value}"
    # Catch typos here rather than as 400s from the server.
    parse_scale_message(raw)
    return raw


async def _run(args: argparse.Namespace) -> int:
    url = args.url.rstrip("/") + "/api/scale/message"
    weight = args.start_weight
    sent = 0

    async with aiohttp.ClientSession(headers={"Authorization": args.token}) as session:
        for message_id in range(1, args.count + 1):
            kind = "push" if message_id % args.push_every == 0 else "ping"
            rssi = random.uniform(-85.0, -55.0)
            raw = _build_message(kind, message_id, rssi, weight)

            async with session.post(url, data=raw) as resp:
                body = await resp.text()
                if resp.status != 200:
                    _LOG.error("%s -> %d %s", raw, resp.status, body)
                    return 1
            _LOG.info("sent %s", raw)
            sent += 1

            weight = max(0.0, weight - random.uniform(0.0, args.pour))
            await asyncio.sleep(args.interval)

    _LOG.info("done, %d messages sent", sent)
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--url", default="http://127.0.0.1:8080")
    parser.add_argument("--token", required=True, help="Authorization header value")
    parser.add_argument("--count", type=int, default=20)
    parser.add_argument("--interval", type=float, default=5.0, help="Seconds between messages")
    parser.add_argument("--push-every", type=int, default=3)
    parser.add_argument("--start-weight", type=float, default=58000.0, help="Grams")
    parser.add_argument("--pour", type=float, default=500.0, help="Max grams drained per message")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
