"""Time-boxed cache in front of the rate-limited traffic quota lookup."""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .hetzner import ServerTraffic
from .metrics import round_half_up

FRESHNESS_WINDOW_SECONDS = 60.0


@dataclass(frozen=True)
class TrafficReading:
    value: Optional[float]
    current: bool


class TrafficQuotaCache:
    """Single-entry cache holding the last traffic percentage.

    Check, fetch and update all happen under one lock, so concurrent requests
    wait on a single lookup instead of each calling the API. When a refresh
    fails the last known good value is returned with ``current=False``; if
    nothing was ever fetched the value is ``None``.
    """

    def __init__(
        self,
        lookup: Callable[[int], ServerTraffic],
        ttl: float = FRESHNESS_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._lookup = lookup
        self._ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._value: Optional[float] = None
        self._last_updated: Optional[float] = None

    def get(self, server_id: int) -> TrafficReading:
        with self._lock:
            now = self._clock()
            if self._last_updated is not None and now - self._last_updated < self._ttl:
                return TrafficReading(self._value, current=True)

            try:
                traffic = self._lookup(server_id)
            except Exception as exc:  # pylint: disable=broad-except
                logging.error("Traffic lookup for server %s failed: %s", server_id, exc)
                return TrafficReading(self._value, current=False)

            if traffic.included <= 0:
                logging.error(
                    "Server %s reports no included traffic (%s); keeping previous value",
                    server_id,
                    traffic.included,
                )
                return TrafficReading(self._value, current=False)

            self._value = round_half_up(traffic.outgoing / traffic.included * 100)
            self._last_updated = now
            logging.debug("Traffic usage for server %s refreshed: %.0f%%", server_id, self._value)
            return TrafficReading(self._value, current=True)
