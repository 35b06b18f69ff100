"""Parallel collection of all metric groups into one snapshot."""
from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Optional

from . import metrics
from .cache import TrafficQuotaCache
from .config import Settings


@dataclass
class Snapshot:
    ramUsagePercent: float = 0.0
    swapUsagePercent: float = 0.0
    diskUsagePercent: float = 0.0
    cpuUsagePercent: float = 0.0
    load1: float = 0.0
    load5: float = 0.0
    load15: float = 0.0
    networkIn: float = 0.0
    networkOut: float = 0.0
    hostname: str = ""
    trafficUsedPercent: Optional[float] = None
    trafficCurrent: Optional[bool] = None
    failedGroups: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict for JSON output; traffic keys are left out when unknown."""
        data = asdict(self)
        if self.trafficUsedPercent is None:
            data.pop("trafficUsedPercent")
            data.pop("trafficCurrent")
        return data


class MetricsAggregator:
    """Runs every metric group concurrently and merges their results.

    Groups return dicts of the fields they own. A group that raises is logged
    and listed in ``failedGroups``; its fields keep their defaults. ``collect``
    always waits for every group before returning.
    """

    def __init__(
        self,
        settings: Settings,
        traffic_cache: Optional[TrafficQuotaCache] = None,
    ) -> None:
        self.settings = settings
        self.traffic_cache = traffic_cache

    def _groups(self) -> Dict[str, Callable[[], Dict[str, Any]]]:
        groups: Dict[str, Callable[[], Dict[str, Any]]] = {
            "memory": metrics.collect_memory,
            "disk": lambda: metrics.collect_disk(self.settings.disk_path),
            "cpu": metrics.collect_cpu_load,
            "network": lambda: metrics.collect_network(self.settings.interface),
        }
        if self.traffic_cache is not None and self.settings.hcloud_server_id is not None:
            groups["traffic"] = self._collect_traffic
        return groups

    def _collect_traffic(self) -> Dict[str, Any]:
        reading = self.traffic_cache.get(self.settings.hcloud_server_id)
        if reading.value is None:
            return {}
        return {"trafficUsedPercent": reading.value, "trafficCurrent": reading.current}

    def collect(self) -> Snapshot:
        snapshot = Snapshot()
        failed: List[str] = []
        groups = self._groups()

        with ThreadPoolExecutor(max_workers=len(groups), thread_name_prefix="collect") as executor:
            futures: Dict[str, Future] = {name: executor.submit(func) for name, func in groups.items()}

            # Hostname is cheap, run it here while the others are in flight.
            self._merge(snapshot, failed, "hostname", metrics.collect_hostname)

            wait(futures.values())
            for name, future in futures.items():
                self._merge(snapshot, failed, name, future.result)

        snapshot.failedGroups = sorted(failed)
        return snapshot

    @staticmethod
    def _merge(
        snapshot: Snapshot,
        failed: List[str],
        name: str,
        produce: Callable[[], Dict[str, Any]],
    ) -> None:
        try:
            values = produce()
        except Exception as exc:  # pylint: disable=broad-except
            logging.error("Error collecting %s metrics: %s", name, exc)
            failed.append(name)
            return
        for key, value in values.items():
            setattr(snapshot, key, value)
