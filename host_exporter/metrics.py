"""Helpers for collecting host system metrics.

Each ``collect_*`` function covers one metric group and returns a dict keyed by
the snapshot field names it owns. Failures are raised, never swallowed; the
aggregator decides what a failed group means for the response.
"""
from __future__ import annotations

import math
import socket
from typing import Any, Dict

import psutil

BYTES_PER_MEGABYTE = 1024 * 1024


class MetricUnavailable(RuntimeError):
    """psutil answered, but not with something a metric can be derived from."""


def round_half_up(value: float, digits: int = 0) -> float:
    """Round to nearest, halves away from zero (``round()`` rounds halves to even)."""
    factor = 10 ** digits
    scaled = abs(value) * factor
    return math.copysign(math.floor(scaled + 0.5) / factor, value)


def _percent(part: float, whole: float) -> float:
    return round_half_up(part / whole * 100)


def collect_memory() -> Dict[str, float]:
    """RAM and swap usage; swap stays at 0 when the host has none."""
    memory = psutil.virtual_memory()
    swap = psutil.swap_memory()
    if not memory.total:
        raise MetricUnavailable("virtual memory reports a total of 0 bytes")

    result = {
        "ramUsagePercent": _percent(memory.used, memory.total),
        "swapUsagePercent": 0.0,
    }
    if swap.total > 0:
        result["swapUsagePercent"] = _percent(swap.used, swap.total)
    return result


def collect_disk(path: str = "/") -> Dict[str, float]:
    usage = psutil.disk_usage(path)
    return {"diskUsagePercent": round_half_up(usage.percent)}


def collect_cpu_load() -> Dict[str, float]:
    """Load averages plus the 1-minute load as a percentage of the core count."""
    load1, load5, load15 = psutil.getloadavg()
    cores = psutil.cpu_count(logical=True)
    if not cores:
        raise MetricUnavailable("CPU core count could not be determined")

    return {
        "cpuUsagePercent": _percent(load1, cores),
        "load1": round_half_up(load1, 2),
        "load5": round_half_up(load5, 2),
        "load15": round_half_up(load15, 2),
    }


def collect_network(interface: str) -> Dict[str, float]:
    counters = psutil.net_io_counters(pernic=True)
    try:
        nic = counters[interface]
    except KeyError:
        known = ", ".join(sorted(counters)) or "none"
        raise MetricUnavailable(f"unknown network interface {interface!r} (available: {known})") from None

    return {
        "networkIn": round_half_up(nic.bytes_recv / BYTES_PER_MEGABYTE),
        "networkOut": round_half_up(nic.bytes_sent / BYTES_PER_MEGABYTE),
    }


def collect_hostname() -> Dict[str, Any]:
    return {"hostname": socket.gethostname()}
