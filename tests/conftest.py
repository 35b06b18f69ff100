from collections import namedtuple
from typing import Dict, Optional

import pytest

from host_exporter import metrics
from host_exporter.config import Settings

Memory = namedtuple("Memory", "total used percent")
DiskUsage = namedtuple("DiskUsage", "total used free percent")
NicCounters = namedtuple("NicCounters", "bytes_sent bytes_recv")

MB = 1024 * 1024


class FakePsutil:
    """Stands in for the psutil module inside host_exporter.metrics."""

    def __init__(self) -> None:
        self.memory = Memory(total=1000 * MB, used=750 * MB, percent=75.0)
        self.swap = Memory(total=0, used=0, percent=0.0)
        self.disk = DiskUsage(total=100, used=42, free=58, percent=42.0)
        self.loadavg = (2.0, 1.5, 1.0)
        self.cores: Optional[int] = 4
        self.nics: Dict[str, NicCounters] = {
            "eth0": NicCounters(bytes_sent=5 * MB, bytes_recv=10 * MB),
        }
        self.calls = []

    def virtual_memory(self):
        return self.memory

    def swap_memory(self):
        return self.swap

    def disk_usage(self, path):
        self.calls.append(("disk_usage", path))
        return self.disk

    def getloadavg(self):
        return self.loadavg

    def cpu_count(self, logical=True):
        return self.cores

    def net_io_counters(self, pernic=False):
        return dict(self.nics)


@pytest.fixture
def fake_psutil(monkeypatch) -> FakePsutil:
    fake = FakePsutil()
    monkeypatch.setattr(metrics, "psutil", fake)
    monkeypatch.setattr(metrics.socket, "gethostname", lambda: "test-host")
    return fake


@pytest.fixture
def settings() -> Settings:
    return Settings(interface="eth0", disk_path="/")


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
