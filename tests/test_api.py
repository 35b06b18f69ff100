from dataclasses import replace
from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from host_exporter import metrics
from host_exporter.api import build_aggregator, create_app
from host_exporter.cache import TrafficQuotaCache
from host_exporter.collector import MetricsAggregator, Snapshot


def test_snapshot_endpoint_returns_json(fake_psutil, settings):
    client = TestClient(create_app(settings))
    response = client.get("/")

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    body = response.json()
    assert body["ramUsagePercent"] == 75
    assert body["cpuUsagePercent"] == 50
    assert body["networkIn"] == 10
    assert body["hostname"] == "test-host"
    assert "trafficUsedPercent" not in body


def test_failing_providers_still_return_200(fake_psutil, settings, monkeypatch):
    def broken(*args):
        raise RuntimeError("provider down")

    for name in ("collect_memory", "collect_disk", "collect_cpu_load", "collect_network", "collect_hostname"):
        monkeypatch.setattr(metrics, name, broken)

    response = TestClient(create_app(settings)).get("/")

    assert response.status_code == 200
    body = response.json()
    assert body["ramUsagePercent"] == 0
    assert body["diskUsagePercent"] == 0
    assert body["hostname"] == ""
    assert body["failedGroups"] == ["cpu", "disk", "hostname", "memory", "network"]


def test_encoding_failure_returns_500(settings):
    aggregator = MagicMock(spec=MetricsAggregator)
    aggregator.collect.return_value = Snapshot(ramUsagePercent=float("nan"))

    response = TestClient(create_app(settings, aggregator=aggregator)).get("/")

    assert response.status_code == 500
    assert response.headers["content-type"].startswith("text/plain")
    assert response.text == "Internal Server Error"


def test_each_request_collects_fresh(fake_psutil, settings):
    client = TestClient(create_app(settings))
    assert client.get("/").json()["diskUsagePercent"] == 42

    fake_psutil.disk = fake_psutil.disk._replace(percent=43.0)
    assert client.get("/").json()["diskUsagePercent"] == 43


def test_build_aggregator_without_credentials(settings):
    assert build_aggregator(settings).traffic_cache is None
    assert build_aggregator(replace(settings, hcloud_token="token")).traffic_cache is None


def test_build_aggregator_with_credentials(settings):
    aggregator = build_aggregator(replace(settings, hcloud_token="token", hcloud_server_id=5))
    assert isinstance(aggregator.traffic_cache, TrafficQuotaCache)
