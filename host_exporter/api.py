"""FastAPI application exposing the latest host metrics snapshot."""
from __future__ import annotations

import json
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse, Response

from .cache import TrafficQuotaCache
from .collector import MetricsAggregator
from .config import Settings, get_settings
from .hetzner import HetznerClient


def build_aggregator(settings: Settings) -> MetricsAggregator:
    """Wire the aggregator, adding the traffic cache only when credentials exist."""
    traffic_cache = None
    if settings.traffic_enabled:
        client = HetznerClient(
            settings.hcloud_token,
            endpoint=settings.hcloud_endpoint,
            timeout=settings.hcloud_timeout,
        )
        traffic_cache = TrafficQuotaCache(client.get_server_traffic)
    else:
        logging.info("Hetzner API deactivated: HCLOUD_TOKEN and HCLOUD_SERVER_ID are not both set")
    return MetricsAggregator(settings, traffic_cache=traffic_cache)


def create_app(
    settings: Optional[Settings] = None,
    aggregator: Optional[MetricsAggregator] = None,
) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(
        title="Host Metrics Exporter",
        description="Lightweight FastAPI service exposing a JSON snapshot of host metrics.",
        version="0.1.0",
    )
    app.state.aggregator = aggregator or build_aggregator(settings)

    @app.get("/", summary="Return current host metrics", tags=["metrics"])
    def snapshot():
        result = app.state.aggregator.collect()
        try:
            body = json.dumps(result.to_dict(), allow_nan=False)
        except (TypeError, ValueError) as exc:
            logging.error("Error while encoding JSON: %s", exc)
            return PlainTextResponse("Internal Server Error", status_code=500)
        return Response(content=body, media_type="application/json")

    return app
