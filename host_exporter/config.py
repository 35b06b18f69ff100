"""Runtime configuration helpers."""
from __future__ import annotations

import math
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from uvicorn.config import LOG_LEVELS

DEFAULT_HCLOUD_ENDPOINT = "https://api.hetzner.cloud/v1"


class ConfigurationError(ValueError):
    """Raised when an environment variable cannot be parsed."""


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "info"
    interface: str = "eth0"
    disk_path: str = "/"
    hcloud_token: Optional[str] = None
    hcloud_server_id: Optional[int] = None
    hcloud_endpoint: str = DEFAULT_HCLOUD_ENDPOINT
    hcloud_timeout: float = 10.0

    @property
    def traffic_enabled(self) -> bool:
        return bool(self.hcloud_token) and self.hcloud_server_id is not None


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


def _parse_float(name: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


def _parse_timeout(name: str, raw: str) -> float:
    value = _parse_float(name, raw)
    if not math.isfinite(value) or value <= 0:
        raise ConfigurationError(f"{name} must be a positive number of seconds, got {raw!r}")
    return value


def _parse_log_level(name: str, raw: str) -> str:
    level = raw.lower()
    if level not in LOG_LEVELS:
        choices = ", ".join(sorted(LOG_LEVELS))
        raise ConfigurationError(f"{name} must be one of {choices}, got {raw!r}")
    return level


def load_settings() -> Settings:
    """Build settings from environment variables with sensible defaults."""
    token = os.getenv("HCLOUD_TOKEN") or None
    server_id_raw = os.getenv("HCLOUD_SERVER_ID")
    # The ID only matters once a token enables the traffic lookup.
    server_id = None
    if token and server_id_raw:
        server_id = _parse_int("HCLOUD_SERVER_ID", server_id_raw)

    return Settings(
        host=os.getenv("HOST_EXPORTER_HOST", "0.0.0.0"),
        port=_parse_int("HOST_EXPORTER_PORT", os.getenv("HOST_EXPORTER_PORT", "8080")),
        log_level=_parse_log_level("HOST_EXPORTER_LOG_LEVEL", os.getenv("HOST_EXPORTER_LOG_LEVEL", "info")),
        interface=os.getenv("HOST_EXPORTER_INTERFACE", "eth0"),
        disk_path=os.getenv("HOST_EXPORTER_DISK_PATH", "/"),
        hcloud_token=token,
        hcloud_server_id=server_id,
        hcloud_endpoint=os.getenv("HCLOUD_ENDPOINT", DEFAULT_HCLOUD_ENDPOINT).rstrip("/"),
        hcloud_timeout=_parse_timeout("HCLOUD_TIMEOUT", os.getenv("HCLOUD_TIMEOUT", "10")),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings, read once from the environment."""
    return load_settings()
