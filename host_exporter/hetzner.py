"""Minimal Hetzner Cloud API client for server traffic lookups."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from .config import DEFAULT_HCLOUD_ENDPOINT


class HetznerAPIError(RuntimeError):
    """The traffic lookup failed or returned something unusable."""


@dataclass(frozen=True)
class ServerTraffic:
    included: int
    outgoing: int


class HetznerClient:
    def __init__(
        self,
        token: str,
        endpoint: str = DEFAULT_HCLOUD_ENDPOINT,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {token}"})

    def _get_server(self, server_id: int) -> Dict[str, Any]:
        url = f"{self.endpoint}/servers/{server_id}"
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise HetznerAPIError(f"request for server {server_id} failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise HetznerAPIError(f"invalid JSON for server {server_id}: {exc}") from exc

        server = payload.get("server") if isinstance(payload, dict) else None
        if not isinstance(server, dict):
            raise HetznerAPIError(f"response for server {server_id} has no server object")
        return server

    def get_server_traffic(self, server_id: int) -> ServerTraffic:
        """Return included and outgoing traffic (bytes) for ``server_id``."""
        server = self._get_server(server_id)
        try:
            return ServerTraffic(
                included=int(server.get("included_traffic") or 0),
                outgoing=int(server.get("outgoing_traffic") or 0),
            )
        except (TypeError, ValueError) as exc:
            raise HetznerAPIError(f"invalid traffic values for server {server_id}: {exc}") from exc
