"""Cluster topology providers: a fixed host list or a management HTTP endpoint."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..config import TopologyConfig
from ..errors import TopologyError
from .base import TopologyProvider

logger = logging.getLogger(__name__)


class StaticTopology(TopologyProvider):
    """Hosts taken from configuration, returned in the configured order."""

    def __init__(self, hosts: list[str]) -> None:
        self._hosts = list(hosts)

    def list_hosts(self) -> list[str]:
        return list(self._hosts)


class HttpTopology(TopologyProvider):
    """Queries a management endpoint for the names of live servers.

    The endpoint may answer with a JSON list of names, a list of objects with
    a ``name`` key, or an object holding either under ``hosts``.
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 10.0,
        headers: dict[str, str] | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._headers = headers or {}
        self._client = client

    def list_hosts(self) -> list[str]:
        try:
            if self._client is not None:
                response = self._client.get(self._url, headers=self._headers, timeout=self._timeout)
                response.raise_for_status()
                payload = response.json()
            else:
                with httpx.Client(timeout=self._timeout) as client:
                    response = client.get(self._url, headers=self._headers)
                    response.raise_for_status()
                    payload = response.json()
        except httpx.HTTPStatusError as exc:
            logger.error("Topology query to %s failed with HTTP %s", self._url, exc.response.status_code)
            raise TopologyError(
                f"HTTP error {exc.response.status_code} querying hosts from {self._url}"
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("Topology query to %s failed: %s", self._url, exc)
            raise TopologyError(f"Unable to query hosts from {self._url}: {exc}") from exc
        except ValueError as exc:
            raise TopologyError(f"Response from {self._url} is not JSON") from exc

        hosts = _host_names(payload)
        logger.debug("Topology %s returned %d hosts", self._url, len(hosts))
        return hosts


def _host_names(payload: Any) -> list[str]:
    if isinstance(payload, dict):
        payload = payload.get("hosts")
    if not isinstance(payload, list):
        raise TopologyError("Topology response does not contain a host list")

    names: list[str] = []
    for item in payload:
        if isinstance(item, dict):
            item = item.get("name")
        if not isinstance(item, str) or not item:
            raise TopologyError(f"Invalid host entry in topology response: {item!r}")
        names.append(item)
    return names


def build_topology(config: TopologyConfig) -> TopologyProvider:
    """HTTP topology when a URL is configured, otherwise the static host list."""
    if config.url:
        return HttpTopology(config.url, timeout=config.timeout_seconds, headers=config.headers)
    return StaticTopology(config.hosts)
