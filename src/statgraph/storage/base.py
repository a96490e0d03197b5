"""Interfaces for the collaborators the aggregator depends on."""

from __future__ import annotations

import abc
from datetime import datetime
from pathlib import Path

from ..resources import ResourceType


class TopologyProvider(abc.ABC):
    """Enumerates the hosts currently live in the cluster."""

    @abc.abstractmethod
    def list_hosts(self) -> list[str]:
        """Return host names in a stable order.

        Raises :class:`~statgraph.errors.TopologyError` when the management
        endpoint cannot be queried.
        """


class StatisticsLocator(abc.ABC):
    """Maps a resource on a host at a given date to a statistics file and column."""

    @abc.abstractmethod
    def resolve_file(
        self,
        resource_type: ResourceType,
        resource_name: str | None,
        host: str,
        as_of: datetime,
    ) -> Path | None:
        """Return the statistics file, or None when there is none."""

    @abc.abstractmethod
    def resolve_column_index(
        self,
        resource_type: ResourceType,
        resource_name: str | None,
        host: str,
        as_of: datetime,
        property_name: str,
    ) -> int | None:
        """Return the property's column position (date-time is 0), or None."""
