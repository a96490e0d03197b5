"""Multi-host series aggregation.

For an ``ALL`` scope one series is produced per host reported by the
topology provider, in that order. A host whose file or column cannot be
found still contributes a series, just an empty one, so a chart keeps the
same legend and line count from one refresh to the next.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

from ..config import StatGraphConfig
from ..resources import ResourceReference
from ..storage.base import StatisticsLocator, TopologyProvider
from .dataset import ChartDataset
from .extractor import extract_file
from .model import NamedSeries, Scope, TimeSeries, TimeWindow

logger = logging.getLogger(__name__)


class SeriesAggregator:
    """Builds the per-host series for one resource property.

    Holds no per-request state, so one instance can serve concurrent
    requests. With ``max_workers`` above 1 hosts are extracted in a thread
    pool; results are still returned in topology order.
    """

    def __init__(
        self,
        locator: StatisticsLocator,
        topology: TopologyProvider,
        *,
        max_workers: int = 1,
    ) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self._locator = locator
        self._topology = topology
        self._max_workers = max_workers

    def collect(
        self,
        ref: ResourceReference,
        window: TimeWindow,
        scope: Scope | str,
    ) -> tuple[list[NamedSeries], int]:
        """Return one :class:`NamedSeries` per host and the number of hosts.

        Raises :class:`~statgraph.errors.TopologyError` if an ``ALL`` scope
        cannot enumerate hosts.
        """
        if not isinstance(scope, Scope):
            scope = Scope.parse(scope)

        if not scope.is_all:
            return [NamedSeries(scope.host, self.host_series(ref, window, scope.host))], 1

        hosts = self._topology.list_hosts()
        logger.debug("Collecting %s for %d hosts", ref.property_name, len(hosts))

        if self._max_workers > 1 and len(hosts) > 1:
            with ThreadPoolExecutor(max_workers=min(self._max_workers, len(hosts))) as pool:
                results = list(pool.map(lambda h: self.host_series(ref, window, h), hosts))
        else:
            results = [self.host_series(ref, window, h) for h in hosts]

        named = [NamedSeries(host, series) for host, series in zip(hosts, results)]
        return named, len(hosts)

    def dataset(self, ref: ResourceReference, window: TimeWindow, scope: Scope | str) -> ChartDataset:
        """:meth:`collect` wrapped up with its request parameters."""
        named, host_count = self.collect(ref, window, scope)
        return ChartDataset(ref=ref, window=window, series=named, host_count=host_count)

    def host_series(self, ref: ResourceReference, window: TimeWindow, host: str) -> TimeSeries:
        """Series for one host; empty when the file or column does not exist."""
        as_of = window.end
        path = self._locator.resolve_file(ref.resource_type, ref.resource_name, host, as_of)
        if path is None or not path.exists():
            logger.debug("No %s statistics for %s on %s", ref.resource_type, ref.resource_name, host)
            return TimeSeries()

        column = self._locator.resolve_column_index(
            ref.resource_type, ref.resource_name, host, as_of, ref.property_name,
        )
        if column is None or column < 0:
            logger.debug("No column %s in %s", ref.property_name, path)
            return TimeSeries()

        try:
            return extract_file(path, window, column)
        except FileNotFoundError:
            # removed between lookup and open (e.g. old statistics purged)
            logger.debug("Statistics file %s disappeared before it was read", path)
            return TimeSeries()


def build_aggregator(config: StatGraphConfig) -> SeriesAggregator:
    """Aggregator over the configured statistics root and topology."""
    from ..storage.files import StatisticsStorage
    from ..storage.topology import build_topology

    return SeriesAggregator(
        StatisticsStorage(config.storage.output_path),
        build_topology(config.topology),
        max_workers=config.query.parallel_hosts,
    )
