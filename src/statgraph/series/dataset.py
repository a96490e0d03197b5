"""Chart-ready datasets: serialisation, JSON output and terminal tables."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TextIO

from ..errors import is_client_disconnect
from ..resources import ResourceReference, property_title
from .model import NamedSeries, TimeWindow

logger = logging.getLogger(__name__)


@dataclass
class ChartDataset:
    """Everything a renderer needs to draw one resource property."""

    ref: ResourceReference
    window: TimeWindow
    series: list[NamedSeries] = field(default_factory=list)
    host_count: int = 0

    @property
    def title(self) -> str:
        return property_title(self.ref.property_name)

    @property
    def point_count(self) -> int:
        return sum(len(s.series) for s in self.series)


def dataset_to_dict(dataset: ChartDataset) -> dict[str, Any]:
    return {
        "resource_type": dataset.ref.resource_type.value,
        "resource_name": dataset.ref.resource_name,
        "property": dataset.ref.property_name,
        "title": dataset.title,
        "start": dataset.window.start.isoformat(),
        "end": dataset.window.end.isoformat(),
        "host_count": dataset.host_count,
        "series": [
            {
                "label": named.label,
                "points": [
                    [p.timestamp.isoformat(), p.value]
                    for p in named.series
                    if math.isfinite(p.value)
                ],
            }
            for named in dataset.series
        ],
    }


def save_dataset(dataset: ChartDataset, path: str | Path) -> None:
    """Write a dataset to a JSON file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(dataset_to_dict(dataset), fh, indent=2)


def write_dataset(dataset: ChartDataset, out: TextIO) -> bool:
    """Stream a dataset as JSON to *out*.

    Returns False if the reader went away before everything was written;
    any other I/O failure is raised.
    """
    try:
        json.dump(dataset_to_dict(dataset), out)
        out.write("\n")
        out.flush()
    except OSError as exc:
        if not is_client_disconnect(exc):
            raise
        logger.debug("Consumer closed the stream early: %s", exc)
        return False
    return True


def print_dataset(dataset: ChartDataset, *, max_rows: int = 200) -> None:
    """Pretty-print a dataset to the terminal using Rich, one column per host."""
    from rich.console import Console
    from rich.table import Table

    ref = dataset.ref
    title = dataset.title
    if ref.resource_name:
        title = f"{ref.resource_name} – {title}"
    table = Table(title=f"{title} ({ref.resource_type.value})", show_lines=False)
    table.add_column("Date-time", style="cyan", width=20)
    for named in dataset.series:
        table.add_column(named.label, justify="right", style="green")

    by_time: dict[Any, list[str]] = {}
    for idx, named in enumerate(dataset.series):
        for point in named.series:
            row = by_time.setdefault(point.timestamp, [""] * len(dataset.series))
            row[idx] = f"{point.value:g}"

    timestamps = sorted(by_time)
    for ts in timestamps[:max_rows]:
        table.add_row(ts.strftime("%Y-%m-%d %H:%M:%S"), *by_time[ts])

    console = Console()
    console.print(table)
    if len(timestamps) > max_rows:
        console.print(f"  ... ({len(timestamps) - max_rows} more rows)")
    console.print(f"  {dataset.host_count} host(s), {dataset.point_count} point(s)")
