"""Data structures shared by the extractor, aggregator and output layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterator

ALL_HOSTS = "ALL"
DISPLAY_DATETIME_FORMAT = "%d/%m/%Y %H:%M:%S"


@dataclass(frozen=True)
class TimeSeriesPoint:
    """A single (timestamp, value) sample."""

    timestamp: datetime
    value: float


@dataclass
class TimeSeries:
    """Ordered sequence of samples for one property on one host.

    Points keep the order they were appended in, which for statistics files
    is the order rows were written. Nothing is re-sorted.
    """

    _points: list[TimeSeriesPoint] = field(default_factory=list, repr=False)

    def add(self, timestamp: datetime, value: float) -> None:
        self._points.append(TimeSeriesPoint(timestamp, float(value)))

    @property
    def points(self) -> tuple[TimeSeriesPoint, ...]:
        return tuple(self._points)

    @property
    def first(self) -> TimeSeriesPoint | None:
        return self._points[0] if self._points else None

    @property
    def last(self) -> TimeSeriesPoint | None:
        return self._points[-1] if self._points else None

    def by_increasing_time(self) -> Iterator[TimeSeriesPoint]:
        """Iterate samples oldest first."""
        return iter(sorted(self._points, key=lambda p: p.timestamp))

    def __iter__(self) -> Iterator[TimeSeriesPoint]:
        return iter(tuple(self._points))

    def __len__(self) -> int:
        return len(self._points)


@dataclass(frozen=True)
class NamedSeries:
    """A host's series, labelled with the host name."""

    label: str
    series: TimeSeries


@dataclass(frozen=True)
class TimeWindow:
    """Inclusive ``[start, end]`` range of rows that contribute to a series."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"window start {self.start} is after end {self.end}")

    @classmethod
    def ending_at(cls, end: datetime, duration_minutes: int) -> TimeWindow:
        """Window covering the *duration_minutes* leading up to *end*."""
        if duration_minutes < 0:
            raise ValueError("duration_minutes must not be negative")
        return cls(end - timedelta(minutes=duration_minutes), end)

    def contains(self, timestamp: datetime) -> bool:
        return self.start <= timestamp <= self.end


def parse_datetime(text: str) -> datetime:
    """Parse a request date-time in display format or ISO 8601.

    Statistics rows carry naive local times, so zone-aware input is converted
    to local time and made naive.
    """
    text = text.strip()
    try:
        return datetime.strptime(text, DISPLAY_DATETIME_FORMAT)
    except ValueError:
        pass
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


@dataclass(frozen=True)
class Scope:
    """Either one named host or every host in the cluster (``host is None``)."""

    host: str | None = None

    @classmethod
    def all_hosts(cls) -> Scope:
        return cls(None)

    @classmethod
    def parse(cls, text: str | None) -> Scope:
        """``ALL`` (any case) or an empty value selects every host."""
        if text is None:
            return cls.all_hosts()
        text = text.strip()
        if not text or text.upper() == ALL_HOSTS:
            return cls.all_hosts()
        return cls(text)

    @property
    def is_all(self) -> bool:
        return self.host is None

    def __str__(self) -> str:
        return ALL_HOSTS if self.host is None else self.host
