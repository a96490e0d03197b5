"""Windowed, single-pass extraction of one metric column from a statistics CSV.

Statistics files are append-only and can grow large while they are being
read, so the scan never materialises the file. It walks the stream one
character at a time, keeps only the field currently being read, and stops as
soon as a row's date-time is later than the end of the requested window.

Row format::

    DateTime,PropertyA,PropertyB,...
    19/10/2026 10:15:00,12,0.5,...

Column 0 is the row's date-time in :data:`DISPLAY_DATETIME_FORMAT`; the
other columns are metric values at a fixed position. A header row, rows with
a corrupt date-time and rows written partially by a concurrent producer are
skipped rather than treated as errors.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from pathlib import Path
from typing import TextIO

from .model import DISPLAY_DATETIME_FORMAT, TimeSeries, TimeWindow

logger = logging.getLogger(__name__)

SEPARATOR_CHAR = ","
_ROW_TERMINATORS = ("\r", "\n")


def extract(
    source: TextIO,
    window: TimeWindow,
    column_index: int,
    *,
    timestamp_format: str = DISPLAY_DATETIME_FORMAT,
) -> TimeSeries:
    """Collect the values of column *column_index* for rows inside *window*.

    Once a value has been taken from a row the rest of that row is ignored.
    A bad numeric field drops only that value, a bad date-time drops the
    whole row, and a row later than ``window.end`` ends the scan (rows are
    expected in append order). The stream is consumed with ``readline`` so
    nothing after that row is read. A last row with no terminator is still
    being written and contributes nothing; ``NaN`` and infinite values are
    dropped like any other unusable value.
    """
    series = TimeSeries()
    if column_index < 1:
        logger.debug("Column index %d does not address a metric column", column_index)
        return series

    current: list[str] = []
    position = 0
    skip_row = False
    row_time: datetime | None = None

    def end_field() -> bool:
        """Handle the field just read. Returns False when the scan must stop."""
        nonlocal position, skip_row, row_time
        text = "".join(current)
        current.clear()

        if position == 0:
            try:
                row_time = datetime.strptime(text, timestamp_format)
            except ValueError as exc:
                skip_row = True
                logger.debug("Skipping row with corrupt date-time %r: %s", text, exc)
            else:
                if row_time < window.start:
                    skip_row = True
                elif row_time > window.end:
                    return False
        elif position == column_index:
            try:
                value = float(text)
            except ValueError as exc:
                logger.debug(
                    "Skipping corrupt value, column=%d, dateTime=%s: %s",
                    column_index, row_time, exc,
                )
            else:
                if math.isfinite(value):
                    series.add(row_time, value)
                    skip_row = True
                else:
                    logger.debug("Skipping non-finite value %r, column=%d, dateTime=%s", text, column_index, row_time)

        position += 1
        return True

    for line in iter(source.readline, ""):
        for char in line:
            if char in _ROW_TERMINATORS:
                # last field of a row has no trailing separator
                if not skip_row and (position > 0 or current) and not end_field():
                    logger.debug("Reached rows after %s, stopping scan", window.end)
                    return series
                current.clear()
                position = 0
                skip_row = False
            elif skip_row:
                continue
            elif char == SEPARATOR_CHAR:
                if not end_field():
                    logger.debug("Reached rows after %s, stopping scan", window.end)
                    return series
            else:
                current.append(char)

    # an unterminated last row may still be being written
    return series


def extract_file(
    path: str | Path,
    window: TimeWindow,
    column_index: int,
    *,
    timestamp_format: str = DISPLAY_DATETIME_FORMAT,
) -> TimeSeries:
    """Open *path* read-only and :func:`extract` from it.

    Undecodable bytes (typically a row being written as we read) are replaced
    rather than raised, so such a row simply fails to parse.
    """
    with open(path, encoding="utf-8", errors="replace", newline="") as fh:
        series = extract(fh, window, column_index, timestamp_format=timestamp_format)
    logger.debug("Extracted %d points from %s (column %d)", len(series), path, column_index)
    return series
