"""Default on-disk layout of per-host statistics files.

::

    <root>/<YYYY-MM-DD>/<host>/<resource type>/<normalised name>.csv
    <root>/<YYYY-MM-DD>/<host>/core/core.csv

The first line of every file names its columns, starting with the
date-time column.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from ..resources import ResourceType, normalize
from ..series.extractor import SEPARATOR_CHAR
from .base import StatisticsLocator

logger = logging.getLogger(__name__)

CORE_FILE_STEM = "core"
DATE_DIR_FORMAT = "%Y-%m-%d"
CSV_SUFFIX = ".csv"
_PATH_SEPARATORS = ("/", "\\")


def is_valid_host(host: str) -> bool:
    """A host name must be a single path segment under the date directory."""
    if not host or host in (".", ".."):
        return False
    return not any(sep in host for sep in _PATH_SEPARATORS)


class StatisticsStorage(StatisticsLocator):
    """Locates statistics files under a root directory configured once."""

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def file_path(
        self,
        resource_type: ResourceType,
        resource_name: str | None,
        host: str,
        as_of: datetime,
    ) -> Path:
        """Where the file for this resource would live, whether or not it exists."""
        if not is_valid_host(host):
            raise ValueError(f"invalid host name {host!r}")
        resource_type = ResourceType(resource_type)
        if resource_type is ResourceType.CORE:
            stem = CORE_FILE_STEM
        else:
            if not resource_name:
                raise ValueError(f"resource_name is required for {resource_type} resources")
            stem = normalize(resource_type, resource_name)
        return (
            self._root
            / as_of.strftime(DATE_DIR_FORMAT)
            / host
            / resource_type.value
            / f"{stem}{CSV_SUFFIX}"
        )

    def resolve_file(self, resource_type, resource_name, host, as_of):
        if not is_valid_host(host):
            logger.warning("Rejected host name %r", host)
            return None
        path = self.file_path(resource_type, resource_name, host, as_of)
        if not path.resolve().is_relative_to(self._root.resolve()):
            logger.warning("Statistics path %s escapes %s", path, self._root)
            return None
        if not path.is_file():
            logger.debug("No statistics file at %s", path)
            return None
        return path

    def resolve_column_index(self, resource_type, resource_name, host, as_of, property_name):
        path = self.resolve_file(resource_type, resource_name, host, as_of)
        if path is None:
            return None
        with open(path, encoding="utf-8", errors="replace", newline="") as fh:
            header = fh.readline()
        columns = [c.strip() for c in header.rstrip("\r\n").split(SEPARATOR_CHAR)]
        try:
            index = columns.index(property_name)
        except ValueError:
            logger.debug("Property %s not in header of %s", property_name, path)
            return None
        if index == 0:
            return None
        return index
