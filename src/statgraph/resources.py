"""Resource types, references and name normalisation.

Raw resource names reported by the management system can contain characters
that are unsafe in file names, CSV columns and URL path segments. Some types
also carry a server or module qualifier in front of the real name. The
helpers here turn such identifiers into clean storage keys.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass

from .errors import ResourcePathError

HOST_MACHINE_RESOURCE_NAME = "HostMachine"

_DEST_PHYSICAL_SEPARATOR = "@"
_DEST_SERVER_MODULE_SEPARATOR = "!"
_WEBAPP_SERVER_SEPARATOR = "_/"
_BAD_CHARS = ("/", "[", "]")
_GOOD_CHAR = "_"
_URL_PATH_SEPARATOR = "/"
_URL_SUFFIX_SEPARATOR = "."
_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


class ResourceType(str, enum.Enum):
    """Kinds of resource that statistics are collected for."""

    CORE = "core"
    DATASOURCE = "datasource"
    DESTINATION = "destination"
    WEBAPP = "webapp"
    HOSTMACHINE = "hostmachine"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ResourceReference:
    """The (type, name, property) triple identifying one metric to plot."""

    resource_type: ResourceType
    resource_name: str | None
    property_name: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "resource_type", ResourceType(self.resource_type))
        if not self.property_name:
            raise ValueError("property_name is required")
        if self.resource_type is not ResourceType.CORE and not self.resource_name:
            raise ValueError(f"resource_name is required for {self.resource_type} resources")


def _strip_destination_qualifier(name: str) -> str:
    pos = name.rfind(_DEST_PHYSICAL_SEPARATOR)
    if pos < 0:
        pos = name.rfind(_DEST_SERVER_MODULE_SEPARATOR)
    if pos > 0:
        return name[pos + 1:]
    return name


def _strip_webapp_qualifier(name: str) -> str:
    pos = name.find(_WEBAPP_SERVER_SEPARATOR)
    if pos > 0:
        return name[pos + len(_WEBAPP_SERVER_SEPARATOR):]
    return name


def normalize(resource_type: ResourceType | str, raw_name: str) -> str:
    """Return a storage safe version of *raw_name*.

    Destinations lose their ``module!`` / ``server@`` qualifier (``@`` is
    looked for first), web applications lose their ``server_/`` prefix, and
    ``/``, ``[`` and ``]`` become ``_``. A single trailing ``_`` left behind
    by that replacement is dropped.
    """
    resource_type = ResourceType(resource_type)
    name = raw_name

    if resource_type is ResourceType.DESTINATION:
        name = _strip_destination_qualifier(name)
    elif resource_type is ResourceType.WEBAPP:
        name = _strip_webapp_qualifier(name)

    for bad in _BAD_CHARS:
        name = name.replace(bad, _GOOD_CHAR)

    while True:
        cleaned = name.strip()
        if cleaned.endswith(_GOOD_CHAR) and not cleaned.endswith(_GOOD_CHAR * 2):
            cleaned = cleaned[:-1]
        if cleaned == name:
            return cleaned
        name = cleaned


def parse_resource_path(path: str) -> ResourceReference:
    """Map a ``type[/name]/property`` URL path to a :class:`ResourceReference`.

    Raises :class:`ResourcePathError` with status 404 when elements are
    missing and 400 when the resource type is not recognised.
    """
    tokens = [t for t in (path or "").split(_URL_PATH_SEPARATOR) if t]
    if len(tokens) <= 1:
        raise ResourcePathError(f"Unable to locate resource property for: {path}", 404)

    type_token = tokens[0]
    if len(tokens) >= 3:
        resource_name: str | None = tokens[1]
        resource_property: str | None = tokens[2]
    else:
        resource_name = None
        resource_property = tokens[1]

    if type_token == ResourceType.HOSTMACHINE.value:
        resource_name = HOST_MACHINE_RESOURCE_NAME

    if not resource_property or (type_token != ResourceType.CORE.value and not resource_name):
        raise ResourcePathError(
            f"Incorrect resource path elements specified to locate property for: {path}", 404,
        )

    try:
        resource_type = ResourceType(type_token)
    except ValueError:
        raise ResourcePathError(f"Bad property type specified in resource path: {path}", 400) from None

    suffix = resource_property.rfind(_URL_SUFFIX_SEPARATOR)
    if suffix > 1:
        resource_property = resource_property[:suffix]

    if resource_type is ResourceType.CORE:
        resource_name = None

    return ResourceReference(resource_type, resource_name, resource_property)


def property_title(property_name: str) -> str:
    """Human-readable chart title for a property, e.g. ``JVMHeapFreeCurrent`` -> ``JVM Heap Free Current``."""
    return _WORD_BOUNDARY.sub(" ", property_name.strip())
