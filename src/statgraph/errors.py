"""Exception hierarchy for statgraph."""

from __future__ import annotations

_DISCONNECT_ERRORS = (BrokenPipeError, ConnectionResetError, ConnectionAbortedError)


class StatGraphError(Exception):
    """Base class for statgraph errors."""


class TopologyError(StatGraphError):
    """The management endpoint could not be queried for live hosts."""


class ResourcePathError(StatGraphError):
    """A resource path could not be mapped to a resource reference.

    ``status_code`` is the HTTP status a web layer should answer with:
    404 when path elements are missing, 400 for an unsupported resource type.
    """

    def __init__(self, message: str, status_code: int = 404) -> None:
        super().__init__(message)
        self.status_code = status_code


def is_client_disconnect(exc: BaseException) -> bool:
    """Return True if *exc* was caused by the consumer closing the stream early."""
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        if isinstance(current, _DISCONNECT_ERRORS):
            return True
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return False
