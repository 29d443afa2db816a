"""Exception types raised by the catalog layer.

Only two situations are allowed to escape a fetch: a single remote request
failing (:class:`TransportError`) and a failure the caller cannot recover from
(:class:`FatalFetchError`).  Failures inside a fan-out are recorded as
:class:`PartialFetchFailure` values instead and never raised.
"""

from __future__ import annotations

from dataclasses import dataclass


class CatalogError(Exception):
    """Base class for every error raised by :mod:`holocron`."""


class TransportError(CatalogError):
    """A single call to the remote resource did not succeed."""

    def __init__(
        self,
        message: str,
        *,
        url: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class FatalFetchError(CatalogError):
    """A fetch the caller depends on failed and no usable data exists."""

    def __init__(self, message: str, *, resource: str) -> None:
        super().__init__(message)
        self.resource = resource


@dataclass(frozen=True, slots=True)
class PartialFetchFailure:
    """Record of one failed member of a fan-out.

    ``resource`` is the cache key of the page or detail record that could not
    be fetched; ``error`` is the string form of the underlying exception.
    """

    resource: str
    error: str

    @classmethod
    def from_exception(cls, resource: str, exc: BaseException) -> PartialFetchFailure:
        return cls(resource=resource, error=str(exc) or type(exc).__name__)


__all__ = [
    "CatalogError",
    "FatalFetchError",
    "PartialFetchFailure",
    "TransportError",
]
