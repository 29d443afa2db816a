"""Process-lifetime TTL cache shared by the catalog services.

Keys are plain strings namespaced by their prefix (``page:3``,
``detail:42``, ``all``).  Each namespace carries its own time-to-live so page
results, detail records and the materialized collection can expire on
different schedules.  Expiry is lazy: a stale entry is simply not returned and
stays in the map until a later ``set`` overwrites it or ``clear`` runs.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

PAGE_NAMESPACE = "page"
DETAIL_NAMESPACE = "detail"
COLLECTION_NAMESPACE = "all"

_DEFAULT_TTL_SECONDS = 300.0

T = TypeVar("T")

Clock = Callable[[], float]


@dataclass(frozen=True, slots=True)
class CacheEntry(Generic[T]):
    """A cached value together with the clock reading taken when it was stored."""

    value: T
    stored_at: float

    def is_fresh(self, now: float, ttl: float) -> bool:
        return now - self.stored_at < ttl


def page_key(page: int) -> str:
    return f"{PAGE_NAMESPACE}:{page}"


def detail_key(uid: str) -> str:
    return f"{DETAIL_NAMESPACE}:{uid}"


def collection_key() -> str:
    return COLLECTION_NAMESPACE


def namespace_of(key: str) -> str:
    """Return the namespace portion of ``key`` (everything before the first colon)."""

    return key.split(":", 1)[0]


class CacheStore:
    """In-memory key/value cache with per-namespace TTLs and an injectable clock.

    Parameters
    ----------
    ttl_policy:
        Mapping of namespace to lifetime in seconds.  Keys whose namespace is
        missing from the mapping fall back to ``default_ttl``.
    default_ttl:
        Lifetime applied to namespaces without an explicit policy.
    clock:
        Zero-argument callable returning the current time in seconds.  Tests
        pass a fake clock so expiry can be asserted without sleeping.

    The store performs no locking.  Under asyncio every ``get``/``set`` runs to
    completion without yielding, and concurrent writers for one key always
    carry equivalent values, so a race only costs a redundant fetch.
    """

    def __init__(
        self,
        ttl_policy: Mapping[str, float] | None = None,
        *,
        default_ttl: float = _DEFAULT_TTL_SECONDS,
        clock: Clock = time.monotonic,
    ) -> None:
        if default_ttl <= 0:
            raise ValueError("default_ttl must be positive")
        policy = dict(ttl_policy or {})
        for namespace, ttl in policy.items():
            if ttl <= 0:
                raise ValueError(f"TTL for namespace {namespace!r} must be positive")
        self._ttl_policy = policy
        self._default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry[Any]] = {}

    def ttl_for(self, key: str) -> float:
        """Return the lifetime that applies to ``key``."""

        return self._ttl_policy.get(namespace_of(key), self._default_ttl)

    def get(self, key: str) -> Any | None:
        """Return the cached value for ``key`` when present and still fresh."""

        entry = self._entries.get(key)
        if entry is None:
            return None
        if not entry.is_fresh(self._clock(), self.ttl_for(key)):
            logger.debug("Cache entry for %s is stale", key)
            return None
        return entry.value

    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous entry."""

        self._entries[key] = CacheEntry(value=value, stored_at=self._clock())

    def clear(self) -> None:
        """Remove every entry from the store."""

        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None

    def __len__(self) -> int:
        return len(self._entries)


__all__ = [
    "COLLECTION_NAMESPACE",
    "CacheEntry",
    "CacheStore",
    "Clock",
    "DETAIL_NAMESPACE",
    "PAGE_NAMESPACE",
    "collection_key",
    "detail_key",
    "namespace_of",
    "page_key",
]
