"""Common caching utilities shared across service layers.

Services receive an explicitly constructed :class:`~holocron.cache.CacheStore`
and inherit from :class:`CacheableService` to read and write it.  The
:func:`cached` decorator wraps an async service method so that a fresh cache
entry short-circuits the call and a successful result is stored before being
returned.  Exceptions pass straight through and leave the cache untouched.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, Concatenate, ParamSpec, TypeVar, cast

from holocron.cache import CacheStore

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

CacheKeyBuilder = Callable[Concatenate["CacheableService", P], str | None]
DecoratedCallable = Callable[Concatenate["CacheableService", P], Awaitable[T]]


class CacheableService:
    """Base class that exposes helper methods for cache access.

    The mixin purposefully has a tiny surface so it composes with services
    that also hold a transport or other collaborators.
    """

    def __init__(self, cache: CacheStore) -> None:
        self._cache = cache

    @property
    def cache(self) -> CacheStore:
        return self._cache

    def _cache_get(self, key: str) -> Any | None:
        cached_value = self._cache.get(key)
        if cached_value is not None:
            logger.debug("Cache hit for %s", key)
        return cached_value

    def _cache_set(self, key: str, value: Any) -> None:
        if value is not None:
            self._cache.set(key, value)


def cached(
    key_builder: CacheKeyBuilder[P],
) -> Callable[[DecoratedCallable], DecoratedCallable]:
    """Decorate an async service method with transparent caching behaviour.

    Parameters
    ----------
    key_builder:
        Callable receiving the same arguments as the decorated method and
        returning the cache key for the invocation.  Returning ``None``
        bypasses the cache for that call.
    """

    def decorator(func: DecoratedCallable) -> DecoratedCallable:
        @wraps(func)
        async def wrapper(
            self: "CacheableService", *args: P.args, **kwargs: P.kwargs
        ) -> T:
            cache_key = key_builder(self, *args, **kwargs)
            if cache_key:
                cached_value = self._cache_get(cache_key)
                if cached_value is not None:
                    return cast(T, cached_value)

            result = await func(self, *args, **kwargs)

            if cache_key and result is not None:
                self._cache_set(cache_key, result)

            return result

        return wrapper

    return decorator


__all__ = ["CacheableService", "cached"]
