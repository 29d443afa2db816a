"""Settle-all join used by every fan-out in the catalog layer."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Iterable
from typing import TypeVar

T = TypeVar("T")


async def settle_all(
    awaitables: Iterable[Awaitable[T]],
    *,
    limit: int | None = None,
) -> list[T | BaseException]:
    """Await every awaitable and return one outcome per input, in input order.

    Each outcome is either the awaitable's result or the exception it raised.
    A failure never cancels its siblings and never propagates from here.

    The returned list is positionally aligned with ``awaitables``: outcome
    ``i`` belongs to input ``i`` regardless of which request finished first.
    ``asyncio.gather`` guarantees this ordering and callers such as the page
    merge depend on it.

    ``limit`` caps how many awaitables run at once; ``None`` runs them all
    concurrently.
    """

    items = list(awaitables)
    if not items:
        return []

    if limit is not None:
        semaphore = asyncio.Semaphore(limit)

        async def _bounded(awaitable: Awaitable[T]) -> T:
            async with semaphore:
                return await awaitable

        items = [_bounded(item) for item in items]

    return list(await asyncio.gather(*items, return_exceptions=True))


__all__ = ["settle_all"]
