"""Side-by-side comparison of a handful of people."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from holocron.schemas.people import ComparisonEntry, ComparisonResponse
from holocron.services.detail_batcher import DetailBatcher

logger = logging.getLogger(__name__)

MAX_COMPARISON = 3


class ComparisonService:
    """Fetch detail records for up to :data:`MAX_COMPARISON` people."""

    def __init__(self, detail_batcher: DetailBatcher) -> None:
        self._detail_batcher = detail_batcher

    async def compare(self, uids: Sequence[str]) -> ComparisonResponse:
        """Return one entry per requested uid, in request order.

        Entries whose details could not be fetched carry ``detail=None``.
        """

        cleaned = [uid.strip() for uid in uids if uid and uid.strip()]
        if not cleaned:
            raise ValueError("At least one person is required for a comparison")
        if len(cleaned) > MAX_COMPARISON:
            raise ValueError(f"You can only compare up to {MAX_COMPARISON} characters at a time")
        if len(set(cleaned)) != len(cleaned):
            raise ValueError("Each person can only appear once in a comparison")

        details = await self._detail_batcher.fetch_details(cleaned)
        missing = [uid for uid in cleaned if uid not in details]
        if missing:
            logger.info("Comparison is missing details for %s", ", ".join(missing))

        return ComparisonResponse(
            entries=[
                ComparisonEntry(
                    uid=uid,
                    name=details[uid].name if uid in details else None,
                    detail=details.get(uid),
                )
                for uid in cleaned
            ]
        )


__all__ = ["MAX_COMPARISON", "ComparisonService"]
