"""Catalog warmup to avoid a cold first request.

Materializing the collection up front fills the page and ``all`` cache entries
so the first search or filter request does not pay for the page fan-out.
"""

from __future__ import annotations

import logging
import time

from holocron.services.collection_aggregator import CollectionAggregator

logger = logging.getLogger(__name__)


async def warmup_catalog(aggregator: CollectionAggregator) -> None:
    """Prefetch the full people collection, logging instead of raising on failure."""

    logger.info("=" * 60)
    logger.info("Warming up people catalog...")
    logger.info("=" * 60)

    start = time.time()
    try:
        people = await aggregator.fetch_all()
    except Exception as e:
        logger.warning(f"Catalog warmup failed: {e}")
        return

    elapsed = (time.time() - start) * 1000
    skipped = len(aggregator.last_failures)
    if skipped:
        logger.warning("Catalog warmup skipped %s page(s)", skipped)
    logger.info(f"✓ Catalog warmed up with {len(people)} people ({elapsed:.0f}ms)")
