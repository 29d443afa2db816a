"""Client-side pagination over an already materialized sequence."""

from __future__ import annotations

import math
from collections.abc import Sequence

from holocron.schemas.people import PaginationView, Person
from holocron.settings import DEFAULT_PAGE_SIZE


def page_link(page: int) -> str:
    """Return the link token used for ``previous``/``next`` in synthesized views."""

    return f"page={page}"


def paginate(
    sequence: Sequence[Person],
    page_number: int,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> PaginationView:
    """Slice ``sequence`` into the envelope for ``page_number`` (1-based).

    Page numbers outside ``1..total_pages`` produce an empty ``results`` list
    while ``total_records`` and ``total_pages`` still describe the sequence.
    """

    if page_size < 1:
        raise ValueError("page_size must be at least 1")

    total_records = len(sequence)
    total_pages = math.ceil(total_records / page_size)
    start = (page_number - 1) * page_size
    end = page_number * page_size
    results = list(sequence[max(start, 0) : max(end, 0)])

    return PaginationView(
        total_records=total_records,
        total_pages=total_pages,
        previous=page_link(page_number - 1) if page_number > 1 else None,
        next=page_link(page_number + 1) if end < total_records else None,
        results=results,
    )


__all__ = ["page_link", "paginate"]
