"""Page metadata for list endpoints."""

from __future__ import annotations

import math
from typing import Sequence, TypeVar

from .models import Page

T = TypeVar("T")


def build_page(items: Sequence[T], total_items: int, page: int, page_size: int) -> Page[T]:
    total_pages = math.ceil(total_items / page_size) if page_size else 0
    return Page(
        items=list(items),
        total_items=total_items,
        current_page=page,
        page_size=page_size,
        total_pages=total_pages,
        has_next_page=page < total_pages,
        has_previous_page=page > 1,
    )
