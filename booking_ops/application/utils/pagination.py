from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Generic, Iterable, Mapping, Sequence, TypeVar

from booking_ops.application.exceptions import ValidationError

T = TypeVar("T")

ALL = "all"
SORT_ASC = "asc"
SORT_DESC = "desc"


@dataclass(frozen=True)
class Page(Generic[T]):
    items: list[T]
    total_count: int
    total_pages: int
    page: int
    page_size: int


def paginate(
    collection: Iterable[T],
    search_term: str | None = None,
    search_fields: Sequence[str] = (),
    filters: Mapping[str, Any] | None = None,
    sort_key: str | None = None,
    sort_dir: str = SORT_ASC,
    page: int = 1,
    page_size: int = 10,
) -> Page[T]:
    """
    Search, filter, sort and slice any listable collection.

    Items can be mappings or plain objects. Search is a case-insensitive
    substring match OR-ed across `search_fields`; filters are exact matches
    AND-ed together, with "all" or None meaning no filter on that field.
    Sorting is stable and puts missing values last in either direction.
    """
    if page < 1:
        raise ValidationError(f"page must be >= 1, got {page}")
    if page_size < 1:
        raise ValidationError(f"page_size must be >= 1, got {page_size}")
    direction = (sort_dir or SORT_ASC).strip().lower()
    if direction not in (SORT_ASC, SORT_DESC):
        raise ValidationError(f"sort_dir must be 'asc' or 'desc', got {sort_dir!r}")

    items = [item for item in collection if _matches_search(item, search_term, search_fields)]
    items = [item for item in items if _matches_filters(item, filters or {})]

    if sort_key:
        items = _stable_sort(items, sort_key, descending=direction == SORT_DESC)

    total_count = len(items)
    total_pages = max(1, math.ceil(total_count / page_size))
    start = (page - 1) * page_size
    return Page(
        items=items[start : start + page_size],
        total_count=total_count,
        total_pages=total_pages,
        page=page,
        page_size=page_size,
    )


def field_value(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def _matches_search(item: Any, term: str | None, fields: Sequence[str]) -> bool:
    needle = (term or "").strip().lower()
    if not needle:
        return True
    for name in fields:
        value = _plain(field_value(item, name))
        if value is not None and needle in str(value).lower():
            return True
    return False


def _matches_filters(item: Any, filters: Mapping[str, Any]) -> bool:
    for name, wanted in filters.items():
        wanted = _plain(wanted)
        if wanted is None or wanted == ALL or wanted == "":
            continue
        if _plain(field_value(item, name)) != wanted:
            return False
    return True


def _sort_key(value: Any) -> tuple[int, Any]:
    # rank keeps mixed types comparable: numbers, then temporals, then strings
    value = _plain(value)
    if isinstance(value, bool):
        return (0, int(value))
    if isinstance(value, (int, float, Decimal)):
        return (0, value)
    if isinstance(value, datetime):
        return (1, value)
    if isinstance(value, date):
        return (1, datetime.combine(value, time.min))
    return (2, str(value))


def _stable_sort(items: list[T], key: str, descending: bool) -> list[T]:
    present = [item for item in items if _plain(field_value(item, key)) is not None]
    missing = [item for item in items if _plain(field_value(item, key)) is None]
    # reverse=True keeps equal elements in their original order
    ordered = sorted(present, key=lambda item: _sort_key(field_value(item, key)), reverse=descending)
    return ordered + missing
