"""Keyset Cursors — pure parameter handling for keyset pagination.

Invariants:
    - before and after are mutually exclusive
    - A cursor has exactly one value per key field
    - Cursor values are datetimes as isoformat(), everything else as str()
    - Page size falls back to DEFAULT_COUNT when missing or non-positive

Design Decisions:
    - Query-side coercion back to column types lives in the shell
      (services/keyset_pagination.py); this module never touches SQL
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping, Sequence

from content_sync.core.errors import PaginationConfigError

DEFAULT_COUNT = 100


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"

    def reversed(self) -> "SortOrder":
        return SortOrder.DESC if self == SortOrder.ASC else SortOrder.ASC


class Direction(str, Enum):
    FORWARDS = "forwards"
    BACKWARDS = "backwards"


@dataclass(frozen=True)
class PageRequest:
    """Resolved pagination parameters for one query."""
    key_names: tuple[str, ...]
    order: SortOrder
    query_order: SortOrder
    count: int
    direction: Direction
    previous: tuple[str, ...] | None


def resolve_page_request(
    key_names: Sequence[str],
    order: SortOrder | str | None = None,
    count: int | None = None,
    before: Sequence[Any] | None = None,
    after: Sequence[Any] | None = None,
) -> PageRequest:
    """Validate parameters and work out the query direction."""
    if not key_names:
        raise PaginationConfigError("Pagination key must have at least one field.")
    if before and after:
        raise PaginationConfigError("Before and after cannot both be present.")

    order = SortOrder(order) if order else SortOrder.ASC
    count = resolve_count(count)

    if before:
        previous, direction, query_order = before, Direction.BACKWARDS, order.reversed()
    else:
        previous, direction, query_order = after, Direction.FORWARDS, order

    if previous and len(previous) != len(key_names):
        raise PaginationConfigError(
            "Number of previous values does not match the number of fields.",
        )

    return PageRequest(
        key_names=tuple(key_names),
        order=order,
        query_order=query_order,
        count=count,
        direction=direction,
        previous=tuple(encode_value(v) for v in previous) if previous else None,
    )


def resolve_count(count: int | str | None) -> int:
    try:
        count = int(count) if count is not None else DEFAULT_COUNT
    except (TypeError, ValueError):
        return DEFAULT_COUNT
    return count if count > 0 else DEFAULT_COUNT


def encode_value(value: Any) -> str:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def key_for_record(
    record: Mapping[str, Any] | None, key_names: Sequence[str],
) -> tuple[str, ...] | None:
    """Cursor tuple identifying a result row; None for an empty page."""
    if record is None:
        return None
    return tuple(encode_value(record[name]) for name in key_names)


def parse_cursor(raw: str | None) -> list[str] | None:
    """Split a comma-separated cursor from a query string."""
    if raw is None or raw == "":
        return None
    return raw.split(",")
