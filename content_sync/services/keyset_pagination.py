"""Keyset Pagination — pages an arbitrary SELECT by a compound key.

Invariants:
    - Results are always returned in the caller's order, even when paging backwards
    - The WHERE clause is a tuple comparison over every key column, so rows sharing
      a leading key value are neither skipped nor repeated
    - has_next_before / has_next_after issue a one-row probe query

Design Decisions:
    - The caller supplies a Select with labelled columns and a key mapping from
      label to column; records come back as plain dicts keyed by label
    - Cursor strings are coerced back through the column's python_type
"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping

from sqlalchemy import Select, literal, tuple_
from sqlalchemy.ext.asyncio import AsyncSession

from content_sync.core.cursor import (
    Direction, SortOrder, key_for_record, resolve_page_request,
)


class KeysetPagination:
    def __init__(
        self,
        db: AsyncSession,
        query: Select,
        key: Mapping[str, Any],
        order: SortOrder | str | None = None,
        count: int | None = None,
        before: list[str] | tuple[str, ...] | None = None,
        after: list[str] | tuple[str, ...] | None = None,
    ):
        self.db = db
        self.query = query
        self.key = dict(key)
        self.order = SortOrder(order) if order else SortOrder.ASC
        self.request = resolve_page_request(
            list(self.key), self.order, count, before, after,
        )
        self._results: list[dict] | None = None

    async def call(self) -> list[dict]:
        if self._results is None:
            result = await self.db.execute(self._paginated_query())
            records = [dict(row) for row in result.mappings().all()]
            if self.request.direction == Direction.BACKWARDS:
                records.reverse()
            self._results = records
        return self._results

    @property
    def count(self) -> int:
        return self.request.count

    @property
    def next_before_key(self) -> tuple[str, ...] | None:
        """Cursor for the page preceding this one."""
        self._require_results()
        return key_for_record(
            self._results[0] if self._results else None, self.request.key_names,
        )

    @property
    def next_after_key(self) -> tuple[str, ...] | None:
        """Cursor for the page following this one."""
        self._require_results()
        return key_for_record(
            self._results[-1] if self._results else None, self.request.key_names,
        )

    async def has_next_before(self) -> bool:
        await self.call()
        return await self._probe(before=self.next_before_key)

    async def has_next_after(self) -> bool:
        await self.call()
        return await self._probe(after=self.next_after_key)

    async def _probe(self, before=None, after=None) -> bool:
        if before is None and after is None:
            return False
        probe = KeysetPagination(
            self.db, self.query, self.key,
            order=self.order, count=1, before=before, after=after,
        )
        return len(await probe.call()) > 0

    def _require_results(self) -> None:
        if self._results is None:
            raise RuntimeError("call() must be awaited before reading cursors")

    def _paginated_query(self) -> Select:
        columns = list(self.key.values())
        ascending = self.request.query_order == SortOrder.ASC
        ordering = [c.asc() if ascending else c.desc() for c in columns]
        query = self.query.order_by(None).order_by(*ordering)

        if self.request.previous:
            values = [
                literal(coerce_cursor_value(column, value), type_=_column_type(column))
                for column, value in zip(columns, self.request.previous)
            ]
            lhs, rhs = tuple_(*columns), tuple_(*values)
            query = query.where(lhs > rhs if ascending else lhs < rhs)

        return query.limit(self.request.count)


def _column_type(column):
    return getattr(column, "expression", column).type


def coerce_cursor_value(column, value: str) -> Any:
    """Turn a cursor string back into the column's Python type."""
    try:
        python_type = _column_type(column).python_type
    except NotImplementedError:
        return value
    if python_type is datetime:
        return datetime.fromisoformat(value)
    if python_type is date:
        return date.fromisoformat(value)
    if python_type is uuid.UUID:
        return uuid.UUID(value)
    if python_type is bool:
        return value.lower() in ("true", "1")
    if python_type in (int, float, Decimal):
        return python_type(value)
    return value
