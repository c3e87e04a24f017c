"""Edition Listing — keyset-paginated view over all editions.

Pages are keyed on (updated_at, id) so the listing stays stable while editions
are being written. Cursor links carry the key as a comma-separated string.
"""

from urllib.parse import urlencode

from sqlalchemy.ext.asyncio import AsyncSession

from content_sync.core.cursor import SortOrder
from content_sync.models.edition import Edition
from content_sync.repositories.editions import EditionRepository
from content_sync.services.keyset_pagination import KeysetPagination

LISTING_KEY = {"updated_at": Edition.updated_at, "id": Edition.id}


async def list_editions(
    db: AsyncSession,
    path: str,
    order: SortOrder | None = None,
    per_page: int | None = None,
    before: list[str] | None = None,
    after: list[str] | None = None,
    publishing_app: str | None = None,
    states: list[str] | None = None,
) -> dict:
    pagination = KeysetPagination(
        db,
        EditionRepository.listing_query(publishing_app, states),
        LISTING_KEY,
        order=order,
        count=per_page,
        before=before,
        after=after,
    )
    records = await pagination.call()

    base = {"order": pagination.order.value, "per_page": pagination.count}
    if publishing_app:
        base["publishing_app"] = publishing_app
    if states:
        base["states"] = ",".join(states)

    def href(**cursor) -> str:
        return f"{path}?{urlencode({**base, **cursor})}"

    links = [{"href": href(**_cursor_params(before, after)), "rel": "self"}]
    if await pagination.has_next_after():
        links.append({"href": href(after=",".join(pagination.next_after_key)), "rel": "next"})
    if await pagination.has_next_before():
        links.append({"href": href(before=",".join(pagination.next_before_key)), "rel": "previous"})

    return {
        "results": [_present(record) for record in records],
        "links": links,
    }


def _cursor_params(before: list[str] | None, after: list[str] | None) -> dict:
    if before:
        return {"before": ",".join(before)}
    if after:
        return {"after": ",".join(after)}
    return {}


def _present(record: dict) -> dict:
    return {
        key: (value.isoformat() if hasattr(value, "isoformat") else
              str(value) if key in ("id", "content_id") else value)
        for key, value in record.items()
    }
