"""Edition Routes — keyset-paginated listing of editions."""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from content_sync.core.cursor import SortOrder, parse_cursor
from content_sync.infrastructure.database import get_db
from content_sync.services.edition_listing import list_editions

router = APIRouter(prefix="/v2/editions", tags=["editions"])


@router.get("")
async def get_editions(
    request: Request,
    before: str | None = Query(None, description="Comma-separated cursor"),
    after: str | None = Query(None, description="Comma-separated cursor"),
    per_page: int | None = Query(None),
    order: SortOrder | None = Query(None),
    publishing_app: str | None = Query(None),
    states: str | None = Query(None, description="Comma-separated edition states"),
    db: AsyncSession = Depends(get_db),
):
    return await list_editions(
        db,
        request.url.path,
        order=order,
        per_page=per_page,
        before=parse_cursor(before),
        after=parse_cursor(after),
        publishing_app=publishing_app,
        states=parse_cursor(states),
    )
