"""Link Routes — links-only patch and the legacy draft-with-links endpoint."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from content_sync.api.dependencies import (
    get_app_settings, get_dispatch, get_draft_store, get_locks,
)
from content_sync.config import Settings
from content_sync.core.keyed_lock import KeyedLock
from content_sync.core.repository_protocols import ContentStore
from content_sync.infrastructure.database import get_db
from content_sync.schemas.content import ContentRequest, EditionResponse, LinkSetRequest
from content_sync.services.downstream_dispatch import DownstreamDispatch
from content_sync.services.patch_link_set import PatchLinkSet
from content_sync.services.put_draft_content_with_links import PutDraftContentWithLinks

router = APIRouter(tags=["links"])


@router.patch("/v2/links/{content_id}", response_model=EditionResponse)
async def patch_link_set(
    content_id: UUID,
    body: LinkSetRequest,
    db: AsyncSession = Depends(get_db),
    dispatch: DownstreamDispatch = Depends(get_dispatch),
    locks: KeyedLock = Depends(get_locks),
    settings: Settings = Depends(get_app_settings),
):
    """Merge link types into the draft and live editions."""
    return await PatchLinkSet(db, dispatch, locks, settings).call(content_id, body)


@router.put("/draft-content-with-links")
async def put_draft_content_with_links(
    body: ContentRequest,
    db: AsyncSession = Depends(get_db),
    dispatch: DownstreamDispatch = Depends(get_dispatch),
    locks: KeyedLock = Depends(get_locks),
    settings: Settings = Depends(get_app_settings),
    draft_store: ContentStore = Depends(get_draft_store),
):
    """Legacy: replace links (protected types kept) and write the draft."""
    return await PutDraftContentWithLinks(
        db, dispatch, locks, settings, draft_store,
    ).call(body)
