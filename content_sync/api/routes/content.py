"""Content Routes — put content, publish and unpublish.

Invariants:
    - Handlers only wire collaborators; every rule lives in the command services
    - Domain errors propagate to the global ContentSyncError handler
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from content_sync.api.dependencies import get_app_settings, get_dispatch, get_locks
from content_sync.config import Settings
from content_sync.core.keyed_lock import KeyedLock
from content_sync.infrastructure.database import get_db
from content_sync.schemas.content import (
    ContentRequest, EditionResponse, PublishRequest, UnpublishRequest,
)
from content_sync.services.downstream_dispatch import DownstreamDispatch
from content_sync.services.publish import Publish
from content_sync.services.put_content import PutContent
from content_sync.services.unpublish import Unpublish

router = APIRouter(prefix="/v2/content", tags=["content"])


@router.put("/{content_id}", response_model=EditionResponse)
async def put_content(
    content_id: UUID,
    body: ContentRequest,
    db: AsyncSession = Depends(get_db),
    dispatch: DownstreamDispatch = Depends(get_dispatch),
    locks: KeyedLock = Depends(get_locks),
    settings: Settings = Depends(get_app_settings),
):
    """Create or update the draft edition of a content item."""
    return await PutContent(db, dispatch, locks, settings).call(content_id, body)


@router.post("/{content_id}/publish", response_model=EditionResponse)
async def publish(
    content_id: UUID,
    body: PublishRequest,
    db: AsyncSession = Depends(get_db),
    dispatch: DownstreamDispatch = Depends(get_dispatch),
    locks: KeyedLock = Depends(get_locks),
    settings: Settings = Depends(get_app_settings),
):
    return await Publish(db, dispatch, locks, settings).call(content_id, body)


@router.post("/{content_id}/unpublish", response_model=EditionResponse)
async def unpublish(
    content_id: UUID,
    body: UnpublishRequest,
    db: AsyncSession = Depends(get_db),
    dispatch: DownstreamDispatch = Depends(get_dispatch),
    locks: KeyedLock = Depends(get_locks),
    settings: Settings = Depends(get_app_settings),
):
    return await Unpublish(db, dispatch, locks, settings).call(content_id, body)
