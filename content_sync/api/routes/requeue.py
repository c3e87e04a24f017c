"""Requeue Route — bulk resync of live content through the low-priority queue."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from content_sync.api.dependencies import get_dispatch
from content_sync.infrastructure.database import get_db
from content_sync.schemas.content import RequeueRequest
from content_sync.services.downstream_dispatch import DownstreamDispatch
from content_sync.services.requeue import RequeueLiveContent

router = APIRouter(prefix="/v2/requeue", tags=["requeue"])


@router.post("", status_code=status.HTTP_202_ACCEPTED)
async def requeue(
    body: RequeueRequest,
    db: AsyncSession = Depends(get_db),
    dispatch: DownstreamDispatch = Depends(get_dispatch),
):
    enqueued = await RequeueLiveContent(
        db, dispatch, body.batch_size or 500,
    ).call(body.version)
    return {"enqueued": enqueued}
