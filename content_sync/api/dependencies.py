"""API Dependencies — per-request collaborators resolved from app.state.

Invariants:
    - One KeyedLock per process, shared by every request
    - The work queue and draft store are created in the lifespan; tests replace
      them on app.state
"""

from fastapi import Depends, Request

from content_sync.config import Settings, get_settings
from content_sync.core.keyed_lock import KeyedLock
from content_sync.core.repository_protocols import ContentStore, WorkQueue
from content_sync.services.downstream_dispatch import DownstreamDispatch


def get_locks(request: Request) -> KeyedLock:
    return request.app.state.locks


def get_work_queue(request: Request) -> WorkQueue:
    return request.app.state.work_queue


def get_draft_store(request: Request) -> ContentStore:
    return request.app.state.draft_store


def get_dispatch(queue: WorkQueue = Depends(get_work_queue)) -> DownstreamDispatch:
    return DownstreamDispatch(queue)


def get_app_settings() -> Settings:
    return get_settings()
