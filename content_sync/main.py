"""content-sync API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map ContentSyncError → {"errors": {...}} responses
    - CORS configured from settings (not hardcoded)
    - Database, work queue and draft store client initialized in the lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - One KeyedLock per process on app.state: mutations of the same
      (content_id, locale) serialize even on a single-writer database
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from content_sync.api.error_handlers import register_error_handlers
from content_sync.api.routes import content, editions, health, links, requeue
from content_sync.config import get_settings
from content_sync.core.keyed_lock import KeyedLock
from content_sync.infrastructure.content_store_client import HttpContentStore
from content_sync.infrastructure.database import init_db
from content_sync.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    from content_sync.workers.queue import DramatiqWorkQueue

    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    app.state.locks = KeyedLock()
    app.state.work_queue = DramatiqWorkQueue.default()
    app.state.draft_store = HttpContentStore(
        "draft-content-store", settings.draft_content_store_url,
        settings.content_store_timeout_seconds,
    )
    logger.info("content-sync API started")
    yield
    logger.info("content-sync API shutting down")
    await app.state.draft_store.aclose()
    await manager.dispose()


app = FastAPI(
    title="content-sync API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(content.router)
app.include_router(links.router)
app.include_router(editions.router)
app.include_router(requeue.router)

register_error_handlers(app)
