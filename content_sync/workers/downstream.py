"""Downstream Actors — high and low priority entrypoints for DownstreamJob processing.

Invariants:
    - One job per actor message; each runs on a fresh event loop with its own
      engine, HTTP client and Redis client
    - DownstreamTransportError propagates so dramatiq's Retries middleware retries;
      DownstreamRequestError is not retried (the store rejected the payload)

Design Decisions:
    - A NullPool DatabaseSessionManager per job, since asyncio.run() opens a new
      event loop for every message and pooled asyncpg connections are loop-bound
"""

import asyncio
import logging

import dramatiq

from content_sync.workers.broker import broker  # noqa: F401  (sets the global broker)
from content_sync.config import Settings, get_settings
from content_sync.core.errors import DownstreamRequestError
from content_sync.infrastructure.database import DatabaseSessionManager
from content_sync.infrastructure.content_store_client import HttpContentStore
from content_sync.infrastructure.error_reporter import LoggingErrorReporter
from content_sync.infrastructure.message_publisher import RedisMessagePublisher
from content_sync.infrastructure.observability import setup_logging
from content_sync.schemas.jobs import DownstreamJob
from content_sync.services.downstream_worker import DownstreamWorker
from content_sync.workers.queue import DramatiqWorkQueue

logger = logging.getLogger(__name__)
settings = get_settings()


async def process_job(raw: dict, settings: Settings) -> None:
    setup_logging(settings.log_level, settings.log_format)
    job = DownstreamJob.model_validate(raw)
    manager = DatabaseSessionManager(settings.database_url, null_pool=True)
    draft_store = HttpContentStore(
        "draft-content-store", settings.draft_content_store_url,
        settings.content_store_timeout_seconds,
        absorb_conflicts=True,
    )
    live_store = HttpContentStore(
        "content-store", settings.live_content_store_url,
        settings.content_store_timeout_seconds,
        absorb_conflicts=True,
    )
    publisher = RedisMessagePublisher.from_url(
        settings.redis_url, settings.message_channel_prefix,
    )
    try:
        async with manager.session() as db:
            await DownstreamWorker(
                db, draft_store, live_store, publisher,
                DramatiqWorkQueue(downstream_high, downstream_low),
                LoggingErrorReporter(), settings,
            ).perform(job)
    finally:
        await draft_store.aclose()
        await live_store.aclose()
        await publisher.aclose()
        await manager.dispose()


@dramatiq.actor(
    queue_name=settings.downstream_high_queue,
    priority=0,
    max_retries=settings.downstream_max_retries,
    time_limit=settings.downstream_time_limit_ms,
    throws=(DownstreamRequestError,),
)
def downstream_high(job: dict):
    asyncio.run(process_job(job, get_settings()))


@dramatiq.actor(
    queue_name=settings.downstream_low_queue,
    priority=100,
    max_retries=settings.downstream_max_retries,
    time_limit=settings.downstream_time_limit_ms,
    throws=(DownstreamRequestError,),
)
def downstream_low(job: dict):
    asyncio.run(process_job(job, get_settings()))
