"""Downstream Dispatch — builds and enqueues post-commit downstream jobs.

Invariants:
    - Called only after the mutation's transaction committed
    - bulk_publishing requests go to the low queue, everything else to high
    - Every job carries the version of the event that caused it
"""

import logging
from uuid import UUID

from content_sync.core.domain_types import QueueClass, Sink
from content_sync.core.repository_protocols import WorkQueue
from content_sync.schemas.jobs import DownstreamJob

logger = logging.getLogger(__name__)


def queue_class_for(bulk_publishing: bool) -> QueueClass:
    return QueueClass.LOW if bulk_publishing else QueueClass.HIGH


class DownstreamDispatch:
    def __init__(self, queue: WorkQueue):
        self.queue = queue

    async def send_draft(
        self,
        content_id: UUID,
        locale: str,
        version: int,
        queue_class: QueueClass = QueueClass.HIGH,
        resolve_dependencies: bool = True,
    ) -> DownstreamJob:
        return await self._enqueue(DownstreamJob(
            sink=Sink.DRAFT,
            content_id=content_id,
            locale=locale,
            version=version,
            resolve_dependencies=resolve_dependencies,
            queue_class=queue_class,
        ))

    async def send_live(
        self,
        content_id: UUID,
        locale: str,
        version: int,
        queue_class: QueueClass = QueueClass.HIGH,
        update_type_override: str | None = None,
        resolve_dependencies: bool = True,
        edition_id: UUID | None = None,
        alert_on_invalid_state: bool = True,
        message_queue_only: bool = False,
    ) -> DownstreamJob:
        return await self._enqueue(DownstreamJob(
            sink=Sink.LIVE,
            content_id=content_id,
            locale=locale,
            version=version,
            update_type_override=update_type_override,
            resolve_dependencies=resolve_dependencies,
            queue_class=queue_class,
            alert_on_invalid_state=alert_on_invalid_state,
            edition_id=edition_id,
            message_queue_only=message_queue_only,
        ))

    async def _enqueue(self, job: DownstreamJob) -> DownstreamJob:
        await self.queue.enqueue(job, job.queue_class)
        logger.info(
            f"Enqueued {job.sink.value} job",
            extra={
                "sink": job.sink.value, "content_id": job.content_id,
                "locale": job.locale, "version": job.version,
                "queue_class": job.queue_class.value,
            },
        )
        return job
