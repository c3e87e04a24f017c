"""In-Memory Work Queue — WorkQueue implementation for tests and single-process runs.

Invariants:
    - drain() empties the high queue before touching the low queue
    - Jobs enqueued while draining are processed in the same drain
"""

from collections import deque
from typing import Awaitable, Callable

from content_sync.core.domain_types import QueueClass
from content_sync.schemas.jobs import DownstreamJob


class InMemoryWorkQueue:
    def __init__(self):
        self.queues: dict[QueueClass, deque[DownstreamJob]] = {
            QueueClass.HIGH: deque(),
            QueueClass.LOW: deque(),
        }

    async def enqueue(self, job: DownstreamJob, queue_class: QueueClass) -> None:
        self.queues[queue_class].append(job)

    @property
    def jobs(self) -> list[DownstreamJob]:
        return [*self.queues[QueueClass.HIGH], *self.queues[QueueClass.LOW]]

    def pop(self) -> DownstreamJob | None:
        for queue_class in (QueueClass.HIGH, QueueClass.LOW):
            if self.queues[queue_class]:
                return self.queues[queue_class].popleft()
        return None

    def clear(self) -> None:
        for queue in self.queues.values():
            queue.clear()

    async def drain(
        self,
        handler: Callable[[DownstreamJob], Awaitable[None]],
        limit: int = 10_000,
    ) -> int:
        processed = 0
        while processed < limit:
            job = self.pop()
            if job is None:
                break
            await handler(job)
            processed += 1
        return processed
