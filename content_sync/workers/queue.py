"""Dramatiq Work Queue — WorkQueue implementation backed by the downstream actors."""

import asyncio

import dramatiq

from content_sync.core.domain_types import QueueClass
from content_sync.schemas.jobs import DownstreamJob


class DramatiqWorkQueue:
    def __init__(self, high: dramatiq.Actor, low: dramatiq.Actor):
        self._actors = {QueueClass.HIGH: high, QueueClass.LOW: low}

    @classmethod
    def default(cls) -> "DramatiqWorkQueue":
        from content_sync.workers.downstream import downstream_high, downstream_low
        return cls(downstream_high, downstream_low)

    async def enqueue(self, job: DownstreamJob, queue_class: QueueClass) -> None:
        # Broker send is blocking IO
        await asyncio.to_thread(self._actors[queue_class].send, job.parameters())
