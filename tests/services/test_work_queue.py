"""Work queues — priority ordering in memory and dramatiq routing."""

from uuid import uuid4

import pytest

from content_sync.core.domain_types import QueueClass, Sink
from content_sync.schemas.jobs import DownstreamJob
from content_sync.services.work_queue import InMemoryWorkQueue


def make_job(version, queue_class=QueueClass.HIGH):
    return DownstreamJob(
        sink=Sink.DRAFT, content_id=uuid4(), locale="en",
        version=version, queue_class=queue_class,
    )


async def test_high_queue_drains_before_low():
    queue = InMemoryWorkQueue()
    low, high = make_job(1, QueueClass.LOW), make_job(2)
    await queue.enqueue(low, QueueClass.LOW)
    await queue.enqueue(high, QueueClass.HIGH)

    seen = []

    async def handler(job):
        seen.append(job.version)

    assert await queue.drain(handler) == 2
    assert seen == [2, 1]
    assert queue.jobs == []


async def test_jobs_enqueued_during_drain_are_processed():
    queue = InMemoryWorkQueue()
    await queue.enqueue(make_job(1), QueueClass.HIGH)
    seen = []

    async def handler(job):
        seen.append(job.version)
        if job.version == 1:
            await queue.enqueue(make_job(2, QueueClass.LOW), QueueClass.LOW)

    await queue.drain(handler)

    assert seen == [1, 2]


async def test_drain_respects_limit():
    queue = InMemoryWorkQueue()
    for version in range(3):
        await queue.enqueue(make_job(version), QueueClass.HIGH)

    async def handler(job):
        pass

    assert await queue.drain(handler, limit=2) == 2
    assert len(queue.jobs) == 1


@pytest.fixture
def stub_broker():
    from content_sync.workers.broker import broker

    broker.flush_all()
    yield broker
    broker.flush_all()


async def test_dramatiq_queue_routes_by_class(stub_broker, settings):
    from content_sync.workers.queue import DramatiqWorkQueue

    queue = DramatiqWorkQueue.default()
    await queue.enqueue(make_job(1), QueueClass.HIGH)
    await queue.enqueue(make_job(2, QueueClass.LOW), QueueClass.LOW)
    await queue.enqueue(make_job(3, QueueClass.LOW), QueueClass.LOW)

    assert stub_broker.queues[settings.downstream_high_queue].qsize() == 1
    assert stub_broker.queues[settings.downstream_low_queue].qsize() == 2
