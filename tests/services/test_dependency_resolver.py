"""Dependency Resolver — fan-out to items linking to a changed item."""

from uuid import uuid4

from content_sync.core.domain_types import QueueClass, Sink
from content_sync.services.dependency_resolver import DependencyResolver


async def linking_items(commands, target, count, publish=False):
    sources = []
    for _ in range(count):
        source = uuid4()
        await commands.put(
            source, base_path=f"/linking/{source}", links={"organisations": [str(target)]},
        )
        if publish:
            await commands.publish(source)
        sources.append(source)
    return sources


async def test_draft_change_fans_out_to_linking_drafts(test_db, dispatch, commands, queue):
    target = uuid4()
    await commands.put(target, base_path="/target")
    sources = await linking_items(commands, target, 3)
    queue.clear()

    enqueued = await DependencyResolver(test_db, dispatch, page_size=2).enqueue_dependents(
        target, 42, Sink.DRAFT,
    )

    assert enqueued == 3
    assert {job.content_id for job in queue.jobs} == set(sources)
    for job in queue.jobs:
        assert job.sink == Sink.DRAFT
        assert job.version == 42
        assert job.queue_class == QueueClass.LOW
        assert job.resolve_dependencies is False


async def test_live_fan_out_skips_draft_only_dependents(test_db, dispatch, commands, queue):
    target = uuid4()
    published = await linking_items(commands, target, 2, publish=True)
    await linking_items(commands, target, 1)
    queue.clear()

    await DependencyResolver(test_db, dispatch).enqueue_dependents(target, 7, Sink.LIVE)

    assert {job.content_id for job in queue.jobs} == set(published)
    for job in queue.jobs:
        assert job.sink == Sink.LIVE
        assert job.update_type_override == "links"


async def test_item_without_dependents_enqueues_nothing(test_db, dispatch, queue):
    enqueued = await DependencyResolver(test_db, dispatch).enqueue_dependents(
        uuid4(), 1, Sink.DRAFT,
    )

    assert enqueued == 0
    assert queue.jobs == []


async def test_self_links_are_excluded(test_db, dispatch, commands, queue):
    content_id = uuid4()
    await commands.put(content_id, links={"related": [str(content_id)]})
    queue.clear()

    enqueued = await DependencyResolver(test_db, dispatch).enqueue_dependents(
        content_id, 3, Sink.DRAFT,
    )

    assert enqueued == 0


async def test_worker_fan_out_does_not_cascade(commands, queue, worker, draft_store):
    target = uuid4()
    await commands.put(target, base_path="/target")
    sources = await linking_items(commands, target, 3)
    await queue.drain(worker.perform)
    writes_before = len(draft_store.puts)

    touched = await commands.put(target, base_path="/target", title="Renamed")
    await queue.drain(worker.perform)

    new_writes = draft_store.puts[writes_before:]
    assert len(new_writes) == 1 + len(sources)
    assert {body["payload_version"] for _, body in new_writes} == {touched.payload_version}
    assert queue.jobs == []
