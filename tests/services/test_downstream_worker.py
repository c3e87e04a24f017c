"""Downstream Worker — sink routing, version guard and error absorption.

Invariants:
    - Draft store sees drafts (with access limits), live store only live editions
    - Message queue only hears about published editions
    - Stale or repeated versions are never written twice
    - Transport failures propagate and leave the ledger untouched
"""

from uuid import uuid4

import pytest

from content_sync.core.domain_types import Sink
from content_sync.core.errors import (
    DownstreamTransportError, EntityNotFoundError, InvalidStateError,
)
from content_sync.schemas.jobs import DownstreamJob
from content_sync.models.sink_version import SinkVersion


def job(sink, content_id, version, **fields):
    return DownstreamJob(sink=sink, content_id=content_id, locale="en", version=version, **fields)


async def ledger(db, sink, content_id):
    row = await db.get(SinkVersion, (sink.value, content_id, "en"))
    return row.version if row else None


# ─── Draft sink ────────────────────────────────────────────────

async def test_draft_job_writes_draft_store(commands, queue, worker, draft_store, live_store):
    content_id = uuid4()
    response = await commands.put(content_id, access_limited={"users": ["u1"]})

    await queue.drain(worker.perform)

    (base_path, body), = draft_store.puts
    assert base_path == "/vat-rates"
    assert body["content_id"] == str(content_id)
    assert body["payload_version"] == response.payload_version
    assert body["state"] == "draft"
    assert body["access_limited"] == {"users": ["u1"], "auth_bypass_ids": []}
    assert body["details"] == {"body": "<p>20%</p>"}
    assert live_store.puts == []


async def test_pathless_item_sent_to_draft_store(commands, queue, worker, draft_store):
    await commands.put(uuid4(), base_path=None, schema_name="contact", document_type="contact")

    await queue.drain(worker.perform)

    (base_path, body), = draft_store.puts
    assert base_path is None
    assert body["schema_name"] == "contact"


# ─── Live sinks ────────────────────────────────────────────────

async def test_publish_reaches_all_sinks(
    commands, queue, worker, draft_store, live_store, publisher,
):
    content_id = uuid4()
    await commands.put(content_id, access_limited={"users": ["u1"]})
    published = await commands.publish(content_id)

    await queue.drain(worker.perform)

    assert draft_store.versions()[-1] == published.payload_version
    (base_path, live_body), = live_store.puts
    assert base_path == "/vat-rates"
    assert live_body["state"] == "published"
    assert "access_limited" not in live_body
    assert publisher.routing_keys == ["guide.major"]
    _, message = publisher.messages[0]
    assert message["update_type"] == "major"
    assert message["payload_version"] == published.payload_version


async def test_unpublished_item_updates_live_store_without_message(
    commands, queue, worker, live_store, publisher,
):
    content_id = uuid4()
    await commands.put(content_id)
    await commands.publish(content_id)
    await queue.drain(worker.perform)

    await commands.unpublish(content_id, type="gone")
    await queue.drain(worker.perform)

    states = [body["state"] for _, body in live_store.puts]
    assert states == ["published", "unpublished"]
    assert live_store.puts[-1][1]["unpublishing"]["type"] == "gone"
    assert len(publisher.messages) == 1


async def test_links_override_routes_message(commands, queue, worker, publisher):
    content_id = uuid4()
    await commands.put(content_id)
    await commands.publish(content_id)
    await commands.patch_links(content_id, {"organisations": [str(uuid4())]})

    await queue.drain(worker.perform)

    assert publisher.routing_keys == ["guide.major", "guide.links"]


async def test_pathless_published_item_only_broadcast(
    commands, queue, worker, live_store, publisher,
):
    content_id = uuid4()
    await commands.put(content_id, base_path=None, schema_name="contact", document_type="contact")
    await commands.publish(content_id)

    await queue.drain(worker.perform)

    assert live_store.puts == []
    assert publisher.routing_keys == ["contact.major"]


# ─── Invalid state and missing items ───────────────────────────

async def test_live_job_for_draft_is_reported(commands, worker, live_store, reporter):
    content_id = uuid4()
    response = await commands.put(content_id)

    await worker.perform(job(Sink.LIVE, content_id, response.payload_version))

    assert reporter.errors == [InvalidStateError]
    _, context = reporter.reports[0]
    assert context["content_id"] == str(content_id)
    assert live_store.puts == []


async def test_invalid_state_suppressed_when_not_alerting(commands, worker, reporter):
    content_id = uuid4()
    response = await commands.put(content_id)

    await worker.perform(job(
        Sink.LIVE, content_id, response.payload_version, alert_on_invalid_state=False,
    ))

    assert reporter.reports == []


async def test_unknown_item_is_reported(worker, reporter, draft_store):
    await worker.perform(job(Sink.DRAFT, uuid4(), 1))

    assert reporter.errors == [EntityNotFoundError]
    assert draft_store.puts == []


# ─── Version guard ─────────────────────────────────────────────

async def test_repeated_job_is_applied_once(commands, queue, worker, draft_store):
    await commands.put(uuid4())
    draft_job = queue.pop()

    await worker.perform(draft_job)
    await worker.perform(draft_job)

    assert len(draft_store.puts) == 1


async def test_older_version_after_newer_is_skipped(commands, queue, worker, draft_store, test_db):
    content_id = uuid4()
    await commands.put(content_id, title="First")
    await commands.put(content_id, title="Second")
    older, newer = queue.jobs

    await worker.perform(newer)
    await worker.perform(older)

    assert draft_store.versions() == [newer.version]
    assert await ledger(test_db, Sink.DRAFT, content_id) == newer.version


async def test_transport_failure_leaves_ledger_unchanged(
    commands, queue, worker, draft_store, test_db,
):
    content_id = uuid4()
    await commands.put(content_id)
    draft_job = queue.pop()
    draft_store.fail_unavailable()

    with pytest.raises(DownstreamTransportError):
        await worker.perform(draft_job)
    assert await ledger(test_db, Sink.DRAFT, content_id) is None

    draft_store.fail_with = None
    await worker.perform(draft_job)

    assert draft_store.versions() == [draft_job.version]
    assert await ledger(test_db, Sink.DRAFT, content_id) == draft_job.version


async def test_each_sink_keeps_its_own_ledger(commands, queue, worker, test_db):
    content_id = uuid4()
    await commands.put(content_id)
    published = await commands.publish(content_id)

    await queue.drain(worker.perform)

    for sink in (Sink.DRAFT, Sink.LIVE, Sink.MESSAGE_QUEUE):
        assert await ledger(test_db, sink, content_id) == published.payload_version


# ─── Expanded links ────────────────────────────────────────────

async def test_expanded_links_use_draft_fallback(commands, queue, worker, draft_store):
    target, source = uuid4(), uuid4()
    await commands.put(target, base_path="/hmrc", title="HMRC")
    await commands.publish(target)
    await commands.put(target, base_path="/hmrc", title="HMRC (draft)")
    await commands.put(source, links={"organisations": [str(target)]})
    queue.clear()
    await commands.put(source, title="Touch")

    await queue.drain(worker.perform)

    _, body = draft_store.puts[-1]
    expanded, = body["expanded_links"]["organisations"]
    assert expanded["title"] == "HMRC (draft)"
    assert expanded["base_path"] == "/hmrc"
