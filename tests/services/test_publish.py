"""Publish — draft promotion, supersession and downstream notification."""

from uuid import uuid4

import pytest
from sqlalchemy import select

from content_sync.core.domain_types import QueueClass, Sink
from content_sync.core.errors import (
    ConcurrencyConflictError, EntityNotFoundError, ValidationError,
)
from content_sync.models.edition import Edition


async def states(db):
    result = await db.execute(
        select(Edition.user_facing_version, Edition.state)
        .order_by(Edition.user_facing_version)
    )
    return [tuple(row) for row in result.all()]


async def test_publish_promotes_draft_and_notifies_both_sinks(commands, queue):
    content_id = uuid4()
    await commands.put(content_id)
    queue.clear()

    response = await commands.publish(content_id)

    assert response.state == "published"
    assert response.user_facing_version == 1
    assert response.lock_version == 2
    assert response.published_at is not None
    assert [job.sink for job in queue.jobs] == [Sink.DRAFT, Sink.LIVE]
    assert {job.version for job in queue.jobs} == {response.payload_version}


async def test_publishing_new_draft_supersedes_previous(commands, test_db):
    content_id = uuid4()
    await commands.put(content_id)
    await commands.publish(content_id)
    await commands.put(content_id, title="Second edition")

    await commands.publish(content_id)

    assert await states(test_db) == [(1, "superseded"), (2, "published")]


async def test_update_type_from_request_overrides_draft(commands):
    content_id = uuid4()
    await commands.put(content_id, update_type="major")

    response = await commands.publish(content_id, update_type="minor")

    assert response.update_type == "minor"


async def test_missing_update_type_is_rejected(commands, test_db):
    content_id = uuid4()
    await commands.put(content_id, update_type=None)

    with pytest.raises(ValidationError) as exc:
        await commands.publish(content_id)

    assert exc.value.fields == {"update_type": ["is required"]}
    assert await states(test_db) == [(1, "draft")]


async def test_unknown_document_not_found(commands):
    with pytest.raises(EntityNotFoundError) as exc:
        await commands.publish(uuid4())

    assert exc.value.http_status == 404


async def test_republishing_without_draft_is_rejected(commands):
    content_id = uuid4()
    await commands.put(content_id)
    await commands.publish(content_id)

    with pytest.raises(ValidationError, match="already published"):
        await commands.publish(content_id)


async def test_stale_previous_version_conflicts(commands, test_db):
    content_id = uuid4()
    await commands.put(content_id)

    with pytest.raises(ConcurrencyConflictError):
        await commands.publish(content_id, previous_version=5)

    assert await states(test_db) == [(1, "draft")]


async def test_bulk_publish_goes_to_low_queue(commands, queue):
    content_id = uuid4()
    await commands.put(content_id)
    queue.clear()

    await commands.publish(content_id, bulk_publishing=True)

    assert {job.queue_class for job in queue.jobs} == {QueueClass.LOW}
