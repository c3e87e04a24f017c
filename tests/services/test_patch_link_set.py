"""Patch Link Set — links-only updates across the draft and live editions."""

from uuid import uuid4

import pytest

from content_sync.core.domain_types import Sink
from content_sync.core.errors import EntityNotFoundError, ValidationError
from content_sync.models.event import Event


async def test_patch_merges_into_draft_without_moving_counters(commands, queue):
    content_id, org, topic = uuid4(), uuid4(), uuid4()
    await commands.put(content_id, links={"organisations": [str(org)]})
    queue.clear()

    response = await commands.patch_links(content_id, {"topics": [str(topic)]})

    assert response.links == {"organisations": [str(org)], "topics": [str(topic)]}
    assert response.lock_version == 1
    assert response.user_facing_version == 1
    assert [job.sink for job in queue.jobs] == [Sink.DRAFT]


async def test_patch_reaches_live_edition_with_links_update_type(commands, queue):
    content_id, org = uuid4(), uuid4()
    await commands.put(content_id)
    await commands.publish(content_id)
    queue.clear()

    response = await commands.patch_links(content_id, {"organisations": [str(org)]})

    assert response.state == "published"
    assert response.links == {"organisations": [str(org)]}
    draft_job, live_job = queue.jobs
    assert draft_job.sink == Sink.DRAFT
    assert live_job.sink == Sink.LIVE
    assert live_job.update_type_override == "links"


async def test_patch_updates_draft_and_live_alike(commands, test_db):
    content_id, org = uuid4(), uuid4()
    await commands.put(content_id)
    await commands.publish(content_id)
    await commands.put(content_id, title="Draft on top")

    response = await commands.patch_links(content_id, {"organisations": [str(org)]})

    assert response.state == "draft"
    published = await commands.publish(content_id)
    assert published.links == {"organisations": [str(org)]}


async def test_patch_for_unknown_document_not_found(commands):
    with pytest.raises(EntityNotFoundError):
        await commands.patch_links(uuid4(), {"organisations": [str(uuid4())]})


async def test_invalid_target_rejected_before_write(commands, test_db):
    content_id = uuid4()
    await commands.put(content_id)

    with pytest.raises(ValidationError):
        await commands.patch_links(content_id, {"organisations": ["nope"]})

    events = (await test_db.execute(Event.__table__.select())).all()
    assert len(events) == 1
