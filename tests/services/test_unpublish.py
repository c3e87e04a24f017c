"""Unpublish — unpublishing types, draft handling and validation."""

from uuid import uuid4

import pytest
from sqlalchemy import func, select

from content_sync.core.domain_types import Sink
from content_sync.core.errors import EntityNotFoundError, ValidationError
from content_sync.models.edition import Edition


@pytest.fixture
async def published(commands, queue):
    content_id = uuid4()
    await commands.put(content_id)
    await commands.publish(content_id)
    queue.clear()
    return content_id


async def test_gone_unpublishes_live_edition(commands, queue, published):
    response = await commands.unpublish(published, type="gone")

    assert response.state == "unpublished"
    assert response.lock_version == 3
    assert response.unpublishing["type"] == "gone"
    assert response.unpublishing["unpublished_at"]
    assert [job.sink for job in queue.jobs] == [Sink.LIVE, Sink.DRAFT]


async def test_redirect_records_alternative_path(commands, published):
    response = await commands.unpublish(
        published, type="redirect", alternative_path="/new-home",
    )

    assert response.unpublishing["alternative_path"] == "/new-home"


async def test_redirect_without_alternative_path_rejected(commands, published):
    with pytest.raises(ValidationError) as exc:
        await commands.unpublish(published, type="redirect")

    assert "alternative_path" in exc.value.fields


async def test_withdrawal_requires_explanation(commands, published):
    with pytest.raises(ValidationError) as exc:
        await commands.unpublish(published, type="withdrawal")

    assert "explanation" in exc.value.fields

    response = await commands.unpublish(
        published, type="withdrawal", explanation="Replaced by new guidance",
    )
    assert response.unpublishing["explanation"] == "Replaced by new guidance"


async def test_unpublishing_again_amends_details(commands, published):
    await commands.unpublish(published, type="gone")

    response = await commands.unpublish(
        published, type="withdrawal", explanation="Out of date",
    )

    assert response.state == "unpublished"
    assert response.unpublishing["type"] == "withdrawal"
    assert response.lock_version == 4


async def test_draft_blocks_unpublish_unless_discarded(commands, test_db, published):
    await commands.put(published, title="Pending edit")

    with pytest.raises(ValidationError) as exc:
        await commands.unpublish(published)
    assert "discard_drafts" in exc.value.fields

    await commands.unpublish(published, discard_drafts=True)

    result = await test_db.execute(
        select(func.count(Edition.id)).where(Edition.state == "draft")
    )
    assert result.scalar_one() == 0


async def test_draft_only_document_cannot_be_unpublished(commands):
    content_id = uuid4()
    await commands.put(content_id)

    with pytest.raises(EntityNotFoundError):
        await commands.unpublish(content_id, discard_drafts=True)


async def test_unknown_document_not_found(commands):
    with pytest.raises(EntityNotFoundError):
        await commands.unpublish(uuid4())
