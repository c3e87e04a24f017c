"""Legacy draft endpoint — replace-except-protected links and the pathed write."""

from uuid import UUID, uuid4

import httpx
import pytest

from content_sync.core.errors import (
    DownstreamRequestError, PathReservationConflictError, ValidationError,
)
from content_sync.infrastructure.content_store_client import HttpContentStore
from content_sync.services.put_draft_content_with_links import PutDraftContentWithLinks

from tests.builders import content_request


@pytest.fixture
def legacy(test_db, dispatch, locks, settings, draft_store):
    return PutDraftContentWithLinks(test_db, dispatch, locks, settings, draft_store)


async def test_replaces_unprotected_links_and_keeps_protected(legacy):
    content_id = uuid4()
    org, taxon, topic = str(uuid4()), str(uuid4()), str(uuid4())
    await legacy.call(content_request(
        content_id=content_id,
        links={"organisations": [org], "taxons": [taxon]},
    ))

    body = await legacy.call(content_request(
        content_id=content_id, links={"topics": [topic]},
    ))

    assert body["links"] == {"taxons": [taxon], "topics": [topic]}
    assert body["state"] == "draft"


async def test_exempt_app_keeps_existing_links(legacy):
    content_id = uuid4()
    org, topic = str(uuid4()), str(uuid4())
    await legacy.call(content_request(
        content_id=content_id, publishing_app="specialist-publisher",
        links={"organisations": [org]},
    ))

    body = await legacy.call(content_request(
        content_id=content_id, publishing_app="specialist-publisher",
        links={"topics": [topic]},
    ))

    assert body["links"] == {"organisations": [org], "topics": [topic]}


async def test_with_content_id_enqueues_instead_of_writing(legacy, queue, draft_store):
    await legacy.call(content_request(content_id=uuid4()))

    assert len(queue.jobs) == 1
    assert draft_store.puts == []


async def test_pathed_draft_written_synchronously(legacy, queue, draft_store):
    body = await legacy.call(content_request(base_path="/legacy-page"))

    assert queue.jobs == []
    (base_path, sent), = draft_store.puts
    assert base_path == "/legacy-page"
    assert sent is body
    assert body["content_id"] is None
    assert body["payload_version"] >= 1
    assert body["title"] == "VAT rates"


async def test_pathed_draft_requires_base_path(legacy):
    with pytest.raises(ValidationError) as exc:
        await legacy.call(content_request(base_path=None))

    assert exc.value.fields == {"base_path": ["is required"]}


async def test_pathed_draft_respects_reservations(legacy, draft_store):
    await legacy.call(content_request(base_path="/owned", publishing_app="whitehall"))

    with pytest.raises(PathReservationConflictError):
        await legacy.call(content_request(base_path="/owned", publishing_app="publisher"))

    assert len(draft_store.puts) == 1


async def test_store_rejection_reaches_caller(test_db, dispatch, locks, settings):
    def conflict(request):
        return httpx.Response(409, json={"error": "stale"})

    store = HttpContentStore(
        "draft-content-store", "http://draft-store",
        client=httpx.AsyncClient(transport=httpx.MockTransport(conflict)),
    )
    legacy = PutDraftContentWithLinks(test_db, dispatch, locks, settings, store)

    with pytest.raises(DownstreamRequestError) as exc:
        await legacy.call(content_request(base_path="/rejected"))

    assert exc.value.http_status == 409
    assert exc.value.body == {"error": "stale"}
    await store.aclose()


async def test_response_is_json_ready(legacy):
    content_id = uuid4()

    body = await legacy.call(content_request(content_id=content_id))

    assert UUID(body["content_id"]) == content_id
    assert isinstance(body["payload_version"], int)
