"""Content Store Client — tests for HTTP status mapping, using httpx.MockTransport.

Tests cover:
    - Pathed items PUT to /content<base_path>, pathless to /content-items/<id>
    - 409 is absorbed only by worker clients, other 4xx raise DownstreamRequestError
    - 5xx and connection failures raise DownstreamTransportError
"""

import httpx
import pytest

from content_sync.core.errors import DownstreamRequestError, DownstreamTransportError
from content_sync.infrastructure.content_store_client import HttpContentStore

BODY = {"content_id": "1234", "locale": "en", "payload_version": 3}


def store_answering(status_code, requests=None, json=None, absorb_conflicts=False):
    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        return httpx.Response(status_code, json=json or {})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpContentStore(
        "content-store", "http://store/", client=client, absorb_conflicts=absorb_conflicts,
    )


async def test_pathed_item_put_under_content():
    requests = []
    store = store_answering(200, requests)

    await store.put_content("/vat rates", BODY)

    request, = requests
    assert request.method == "PUT"
    assert str(request.url) == "http://store/content/vat%20rates"
    await store.aclose()


async def test_pathless_item_addressed_by_content_id():
    requests = []
    store = store_answering(200, requests)

    await store.put_content(None, BODY)

    assert requests[0].url.path == "/content-items/1234"
    await store.aclose()


async def test_worker_client_absorbs_conflict():
    store = store_answering(409, absorb_conflicts=True)
    await store.put_content("/a", BODY)
    await store.aclose()


async def test_conflict_raises_by_default():
    store = store_answering(409, json={"error": "newer version held"})

    with pytest.raises(DownstreamRequestError) as exc:
        await store.put_content("/a", BODY)

    assert exc.value.http_status == 409
    await store.aclose()


async def test_client_error_passes_status_through():
    store = store_answering(422, json={"error": "invalid"})

    with pytest.raises(DownstreamRequestError) as exc:
        await store.put_content("/a", BODY)

    assert exc.value.http_status == 422
    assert exc.value.body == {"error": "invalid"}
    await store.aclose()


async def test_server_error_is_transport_failure():
    store = store_answering(503)

    with pytest.raises(DownstreamTransportError) as exc:
        await store.put_content("/a", BODY)

    assert exc.value.store == "content-store"
    await store.aclose()


async def test_connection_failure_is_transport_failure():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(refuse))
    store = HttpContentStore("draft-content-store", "http://store", client=client)

    with pytest.raises(DownstreamTransportError, match="draft-content-store unavailable"):
        await store.put_content("/a", BODY)
    await store.aclose()
