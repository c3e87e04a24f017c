"""Message Publisher — tests for channel naming and failure mapping."""

import json

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from content_sync.core.errors import DownstreamTransportError
from content_sync.infrastructure.message_publisher import RedisMessagePublisher


class FakeRedis:
    def __init__(self, fail=False):
        self.published = []
        self.fail = fail

    async def publish(self, channel, message):
        if self.fail:
            raise RedisConnectionError("connection refused")
        self.published.append((channel, message))
        return 1


async def test_channel_is_prefixed_routing_key():
    client = FakeRedis()
    publisher = RedisMessagePublisher(client, "published_documents")

    await publisher.send_message("guide.major", {"content_id": "abc", "title": "VAT"})

    (channel, message), = client.published
    assert channel == "published_documents.guide.major"
    assert json.loads(message) == {"content_id": "abc", "title": "VAT"}


async def test_redis_failure_is_transport_error():
    publisher = RedisMessagePublisher(FakeRedis(fail=True), "published_documents")

    with pytest.raises(DownstreamTransportError) as exc:
        await publisher.send_message("guide.major", {"content_id": "abc"})

    assert exc.value.store == "message-queue"
