"""Message Publisher — broadcasts published payloads on Redis pub/sub.

Invariants:
    - Channel is "<prefix>.<routing_key>", routing key "<schema_name>.<update_type>"
    - Subscribers pattern-match (PSUBSCRIBE published_documents.*.major)
    - Connection errors raise DownstreamTransportError naming the broker
"""

import json
import logging

import redis.asyncio as redis
from redis.exceptions import RedisError

from content_sync.core.errors import DownstreamTransportError, ErrorContext

logger = logging.getLogger(__name__)

STORE_NAME = "message-queue"


class RedisMessagePublisher:
    def __init__(self, client: redis.Redis, channel_prefix: str):
        self._client = client
        self._prefix = channel_prefix

    @classmethod
    def from_url(cls, url: str, channel_prefix: str) -> "RedisMessagePublisher":
        return cls(redis.Redis.from_url(url, decode_responses=True), channel_prefix)

    async def send_message(self, routing_key: str, body: dict) -> None:
        channel = f"{self._prefix}.{routing_key}"
        message = json.dumps(body, ensure_ascii=False, sort_keys=True)
        try:
            receivers = await self._client.publish(channel, message)
        except RedisError as e:
            raise DownstreamTransportError(
                STORE_NAME, str(e),
                ErrorContext(content_id=body.get("content_id"), locale=body.get("locale")),
            )
        logger.info(
            f"Broadcast to {channel} ({receivers} subscribers)",
            extra={"routing_key": routing_key, "content_id": body.get("content_id")},
        )

    async def aclose(self) -> None:
        await self._client.aclose()
