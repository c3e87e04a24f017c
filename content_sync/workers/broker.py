"""Dramatiq Broker — single broker instance for the API (enqueue) and the workers.

Invariants:
    - set_broker() runs before any actor module is imported
    - dramatiq_broker=stub swaps in StubBroker (tests, local runs without Redis)

Design Decisions:
    - Explicit middleware list: no Prometheus exporter, Retries configured from Settings
"""

import dramatiq
from dramatiq.brokers.redis import RedisBroker
from dramatiq.brokers.stub import StubBroker
from dramatiq.middleware import AgeLimit, Callbacks, Retries, TimeLimit

from content_sync.config import get_settings

settings = get_settings()

middleware = [
    AgeLimit(),
    TimeLimit(),
    Callbacks(),
    Retries(min_backoff=1_000, max_backoff=300_000, max_retries=settings.downstream_max_retries),
]

if settings.dramatiq_broker == "stub":
    broker = StubBroker(middleware=middleware)
else:
    broker = RedisBroker(url=settings.redis_url, middleware=middleware)

dramatiq.set_broker(broker)
