"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - Every sink, queue and reporter is injected through one of these types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, in-memory fakes need no base class
    - Async where implementations do IO; reporter stays sync (logging only)
"""

from typing import TYPE_CHECKING, Any, Protocol

from content_sync.core.domain_types import QueueClass, Sink

if TYPE_CHECKING:
    from content_sync.core.downstream_payload import DownstreamPayload
    from content_sync.schemas.jobs import DownstreamJob


class WorkQueue(Protocol):
    """Where post-commit downstream jobs go. Delivery is at-least-once."""
    async def enqueue(self, job: "DownstreamJob", queue_class: QueueClass) -> None: ...


class ContentStore(Protocol):
    """A downstream read replica (draft or live content store)."""
    name: str

    async def put_content(self, base_path: str | None, body: dict) -> None: ...


class MessagePublisher(Protocol):
    """The message broker consumed by independent subscribers."""
    async def send_message(self, routing_key: str, body: dict) -> None: ...


class VersionLedger(Protocol):
    """Last version applied per (sink, content_id, locale)."""
    async def last_recorded(
        self, sink: Sink, payload: "DownstreamPayload",
    ) -> int | None: ...
    async def record(self, sink: Sink, payload: "DownstreamPayload") -> None: ...


class ErrorReporter(Protocol):
    """Error-tracking collaborator for absorbed worker failures."""
    def report(self, error: Exception, context: dict[str, Any]) -> None: ...
