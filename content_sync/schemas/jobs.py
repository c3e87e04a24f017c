"""Job Schemas — the unit of downstream work carried by the work queue.

Invariants:
    - Every job names one sink (draft or live), one (content_id, locale) and the
      version it was enqueued with
    - Serialized with model_dump(mode="json") so it survives the broker
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict

from content_sync.core.domain_types import QueueClass, Sink


class DownstreamJob(BaseModel):
    model_config = ConfigDict(frozen=True)

    sink: Sink
    content_id: UUID
    locale: str
    version: int
    update_type_override: str | None = None
    resolve_dependencies: bool = True
    queue_class: QueueClass = QueueClass.HIGH
    alert_on_invalid_state: bool = True
    edition_id: UUID | None = None
    message_queue_only: bool = False

    def parameters(self) -> dict:
        """Job parameters as reported alongside absorbed errors."""
        return self.model_dump(mode="json")
