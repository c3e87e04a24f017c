"""Content Schemas — request and response models for the publishing endpoints.

Invariants:
    - update_type restricted to major/minor/links, unpublishing type to the enum
    - links and access_limited entries are NOT type-checked here: domain validation
      (core/link_policy.py, core/edition_rules.py) raises ValidationError with
      field-level messages before anything is written
    - EditionResponse is the structural snapshot returned on success

Design Decisions:
    - extra="ignore" on requests: publishers send fields this service does not store
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from content_sync.core.domain_types import UnpublishingType, UpdateType


class AccessLimitRequest(BaseModel):
    users: list[Any] = Field(default_factory=list)
    auth_bypass_ids: list[Any] = Field(default_factory=list)
    fact_check_ids: list[Any] = Field(default_factory=list)

    def bypass_ids(self) -> list[Any]:
        """auth_bypass_ids plus the legacy fact_check_ids alias."""
        return list(dict.fromkeys([*self.auth_bypass_ids, *self.fact_check_ids]))


class ContentRequest(BaseModel):
    """Body of PUT /v2/content/{content_id} and the legacy draft endpoint."""
    model_config = ConfigDict(extra="ignore")

    content_id: UUID | None = None
    locale: str | None = Field(None, max_length=10)
    base_path: str | None = Field(None, max_length=512)
    title: str | None = Field(None, max_length=512)
    description: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)
    schema_name: str = Field(min_length=1, max_length=100)
    document_type: str = Field(min_length=1, max_length=100)
    update_type: UpdateType | None = None
    publishing_app: str | None = Field(None, max_length=100)
    links: dict[str, Any] | None = None
    access_limited: AccessLimitRequest | None = None
    bulk_publishing: bool = False
    last_edited_at: datetime | None = None
    previous_version: int | None = Field(None, ge=0)

    @field_validator("base_path")
    @classmethod
    def strip_base_path(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else v

    def body(self) -> dict:
        """Opaque content body stored on the edition."""
        return {"description": self.description, "details": self.details}


class PublishRequest(BaseModel):
    update_type: UpdateType | None = None
    locale: str | None = Field(None, max_length=10)
    previous_version: int | None = Field(None, ge=0)
    bulk_publishing: bool = False


class UnpublishRequest(BaseModel):
    type: UnpublishingType
    explanation: str | None = None
    alternative_path: str | None = Field(None, max_length=512)
    locale: str | None = Field(None, max_length=10)
    discard_drafts: bool = False
    previous_version: int | None = Field(None, ge=0)
    bulk_publishing: bool = False


class LinkSetRequest(BaseModel):
    links: dict[str, Any] = Field(default_factory=dict)
    locale: str | None = Field(None, max_length=10)
    previous_version: int | None = Field(None, ge=0)
    bulk_publishing: bool = False


class RequeueRequest(BaseModel):
    version: int | None = Field(None, ge=1)
    batch_size: int | None = Field(None, ge=1, le=10_000)


class EditionResponse(BaseModel):
    """Structural snapshot of an edition after a mutation."""
    content_id: UUID
    locale: str
    state: str
    user_facing_version: int
    lock_version: int
    base_path: str | None
    title: str | None
    schema_name: str | None
    document_type: str | None
    update_type: str | None
    publishing_app: str | None
    description: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)
    links: dict[str, list[str]] = Field(default_factory=dict)
    access_limited: dict | None = None
    unpublishing: dict | None = None
    last_edited_at: datetime | None = None
    published_at: datetime | None = None
    payload_version: int | None = None
    warnings: dict[str, str] = Field(default_factory=dict)
