"""Presenters — edition rows to API response models."""

from content_sync.models.edition import Edition
from content_sync.repositories.editions import EditionRepository
from content_sync.schemas.content import EditionResponse

BLOCKING_PUBLISH_WARNING = "There is a content item blocking the publish of this item"


async def edition_warnings(editions: EditionRepository, edition: Edition) -> dict[str, str]:
    warnings: dict[str, str] = {}
    if await editions.blocking_edition(edition):
        warnings["content_item_blocking_publish"] = BLOCKING_PUBLISH_WARNING
    return warnings


def present_edition(
    edition: Edition,
    payload_version: int | None = None,
    warnings: dict[str, str] | None = None,
) -> EditionResponse:
    document = edition.document
    links: dict[str, list[str]] = {}
    for link in sorted(edition.links, key=lambda l: (l.link_type, l.position)):
        links.setdefault(link.link_type, []).append(str(link.target_content_id))
    access_limited = None
    if edition.access_limit is not None:
        access_limited = {
            "users": list(edition.access_limit.users),
            "auth_bypass_ids": list(edition.access_limit.auth_bypass_ids),
        }
    content = edition.content or {}
    return EditionResponse(
        content_id=document.content_id,
        locale=document.locale,
        state=edition.state,
        user_facing_version=edition.user_facing_version,
        lock_version=document.lock_counter,
        base_path=edition.base_path,
        title=edition.title,
        schema_name=edition.schema_name,
        document_type=edition.document_type,
        update_type=edition.update_type,
        publishing_app=edition.publishing_app,
        description=content.get("description"),
        details=content.get("details") or {},
        links=links,
        access_limited=access_limited,
        unpublishing=edition.unpublishing,
        last_edited_at=edition.last_edited_at,
        published_at=edition.published_at,
        payload_version=payload_version,
        warnings=warnings or {},
    )
