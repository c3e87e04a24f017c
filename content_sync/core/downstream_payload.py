"""Downstream Payload — pure builder from an edition snapshot and a version.

Invariants:
    - build_downstream_payload has no side effects and no IO
    - Same snapshot + version + fallback order always yields byte-identical to_json()
    - Link types emitted sorted, targets in stored position order, access-limit
      lists sorted
    - A linked item is expanded from its first edition in fallback-order state,
      preferring the payload's locale over the default locale; unresolvable
      targets are left out of expanded_links but stay in links

Design Decisions:
    - Snapshot dataclasses decouple the builder from ORM rows (shell loads, core shapes)
"""

import copy
import json
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from content_sync.core.domain_types import EditionState, Sink
from content_sync.core.link_policy import LinkRow


@dataclass(frozen=True)
class LinkedEdition:
    """Summary of an edition belonging to a link target."""
    content_id: UUID
    locale: str
    state: EditionState
    base_path: str | None
    title: str | None
    schema_name: str | None
    document_type: str | None


@dataclass(frozen=True)
class AccessLimitSnapshot:
    users: tuple[str, ...] = ()
    auth_bypass_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class EditionSnapshot:
    edition_id: UUID | None
    content_id: UUID | None
    locale: str
    state: EditionState
    user_facing_version: int
    base_path: str | None
    title: str | None
    schema_name: str | None
    document_type: str | None
    update_type: str | None
    publishing_app: str | None
    content: dict = field(default_factory=dict)
    unpublishing: dict | None = None
    last_edited_at: datetime | None = None
    published_at: datetime | None = None
    links: tuple[LinkRow, ...] = ()
    access_limit: AccessLimitSnapshot | None = None
    linked_editions: tuple[LinkedEdition, ...] = ()
    default_locale: str = "en"


@dataclass(frozen=True)
class DownstreamPayload:
    """Sink-agnostic value object. Never mutated after build."""
    content_id: UUID | None
    locale: str
    version: int
    base_path: str | None
    state: EditionState
    schema_name: str | None
    document_type: str | None
    title: str | None
    update_type: str | None
    publishing_app: str | None
    user_facing_version: int
    content: dict
    links: dict[str, list[str]]
    expanded_links: dict[str, list[dict]]
    access_limited: dict | None
    unpublishing: dict | None
    last_edited_at: str | None
    published_at: str | None

    def for_content_store(self, sink: Sink) -> dict:
        """Body PUT to a content store. Access limits only go to the draft store."""
        body = {
            "content_id": str(self.content_id) if self.content_id else None,
            "locale": self.locale,
            "payload_version": self.version,
            "base_path": self.base_path,
            "state": self.state.value,
            "schema_name": self.schema_name,
            "document_type": self.document_type,
            "title": self.title,
            "publishing_app": self.publishing_app,
            "user_facing_version": self.user_facing_version,
            "links": self.links,
            "expanded_links": self.expanded_links,
            "last_edited_at": self.last_edited_at,
            "public_updated_at": self.published_at,
            **self.content,
        }
        if self.unpublishing is not None:
            body["unpublishing"] = self.unpublishing
        if sink == Sink.DRAFT and self.access_limited is not None:
            body["access_limited"] = self.access_limited
        return body

    def for_message_queue(self, update_type: str) -> dict:
        body = self.for_content_store(Sink.LIVE)
        body["update_type"] = update_type
        return body

    def to_json(self, sink: Sink = Sink.DRAFT) -> str:
        return json.dumps(
            self.for_content_store(sink), sort_keys=True, separators=(",", ":"),
        )


def build_downstream_payload(
    snapshot: EditionSnapshot,
    version: int,
    dependency_fallback_order: tuple[EditionState, ...],
) -> DownstreamPayload:
    """Shape a payload for every sink from one edition snapshot."""
    return DownstreamPayload(
        content_id=snapshot.content_id,
        locale=snapshot.locale,
        version=version,
        base_path=snapshot.base_path,
        state=snapshot.state,
        schema_name=snapshot.schema_name,
        document_type=snapshot.document_type,
        title=snapshot.title,
        update_type=snapshot.update_type,
        publishing_app=snapshot.publishing_app,
        user_facing_version=snapshot.user_facing_version,
        content=copy.deepcopy(snapshot.content),
        links=_links_by_type(snapshot.links),
        expanded_links=_expand_links(snapshot, dependency_fallback_order),
        access_limited=_access_limited(snapshot.access_limit),
        unpublishing=copy.deepcopy(snapshot.unpublishing),
        last_edited_at=_iso(snapshot.last_edited_at),
        published_at=_iso(snapshot.published_at),
    )


def _links_by_type(links: tuple[LinkRow, ...]) -> dict[str, list[str]]:
    grouped: dict[str, list[LinkRow]] = {}
    for link in links:
        grouped.setdefault(link.link_type, []).append(link)
    return {
        link_type: [
            str(link.target_content_id)
            for link in sorted(grouped[link_type], key=lambda l: (l.position, str(l.target_content_id)))
        ]
        for link_type in sorted(grouped)
    }


def _expand_links(
    snapshot: EditionSnapshot,
    fallback_order: tuple[EditionState, ...],
) -> dict[str, list[dict]]:
    chosen = _choose_linked_editions(snapshot, fallback_order)
    expanded: dict[str, list[dict]] = {}
    for link_type, targets in _links_by_type(snapshot.links).items():
        items = [chosen[t] for t in targets if t in chosen]
        if items:
            expanded[link_type] = items
    return expanded


def _choose_linked_editions(
    snapshot: EditionSnapshot,
    fallback_order: tuple[EditionState, ...],
) -> dict[str, dict]:
    locale_rank = {snapshot.locale: 0, snapshot.default_locale: 1}
    best: dict[str, tuple[tuple[int, int], LinkedEdition]] = {}
    for linked in snapshot.linked_editions:
        if linked.state not in fallback_order or linked.locale not in locale_rank:
            continue
        rank = (locale_rank[linked.locale], fallback_order.index(linked.state))
        key = str(linked.content_id)
        if key not in best or rank < best[key][0]:
            best[key] = (rank, linked)
    return {
        key: {
            "content_id": key,
            "locale": linked.locale,
            "base_path": linked.base_path,
            "title": linked.title,
            "schema_name": linked.schema_name,
            "document_type": linked.document_type,
        }
        for key, (_, linked) in best.items()
    }


def _access_limited(limit: AccessLimitSnapshot | None) -> dict | None:
    if limit is None:
        return None
    return {
        "users": sorted(limit.users),
        "auth_bypass_ids": sorted(limit.auth_bypass_ids),
    }


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None
