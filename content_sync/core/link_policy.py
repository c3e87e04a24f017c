"""Link Policy — the two strategies for mutating an edition's typed link graph.

Invariants:
    - MergeByType never deletes: types absent from the payload are untouched
    - ReplaceExceptProtected deletes every non-protected link first, unless the
      publishing app is exempt, in which case it deletes nothing
    - (link_type, target_content_id) is unique per edition; re-sending an
      existing link is a no-op
    - Targets must be UUIDs, otherwise ValidationError before any write

Design Decisions:
    - Tagged variants (two frozen dataclasses) instead of one policy with a flag
    - The exempt-app table is configuration. It exists only while those apps
      migrate to the v2 endpoints and should be deleted afterwards
"""

from dataclasses import dataclass, field
from uuid import UUID

from content_sync.core.errors import ValidationError


@dataclass(frozen=True)
class MergeByType:
    """Add listed targets per link type, keep everything else."""


@dataclass(frozen=True)
class ReplaceExceptProtected:
    """Drop non-protected links, then merge. Exempt apps skip the drop."""
    protected_link_types: frozenset[str] = frozenset()
    exempt_apps: frozenset[str] = frozenset()


LinkPolicy = MergeByType | ReplaceExceptProtected


@dataclass(frozen=True)
class LinkRow:
    """A link as stored, decoupled from the ORM row."""
    link_type: str
    target_content_id: UUID
    position: int = 0


@dataclass(frozen=True)
class LinkPlan:
    delete: tuple[LinkRow, ...] = field(default_factory=tuple)
    create: tuple[LinkRow, ...] = field(default_factory=tuple)

    @property
    def changed(self) -> bool:
        return bool(self.delete or self.create)


def normalize_links(links: dict | None) -> dict[str, list[UUID]]:
    """Validate link payload: str types mapping to lists of UUID targets."""
    if not links:
        return {}
    if not isinstance(links, dict):
        raise ValidationError("links must be an object", {"links": ["must be an object"]})

    errors: dict[str, list[str]] = {}
    normalized: dict[str, list[UUID]] = {}
    for link_type, targets in links.items():
        if not isinstance(targets, list):
            errors[f"links.{link_type}"] = ["must be an array"]
            continue
        parsed: list[UUID] = []
        for target in targets:
            try:
                parsed.append(target if isinstance(target, UUID) else UUID(str(target)))
            except ValueError:
                errors.setdefault(f"links.{link_type}", []).append(
                    f"'{target}' is not a valid content_id",
                )
        # Keep first occurrence order, drop duplicates
        normalized[link_type] = list(dict.fromkeys(parsed))

    if errors:
        raise ValidationError("links are invalid", errors)
    return normalized


def links_to_delete(
    policy: LinkPolicy, existing: list[LinkRow], publishing_app: str | None,
) -> list[LinkRow]:
    if isinstance(policy, MergeByType):
        return []
    if publishing_app in policy.exempt_apps:
        return []
    return [
        link for link in existing
        if link.link_type not in policy.protected_link_types
    ]


def links_to_create(
    remaining: list[LinkRow], incoming: dict[str, list[UUID]],
) -> list[LinkRow]:
    """New rows for incoming targets not already present, positioned after existing ones."""
    present = {(link.link_type, link.target_content_id) for link in remaining}
    next_position: dict[str, int] = {}
    for link in remaining:
        next_position[link.link_type] = max(
            next_position.get(link.link_type, 0), link.position + 1,
        )

    created: list[LinkRow] = []
    for link_type in incoming:
        for target in incoming[link_type]:
            if (link_type, target) in present:
                continue
            position = next_position.get(link_type, 0)
            created.append(LinkRow(link_type, target, position))
            next_position[link_type] = position + 1
            present.add((link_type, target))
    return created


def plan_link_mutation(
    policy: LinkPolicy,
    existing: list[LinkRow],
    incoming: dict[str, list[UUID]],
    publishing_app: str | None = None,
) -> LinkPlan:
    """Compute deletions and creations for one edition."""
    delete = links_to_delete(policy, existing, publishing_app)
    deleted = set(delete)
    remaining = [link for link in existing if link not in deleted]
    create = links_to_create(remaining, incoming)
    return LinkPlan(delete=tuple(delete), create=tuple(create))
