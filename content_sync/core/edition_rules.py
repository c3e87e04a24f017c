"""Edition Rules — pure lifecycle and version-numbering rules for editions.

Invariants:
    - user_facing_version of a new draft is one more than the latest
      published/unpublished edition (1 for a brand-new document)
    - Draft edits never move counters; draft creation, publish and unpublish
      each add one to the document lock_counter
    - Validation raises ValidationError before any row is written

Design Decisions:
    - Functions take plain values, never ORM rows, so the shell decides what to load
"""

from datetime import datetime
from uuid import UUID

from content_sync.core.domain_types import EditionState, UpdateType
from content_sync.core.errors import (
    ConcurrencyConflictError, ErrorContext, ValidationError,
)

STAMPED_UPDATE_TYPES = frozenset({UpdateType.MAJOR, UpdateType.MINOR})


# ─── Counters ────────────────────────────────────────────────────

def next_user_facing_version(prior: int | None) -> int:
    """Version for a fresh draft, resuming after the prior live edition."""
    return (prior or 0) + 1


def next_lock_counter(current: int) -> int:
    return current + 1


def check_previous_version(
    previous_version: int | None, lock_counter: int, content_id: str | None = None,
) -> None:
    """Optimistic check. None means the caller opted out."""
    if previous_version is None:
        return
    if previous_version != lock_counter:
        raise ConcurrencyConflictError(
            previous_version, lock_counter,
            ErrorContext(content_id=content_id),
        )


# ─── Base paths ──────────────────────────────────────────────────

def base_path_required(schema_name: str | None, empty_formats: frozenset[str]) -> bool:
    return schema_name not in empty_formats


def validate_base_path(base_path: str | None, required: bool) -> None:
    if base_path is None:
        if required:
            raise ValidationError(
                "base_path is required for this schema",
                {"base_path": ["is required"]},
            )
        return
    if not base_path.startswith("/") or "//" in base_path or " " in base_path:
        raise ValidationError(
            f"base_path '{base_path}' is not an absolute path",
            {"base_path": ["is not a valid absolute URL path"]},
        )


def needs_redirect(
    previous_base_path: str | None, new_base_path: str | None, required: bool,
) -> bool:
    """Redirect the previously published path when the item moves."""
    return (
        required
        and previous_base_path is not None
        and new_base_path is not None
        and previous_base_path != new_base_path
    )


# ─── Access limits ───────────────────────────────────────────────

def validate_access_limit(
    users: list | None, auth_bypass_ids: list | None,
) -> tuple[list[str], list[str]]:
    """Check both lists and return them normalized.

    users must be string identifiers, auth_bypass_ids must be UUID strings.
    """
    users = list(users or [])
    auth_bypass_ids = list(auth_bypass_ids or [])
    errors: dict[str, list[str]] = {}

    if any(not isinstance(u, str) for u in users):
        errors["users"] = ["must be an array of strings"]

    bad_ids = [i for i in auth_bypass_ids if not _is_uuid_string(i)]
    if bad_ids:
        errors["auth_bypass_ids"] = ["contains an invalid UUID"]

    if errors:
        raise ValidationError("access_limited is invalid", errors)
    return users, [str(UUID(i)) for i in auth_bypass_ids]


def _is_uuid_string(value) -> bool:
    if not isinstance(value, str):
        return False
    try:
        UUID(value)
    except ValueError:
        return False
    return True


# ─── Timestamps ──────────────────────────────────────────────────

def resolve_last_edited_at(
    explicit: datetime | None, update_type: UpdateType | None, now: datetime,
) -> datetime | None:
    """Explicit value wins, major/minor stamp now, links leave it untouched (None)."""
    if explicit is not None:
        return explicit
    if update_type in STAMPED_UPDATE_TYPES:
        return now
    return None


# ─── Publish / unpublish ─────────────────────────────────────────

def resolve_publish_update_type(
    requested: UpdateType | None, draft_update_type: str | None,
) -> UpdateType:
    if requested is not None:
        return requested
    if draft_update_type:
        return UpdateType(draft_update_type)
    raise ValidationError(
        "update_type is required", {"update_type": ["is required"]},
    )


def can_unpublish(state: EditionState) -> bool:
    """Published items unpublish; unpublished ones may amend their details."""
    return state in (EditionState.PUBLISHED, EditionState.UNPUBLISHED)
