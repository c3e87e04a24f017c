"""Downstream Rules — which sink receives what, and the version guard predicate.

Invariants:
    - Draft store: any edition with a base_path, or whose schema needs none
    - Live store: only published/unpublished editions, and only with a base_path;
      any other state is an InvalidStateError, never silently skipped
    - Message queue: only published editions
    - A sink applies a payload only if its version is strictly greater than
      the last version it recorded for the (content_id, locale)
"""

from content_sync.core.domain_types import EditionState, LIVE_STATES
from content_sync.core.edition_rules import base_path_required
from content_sync.core.errors import ErrorContext, InvalidStateError

LIVE_STATE_MESSAGE = (
    "Can only send published and unpublished items to the live content store"
)


def should_send_to_draft(
    base_path: str | None, schema_name: str | None, empty_formats: frozenset[str],
) -> bool:
    return base_path is not None or not base_path_required(schema_name, empty_formats)


def assert_live_state(state: EditionState, content_id: str | None = None) -> None:
    if state not in LIVE_STATES:
        raise InvalidStateError(
            f"{LIVE_STATE_MESSAGE} (got {state.value})",
            ErrorContext(content_id=content_id),
        )


def should_send_to_live(base_path: str | None) -> bool:
    return base_path is not None


def should_broadcast(state: EditionState) -> bool:
    return state == EditionState.PUBLISHED


def message_update_type(override: str | None, edition_update_type: str | None) -> str:
    """Explicit override (links, bulk.reindex) else the edition's own update type."""
    return override or edition_update_type or "major"


def routing_key(schema_name: str | None, update_type: str) -> str:
    return f"{schema_name or 'unknown'}.{update_type}"


def should_apply_version(incoming: int, last_recorded: int | None) -> bool:
    return last_recorded is None or incoming > last_recorded
