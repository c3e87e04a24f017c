"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - All valid states encoded as Enums, no raw string matching in domain logic

Design Decisions:
    - str Enums: serialize to JSON without custom encoders (job payloads cross the broker)
"""

from enum import Enum


# ─── Enums ───────────────────────────────────────────────────────

class EditionState(str, Enum):
    """Edition lifecycle states, maps to editions.state."""
    DRAFT = "draft"
    PUBLISHED = "published"
    UNPUBLISHED = "unpublished"
    SUPERSEDED = "superseded"


class UpdateType(str, Enum):
    MAJOR = "major"
    MINOR = "minor"
    LINKS = "links"


class UnpublishingType(str, Enum):
    GONE = "gone"
    WITHDRAWAL = "withdrawal"
    REDIRECT = "redirect"
    VANISH = "vanish"


class Sink(str, Enum):
    """Downstream targets. Each keeps its own version ledger."""
    DRAFT = "draft"
    LIVE = "live"
    MESSAGE_QUEUE = "message_queue"


class QueueClass(str, Enum):
    """Work-queue priority classes. bulk requests go to LOW."""
    HIGH = "high"
    LOW = "low"


class EventAction(str, Enum):
    PUT_CONTENT = "PutContent"
    PUT_DRAFT_CONTENT_WITH_LINKS = "PutDraftContentWithLinks"
    PATCH_LINK_SET = "PatchLinkSet"
    PUBLISH = "Publish"
    UNPUBLISH = "Unpublish"


# ─── Dependency fallback orders ──────────────────────────────────
# Which edition of a linked item represents it, in order of preference.

DRAFT_FALLBACK_ORDER: tuple[EditionState, ...] = (
    EditionState.DRAFT, EditionState.PUBLISHED, EditionState.UNPUBLISHED,
)
LIVE_FALLBACK_ORDER: tuple[EditionState, ...] = (
    EditionState.PUBLISHED, EditionState.UNPUBLISHED,
)

LIVE_STATES = frozenset({EditionState.PUBLISHED, EditionState.UNPUBLISHED})


def fallback_order_for(sink: Sink) -> tuple[EditionState, ...]:
    if sink == Sink.DRAFT:
        return DRAFT_FALLBACK_ORDER
    return LIVE_FALLBACK_ORDER
