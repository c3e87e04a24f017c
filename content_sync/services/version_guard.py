"""Version Guard — applies a payload to a sink only if it is newer than the last one.

Invariants:
    - Per (sink, content_id, locale) the read-compare-deliver-record sequence is
      exclusive: in-process via KeyedLock, across processes via the ledger row
      lock, which the ledger creates before locking when the item is new
    - incoming version <= recorded version: skipped, nothing delivered
    - A failed delivery leaves the ledger unchanged, so the retried job re-applies
    - The ledger commit ends the guard's transaction and releases the row lock

Design Decisions:
    - The guard commits on the caller's session; callers must not hold
      uncommitted work when they call apply()
"""

import logging
from typing import Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from content_sync.core.domain_types import Sink
from content_sync.core.downstream_payload import DownstreamPayload
from content_sync.core.downstream_rules import should_apply_version
from content_sync.core.keyed_lock import KeyedLock
from content_sync.core.repository_protocols import VersionLedger

logger = logging.getLogger(__name__)

Delivery = Callable[[DownstreamPayload], Awaitable[None]]


class VersionGuard:
    def __init__(
        self, db: AsyncSession, ledger: VersionLedger, locks: KeyedLock | None = None,
    ):
        self.db = db
        self.ledger = ledger
        self.locks = locks or KeyedLock()

    async def apply(
        self, sink: Sink, payload: DownstreamPayload, deliver: Delivery,
    ) -> bool:
        """Deliver payload to sink unless a newer or equal version was applied.

        Returns True when the payload was delivered.
        """
        log_extra = {
            "sink": sink.value, "content_id": payload.content_id,
            "locale": payload.locale, "version": payload.version,
        }
        async with self.locks.hold(sink, payload.content_id, payload.locale):
            try:
                last = await self.ledger.last_recorded(sink, payload)
                if not should_apply_version(payload.version, last):
                    logger.info(
                        f"Skipping stale payload for {sink.value}: "
                        f"version {payload.version} <= {last}",
                        extra=log_extra,
                    )
                    await self.db.commit()
                    return False

                await deliver(payload)
                await self.ledger.record(sink, payload)
                await self.db.commit()
            except BaseException:
                await self.db.rollback()
                raise

        logger.info(f"Applied version {payload.version} to {sink.value}", extra=log_extra)
        return True
