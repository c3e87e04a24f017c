"""Error Reporter — default error-tracking collaborator for absorbed worker failures."""

import logging
from typing import Any

from content_sync.core.errors import ContentSyncError

logger = logging.getLogger(__name__)


class LoggingErrorReporter:
    """Reports to the log at ERROR with the job parameters attached."""

    def report(self, error: Exception, context: dict[str, Any]) -> None:
        code = error.code if isinstance(error, ContentSyncError) else type(error).__name__
        logger.error(
            f"{type(error).__name__}: {error} (parameters: {context})",
            extra={
                "error_code": code,
                "content_id": context.get("content_id"),
                "sink": context.get("sink"),
                "version": context.get("version"),
            },
        )
