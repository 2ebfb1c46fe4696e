"""
Structured log lines for billing mutations.

Logs who did what to which record, and when. These are plain log records
for the log pipeline, not a persisted audit history.
"""

import logging
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger("audit")


def log_billing_action(
    action: str,
    *,
    user_id: Any = None,
    entity: str = "",
    entity_id: Any = None,
    details: dict[str, Any] | None = None,
) -> None:
    """Log a billing action (invoice create, payment delete, etc.)."""
    logger.info(
        "BILLING_ACTION action=%s user_id=%s entity=%s entity_id=%s time=%s details=%s",
        action,
        user_id,
        entity,
        entity_id,
        datetime.now(timezone.utc).isoformat(),
        details or {},
    )
