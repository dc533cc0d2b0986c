from __future__ import annotations

from typing import Any, Dict, Optional

import logging
from sqlalchemy.orm import Session

from core import dates
from models import AuditLogEntry

logger = logging.getLogger(__name__)


def write_audit(
    db: Session,
    user_id: Optional[int],
    action: str,
    entity_type: Optional[str] = None,
    entity_id: Optional[int] = None,
    meta: Optional[Dict[str, Any]] = None,
) -> AuditLogEntry:
    """
    Append an audit row in the caller's transaction.

    The entry commits or rolls back together with the state change it
    describes, so a failure here fails the whole request.
    """
    entry = AuditLogEntry(
        user_id=user_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        meta=meta or {},
        created_at=dates.now_timestamp(),
    )
    db.add(entry)
    db.flush()
    logger.info(
        f"Audit: {action}",
        extra={
            "extra_fields": {
                "user_id": user_id,
                "entity_type": entity_type,
                "entity_id": entity_id,
            }
        },
    )
    return entry
