"""Audit trail for balance changes."""

from typing import Any

from pymongo.errors import PyMongoError

from app.core.logging import get_logger
from app.models.audit_log import AuditLog

log = get_logger(__name__)


async def log_event(
    user_id: str | None,
    event_type: str,
    entity_type: str,
    entity_id: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> AuditLog | None:
    """
    Append to audit_logs. Called after the audited write has already been committed,
    so a failed append is logged and returns None instead of failing the request.
    """
    entry = AuditLog(
        user_id=user_id,
        event_type=event_type,
        entity_type=entity_type,
        entity_id=entity_id,
        metadata=metadata or {},
    )
    try:
        await entry.insert()
    except PyMongoError as e:
        log.warning("audit_write_failed", event_type=event_type, entity_id=entity_id, reason=str(e))
        return None
    return entry
