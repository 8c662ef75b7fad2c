from datetime import datetime
from typing import Any

from beanie import Document
from pydantic import Field


class AuditLog(Document):
    """One entry per balance recomputation; metadata holds the source and sums used."""
    user_id: str | None = None
    event_type: str  # points_reconciled
    entity_type: str  # student_points
    entity_id: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "audit_logs"
        indexes = [
            [("user_id", 1), ("created_at", -1)],
            [("event_type", 1), ("created_at", -1)],
        ]
