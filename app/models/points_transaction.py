from datetime import datetime

from beanie import Document
from pydantic import Field


class PointsTransaction(Document):
    user_id: str
    points: int | None = None  # magnitude, sign carried by is_positive
    is_positive: bool | None = None  # True = credit, False = debit
    reason: str | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "points_transactions"
        indexes = [[("user_id", 1), ("created_at", -1)]]
