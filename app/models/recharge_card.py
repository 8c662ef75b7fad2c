from datetime import datetime

from beanie import Document
from pydantic import Field

STATUS_ACTIVE = "ACTIVE"
STATUS_REDEEMED = "REDEEMED"


class RechargeCard(Document):
    """Pre-issued card; grants its points to the user who redeemed it."""
    code: str
    points: int | None = None
    status: str = STATUS_ACTIVE  # ACTIVE | REDEEMED
    redeemed_by: str | None = None
    redeemed_at: datetime | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "recharge_cards"
        indexes = [
            [("code", 1)],
            [("redeemed_by", 1), ("status", 1)],
        ]
