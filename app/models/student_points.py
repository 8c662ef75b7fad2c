from datetime import datetime

from beanie import Document, Indexed
from pydantic import Field


class StudentPoints(Document):
    """Stored points balance; one record per student."""
    student_id: Indexed(str, unique=True)
    points: int = 0
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "student_points"
