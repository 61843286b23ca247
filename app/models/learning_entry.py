"""
Learning Entry Model

Learning-log entries (courses, books, topics) with hour tracking.

Categories are stored once, as an ordered list. The primary category is
always the first element; it is not stored separately.
"""

import uuid
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional, List, Dict, Any

from sqlmodel import Field, SQLModel, Column
from sqlalchemy import Text, JSON


class LearningStatus(str, Enum):
    PLANNING = "PLANNING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    PAUSED = "PAUSED"


class LearningDifficulty(str, Enum):
    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"


class LearningEntry(SQLModel, table=True):
    """One learning-log entry."""

    __tablename__ = "learning_entry"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    title: str = Field(max_length=500)
    description: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    categories: List[str] = Field(default_factory=list, sa_column=Column(JSON, default=[]))
    status: str = Field(default=LearningStatus.IN_PROGRESS.value, index=True)
    progress: int = Field(default=0)  # percent, 0-100
    skills: List[str] = Field(default_factory=list, sa_column=Column(JSON, default=[]))
    difficulty: str = Field(default=LearningDifficulty.BEGINNER.value)

    estimated_hours: Optional[float] = Field(default=None)
    completed_hours: float = Field(default=0.0)
    start_date: Optional[date] = Field(default=None)
    target_date: Optional[date] = Field(default=None)

    # [{"title", "url", "type", "completed"}, ...]
    resources: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, default=[]))

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def category(self) -> str:
        return self.categories[0] if self.categories else "OTHER"


__all__ = ["LearningEntry", "LearningStatus", "LearningDifficulty"]
