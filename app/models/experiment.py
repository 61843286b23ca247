"""
Experiment Model

Side projects shown on the experiments page with progress tracking.
Category and status are stored as plain strings: values outside the
enums below are kept as-is.
"""

import uuid
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional, List

from sqlmodel import Field, SQLModel, Column
from sqlalchemy import Text, JSON


class ExperimentCategory(str, Enum):
    WEB = "WEB"
    MOBILE = "MOBILE"
    AI = "AI"
    GAME = "GAME"
    TOOL = "TOOL"
    OTHER = "OTHER"


class ExperimentStatus(str, Enum):
    PLANNING = "PLANNING"
    IN_PROGRESS = "IN_PROGRESS"
    TESTING = "TESTING"
    COMPLETED = "COMPLETED"
    PAUSED = "PAUSED"


class Experiment(SQLModel, table=True):
    """A project tracked on the experiments page."""

    __tablename__ = "experiment"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    title: str = Field(max_length=500)
    description: str = Field(default="", max_length=2000)
    detailed_content: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    next_steps: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    category: str = Field(default=ExperimentCategory.OTHER.value, index=True)
    status: str = Field(default=ExperimentStatus.PLANNING.value, index=True)
    progress: int = Field(default=0)  # percent, 0-100
    technologies: List[str] = Field(default_factory=list, sa_column=Column(JSON, default=[]))
    start_date: Optional[date] = Field(default=None)

    # Links
    image_url: Optional[str] = Field(default=None)
    demo_url: Optional[str] = Field(default=None)
    github_url: Optional[str] = Field(default=None)
    work_in_progress_url: Optional[str] = Field(default=None)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


__all__ = ["Experiment", "ExperimentCategory", "ExperimentStatus"]
