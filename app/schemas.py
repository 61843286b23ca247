from typing import Any, Dict, List, Optional
from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field, computed_field, model_validator

from app.models.article import ArticleStatus

SLUG_PATTERN = r"^[a-z0-9-]+$"


def apply_primary_category(categories: List[str], primary: Optional[str]) -> List[str]:
    """Return categories with `primary` moved (or inserted) at the front."""
    if not primary:
        return list(categories)
    return [primary] + [c for c in categories if c != primary]


# ============== ARTICLES ==============


class ArticleCreate(BaseModel):
    title: str = Field(min_length=1, max_length=500)
    slug: Optional[str] = Field(default=None, max_length=200, pattern=SLUG_PATTERN)  # generated from title when omitted
    content: Optional[str] = None
    excerpt: Optional[str] = None
    status: ArticleStatus = ArticleStatus.DRAFT
    tags: List[str] = Field(default_factory=list)
    featured_image_url: Optional[str] = None
    reading_time: Optional[int] = Field(default=None, ge=0)
    published_at: Optional[datetime] = None


class ArticleUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=500)
    slug: Optional[str] = Field(default=None, max_length=200, pattern=SLUG_PATTERN)
    content: Optional[str] = None
    excerpt: Optional[str] = None
    status: Optional[ArticleStatus] = None
    tags: Optional[List[str]] = None
    featured_image_url: Optional[str] = None
    reading_time: Optional[int] = Field(default=None, ge=0)
    published_at: Optional[datetime] = None


class ArticleOut(BaseModel):
    id: UUID
    title: str
    slug: str
    content: Optional[str] = None
    excerpt: Optional[str] = None
    status: str
    tags: List[str] = Field(default_factory=list)
    featured_image_url: Optional[str] = None
    reading_time: Optional[int] = None
    published_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ArticleHtmlOut(BaseModel):
    id: UUID
    slug: str
    html: str


# ============== EXPERIMENTS ==============


def _migrate_experiment_payload(data: Any) -> Any:
    """Older project rows used `tech_stack` or `tags` for the technology list."""
    if isinstance(data, dict) and "technologies" not in data:
        data = dict(data)
        for legacy in ("tech_stack", "tags"):
            if legacy in data:
                data["technologies"] = data.pop(legacy)
                break
    return data


class ExperimentCreate(BaseModel):
    title: str = Field(min_length=1, max_length=500)
    description: str = Field(default="", max_length=2000)
    detailed_content: Optional[str] = None
    next_steps: Optional[str] = None
    category: str = "OTHER"  # ExperimentCategory; unknown labels are kept
    status: str = "PLANNING"  # ExperimentStatus; unknown labels are kept
    progress: int = Field(default=0, ge=0, le=100)
    technologies: List[str] = Field(default_factory=list)
    start_date: Optional[date] = None
    image_url: Optional[str] = None
    demo_url: Optional[str] = None
    github_url: Optional[str] = None
    work_in_progress_url: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _migrate_legacy_shape(cls, data: Any) -> Any:
        return _migrate_experiment_payload(data)


class ExperimentUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=500)
    description: Optional[str] = Field(default=None, max_length=2000)
    detailed_content: Optional[str] = None
    next_steps: Optional[str] = None
    category: Optional[str] = None
    status: Optional[str] = None
    progress: Optional[int] = Field(default=None, ge=0, le=100)
    technologies: Optional[List[str]] = None
    start_date: Optional[date] = None
    image_url: Optional[str] = None
    demo_url: Optional[str] = None
    github_url: Optional[str] = None
    work_in_progress_url: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _migrate_legacy_shape(cls, data: Any) -> Any:
        return _migrate_experiment_payload(data)


class ExperimentOut(BaseModel):
    id: UUID
    title: str
    description: str
    detailed_content: Optional[str] = None
    next_steps: Optional[str] = None
    category: str
    status: str
    progress: int
    technologies: List[str] = Field(default_factory=list)
    start_date: Optional[date] = None
    image_url: Optional[str] = None
    demo_url: Optional[str] = None
    github_url: Optional[str] = None
    work_in_progress_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# ============== LEARNING ENTRIES ==============


class LearningResource(BaseModel):
    title: str
    url: str
    type: str = "link"
    completed: bool = False

    @model_validator(mode="before")
    @classmethod
    def _from_bare_url(cls, data: Any) -> Any:
        # Older rows stored resources as plain URL strings
        if isinstance(data, str):
            return {"title": data, "url": data}
        return data


def _migrate_learning_payload(data: Any) -> Any:
    """Map the older learning-entry shape (scalar `category`, `date`) onto the canonical one."""
    if not isinstance(data, dict):
        return data
    data = dict(data)
    if "date" in data and "start_date" not in data:
        data["start_date"] = data.pop("date")
    return data


class LearningEntryCreate(BaseModel):
    title: str = Field(min_length=1, max_length=500)
    description: Optional[str] = None
    categories: List[str] = Field(default_factory=list)
    category: Optional[str] = None  # primary category, folded into `categories`
    status: str = "IN_PROGRESS"
    progress: int = Field(default=0, ge=0, le=100)
    skills: List[str] = Field(default_factory=list)
    difficulty: str = "BEGINNER"
    estimated_hours: Optional[float] = Field(default=None, ge=0)
    completed_hours: float = Field(default=0.0, ge=0)
    start_date: Optional[date] = None
    target_date: Optional[date] = None
    resources: List[LearningResource] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _migrate_legacy_shape(cls, data: Any) -> Any:
        return _migrate_learning_payload(data)

    def to_row(self) -> Dict[str, Any]:
        data = self.model_dump(mode="json", exclude={"category", "start_date", "target_date"})
        data["start_date"] = self.start_date
        data["target_date"] = self.target_date
        data["categories"] = apply_primary_category(self.categories, self.category)
        return data


class LearningEntryUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=500)
    description: Optional[str] = None
    categories: Optional[List[str]] = None
    category: Optional[str] = None
    status: Optional[str] = None
    progress: Optional[int] = Field(default=None, ge=0, le=100)
    skills: Optional[List[str]] = None
    difficulty: Optional[str] = None
    estimated_hours: Optional[float] = Field(default=None, ge=0)
    completed_hours: Optional[float] = Field(default=None, ge=0)
    start_date: Optional[date] = None
    target_date: Optional[date] = None
    resources: Optional[List[LearningResource]] = None

    @model_validator(mode="before")
    @classmethod
    def _migrate_legacy_shape(cls, data: Any) -> Any:
        return _migrate_learning_payload(data)


class LearningEntryOut(BaseModel):
    id: UUID
    title: str
    description: Optional[str] = None
    categories: List[str] = Field(default_factory=list)
    status: str
    progress: int
    skills: List[str] = Field(default_factory=list)
    difficulty: str
    estimated_hours: Optional[float] = None
    completed_hours: float = 0.0
    start_date: Optional[date] = None
    target_date: Optional[date] = None
    resources: List[LearningResource] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @computed_field  # type: ignore[prop-decorator]
    @property
    def category(self) -> str:
        return self.categories[0] if self.categories else "OTHER"


# ============== PREFERENCES ==============


class PreferenceValue(BaseModel):
    value: Any = None
