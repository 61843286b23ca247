"""
Article Model

Blog posts authored from the admin dashboard. The body is Markdown and is
rendered to HTML on request (see app.services.markdown).

Usage:
    from app.models.article import Article, ArticleStatus

    article = Article(
        title="Shipping the dashboard",
        slug="shipping-the-dashboard",
        content="# Hello",
    )
"""

import re
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, List

from sqlmodel import Field, SQLModel, Column
from sqlalchemy import Text, Index, JSON


def generate_slug(title: str) -> str:
    """Generate URL-friendly slug from an article title."""
    # Convert to lowercase
    slug = title.lower()
    # Replace anything outside [a-z0-9] with hyphens
    slug = re.sub(r"[^a-z0-9]+", "-", slug)
    # Remove leading/trailing hyphens
    slug = slug.strip("-")
    return slug


class ArticleStatus(str, Enum):
    """Article lifecycle state."""

    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


class Article(SQLModel, table=True):
    """
    Blog post.

    Attributes:
        id: Primary key (server-assigned UUID)
        slug: URL-friendly unique identifier (e.g., "shipping-the-dashboard")
        title: Post title
        content: Markdown body
        excerpt: Short summary for listings
        status: DRAFT, PUBLISHED or ARCHIVED
        tags: JSON array of tags
        featured_image_url: Cover image
        reading_time: Estimated read time in minutes
        published_at: Set on the first transition into PUBLISHED, never cleared
        created_at: When the record was created
        updated_at: When the record was last modified
    """

    __tablename__ = "article"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    title: str = Field(max_length=500)
    slug: str = Field(unique=True, index=True, max_length=200)
    content: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    excerpt: Optional[str] = Field(default=None, max_length=1000)
    status: str = Field(default=ArticleStatus.DRAFT.value, max_length=20)
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON, default=[]))
    featured_image_url: Optional[str] = Field(default=None)
    reading_time: Optional[int] = Field(default=None)  # minutes
    published_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        # Public listing: published posts by date
        Index("ix_article_status_published", "status", "published_at"),
    )


__all__ = ["Article", "ArticleStatus", "generate_slug"]
