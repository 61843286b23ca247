"""
Test fixtures for the portfolio dashboard tests.

Provides database session fixtures, an API client bound to the test
database and sample rows for each collection.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Generator, List

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.db import get_session
from app.main import app as fastapi_app
from app.models.article import Article, ArticleStatus
from app.models.experiment import Experiment
from app.models.learning_entry import LearningEntry

# Use in-memory SQLite for unit tests (fast, isolated)
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def test_engine():
    """Create a test database engine with in-memory SQLite."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(scope="function")
def test_session(test_engine) -> Generator[Session, None, None]:
    """Provide a test database session."""
    with Session(test_engine) as session:
        yield session


@pytest.fixture
def api_app(test_session: Session):
    """The FastAPI app with its database dependency bound to the test session."""

    def get_test_session():
        yield test_session

    fastapi_app.dependency_overrides[get_session] = get_test_session
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(api_app) -> TestClient:
    """Create test client with database session override."""
    return TestClient(api_app)


@pytest.fixture
def preferences_path(tmp_path):
    """Point the preferences store at a throwaway file."""
    from unittest.mock import patch

    from app.core.config import settings

    path = tmp_path / "preferences.json"
    with patch.object(settings, "PREFERENCES_PATH", str(path)):
        yield path


# ============================================
# Collection Fixtures
# ============================================

BASE_TIME = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def sample_articles(test_session: Session) -> List[Article]:
    """
    One article per state.

    "first-post" was published before "second-post"; the draft was edited last.
    """
    articles = [
        Article(
            title="First Post",
            slug="first-post",
            content="# First\n\nHello **world**",
            status=ArticleStatus.PUBLISHED.value,
            tags=["intro"],
            published_at=BASE_TIME,
            created_at=BASE_TIME,
            updated_at=BASE_TIME,
        ),
        Article(
            title="Second Post",
            slug="second-post",
            content="Second body",
            status=ArticleStatus.PUBLISHED.value,
            published_at=BASE_TIME + timedelta(days=1),
            created_at=BASE_TIME + timedelta(days=1),
            updated_at=BASE_TIME + timedelta(days=1),
        ),
        Article(
            title="Work In Progress",
            slug="work-in-progress",
            content="Not ready",
            status=ArticleStatus.DRAFT.value,
            created_at=BASE_TIME + timedelta(days=2),
            updated_at=BASE_TIME + timedelta(days=2),
        ),
        Article(
            title="Old News",
            slug="old-news",
            status=ArticleStatus.ARCHIVED.value,
            published_at=BASE_TIME - timedelta(days=30),
            created_at=BASE_TIME - timedelta(days=30),
            updated_at=BASE_TIME - timedelta(days=30),
        ),
    ]
    for a in articles:
        test_session.add(a)
    test_session.commit()
    for a in articles:
        test_session.refresh(a)
    return articles


@pytest.fixture
def sample_experiments(test_session: Session) -> List[Experiment]:
    """Two experiments, the second one edited most recently."""
    experiments = [
        Experiment(
            title="Realtime Chat",
            description="WebSocket playground",
            category="WEB",
            status="IN_PROGRESS",
            progress=40,
            technologies=["FastAPI", "WebSockets"],
            start_date=date(2024, 11, 1),
            created_at=BASE_TIME,
            updated_at=BASE_TIME,
        ),
        Experiment(
            title="Tiny Roguelike",
            description="Terminal game",
            category="GAME",
            status="PLANNING",
            progress=0,
            technologies=["Python"],
            created_at=BASE_TIME + timedelta(hours=1),
            updated_at=BASE_TIME + timedelta(hours=1),
        ),
    ]
    for e in experiments:
        test_session.add(e)
    test_session.commit()
    for e in experiments:
        test_session.refresh(e)
    return experiments


@pytest.fixture
def sample_learning_entries(test_session: Session) -> List[LearningEntry]:
    """Two learning entries, the second one edited most recently."""
    entries = [
        LearningEntry(
            title="Rust Book",
            categories=["LANGUAGES", "SYSTEMS"],
            status="IN_PROGRESS",
            progress=30,
            skills=["ownership"],
            difficulty="INTERMEDIATE",
            estimated_hours=40,
            completed_hours=12,
            start_date=date(2024, 12, 1),
            resources=[{"title": "The Book", "url": "https://doc.rust-lang.org/book/", "type": "book", "completed": False}],
            created_at=BASE_TIME,
            updated_at=BASE_TIME,
        ),
        LearningEntry(
            title="Linear Algebra",
            categories=[],
            status="PLANNING",
            created_at=BASE_TIME + timedelta(hours=1),
            updated_at=BASE_TIME + timedelta(hours=1),
        ),
    ]
    for e in entries:
        test_session.add(e)
    test_session.commit()
    for e in entries:
        test_session.refresh(e)
    return entries
