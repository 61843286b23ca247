from sqlmodel import create_engine, SQLModel, Session
import logging

from app.core.config import settings

logger = logging.getLogger(__name__)

DATABASE_URL = settings.DATABASE_URL

if DATABASE_URL.startswith("sqlite"):
    # Local development database; FastAPI runs sync routes on a threadpool
    engine = create_engine(
        DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
    )
else:
    # Hosted Postgres drops idle connections, so verify and recycle them
    engine = create_engine(
        DATABASE_URL,
        echo=False,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,  # Verify connections before use
        pool_recycle=300,  # Recycle connections every 5 min
        pool_timeout=30,
        connect_args={"connect_timeout": 10},
    )


def get_session():
    with Session(engine) as session:
        yield session


def create_db_and_tables():
    # Register table models on SQLModel.metadata before creating
    import app.models  # noqa: F401

    SQLModel.metadata.create_all(engine)
