from contextlib import contextmanager
from typing import Generator

from sqlmodel import create_engine, Session

from glassworks.config import settings

# Import the models so the metadata knows every table
import glassworks.model  # noqa: F401

DATABASE_URL = settings.database_url

# Engine singleton
engine = create_engine(DATABASE_URL, echo=False, pool_pre_ping=True)


def get_session() -> Generator[Session, None, None]:
    """FastAPI dependency that yields a database session."""
    with Session(engine) as session:
        yield session


@contextmanager
def get_session_context() -> Generator[Session, None, None]:
    """Context manager for use outside FastAPI Depends (scripts)."""
    with Session(engine) as session:
        yield session
