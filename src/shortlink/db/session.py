from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from src.shortlink.core.config import logger
from src.shortlink.core.errors import StorageError
from src.shortlink.db.base import Base

# Register the tables on Base.metadata
from src.shortlink.models.url import URL  # noqa: F401
from src.shortlink.models.user import User  # noqa: F401


class Database:
    """
    Handle on the relational backend.

    Opened once at application startup and closed at shutdown; request
    handlers get short-lived sessions from it.
    """

    def __init__(self, url: str, timeout: float = 5.0):
        self.url = url
        self.timeout = timeout
        self.engine: Optional[Engine] = None
        self.SessionLocal: Optional[sessionmaker] = None

    def open(self) -> None:
        if self.url.startswith("sqlite"):
            kwargs = {"connect_args": {"check_same_thread": False, "timeout": self.timeout}}
            if ":memory:" in self.url or self.url in ("sqlite://", "sqlite:///"):
                kwargs["poolclass"] = StaticPool
        else:
            kwargs = {"pool_pre_ping": True, "pool_timeout": self.timeout}

        self.engine = create_engine(self.url, **kwargs)
        Base.metadata.create_all(bind=self.engine)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        logger.info(f"Database opened ({self.engine.dialect.name})")

    def session(self) -> Session:
        if self.SessionLocal is None:
            raise RuntimeError("Database session not initialized. Call open() first.")
        return self.SessionLocal()

    def close(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
            logger.info("Database closed")
        self.engine = None
        self.SessionLocal = None


@contextmanager
def storage_errors(action: str) -> Iterator[None]:
    """Log backend failures and re-raise them as StorageError."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(f"Database error while trying to {action}: {e}")
        raise StorageError(f"Failed to {action}") from e
