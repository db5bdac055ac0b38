"""
store.py
========
This module is the *database gateway* for the service.

It does three things:
1) Creates a connection "engine" to the database.
2) Creates tables (once) based on the SQLModel classes in models.py.
3) Provides a helper to open a database "Session" (a unit of work/transaction).

There is no module-level engine: a ``Database`` is built by the application
lifespan (or by a test) and handed to every component that needs storage.
"""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from .errors import CacheUnavailableError
from .logging_setup import get_logger

logger = get_logger("newsengine.store")


def create_db_engine(db_url: str):
    """
    Build an engine for ``db_url``.

    SQLite needs ``check_same_thread=False`` because FastAPI runs sync endpoints
    in a threadpool. An in-memory SQLite URL additionally needs a StaticPool so
    every session sees the same database.
    """
    if db_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in db_url or db_url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
        return create_engine(db_url, echo=False, **kwargs)
    return create_engine(db_url, echo=False, pool_pre_ping=True)


class Database:
    def __init__(self, db_url: str):
        self.url = db_url
        self.engine = create_db_engine(db_url)

    def init(self) -> None:
        """
        Create all tables declared in models.py.

        Safe to call on every startup; it only creates missing tables and never
        drops data.
        """
        # Import here so the table classes are registered before create_all().
        from . import models  # noqa: F401

        SQLModel.metadata.create_all(self.engine)

    def get_session(self) -> Session:
        # expire_on_commit=False keeps returned rows usable after the session closes
        return Session(self.engine, expire_on_commit=False)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """
        Open a session and translate storage failures into CacheUnavailableError.

        Usage pattern:
          with db.session() as s:
              s.add(obj)
              s.commit()

        Anything not committed inside the block is rolled back on exit.
        """
        s = self.get_session()
        try:
            yield s
        except SQLAlchemyError as e:
            s.rollback()
            logger.error("STORAGE_ERROR", extra={"error": type(e).__name__})
            raise CacheUnavailableError(str(e)) from e
        finally:
            s.close()

    def dispose(self) -> None:
        self.engine.dispose()
