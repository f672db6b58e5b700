"""Engine/session helpers for the SQL backend."""
from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from mememage.core.config import get_settings

Base = declarative_base()


def build_engine(url: str, pool_size: int = 5) -> Engine:
    url = (url or "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL must be configured to use the SQL backend.")
    options = {"future": True, "pool_pre_ping": True}
    is_sqlite = url.startswith("sqlite")
    if not is_sqlite:
        options["pool_size"] = pool_size
    engine = create_engine(url, **options)
    if is_sqlite:
        # SQLite ignores REFERENCES clauses unless enabled per connection.
        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys = ON")
            cursor.close()

    return engine


def build_sessionmaker(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@lru_cache
def get_engine() -> Engine:
    settings = get_settings()
    return build_engine(settings.database_url, settings.db_pool_size)


@lru_cache
def _get_sessionmaker() -> sessionmaker:
    return build_sessionmaker(get_engine())


@contextmanager
def get_session() -> Session:
    session: Session = _get_sessionmaker()()
    try:
        yield session
    finally:
        session.close()
