"""Database setup using SQLAlchemy with SQLite.

Engines are built by a factory rather than at import time so the API and the
tests can each own their store. The default URL points at ``data/workwell.db``.
"""
from __future__ import annotations

from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool


Base = declarative_base()


def create_db_engine(url: str) -> Engine:
    """Create an engine for ``url``, preparing SQLite files and in-memory pools."""
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return create_engine(url)
    database = parsed.database
    if not database or database == ":memory:":
        # A single shared connection keeps the in-memory database alive
        return create_engine(
            url, connect_args={"check_same_thread": False}, poolclass=StaticPool
        )
    Path(database).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(url, connect_args={"check_same_thread": False})


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Create tables (idempotent)."""
    from . import models  # noqa: F401  registers tables on Base

    Base.metadata.create_all(bind=engine)

