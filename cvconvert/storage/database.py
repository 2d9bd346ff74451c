"""
Engine and session setup.
"""

from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


def create_engine_for(database_url: str, echo: bool = False) -> Engine:
    """
    Create an engine for any SQLAlchemy URL.

    In-memory SQLite shares one connection across sessions so the schema and
    data outlive a single session.
    """
    kwargs = {}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if _is_memory_sqlite(database_url):
            kwargs["poolclass"] = StaticPool
    return create_engine(database_url, echo=echo, **kwargs)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    # Registers the mapped classes on Base.metadata
    from . import models  # noqa: F401

    Base.metadata.create_all(engine)
