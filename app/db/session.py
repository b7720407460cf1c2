# app/db/session.py
"""
SQLAlchemy engine and session factory for the relational profile store.

Use ``get_session`` as a FastAPI dependency:
    session = Depends(get_session)
"""

from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings
from app.db.base import Base


def _engine_kwargs(url: str) -> dict:
    kwargs = {"future": True, "echo": False, "pool_pre_ping": True}
    if url.startswith("sqlite"):
        # sessions are used from the executor threads of the async service
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in url:
            kwargs["poolclass"] = StaticPool
    return kwargs


engine = create_engine(settings.DATABASE_URL, **_engine_kwargs(settings.DATABASE_URL))
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def init_models() -> None:
    # import for side effect: registers tables on Base.metadata
    from app.db import models  # noqa: F401

    Base.metadata.create_all(engine)


def get_session() -> Generator[Session, None, None]:
    """
    Yields a SQLAlchemy session and always closes it.
    """
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
