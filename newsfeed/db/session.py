"""Session helpers for the news feed database."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from newsfeed.settings import IngestSettings, get_settings

_ENGINE: Engine | None = None
_SESSIONMAKER: sessionmaker[Session] | None = None
_CURRENT_DSN: str | None = None


def get_engine(settings: IngestSettings | None = None) -> Engine:
    """Return a memoized SQLAlchemy engine."""
    global _ENGINE, _SESSIONMAKER, _CURRENT_DSN

    config = settings or get_settings()
    if _ENGINE is None or _CURRENT_DSN != config.database_url:
        _ENGINE = create_engine(config.database_url, future=True)
        _SESSIONMAKER = sessionmaker(
            bind=_ENGINE,
            expire_on_commit=False,
            autoflush=False,
            future=True,
        )
        _CURRENT_DSN = config.database_url
    return _ENGINE


def get_sessionmaker(settings: IngestSettings | None = None) -> sessionmaker[Session]:
    """Return a memoized sessionmaker."""
    get_engine(settings)
    assert _SESSIONMAKER is not None  # for mypy
    return _SESSIONMAKER


def reset_engine() -> None:
    """Dispose the memoized engine (tests switch DSNs between cases)."""
    global _ENGINE, _SESSIONMAKER, _CURRENT_DSN
    if _ENGINE is not None:
        _ENGINE.dispose()
    _ENGINE = None
    _SESSIONMAKER = None
    _CURRENT_DSN = None


@contextmanager
def session_scope(settings: IngestSettings | None = None) -> Iterator[Session]:
    """Provide a transactional scope for DB operations."""
    with transaction(get_sessionmaker(settings)) as session:
        yield session


@contextmanager
def transaction(factory: sessionmaker[Session]) -> Iterator[Session]:
    """Commit on success, roll back on error, always close."""
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:  # pragma: no cover - re-raise after rollback
        session.rollback()
        raise
    finally:
        session.close()


def init_db(settings: IngestSettings | None = None) -> None:
    """Create all tables for the configured database."""
    from newsfeed.db.models import Base

    Base.metadata.create_all(get_engine(settings))
