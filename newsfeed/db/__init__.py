"""Database utilities for the news feed service."""

from .models import (  # noqa: F401
    Alias,
    Article,
    ArticlePerson,
    Base,
    IngestJobRun,
    Institution,
    JobStatus,
    Person,
    Summary,
)
from .session import get_engine, get_sessionmaker, init_db, reset_engine, session_scope, transaction  # noqa: F401

__all__ = [
    "Alias",
    "Article",
    "ArticlePerson",
    "Base",
    "IngestJobRun",
    "Institution",
    "JobStatus",
    "Person",
    "Summary",
    "get_engine",
    "get_sessionmaker",
    "init_db",
    "reset_engine",
    "session_scope",
    "transaction",
]
