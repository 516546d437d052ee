"""Repositories for persisting articles, summaries and person links."""

from __future__ import annotations

import uuid
from typing import Iterable, Optional

from sqlalchemy import delete, insert, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from newsfeed.db.models import Article, ArticlePerson, Summary
from newsfeed.models.domain import ArticleSaveInput


def find_duplicate_article(
    session: Session,
    url_normalized: str,
    content_hash: Optional[str] = None,
) -> Optional[uuid.UUID]:
    """Id of an article sharing the normalized URL, else the content hash."""
    by_url = session.execute(
        select(Article.id).where(Article.url_normalized == url_normalized).limit(1)
    ).scalar_one_or_none()
    if by_url is not None:
        return by_url
    if not content_hash:
        return None
    return session.execute(
        select(Article.id).where(Article.content_hash == content_hash).limit(1)
    ).scalar_one_or_none()


def _article_values(article: ArticleSaveInput, url_normalized: str, article_id: uuid.UUID) -> dict:
    return {
        "id": article_id,
        "url_original": article.url,
        "url_normalized": url_normalized,
        "content_hash": article.content_hash,
        "source_domain": article.source_domain,
        "title": article.title,
        "description": article.description,
        "content": article.content,
        "image_url": article.image_url,
        "published_at": article.published_at,
        "fetched_at": article.fetched_at,
    }


def insert_article_if_absent(
    session: Session,
    article: ArticleSaveInput,
    url_normalized: str,
    *,
    article_id: uuid.UUID,
) -> bool:
    """Insert the article unless a unique key already exists.

    Returns True when this call wrote the row. Conflicts on either dedup key
    are absorbed; the caller re-reads to learn which row won.
    """
    values = _article_values(article, url_normalized, article_id)
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        stmt = pg_insert(Article).values(**values).on_conflict_do_nothing()
    elif dialect == "sqlite":
        stmt = sqlite_insert(Article).values(**values).on_conflict_do_nothing()
    else:
        try:
            with session.begin_nested():
                session.execute(insert(Article).values(**values))
        except IntegrityError:
            return False
        return True
    result = session.execute(stmt)
    return bool(result.rowcount)


def upsert_summary(session: Session, article_id: uuid.UUID, text: str) -> None:
    existing = session.execute(select(Summary).where(Summary.article_id == article_id)).scalar_one_or_none()
    if existing is None:
        session.add(Summary(article_id=article_id, text=text))
    else:
        existing.text = text
    session.flush()


def replace_person_links(session: Session, article_id: uuid.UUID, person_ids: Iterable[uuid.UUID]) -> int:
    """Make the article's link set exactly ``person_ids``."""
    session.execute(delete(ArticlePerson).where(ArticlePerson.article_id == article_id))
    unique_ids = list(dict.fromkeys(person_ids))
    for person_id in unique_ids:
        session.add(ArticlePerson(article_id=article_id, person_id=person_id))
    session.flush()
    return len(unique_ids)
