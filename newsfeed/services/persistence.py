"""Persistence gateway: dedup truth, article writes and job run bookkeeping."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session, sessionmaker

from newsfeed.db.session import transaction
from newsfeed.models.domain import (
    ArticleSaveInput,
    DuplicateMarker,
    IngestStats,
    PersonDictionary,
    SaveOutcome,
)
from newsfeed.repositories.articles import (
    find_duplicate_article,
    insert_article_if_absent,
    replace_person_links,
    upsert_summary,
)
from newsfeed.repositories.job_runs import create_job_run, finish_job_run
from newsfeed.repositories.persons import load_person_dictionary
from newsfeed.utils.urls import normalize_url

logger = logging.getLogger(__name__)


class PersistenceGateway:
    """Owns every durable write of the pipeline.

    Each public method runs in its own transaction. Concurrent savers of the
    same article are serialized by the unique constraints on normalized URL
    and content hash: the insert is conditional and the row that survives is
    re-read, so the losing writer reports ``duplicate`` with the winner's id.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def load_person_dictionary(self) -> PersonDictionary:
        with transaction(self._session_factory) as session:
            return load_person_dictionary(session)

    def record_job_start(self, started_at: Optional[datetime] = None) -> uuid.UUID:
        with transaction(self._session_factory) as session:
            return create_job_run(session, started_at)

    def complete_job_run(
        self,
        job_id: uuid.UUID,
        stats: IngestStats,
        *,
        error_code: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> None:
        with transaction(self._session_factory) as session:
            finish_job_run(session, job_id, stats, error_code=error_code, error_message=error_message)

    def is_duplicate_article(self, url: str, content_hash: Optional[str] = None) -> Optional[DuplicateMarker]:
        normalized = normalize_url(url)
        with transaction(self._session_factory) as session:
            existing = find_duplicate_article(session, normalized, content_hash)
        if existing is None:
            return None
        return DuplicateMarker(article_id=existing)

    def save_article_result(self, article: ArticleSaveInput) -> SaveOutcome:
        duplicate = self.is_duplicate_article(article.url, article.content_hash)
        if duplicate is not None:
            return SaveOutcome(status="duplicate", article_id=duplicate.article_id)

        normalized = normalize_url(article.url)
        candidate_id = uuid.uuid4()
        with transaction(self._session_factory) as session:
            insert_article_if_absent(session, article, normalized, article_id=candidate_id)
            winner = find_duplicate_article(session, normalized, article.content_hash)
            if winner is None:
                raise RuntimeError(f"article row missing after insert: {normalized}")
            if winner != candidate_id:
                logger.info(
                    "ingest.article.race_lost",
                    extra={"url": normalized, "article_id": str(winner)},
                )
                return SaveOutcome(status="duplicate", article_id=winner)

            if article.summary_text:
                upsert_summary(session, candidate_id, article.summary_text)
            replace_person_links(session, candidate_id, (person.id for person in article.persons))

        return SaveOutcome(status="inserted", article_id=candidate_id)
