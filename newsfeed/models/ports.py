"""Collaborator interfaces consumed by the job runner and article processor."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Awaitable, Callable, List, Optional, Protocol

from newsfeed.models.domain import (
    ArticleSaveInput,
    DuplicateMarker,
    ExtractorResult,
    FetchContext,
    IngestStats,
    PersonDictionary,
    PersonDictionaryEntry,
    ProcessContext,
    ProcessedArticle,
    ResolveResult,
    RssArticleCandidate,
    SaveOutcome,
    SummaryInput,
)

ContentExtractor = Callable[[str], Awaitable[ExtractorResult]]
UrlResolver = Callable[[str], Awaitable[ResolveResult]]


class RssFetcher(Protocol):
    async def fetch(self, person: PersonDictionaryEntry, context: FetchContext) -> List[RssArticleCandidate]: ...


class ArticleProcessor(Protocol):
    async def process(
        self,
        candidate: RssArticleCandidate,
        person: PersonDictionaryEntry,
        context: ProcessContext,
    ) -> Optional[ProcessedArticle]: ...


class SummaryService(Protocol):
    async def generate_summary(self, summary_input: SummaryInput) -> Optional[str]: ...


class IngestPersistence(Protocol):
    def load_person_dictionary(self) -> PersonDictionary: ...
    def record_job_start(self, started_at: Optional[datetime] = None) -> uuid.UUID: ...
    def complete_job_run(
        self,
        job_id: uuid.UUID,
        stats: IngestStats,
        *,
        error_code: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> None: ...
    def is_duplicate_article(self, url: str, content_hash: Optional[str] = None) -> Optional[DuplicateMarker]: ...
    def save_article_result(self, article: ArticleSaveInput) -> SaveOutcome: ...
