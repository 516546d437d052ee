"""Application factory wiring settings into the ingestion components."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional

import httpx
from sqlalchemy.orm import Session, sessionmaker

from newsfeed.connectors.google_news import GoogleNewsRssFetcher
from newsfeed.connectors.resolver import GoogleNewsUrlResolver, resolve_with_browser
from newsfeed.db.session import get_sessionmaker
from newsfeed.extraction.content import HttpContentExtractor
from newsfeed.models.domain import IngestResult
from newsfeed.models.ports import ArticleProcessor, ContentExtractor, IngestPersistence, RssFetcher, SummaryService, UrlResolver
from newsfeed.processing.article_processor import ArticleProcessorImpl
from newsfeed.processing.scoring import MentionPolicy
from newsfeed.scheduler import IngestScheduler
from newsfeed.services.persistence import PersistenceGateway
from newsfeed.settings import IngestSettings, get_settings
from newsfeed.tasks.ingest import IngestJobRunner

if TYPE_CHECKING:  # pragma: no cover
    from celery import Celery


@dataclass
class _RunComponents:
    fetcher: RssFetcher
    processor: ArticleProcessor


class IngestApplication:
    """Builds a fresh component graph per run around one ``httpx.AsyncClient``.

    Every collaborator can be overridden; ``None`` means "build the default".
    """

    def __init__(
        self,
        settings: IngestSettings,
        *,
        persistence: Optional[IngestPersistence] = None,
        session_factory: Optional[sessionmaker[Session]] = None,
        summary_service: Optional[SummaryService] = None,
        fetcher: Optional[RssFetcher] = None,
        processor: Optional[ArticleProcessor] = None,
        content_extractor: Optional[ContentExtractor] = None,
        url_resolver: Optional[UrlResolver] = None,
        http_client_factory: Callable[[], httpx.AsyncClient] = httpx.AsyncClient,
        celery_app: Optional["Celery"] = None,
    ) -> None:
        self.settings = settings
        self._persistence = persistence
        self._session_factory = session_factory
        self._summary_service = summary_service
        self._fetcher = fetcher
        self._processor = processor
        self._content_extractor = content_extractor
        self._url_resolver = url_resolver
        self._http_client_factory = http_client_factory
        self.scheduler = IngestScheduler(
            enable_internal_cron=settings.enable_internal_cron,
            cron_expression=settings.ingest_cron,
            job_runner=self._run_job,
            celery_app=celery_app,
        )

    @property
    def persistence(self) -> IngestPersistence:
        if self._persistence is None:
            factory = self._session_factory or get_sessionmaker(self.settings)
            self._persistence = PersistenceGateway(factory)
        return self._persistence

    @property
    def summary_service(self) -> SummaryService:
        if self._summary_service is None:
            from summarizer.client.openai_client import SummaryClient

            self._summary_service = SummaryClient.from_env()
        return self._summary_service

    def _build_components(self, client: httpx.AsyncClient) -> _RunComponents:
        settings = self.settings
        fetcher = self._fetcher or GoogleNewsRssFetcher(
            client,
            endpoint=settings.rss_endpoint,
            user_agent=settings.user_agent,
        )
        processor = self._processor
        if processor is None:
            resolver = self._url_resolver or GoogleNewsUrlResolver(
                client,
                browser_resolver=resolve_with_browser if settings.browser_fallback else None,
            )
            extractor = self._content_extractor or HttpContentExtractor(
                client,
                timeout_seconds=settings.fetch_timeout_seconds,
                user_agent=settings.user_agent,
            )
            processor = ArticleProcessorImpl(
                content_extractor=extractor,
                resolve_url=resolver,
                policy=MentionPolicy(
                    threshold=settings.mention_threshold,
                    primary_weight=settings.primary_mention_weight,
                    alias_weight=settings.alias_mention_weight,
                ),
            )
        return _RunComponents(fetcher=fetcher, processor=processor)

    async def _run_job(self) -> IngestResult:
        summary_service = self.summary_service
        try:
            async with self._http_client_factory() as client:
                components = self._build_components(client)
                runner = IngestJobRunner(
                    settings=self.settings,
                    persistence=self.persistence,
                    fetcher=components.fetcher,
                    processor=components.processor,
                    summary_service=summary_service,
                )
                return await runner.run()
        finally:
            # 요약 클라이언트 연결도 실행 단위로 정리
            aclose = getattr(summary_service, "aclose", None)
            if aclose is not None:
                await aclose()

    async def run_once(self) -> IngestResult:
        return await self.scheduler.run_once()

    def start_scheduler(self) -> Optional[str]:
        return self.scheduler.start()

    def stop_scheduler(self) -> None:
        self.scheduler.stop()


def create_ingest_application(settings: Optional[IngestSettings] = None, **overrides) -> IngestApplication:  # noqa: ANN003
    return IngestApplication(settings or get_settings(), **overrides)
