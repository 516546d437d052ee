"""Ingestion job runner and its Celery task."""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from celery import shared_task

from newsfeed.errors import IngestError, JobTimeoutError, SummaryGenerationError
from newsfeed.models.domain import (
    FetchContext,
    IngestResult,
    IngestStats,
    PersonDictionaryEntry,
    ProcessContext,
    RssArticleCandidate,
)
from newsfeed.models.ports import ArticleProcessor, IngestPersistence, RssFetcher, SummaryService
from newsfeed.services.concurrency import WorkerPool, await_with_deadline, retry_with_timeout
from newsfeed.settings import IngestSettings
from newsfeed.utils.logging import get_logger, log_ingest_error

# Articles handled in parallel inside one person's worker.
ARTICLE_CONCURRENCY = 3

logger = get_logger(__name__)


class IngestJobRunner:
    """One full ingestion pass.

    Started → FetchingPersons → (per person: fetch → per article: process) →
    Completing → Completed | Failed. The job run row is finalized exactly once.
    """

    def __init__(
        self,
        *,
        settings: IngestSettings,
        persistence: IngestPersistence,
        fetcher: RssFetcher,
        processor: ArticleProcessor,
        summary_service: SummaryService,
        article_concurrency: int = ARTICLE_CONCURRENCY,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._settings = settings
        self._persistence = persistence
        self._fetcher = fetcher
        self._processor = processor
        self._summary = summary_service
        self._article_pool: WorkerPool[RssArticleCandidate] = WorkerPool(article_concurrency)
        self._person_pool: WorkerPool[PersonDictionaryEntry] = WorkerPool(settings.concurrency)
        self._now = now
        self._abandoned = False
        self._suppressed_errors = 0

    async def run(self) -> IngestResult:
        started_at = self._now()
        job_id = await asyncio.to_thread(self._persistence.record_job_start, started_at)
        stats = IngestStats()
        error_code: Optional[str] = None
        error_message: Optional[str] = None
        self._abandoned = False
        self._suppressed_errors = 0
        logger.info("ingest.job.start", extra={"job_id": str(job_id), "started_at": started_at})

        try:
            await await_with_deadline(
                self._process_all_persons(stats, job_id),
                self._settings.job_timeout_seconds,
                on_orphan_done=lambda task: self._log_orphan_done(job_id, task),
            )
        except Exception as exc:
            if isinstance(exc, JobTimeoutError):
                self._abandoned = True
            stats.errors += 1
            error_code = exc.code if isinstance(exc, IngestError) else "INGEST_JOB_FAILED"
            error_message = str(exc) or type(exc).__name__
            log_ingest_error(logger, "ingest.job.failed", "INGEST_JOB_FAILED", exc, job_id=str(job_id))
        finally:
            # 마감 이후 남은 작업이 stats를 계속 바꾸므로 저장 시점 값으로 고정
            final_stats = replace(stats)
            await asyncio.to_thread(
                self._persistence.complete_job_run,
                job_id,
                final_stats,
                error_code=error_code,
                error_message=error_message,
            )

        logger.info("ingest.job.complete", extra={"job_id": str(job_id), **final_stats.as_dict()})
        return IngestResult(job_id=job_id, stats=final_stats, error_code=error_code)

    def _report_error(self, event: str, code: str, exc: BaseException, **context: Any) -> None:
        if self._abandoned:
            self._suppressed_errors += 1
            return
        log_ingest_error(logger, event, code, exc, **context)

    def _log_orphan_done(self, job_id: uuid.UUID, task: "asyncio.Future[Any]") -> None:
        logger.warning(
            "ingest.job.orphan_finished",
            extra={
                "job_id": str(job_id),
                "suppressed_errors": self._suppressed_errors,
                "cancelled": task.cancelled(),
            },
        )

    async def _process_all_persons(self, stats: IngestStats, job_id: uuid.UUID) -> None:
        dictionary = await asyncio.to_thread(self._persistence.load_person_dictionary)
        persons = list(dictionary.entries())
        if not persons:
            logger.info("ingest.dictionary.empty", extra={"job_id": str(job_id)})
            return

        async def handle(entry: PersonDictionaryEntry) -> None:
            await self._process_person(entry, stats, job_id)

        await self._person_pool.run(persons, handle)

    async def _fetch_with_retry(self, entry: PersonDictionaryEntry) -> List[RssArticleCandidate]:
        settings = self._settings
        context = FetchContext(timeout_seconds=settings.fetch_timeout_seconds, retry_limit=settings.retry_limit)
        slug = entry.person.slug

        def on_retry(attempt: int, exc: Exception) -> None:
            logger.info(
                "ingest.retry",
                extra={
                    "code": "INGEST_RETRY",
                    "slug": slug,
                    "attempt": attempt,
                    "retry_limit": settings.retry_limit,
                    "error": str(exc) or type(exc).__name__,
                },
            )

        return await retry_with_timeout(
            lambda: self._fetcher.fetch(entry, context),
            retries=settings.retry_limit,
            timeout_seconds=settings.fetch_timeout_seconds,
            operation="rss.fetch",
            on_retry=on_retry,
        )

    async def _process_person(self, entry: PersonDictionaryEntry, stats: IngestStats, job_id: uuid.UUID) -> None:
        slug = entry.person.slug
        try:
            candidates = await self._fetch_with_retry(entry)
        except Exception as exc:
            stats.errors += 1
            self._report_error(
                "ingest.person.failed",
                "PERSON_FETCH_FAILED",
                exc,
                force_code=True,
                slug=slug,
                job_id=str(job_id),
            )
            return

        candidates = candidates[: self._settings.max_articles_per_person]
        stats.fetched += len(candidates)
        if not candidates:
            return

        context = ProcessContext(person=entry, job_id=job_id)

        async def handle(candidate: RssArticleCandidate) -> None:
            await self._process_candidate(candidate, entry, context, stats)

        await self._article_pool.run(candidates, handle)

    async def _process_candidate(
        self,
        candidate: RssArticleCandidate,
        entry: PersonDictionaryEntry,
        context: ProcessContext,
        stats: IngestStats,
    ) -> None:
        slug = entry.person.slug
        job_id = str(context.job_id)
        try:
            processed = await self._processor.process(candidate, entry, context)
            if processed is None:
                stats.skipped += 1
                return

            draft = processed.draft
            duplicate = await asyncio.to_thread(
                self._persistence.is_duplicate_article, draft.url, draft.content_hash
            )
            if duplicate is not None:
                stats.deduped += 1
                logger.info(
                    "ingest.article.duplicate",
                    extra={"slug": slug, "url": draft.url, "article_id": str(duplicate.article_id), "job_id": job_id},
                )
                return

            summary = await self._summary.generate_summary(processed.summary_input)
            if not summary or not summary.strip():
                raise SummaryGenerationError("summary generation returned no text", details={"url": draft.url})

            outcome = await asyncio.to_thread(self._persistence.save_article_result, draft.with_summary(summary.strip()))
            if outcome.status == "duplicate":
                stats.deduped += 1
            else:
                stats.inserted += 1
            logger.info(
                "ingest.article.saved",
                extra={"slug": slug, "url": draft.url, "status": outcome.status, "article_id": str(outcome.article_id)},
            )
        except Exception as exc:
            stats.errors += 1
            stats.skipped += 1
            self._report_error(
                "ingest.article.failed",
                "ARTICLE_PROCESS_FAILED",
                exc,
                slug=slug,
                url=candidate.url,
                job_id=job_id,
            )


def run_ingest_once() -> Dict[str, Any]:
    """Build the application from environment settings and run a single pass."""
    from newsfeed.app import create_ingest_application

    application = create_ingest_application()
    result = asyncio.run(application.run_once())
    return {"job_id": str(result.job_id), "error_code": result.error_code, **result.stats.as_dict()}


@shared_task(name="newsfeed.tasks.ingest.run_ingest_job")
def run_ingest_job() -> Dict[str, Any]:  # pragma: no cover - wrapper
    return run_ingest_once()
