"""Recurring trigger for the ingestion job (Celery beat)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Optional

from celery.schedules import crontab

from newsfeed.models.domain import IngestResult

if TYPE_CHECKING:  # pragma: no cover
    from celery import Celery

INGEST_TASK_NAME = "newsfeed.tasks.ingest.run_ingest_job"
BEAT_ENTRY_NAME = "newsfeed.ingest.cron"

logger = logging.getLogger(__name__)

JobRunnerFn = Callable[[], Awaitable[IngestResult]]


def crontab_from_expression(expression: str) -> crontab:
    """Five-field cron expression → celery ``crontab``."""
    fields = expression.split()
    if len(fields) != 5:
        raise ValueError(f"cron expression must have 5 fields: {expression!r}")
    minute, hour, day_of_month, month_of_year, day_of_week = fields
    return crontab(
        minute=minute,
        hour=hour,
        day_of_month=day_of_month,
        month_of_year=month_of_year,
        day_of_week=day_of_week,
    )


def build_beat_entry(expression: str) -> Dict[str, Any]:
    return {"task": INGEST_TASK_NAME, "schedule": crontab_from_expression(expression)}


class IngestScheduler:
    """Registers/unregisters the beat entry and runs the job on demand.

    ``start()`` is a no-op returning ``None`` while internal scheduling is disabled.
    Beat reads ``beat_schedule`` once at startup, so ``start()`` has to run before
    the worker/beat process is launched (see ``newsfeed.cli``).
    """

    def __init__(
        self,
        *,
        enable_internal_cron: bool,
        cron_expression: str,
        job_runner: JobRunnerFn,
        celery_app: Optional["Celery"] = None,
    ) -> None:
        self._enabled = enable_internal_cron
        self._expression = cron_expression
        self._job_runner = job_runner
        self._celery_app = celery_app
        self._entry: Optional[str] = None

    @property
    def registered(self) -> Optional[str]:
        return self._entry

    def _app(self) -> "Celery":
        if self._celery_app is None:
            from newsfeed.celery_app import get_celery_app

            self._celery_app = get_celery_app()
        return self._celery_app

    def start(self) -> Optional[str]:
        if not self._enabled:
            return None
        if self._entry is not None:
            return self._entry
        app = self._app()
        schedule = dict(app.conf.beat_schedule or {})
        schedule[BEAT_ENTRY_NAME] = build_beat_entry(self._expression)
        app.conf.beat_schedule = schedule
        self._entry = BEAT_ENTRY_NAME
        logger.info("ingest.scheduler.start", extra={"cron": self._expression, "task": INGEST_TASK_NAME})
        return self._entry

    def stop(self) -> None:
        if self._entry is None:
            return
        app = self._app()
        schedule = dict(app.conf.beat_schedule or {})
        schedule.pop(self._entry, None)
        app.conf.beat_schedule = schedule
        self._entry = None
        logger.info("ingest.scheduler.stop")

    async def run_once(self) -> IngestResult:
        try:
            result = await self._job_runner()
        except Exception as exc:
            logger.error("ingest.run.failed", extra={"error": str(exc) or type(exc).__name__})
            raise
        logger.info("ingest.run.complete", extra={"job_id": str(result.job_id), **result.stats.as_dict()})
        return result
