"""Celery 애플리케이션 부트스트랩."""

from __future__ import annotations

import logging
from typing import Any, Dict

from celery import Celery, signals

from .scheduler import BEAT_ENTRY_NAME, build_beat_entry
from .settings import IngestSettings, get_settings
from .utils.logging import configure_logging

_CELERY_APP: Celery | None = None


def create_celery_app(settings: IngestSettings | None = None) -> Celery:
    """설정을 기반으로 Celery 인스턴스를 생성한다."""
    config = settings or get_settings()
    configure_logging(config.structlog_level, json_enabled=config.log_json)

    app = Celery("newsfeed", broker=config.redis_url, backend=config.redis_url)
    app.conf.update(
        task_default_queue="newsfeed.default",
        task_default_exchange="newsfeed",
        task_default_routing_key="newsfeed.default",
        # one ingest pass at a time per worker; the job parallelizes internally
        worker_concurrency=1,
        worker_prefetch_multiplier=1,
        task_soft_time_limit=int(config.job_timeout_seconds) + 60,
        beat_schedule=_build_beat_schedule(config),
        timezone="UTC",
        enable_utc=True,
        worker_send_task_events=True,
        task_send_sent_event=True,
    )

    app.autodiscover_tasks(["newsfeed.tasks"], related_name="ingest")
    _install_signal_handlers(app)
    return app


def get_celery_app() -> Celery:
    """싱글톤 Celery 인스턴스를 반환한다."""
    global _CELERY_APP
    if _CELERY_APP is None:
        _CELERY_APP = create_celery_app()
    return _CELERY_APP


def _build_beat_schedule(settings: IngestSettings) -> Dict[str, Dict[str, Any]]:
    if not settings.enable_internal_cron:
        return {}
    return {BEAT_ENTRY_NAME: build_beat_entry(settings.ingest_cron)}


def _install_signal_handlers(app: Celery) -> None:
    logger = logging.getLogger("newsfeed.worker")

    @signals.worker_shutdown.connect(weak=False)  # type: ignore[attr-defined]
    def _on_worker_shutdown(sender=None, **kwargs):  # noqa: ANN001
        logger.info("ingest.worker.shutdown", extra={"sender": str(sender)})
