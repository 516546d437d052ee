"""Command line entrypoint: ``python -m newsfeed [run|init-db|seed]``.

Exit codes:
  0 성공
  1 실행 실패
  2 설정 오류
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from typing import List, Optional

from newsfeed.settings import IngestSettings, get_settings
from newsfeed.utils.logging import configure_logging
from summarizer.settings import get_summary_settings

logger = logging.getLogger("newsfeed.cli")

EXIT_OK = 0
EXIT_RUN_FAILED = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="newsfeed", description="Central bank news ingestion")
    sub = parser.add_subparsers(dest="command")
    sub.add_parser("run", help="Run one ingestion pass (or the worker with beat when cron is enabled)")
    sub.add_parser("init-db", help="Create database tables")
    sub.add_parser("seed", help="Upsert institutions, persons and aliases")
    return parser


def _run(settings: IngestSettings) -> int:
    from newsfeed.app import create_ingest_application

    if settings.enable_internal_cron:
        from newsfeed.celery_app import get_celery_app

        celery_app = get_celery_app()
        application = create_ingest_application(settings, celery_app=celery_app)
        # beat 항목은 워커 기동 전에 등록되어야 한다
        application.start_scheduler()
        logger.info("ingest.worker.start", extra={"cron": settings.ingest_cron})
        try:
            celery_app.worker_main(["worker", "--beat", "--loglevel=INFO"])
        finally:
            application.stop_scheduler()
        return EXIT_OK

    application = create_ingest_application(settings)
    try:
        result = asyncio.run(application.run_once())
    except Exception:
        logger.exception("ingest.cli.failed")
        return EXIT_RUN_FAILED
    return EXIT_RUN_FAILED if result.failed else EXIT_OK


def _init_db(settings: IngestSettings) -> int:
    from newsfeed.db.session import init_db

    init_db(settings)
    logger.info("db.init.complete")
    return EXIT_OK


def _seed(settings: IngestSettings) -> int:
    from newsfeed.db.seed import seed_reference_data
    from newsfeed.db.session import session_scope

    with session_scope(settings) as session:
        seed_reference_data(session)
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    command = args.command or "run"
    try:
        settings = get_settings()
        if command == "run":
            get_summary_settings()
    except RuntimeError as exc:
        configure_logging("INFO", json_enabled=False)
        logger.error("config.invalid", extra={"error": str(exc)})
        return EXIT_CONFIG_ERROR
    configure_logging(settings.structlog_level, json_enabled=settings.log_json)

    handlers = {"run": _run, "init-db": _init_db, "seed": _seed}
    try:
        return handlers[command](settings)
    except Exception:
        logger.exception("cli.command.failed", extra={"command": command})
        return EXIT_RUN_FAILED
