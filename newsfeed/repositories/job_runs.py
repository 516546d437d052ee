"""Ingest job run bookkeeping."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from newsfeed.db.models import IngestJobRun, JobStatus
from newsfeed.models.domain import IngestStats


def create_job_run(session: Session, started_at: Optional[datetime] = None) -> uuid.UUID:
    job = IngestJobRun(
        status=JobStatus.RUNNING,
        started_at=started_at or datetime.now(timezone.utc),
        fetched=0,
        inserted=0,
        deduped=0,
        skipped=0,
        errors=0,
    )
    session.add(job)
    session.flush()
    return job.id


def finish_job_run(
    session: Session,
    job_id: uuid.UUID,
    stats: IngestStats,
    *,
    error_code: Optional[str] = None,
    error_message: Optional[str] = None,
    finished_at: Optional[datetime] = None,
) -> None:
    job = session.get(IngestJobRun, job_id)
    if job is None:
        raise LookupError(f"ingest job run {job_id} not found")
    job.finished_at = finished_at or datetime.now(timezone.utc)
    job.fetched = stats.fetched
    job.inserted = stats.inserted
    job.deduped = stats.deduped
    job.skipped = stats.skipped
    job.errors = stats.errors
    job.status = JobStatus.FAILED if error_code else JobStatus.SUCCEEDED
    job.error_code = error_code
    job.error_message = error_message[:512] if error_message else None
    session.flush()
