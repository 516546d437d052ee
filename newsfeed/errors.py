"""Error taxonomy for the ingestion pipeline.

Errors are identified by ``code`` rather than by class name; the job runner
turns them into log events and stats counters.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class IngestError(Exception):
    """Base ingestion error carrying a machine-readable code."""

    def __init__(self, code: str, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.code = code
        self.details: Dict[str, Any] = dict(details or {})


class FeedFetchError(IngestError):
    """Feed unreachable or unparseable."""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None, code: str = "RSS_FETCH_FAILED") -> None:
        super().__init__(code, message, details=details)


class FeedHTTPError(FeedFetchError):
    """Feed endpoint answered with a non-2xx status."""

    def __init__(self, status: int, slug: str) -> None:
        super().__init__(
            f"Failed to fetch RSS feed (status {status})",
            details={"status": status, "slug": slug},
            code="RSS_HTTP_ERROR",
        )
        self.status = status


class SummaryGenerationError(IngestError):
    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__("SUMMARY_GENERATION_FAILED", message, details=details)


class OperationTimeoutError(IngestError):
    def __init__(self, operation: str, seconds: float) -> None:
        super().__init__(
            "OPERATION_TIMEOUT",
            f"{operation} timed out after {seconds:g}s",
            details={"operation": operation, "timeout_seconds": seconds},
        )


class JobTimeoutError(IngestError):
    def __init__(self, seconds: float) -> None:
        super().__init__(
            "INGEST_JOB_FAILED",
            f"job exceeded timeout {seconds:g}s",
            details={"timeout_seconds": seconds},
        )
