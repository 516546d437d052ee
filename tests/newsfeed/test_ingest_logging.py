import json
import logging
import uuid

from newsfeed.errors import FeedHTTPError, IngestError, OperationTimeoutError
from newsfeed.utils.logging import JsonFormatter, log_ingest_error


def _record(**extra):
    logger = logging.getLogger("newsfeed.test")
    record = logger.makeRecord("newsfeed.test", logging.INFO, __file__, 1, "ingest.job.start", (), None, extra=extra)
    return record


def test_json_formatter_includes_extra_fields():
    job_id = uuid.uuid4()
    payload = json.loads(JsonFormatter().format(_record(job_id=job_id, fetched=3)))

    assert payload["event"] == "ingest.job.start"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "newsfeed.test"
    assert payload["job_id"] == str(job_id)
    assert payload["fetched"] == 3
    assert "msg" not in payload


def test_log_ingest_error_prefers_error_code(caplog):
    logger = logging.getLogger("newsfeed.test")
    try:
        raise FeedHTTPError(503, "kazuo-ueda")
    except IngestError as exc:
        log_ingest_error(logger, "ingest.rss.error", "RSS_FETCH_FAILED", exc, url="https://feed")

    record = caplog.records[-1]
    assert record.code == "RSS_HTTP_ERROR"
    assert record.status == 503
    assert record.slug == "kazuo-ueda"
    assert record.url == "https://feed"
    assert "FeedHTTPError" in record.stack


def test_log_ingest_error_forced_code_keeps_cause(caplog):
    logger = logging.getLogger("newsfeed.test")
    exc = OperationTimeoutError("rss.fetch", 10)

    log_ingest_error(logger, "ingest.person.failed", "PERSON_FETCH_FAILED", exc, force_code=True, slug="s")

    record = caplog.records[-1]
    assert record.code == "PERSON_FETCH_FAILED"
    assert record.cause_code == "OPERATION_TIMEOUT"
    assert record.error == "rss.fetch timed out after 10s"


def test_log_ingest_error_plain_exception_uses_fallback(caplog):
    log_ingest_error(logging.getLogger("newsfeed.test"), "ingest.article.failed", "ARTICLE_PROCESS_FAILED", ValueError())

    record = caplog.records[-1]
    assert record.code == "ARTICLE_PROCESS_FAILED"
    assert record.error == "ValueError"
    assert not hasattr(record, "cause_code")
