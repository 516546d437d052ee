"""Configuration models for the ingestion service."""

from __future__ import annotations

import re
from functools import lru_cache

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_CRON_PATTERN = re.compile(r"^(\S+\s){4}\S+$")


class IngestSettings(BaseSettings):
    """Ingestion용 환경 설정."""

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    database_url: str = Field(..., alias="DATABASE_URL", description="Article/person store DSN.")
    redis_url: str = Field(
        "redis://localhost:6379/0",
        alias="INGESTION_REDIS_URL",
        description="Celery 브로커/백엔드 Redis DSN.",
    )
    structlog_level: str = Field("INFO", alias="STRUCTLOG_LEVEL", description="구조화 로그 레벨.")
    log_json: bool = Field(False, alias="LOG_JSON", description="로그를 JSON 형식으로 출력할지 여부.")

    enable_internal_cron: bool = Field(False, alias="ENABLE_INTERNAL_CRON", description="Register the beat trigger.")
    ingest_cron: str = Field("5 * * * *", alias="INGEST_CRON", description="Five-field cron expression.")

    concurrency: int = Field(5, ge=1, le=10, alias="INGEST_CONCURRENCY", description="Persons processed in parallel.")
    retry_limit: int = Field(2, ge=0, le=5, alias="INGEST_RETRY_LIMIT", description="Feed fetch retries per person.")
    timeout_ms: int = Field(10_000, ge=1, le=60_000, alias="INGEST_TIMEOUT_MS", description="Per-operation timeout.")
    job_timeout_ms: int = Field(
        480_000,
        ge=1,
        le=480_000,
        alias="INGEST_JOB_TIMEOUT_MS",
        description="Job-wide deadline for processing all persons.",
    )
    max_articles_per_person: int = Field(
        10,
        ge=1,
        le=100,
        alias="INGEST_MAX_ARTICLES_PER_PERSON",
        description="Feed entries considered per person.",
    )

    mention_threshold: int = Field(2, ge=1, le=20, alias="INGEST_MENTION_THRESHOLD")
    primary_mention_weight: int = Field(2, ge=1, le=10, alias="INGEST_PRIMARY_MENTION_WEIGHT")
    alias_mention_weight: int = Field(1, ge=1, le=10, alias="INGEST_ALIAS_MENTION_WEIGHT")

    browser_fallback: bool = Field(
        True,
        alias="INGEST_BROWSER_FALLBACK",
        description="Use a headless browser when the aggregator RPC cannot resolve a link.",
    )
    rss_endpoint: str = Field(
        "https://news.google.com/rss/search",
        alias="GOOGLE_NEWS_RSS_ENDPOINT",
        description="Search feed endpoint.",
    )
    user_agent: str = Field("cb-newsfeed-ingest/1.0", alias="INGEST_USER_AGENT")

    @field_validator("database_url")
    @classmethod
    def _validate_database_url(cls, value: str) -> str:
        if "://" not in value:
            raise ValueError("DATABASE_URL은 유효한 DSN 문자열이어야 합니다.")
        return value

    @field_validator("ingest_cron")
    @classmethod
    def _validate_cron(cls, value: str) -> str:
        expression = value.strip()
        if not expression:
            raise ValueError("INGEST_CRON은 공백일 수 없습니다.")
        if not _CRON_PATTERN.match(expression):
            raise ValueError("INGEST_CRON은 5개 필드로 구성되어야 합니다.")
        return expression

    @field_validator("rss_endpoint")
    @classmethod
    def _validate_endpoint(cls, value: str) -> str:
        endpoint = value.strip()
        if not endpoint.startswith(("http://", "https://")):
            raise ValueError("GOOGLE_NEWS_RSS_ENDPOINT는 http(s) URL이어야 합니다.")
        return endpoint

    @property
    def fetch_timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0

    @property
    def job_timeout_seconds(self) -> float:
        return self.job_timeout_ms / 1000.0


@lru_cache()
def get_settings() -> IngestSettings:
    """환경 변수를 기준으로 IngestSettings 인스턴스를 반환한다."""
    try:
        return IngestSettings()
    except ValidationError as exc:
        raise RuntimeError(f"환경 변수 검증에 실패했습니다: {exc}") from exc


def reset_settings_cache() -> None:
    """Settings LRU 캐시를 초기화한다 (테스트 용도)."""
    get_settings.cache_clear()  # type: ignore[attr-defined]
