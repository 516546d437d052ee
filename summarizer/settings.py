"""Settings for the article summarization (OpenAI) client."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SummarySettings(BaseSettings):
    """Environment-driven configuration for summary generation."""

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    openai_api_key: str = Field(..., alias="OPENAI_API_KEY", description="OpenAI API key")
    openai_model: str = Field("gpt-4o-mini", alias="OPENAI_MODEL", description="OpenAI model name")
    max_output_tokens: int = Field(300, ge=1, le=4000, alias="SUMMARY_MAX_OUTPUT_TOKENS")
    temperature: float = Field(0.2, ge=0.0, le=2.0, alias="SUMMARY_TEMPERATURE")
    request_timeout_ms: int = Field(
        12_000,
        ge=1,
        le=120_000,
        alias="SUMMARY_REQUEST_TIMEOUT_MS",
        description="Per-attempt request timeout",
    )
    max_retries: int = Field(2, ge=0, le=5, alias="SUMMARY_MAX_RETRIES", description="Retries after the first attempt")

    @field_validator("openai_api_key")
    @classmethod
    def _non_empty_api_key(cls, v: str) -> str:
        s = v.strip()
        if not s:
            raise ValueError("OPENAI_API_KEY는 공백일 수 없습니다.")
        return s

    @property
    def request_timeout_seconds(self) -> float:
        return self.request_timeout_ms / 1000.0


@lru_cache()
def get_summary_settings() -> SummarySettings:
    try:
        return SummarySettings()
    except ValidationError as exc:
        raise RuntimeError(f"요약 설정 검증 실패: {exc}") from exc


def reset_summary_settings_cache() -> None:
    get_summary_settings.cache_clear()  # type: ignore[attr-defined]
