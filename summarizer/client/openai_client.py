"""OpenAI 요약 클라이언트 래퍼.

특징
- Responses API(`/v1/responses`) 호출, 응답의 output/content 구조에서 텍스트 추출
- 시도별 타임아웃 + 재시도(maxRetries), 소진 시 None 반환 (예외 없음)
- Provider 주입으로 테스트 시 네트워크/실제 의존성 제거
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

from newsfeed.models.domain import SummaryInput
from newsfeed.utils.logging import format_stack
from summarizer.prompts.templates import build_summary_payload
from summarizer.settings import SummarySettings, get_summary_settings

logger = logging.getLogger(__name__)


class SummaryError(Exception):
    """요약 호출 관련 기본 오류."""


class SummaryHTTPStatusError(SummaryError):
    """Non-2xx response from the summarization endpoint."""

    def __init__(self, status_code: int, message: str = "") -> None:
        super().__init__(message or f"summary endpoint returned status {status_code}")
        self.status_code = status_code


ProviderFn = Callable[[Dict[str, Any]], Awaitable[Mapping[str, Any]]]


def _text_value(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping) and isinstance(value.get("value"), str):
        return value["value"]
    return None


def extract_output_text(data: Mapping[str, Any]) -> Optional[str]:
    """output[].content[].text (문자열 또는 {value}) → 최초의 비어있지 않은 값, 없으면 output_text."""
    outputs = data.get("output") if isinstance(data, Mapping) else None
    for output in outputs if isinstance(outputs, list) else []:
        contents = output.get("content") if isinstance(output, Mapping) else None
        for content in contents if isinstance(contents, list) else []:
            if not isinstance(content, Mapping):
                continue
            text = _text_value(content.get("text"))
            if text is not None and text.strip():
                return text.strip()
    flat = data.get("output_text") if isinstance(data, Mapping) else None
    if isinstance(flat, str) and flat.strip():
        return flat.strip()
    return None


@dataclass(frozen=True)
class SummaryClient:
    settings: SummarySettings
    provider: Optional[ProviderFn] = None
    _sdk_client: Any = field(default=None, init=False, repr=False, compare=False)

    @classmethod
    def from_env(cls, provider: Optional[ProviderFn] = None) -> "SummaryClient":
        return cls(get_summary_settings(), provider=provider)

    def _get_sdk_client(self) -> Any:
        # 지연 import: 테스트에선 provider 주입
        if self._sdk_client is None:
            from openai import AsyncOpenAI

            client = AsyncOpenAI(
                api_key=self.settings.openai_api_key,
                max_retries=0,
                timeout=self.settings.request_timeout_seconds,
            )
            object.__setattr__(self, "_sdk_client", client)
        return self._sdk_client

    def _get_provider(self) -> ProviderFn:
        if self.provider is not None:
            return self.provider
        from openai import APIStatusError

        client = self._get_sdk_client()

        async def _call(payload: Dict[str, Any]) -> Mapping[str, Any]:
            try:
                resp = await client.responses.create(**payload)
            except APIStatusError as exc:
                raise SummaryHTTPStatusError(exc.status_code, str(exc)) from exc
            return resp.model_dump()

        return _call

    async def aclose(self) -> None:
        """SDK 클라이언트(연결 풀) 해제. 다음 호출 시 새로 생성된다."""
        client = self._sdk_client
        if client is None:
            return
        object.__setattr__(self, "_sdk_client", None)
        await client.close()

    def _build_payload(self, inp: SummaryInput) -> Dict[str, Any]:
        return build_summary_payload(
            inp,
            model=self.settings.openai_model,
            max_output_tokens=self.settings.max_output_tokens,
            temperature=self.settings.temperature,
        )

    async def generate_summary(self, inp: SummaryInput) -> Optional[str]:
        payload = self._build_payload(inp)
        provider = self._get_provider()
        timeout = self.settings.request_timeout_seconds

        attempt = 0
        while attempt <= int(self.settings.max_retries):
            try:
                data = await asyncio.wait_for(provider(payload), timeout=timeout)
                text = extract_output_text(data)
                if text:
                    return text
                logger.error(
                    "ingest.summary.empty",
                    extra={"code": "SUMMARY_EMPTY_RESPONSE", "attempt": attempt, "url": inp.url},
                )
            except SummaryHTTPStatusError as exc:
                logger.error(
                    "ingest.summary.http_error",
                    extra={"code": "SUMMARY_HTTP_ERROR", "status": exc.status_code, "attempt": attempt, "url": inp.url},
                )
            except Exception as exc:  # 재시도 대상
                logger.error(
                    "ingest.summary.error",
                    extra={
                        "code": "SUMMARY_REQUEST_ERROR",
                        "attempt": attempt,
                        "url": inp.url,
                        "error": str(exc) or type(exc).__name__,
                        "stack": format_stack(exc),
                    },
                )
            attempt += 1

        logger.error(
            "ingest.summary.max_retries",
            extra={"code": "SUMMARY_MAX_RETRIES", "attempts": attempt, "url": inp.url},
        )
        return None
