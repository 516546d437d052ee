"""HTTP content extractor for arbitrary article pages."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Set, Tuple

import httpx
import trafilatura

from newsfeed.models.domain import ExtractedContent
from newsfeed.utils.text import has_sufficient_content

from .html import (
    extract_article_section,
    extract_primary_image,
    find_read_more_url,
    limit_length,
    sanitize_content,
    strip_html,
)

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "cb-newsfeed-ingest/1.0"
ACCEPT_HTML = "text/html,application/xhtml+xml"
MIN_TIMEOUT_SECONDS = 5.0
MAX_TIMEOUT_SECONDS = 15.0
FALLBACK_LENGTH_ADVANTAGE = 200


@dataclass(frozen=True)
class GenericExtraction:
    content: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None


ArticleExtractor = Callable[[str, str], Optional[GenericExtraction]]


def extract_with_trafilatura(html: str, url: str) -> Optional[GenericExtraction]:
    """Generic article heuristic (trafilatura JSON output with metadata)."""
    raw = trafilatura.extract(html, url=url, output_format="json", with_metadata=True)
    if not raw:
        return None
    data = json.loads(raw)
    return GenericExtraction(
        content=data.get("text") or data.get("raw_text"),
        description=data.get("description") or data.get("excerpt"),
        image=data.get("image"),
    )


@dataclass
class _PrimaryAttempt:
    html: Optional[str] = None
    content: Optional[str] = None
    image_url: Optional[str] = None


def _strip(value: Optional[str]) -> str:
    return value.strip() if value else ""


class HttpContentExtractor:
    """Callable extractor; ``await extractor(url)`` never raises.

    Returns ``None`` when the page could not be fetched at all.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        timeout_seconds: float,
        user_agent: str = DEFAULT_USER_AGENT,
        article_extractor: ArticleExtractor = extract_with_trafilatura,
    ) -> None:
        self._client = client
        self._timeout = max(MIN_TIMEOUT_SECONDS, min(timeout_seconds, MAX_TIMEOUT_SECONDS))
        self._headers = {"User-Agent": user_agent, "Accept": ACCEPT_HTML}
        self._article_extractor = article_extractor

    @property
    def timeout_seconds(self) -> float:
        return self._timeout

    async def __call__(self, url: str) -> Optional[ExtractedContent]:
        return await self.extract(url)

    async def extract(self, url: str) -> Optional[ExtractedContent]:
        try:
            return await self._extract(url)
        except Exception as exc:  # untrusted HTML must not break the pipeline
            logger.error("content.extractor.failed", extra={"url": url, "error": str(exc) or type(exc).__name__})
            return None

    async def _extract(self, url: str) -> Optional[ExtractedContent]:
        visited: Set[str] = set()

        primary = await self._attempt_primary(url, visited)
        if primary.html is None and primary.content is None:
            return None

        primary_limited = limit_length(primary.content)

        fallback: Optional[ExtractedContent] = None
        if primary.html is not None:
            fallback = await self._follow_read_more(url, primary.html, visited)

        fallback_content = fallback.content if fallback is not None else None
        fallback_image = fallback.image_url if fallback is not None else None

        if fallback_content:
            primary_len = len(primary_limited or "")
            if (
                not primary_limited
                or not has_sufficient_content(primary_limited, normalize=False)
                or len(fallback_content) > primary_len + FALLBACK_LENGTH_ADVANTAGE
            ):
                return self._build(fallback_content, fallback_image or primary.image_url)

        if has_sufficient_content(primary_limited, normalize=False):
            return self._build(primary_limited, primary.image_url)

        if fallback_content and has_sufficient_content(fallback_content, normalize=False):
            return self._build(fallback_content, fallback_image or primary.image_url)

        return self._build(primary_limited, primary.image_url)

    async def _fetch_page(self, url: str) -> Optional[str]:
        try:
            resp = await self._client.get(url, headers=self._headers, timeout=self._timeout, follow_redirects=True)
        except httpx.HTTPError as exc:
            logger.error("content.extractor.failed", extra={"url": url, "error": str(exc) or type(exc).__name__})
            return None
        if not resp.is_success:
            logger.info("content.extractor.http_status", extra={"url": url, "status": resp.status_code})
            return None
        return resp.text

    async def _generic_extract(self, html: str, url: str) -> Optional[GenericExtraction]:
        try:
            return await asyncio.to_thread(self._article_extractor, html, url)
        except Exception as exc:  # third-party heuristics on untrusted HTML
            logger.info("content.extractor.generic_failed", extra={"url": url, "error": str(exc)})
            return None

    async def _attempt_primary(self, url: str, visited: Set[str]) -> _PrimaryAttempt:
        key = _visit_key(url)
        if key in visited:
            return _PrimaryAttempt()
        visited.add(key)

        html = await self._fetch_page(url)
        if html is None:
            return _PrimaryAttempt()

        generic = await self._generic_extract(html, url)
        primary_candidate, section_text, page_image = await asyncio.to_thread(_scan_page, html, generic)
        if primary_candidate and section_text:
            combined = primary_candidate if len(primary_candidate) >= len(section_text) else section_text
        else:
            combined = primary_candidate or section_text or None

        image_url = (generic.image if generic is not None else None) or page_image
        return _PrimaryAttempt(html=html, content=combined, image_url=image_url)

    async def _follow_read_more(self, base_url: str, html: str, visited: Set[str]) -> Optional[ExtractedContent]:
        next_url = await asyncio.to_thread(find_read_more_url, html, base_url)
        if not next_url:
            return None
        key = _visit_key(next_url)
        if key in visited:
            return None
        visited.add(key)

        next_html = await self._fetch_page(next_url)
        if next_html is None:
            return None

        text, next_image = await asyncio.to_thread(_scan_read_more_page, next_html)
        if not has_sufficient_content(text, normalize=False):
            return None
        limited = limit_length(text)
        if not limited:
            return None
        return ExtractedContent(content=limited, text=limited, image_url=next_image)

    @staticmethod
    def _build(content: Optional[str], image_url: Optional[str]) -> ExtractedContent:
        limited = limit_length(content)
        return ExtractedContent(content=limited, text=limited, image_url=_strip(image_url) or None)


def _visit_key(url: str) -> str:
    try:
        return str(httpx.URL(url))
    except (httpx.InvalidURL, TypeError, ValueError):
        return url


# BeautifulSoup passes run off the event loop (see ``asyncio.to_thread`` callers).
def _scan_page(
    html: str, generic: Optional[GenericExtraction]
) -> Tuple[Optional[str], Optional[str], Optional[str]]:
    candidate = None
    if generic is not None:
        candidate = sanitize_content(generic.content) or sanitize_content(generic.description)
    section = extract_article_section(html)
    section_text = strip_html(section) if section else None
    return candidate, section_text, extract_primary_image(html)


def _scan_read_more_page(html: str) -> Tuple[str, Optional[str]]:
    section = extract_article_section(html) or html
    return strip_html(section), extract_primary_image(html)
