"""Google News search-feed fetcher."""

from __future__ import annotations

import asyncio
import calendar
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence

import feedparser
import httpx

from newsfeed.errors import FeedFetchError, FeedHTTPError, IngestError
from newsfeed.models.domain import FetchContext, PersonDictionaryEntry
from newsfeed.utils.logging import log_ingest_error

from .base import FeedFetcher

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://news.google.com/rss/search"
DEFAULT_USER_AGENT = "cb-newsfeed-ingest/1.0"
LOCALE_PARAMS = {"hl": "ja", "gl": "JP", "ceid": "JP:ja"}


def build_query(person: PersonDictionaryEntry) -> str:
    """Quoted name/alias terms joined by OR, ANDed with the institution code."""
    terms: Dict[str, None] = {}
    for value in (person.person.name_en, person.person.name_jp, *person.aliases):
        term = (value or "").strip()
        if term:
            terms.setdefault(term, None)
    names_expression = " OR ".join(f'"{term}"' for term in terms)

    code = (person.person.institution_code or "").strip()
    if not code:
        return names_expression
    return f'{names_expression} AND ("{code}")'


def _is_image_mime(value: Optional[str]) -> bool:
    return bool(value) and str(value).startswith("image/")


def _first(value: Any) -> Optional[Mapping[str, Any]]:
    if not value:
        return None
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        return value[0] if value else None
    return value if isinstance(value, Mapping) else None


def select_image_url(entry: Mapping[str, Any]) -> Optional[str]:
    """Lead image from enclosure (must be image/*) or media content (image/* or untyped)."""
    enclosure = _first(entry.get("enclosures"))
    if enclosure is not None:
        href = enclosure.get("href") or enclosure.get("url")
        if href and _is_image_mime(enclosure.get("type")):
            return href

    media = _first(entry.get("media_content")) or _first(entry.get("media_thumbnail"))
    if media is not None:
        url = media.get("url")
        if url and (not media.get("type") or _is_image_mime(media.get("type"))):
            return url
    return None


def parse_published(entry: Mapping[str, Any]) -> Optional[datetime]:
    parsed = entry.get("published_parsed") or entry.get("updated_parsed")
    if not parsed:
        return None
    try:
        return datetime.fromtimestamp(calendar.timegm(parsed), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError):
        return None


class GoogleNewsRssFetcher(FeedFetcher):
    """Search feed fetcher backed by an injected ``httpx.AsyncClient``."""

    source = "google_news"

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        endpoint: str = DEFAULT_ENDPOINT,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._client = client
        self._endpoint = endpoint
        self._user_agent = user_agent

    def build_params(self, person: PersonDictionaryEntry) -> Dict[str, str]:
        return {**LOCALE_PARAMS, "q": build_query(person)}

    async def _fetch_raw(self, person: PersonDictionaryEntry, context: FetchContext) -> List[Mapping[str, Any]]:
        slug = person.person.slug
        params = self.build_params(person)
        try:
            try:
                resp = await self._client.get(
                    self._endpoint,
                    params=params,
                    headers={"User-Agent": self._user_agent},
                    timeout=context.timeout_seconds,
                )
            except httpx.HTTPError as exc:
                raise FeedFetchError(str(exc) or type(exc).__name__, details={"slug": slug, "url": self._endpoint}) from exc

            if not resp.is_success:
                raise FeedHTTPError(resp.status_code, slug)

            feed = await asyncio.to_thread(feedparser.parse, resp.content)
            if feed.get("bozo") and not feed.entries:
                reason = feed.get("bozo_exception")
                raise FeedFetchError(f"unparseable feed: {reason}", details={"slug": slug, "url": str(resp.url)})
        except IngestError as exc:
            log_ingest_error(logger, "ingest.rss.error", exc.code, exc, slug=slug, url=self._endpoint)
            raise

        return [self._entry_to_item(entry) for entry in feed.entries]

    def _entry_to_item(self, entry: Mapping[str, Any]) -> Dict[str, Any]:
        return {
            "link": entry.get("link"),
            "title": entry.get("title"),
            "description": entry.get("summary") or entry.get("description"),
            "image_url": select_image_url(entry),
            "published_at": parse_published(entry),
            "raw": dict(entry),
        }
