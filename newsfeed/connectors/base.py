"""Feed fetcher abstraction and entry normalization helpers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional

from newsfeed.models.domain import FetchContext, PersonDictionaryEntry, RssArticleCandidate
from newsfeed.utils.urls import source_domain


class FeedFetcher(ABC):
    """Abstract per-person feed fetcher.

    Subclasses return raw entry mappings; this base turns them into
    candidates (one per unique link). Fetchers never retry on their own.
    """

    source: str

    async def fetch(self, person: PersonDictionaryEntry, context: FetchContext) -> List[RssArticleCandidate]:
        raw = await self._fetch_raw(person, context)
        return self._normalize_and_dedupe(raw)

    @abstractmethod
    async def _fetch_raw(self, person: PersonDictionaryEntry, context: FetchContext) -> List[Mapping[str, Any]]:
        """Return a list of raw entry mappings from the upstream."""

    def _normalize_and_dedupe(self, items: Iterable[Mapping[str, Any]]) -> List[RssArticleCandidate]:
        seen: set[str] = set()
        normalized: List[RssArticleCandidate] = []
        now = datetime.now(timezone.utc)
        for item in items:
            link = item.get("link")
            if not isinstance(link, str) or not link:
                continue
            if link in seen:
                continue
            seen.add(link)
            normalized.append(self._normalize_item(link, item, now))
        return normalized

    def _normalize_item(self, link: str, item: Mapping[str, Any], fetched_at: datetime) -> RssArticleCandidate:
        title = item.get("title")
        description = item.get("description")
        return RssArticleCandidate(
            url=link,
            source_domain=source_domain(link),
            title=title if isinstance(title, str) and title else link,
            description=description if isinstance(description, str) and description else None,
            image_url=self._image_url(item),
            published_at=self._published_at(item),
            fetched_at=fetched_at,
            raw=item.get("raw", item),
        )

    def _image_url(self, item: Mapping[str, Any]) -> Optional[str]:
        value = item.get("image_url")
        return value if isinstance(value, str) and value else None

    def _published_at(self, item: Mapping[str, Any]) -> Optional[datetime]:
        value = item.get("published_at")
        if isinstance(value, datetime):
            return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        return None
