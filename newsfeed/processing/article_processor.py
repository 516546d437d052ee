"""Turn a feed candidate into a persistence-ready draft, or reject it."""

from __future__ import annotations

import hashlib
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from newsfeed.models.domain import (
    ArticleDraft,
    LinkedPerson,
    PersonDictionaryEntry,
    ProcessContext,
    ProcessedArticle,
    RssArticleCandidate,
    SummaryInput,
    SummaryPerson,
    coerce_extracted,
)
from newsfeed.models.ports import ContentExtractor, UrlResolver
from newsfeed.utils.text import clean_whitespace, has_sufficient_content, normalize_for_comparison
from newsfeed.utils.urls import source_domain

from .scoring import MentionPolicy, score_person

logger = logging.getLogger(__name__)


def compute_content_hash(normalized_text: str) -> str:
    return hashlib.sha256(normalized_text.encode("utf-8")).hexdigest()


class ArticleProcessorImpl:
    """resolve → extract → clean → sufficiency → mention score → hash → draft."""

    def __init__(
        self,
        *,
        content_extractor: ContentExtractor,
        resolve_url: UrlResolver,
        policy: Optional[MentionPolicy] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._extract = content_extractor
        self._resolve = resolve_url
        self._policy = policy or MentionPolicy()
        self._clock = clock

    @property
    def policy(self) -> MentionPolicy:
        return self._policy

    async def process(
        self,
        candidate: RssArticleCandidate,
        person: PersonDictionaryEntry,
        context: ProcessContext,
    ) -> Optional[ProcessedArticle]:
        slug = person.person.slug
        job_id = str(context.job_id) if context.job_id else None

        resolution = await self._resolve(candidate.url)
        resolved_url = resolution.url or candidate.url

        extracted = coerce_extracted(await self._extract(resolved_url))
        body = extracted.body if extracted is not None else None
        text_raw = body if body is not None else (candidate.description or "")
        cleaned = clean_whitespace(text_raw)
        image_url = (extracted.image if extracted is not None else None) or candidate.image_url

        if not has_sufficient_content(cleaned):
            logger.info(
                "ingest.article.skipped",
                extra={"slug": slug, "reason": "insufficient_content", "url": resolved_url, "job_id": job_id},
            )
            return None

        normalized = normalize_for_comparison(cleaned)
        score = score_person(normalized, person, self._policy)
        if score < self._policy.threshold:
            logger.info(
                "ingest.article.skipped",
                extra={
                    "slug": slug,
                    "reason": "insufficient_mentions",
                    "mentions": score,
                    "threshold": self._policy.threshold,
                    "url": resolved_url,
                    "job_id": job_id,
                },
            )
            return None

        draft = ArticleDraft(
            url=resolved_url,
            source_domain=source_domain(resolved_url, candidate.source_domain),
            title=candidate.title,
            description=candidate.description,
            content=cleaned,
            content_hash=compute_content_hash(normalized),
            image_url=image_url,
            published_at=candidate.published_at,
            fetched_at=candidate.fetched_at or self._clock(),
            persons=(LinkedPerson(id=person.person.id, slug=slug),),
        )
        summary_input = SummaryInput(
            title=candidate.title,
            content=cleaned,
            url=resolved_url,
            persons=(
                SummaryPerson(
                    slug=slug,
                    name_jp=person.person.name_jp,
                    name_en=person.person.name_en,
                    institution_code=person.person.institution_code,
                ),
            ),
        )
        return ProcessedArticle(draft=draft, summary_input=summary_input)
