"""Domain DTOs for the ingestion pipeline."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterator, Literal, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

ResolveMethod = Literal["batchexecute", "playwright", "fallback"]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class PersonInfo(_Frozen):
    id: uuid.UUID
    slug: str
    name_jp: str
    name_en: str
    role: str
    active: bool = True
    institution_code: str
    institution_name_jp: str
    institution_name_en: str


class PersonDictionaryEntry(_Frozen):
    """A tracked official and the alias strings used to find them in text."""

    person: PersonInfo
    aliases: Tuple[str, ...] = ()


class PersonDictionary(_Frozen):
    """Snapshot of active persons, read-only for the duration of a job run."""

    by_slug: Dict[str, PersonDictionaryEntry] = Field(default_factory=dict)
    alias_to_slug: Dict[str, str] = Field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.by_slug)

    def entries(self) -> Iterator[PersonDictionaryEntry]:
        return iter(self.by_slug.values())


class RssArticleCandidate(_Frozen):
    """One raw feed entry, prior to extraction or relevance filtering."""

    url: str
    source_domain: str
    title: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    published_at: Optional[datetime] = None
    fetched_at: datetime
    raw: Any = None


class LinkedPerson(_Frozen):
    id: uuid.UUID
    slug: str


class ArticleDraft(_Frozen):
    """Persistence-ready article without a summary."""

    url: str
    source_domain: str
    title: str
    description: Optional[str] = None
    content: str
    content_hash: Optional[str] = None
    image_url: Optional[str] = None
    published_at: Optional[datetime] = None
    fetched_at: datetime
    persons: Tuple[LinkedPerson, ...] = ()

    def with_summary(self, summary_text: Optional[str]) -> "ArticleSaveInput":
        data = self.model_dump()
        data["summary_text"] = summary_text
        return ArticleSaveInput(**data)


class ArticleSaveInput(ArticleDraft):
    summary_text: Optional[str] = None


class SummaryPerson(_Frozen):
    slug: str
    name_jp: str
    name_en: str
    institution_code: str


class SummaryInput(_Frozen):
    title: str
    content: str
    url: str
    persons: Tuple[SummaryPerson, ...] = ()


class ProcessedArticle(_Frozen):
    draft: ArticleDraft
    summary_input: SummaryInput


class ExtractedContent(_Frozen):
    """Normalized extractor output."""

    content: Optional[str] = None
    text: Optional[str] = None
    image_url: Optional[str] = None

    @property
    def body(self) -> Optional[str]:
        if self.content is not None:
            return self.content
        return self.text

    @property
    def image(self) -> Optional[str]:
        if self.image_url is None:
            return None
        trimmed = self.image_url.strip()
        return trimmed or None


ExtractorResult = Union[ExtractedContent, Mapping[str, Any], str, None]


def coerce_extracted(result: ExtractorResult) -> Optional[ExtractedContent]:
    """Fold the shapes an extractor may hand back into ``ExtractedContent``."""
    if result is None:
        return None
    if isinstance(result, ExtractedContent):
        return result
    if isinstance(result, str):
        return ExtractedContent(content=result)
    if isinstance(result, Mapping):
        def _str_or_none(key: str, *alternatives: str) -> Optional[str]:
            for name in (key, *alternatives):
                value = result.get(name)
                if isinstance(value, str):
                    return value
            return None

        return ExtractedContent(
            content=_str_or_none("content"),
            text=_str_or_none("text"),
            image_url=_str_or_none("image_url", "imageUrl"),
        )
    raise TypeError(f"unsupported extractor result: {type(result).__name__}")


class ResolveResult(_Frozen):
    url: str
    method: ResolveMethod


class DuplicateMarker(_Frozen):
    status: Literal["duplicate"] = "duplicate"
    article_id: uuid.UUID


class SaveOutcome(_Frozen):
    status: Literal["duplicate", "inserted"]
    article_id: uuid.UUID


@dataclass
class IngestStats:
    fetched: int = 0
    inserted: int = 0
    deduped: int = 0
    skipped: int = 0
    errors: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {
            "fetched": self.fetched,
            "inserted": self.inserted,
            "deduped": self.deduped,
            "skipped": self.skipped,
            "errors": self.errors,
        }


@dataclass
class IngestResult:
    job_id: uuid.UUID
    stats: IngestStats = field(default_factory=IngestStats)
    error_code: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error_code is not None


@dataclass(frozen=True)
class FetchContext:
    timeout_seconds: float
    retry_limit: int


@dataclass(frozen=True)
class ProcessContext:
    person: PersonDictionaryEntry
    job_id: Optional[uuid.UUID] = None
