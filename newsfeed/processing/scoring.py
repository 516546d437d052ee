"""Weighted mention scoring of article text against a person's names."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Tuple

from newsfeed.models.domain import PersonDictionaryEntry
from newsfeed.utils.text import normalize_for_comparison

PRIMARY_MENTION_WEIGHT = 2
ALIAS_MENTION_WEIGHT = 1


@dataclass(frozen=True)
class MentionPolicy:
    threshold: int = 2
    primary_weight: int = PRIMARY_MENTION_WEIGHT
    alias_weight: int = ALIAS_MENTION_WEIGHT


def build_term_weights(
    terms: Iterable[Tuple[str, int]],
) -> Dict[str, int]:
    """Normalized term → weight, keeping the highest weight for repeated terms."""
    weights: Dict[str, int] = {}
    for value, weight in terms:
        normalized = normalize_for_comparison(value or "")
        if not normalized:
            continue
        if weight > weights.get(normalized, 0):
            weights[normalized] = weight
    return weights


def person_term_weights(person: PersonDictionaryEntry, policy: MentionPolicy) -> Dict[str, int]:
    prioritized = [
        (person.person.name_jp, policy.primary_weight),
        (person.person.name_en, policy.primary_weight),
        *((alias, policy.alias_weight) for alias in person.aliases),
    ]
    return build_term_weights(prioritized)


def count_occurrences(haystack: str, needle: str) -> int:
    """Non-overlapping occurrences of ``needle``."""
    if not needle:
        return 0
    return haystack.count(needle)


def mention_score(normalized_text: str, weights: Dict[str, int]) -> int:
    return sum(count_occurrences(normalized_text, term) * weight for term, weight in weights.items())


def score_person(normalized_text: str, person: PersonDictionaryEntry, policy: MentionPolicy) -> int:
    return mention_score(normalized_text, person_term_weights(person, policy))
