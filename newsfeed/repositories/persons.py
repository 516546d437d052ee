"""Person dictionary queries."""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, List

from sqlalchemy import select
from sqlalchemy.orm import Session

from newsfeed.db.models import Alias, Institution, Person
from newsfeed.models.domain import PersonDictionary, PersonDictionaryEntry, PersonInfo


def load_person_dictionary(session: Session) -> PersonDictionary:
    """Active persons with their aliases, keyed by slug, plus an alias→slug index."""
    stmt = (
        select(Person, Institution)
        .join(Institution, Person.institution_id == Institution.id)
        .where(Person.active.is_(True))
        .order_by(Institution.code, Person.slug)
    )
    rows = session.execute(stmt).all()
    if not rows:
        return PersonDictionary()

    person_ids = [person.id for person, _ in rows]
    aliases: Dict[object, List[str]] = defaultdict(list)
    alias_stmt = select(Alias.person_id, Alias.text).where(Alias.person_id.in_(person_ids)).order_by(Alias.text)
    for person_id, text in session.execute(alias_stmt):
        aliases[person_id].append(text)

    by_slug: Dict[str, PersonDictionaryEntry] = {}
    alias_to_slug: Dict[str, str] = {}
    for person, institution in rows:
        entry = PersonDictionaryEntry(
            person=PersonInfo(
                id=person.id,
                slug=person.slug,
                name_jp=person.name_jp,
                name_en=person.name_en,
                role=person.role,
                active=person.active,
                institution_code=institution.code,
                institution_name_jp=institution.name_jp,
                institution_name_en=institution.name_en,
            ),
            aliases=tuple(aliases.get(person.id, ())),
        )
        by_slug[person.slug] = entry
        for alias in entry.aliases:
            alias_to_slug[alias] = person.slug
        alias_to_slug[person.name_jp] = person.slug
        alias_to_slug[person.name_en] = person.slug

    return PersonDictionary(by_slug=by_slug, alias_to_slug=alias_to_slug)
