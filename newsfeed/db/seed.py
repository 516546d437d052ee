"""Idempotent seeding of institutions, persons and aliases."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from newsfeed.db.models import Alias, Institution, Person
from newsfeed.db.seed_data import ALIASES, INSTITUTIONS, PERSONS, InstitutionSeed, PersonSeed

logger = logging.getLogger(__name__)


def _clean_aliases(texts: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(t.strip() for t in texts if t and t.strip()))


def seed_reference_data(
    session: Session,
    *,
    institutions: Sequence[InstitutionSeed] = INSTITUTIONS,
    persons: Sequence[PersonSeed] = PERSONS,
    aliases: Mapping[str, Sequence[str]] = ALIASES,
) -> Dict[str, int]:
    """Upsert institutions by code and persons by slug; replace each person's alias set."""
    by_code: Dict[str, Institution] = {}
    for item in institutions:
        inst = session.execute(select(Institution).where(Institution.code == item.code)).scalar_one_or_none()
        if inst is None:
            inst = Institution(code=item.code, name_jp=item.name_jp, name_en=item.name_en)
            session.add(inst)
        else:
            inst.name_jp = item.name_jp
            inst.name_en = item.name_en
        by_code[item.code] = inst
    session.flush()

    alias_count = 0
    for item in persons:
        inst = by_code.get(item.institution_code)
        if inst is None:
            inst = session.execute(
                select(Institution).where(Institution.code == item.institution_code)
            ).scalar_one()
        person = session.execute(select(Person).where(Person.slug == item.slug)).scalar_one_or_none()
        if person is None:
            person = Person(slug=item.slug)
            session.add(person)
        person.name_jp = item.name_jp
        person.name_en = item.name_en
        person.role = item.role
        person.active = item.active
        person.institution_id = inst.id
        session.flush()

        session.execute(delete(Alias).where(Alias.person_id == person.id))
        for text in _clean_aliases(aliases.get(item.slug, ())):
            session.add(Alias(person_id=person.id, text=text))
            alias_count += 1
        session.flush()

    counts = {"institutions": len(institutions), "persons": len(persons), "aliases": alias_count}
    logger.info("seed.complete", extra=counts)
    return counts
