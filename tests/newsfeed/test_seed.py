import pytest
from sqlalchemy import func, select

from newsfeed.db.models import Alias, Institution, Person
from newsfeed.db.seed import seed_reference_data
from newsfeed.db.seed_data import ALIASES, INSTITUTIONS, PERSONS, InstitutionSeed, PersonSeed
from newsfeed.db.session import get_sessionmaker, init_db, reset_engine, transaction
from newsfeed.settings import IngestSettings


@pytest.fixture
def session_factory(tmp_path):
    reset_engine()
    settings = IngestSettings(database_url=f"sqlite:///{tmp_path / 'seed.db'}")
    init_db(settings)
    yield get_sessionmaker(settings)
    reset_engine()


def _count(session, model):
    return session.execute(select(func.count()).select_from(model)).scalar_one()


def test_reference_data_is_consistent():
    codes = {i.code for i in INSTITUTIONS}
    slugs = [p.slug for p in PERSONS]

    assert codes == {"FRB", "ECB", "BOJ", "BoE", "SNB"}
    assert len(slugs) == len(set(slugs))
    assert all(p.institution_code in codes for p in PERSONS)
    assert set(ALIASES) <= set(slugs)


def test_seed_is_idempotent(session_factory):
    with transaction(session_factory) as session:
        first = seed_reference_data(session)
    with transaction(session_factory) as session:
        second = seed_reference_data(session)

    assert first == second
    assert first["institutions"] == 5
    assert first["persons"] == len(PERSONS)
    with transaction(session_factory) as session:
        assert _count(session, Institution) == 5
        assert _count(session, Person) == len(PERSONS)
        assert _count(session, Alias) == first["aliases"]
        powell = session.execute(select(Person).where(Person.slug == "jerome-h-powell")).scalar_one()
        assert powell.name_en == "Jerome H. Powell"
        assert powell.active is True


def test_seed_replaces_alias_set_and_updates_person(session_factory):
    institutions = (InstitutionSeed("SNB", "スイス国立銀行", "Swiss National Bank"),)
    with transaction(session_factory) as session:
        seed_reference_data(
            session,
            institutions=institutions,
            persons=(PersonSeed("SNB", "martin-schlegel", "マーティン・シュレーゲル", "Martin Schlegel", "副総裁"),),
            aliases={"martin-schlegel": ["Martin Schlegel", "SNB副総裁"]},
        )
    with transaction(session_factory) as session:
        counts = seed_reference_data(
            session,
            institutions=institutions,
            persons=(PersonSeed("SNB", "martin-schlegel", "マーティン・シュレーゲル", "Martin Schlegel", "総裁"),),
            aliases={"martin-schlegel": [" SNB総裁 ", "SNB総裁", "", "Martin Schlegel"]},
        )

    assert counts["aliases"] == 2
    with transaction(session_factory) as session:
        person = session.execute(select(Person)).scalar_one()
        assert person.role == "総裁"
        texts = session.execute(select(Alias.text).order_by(Alias.text)).scalars().all()
        assert texts == sorted(["SNB総裁", "Martin Schlegel"])
