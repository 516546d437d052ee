import logging
import uuid
from datetime import datetime, timezone

import pytest
from ingest_factories import FETCHED_AT
from sqlalchemy import func, select

from newsfeed.db.models import Article, ArticlePerson, IngestJobRun, JobStatus, Summary
from newsfeed.db.seed import seed_reference_data
from newsfeed.db.seed_data import InstitutionSeed, PersonSeed
from newsfeed.db.session import get_sessionmaker, init_db, reset_engine, transaction
from newsfeed.models.domain import ArticleDraft, IngestStats, LinkedPerson
from newsfeed.repositories.articles import replace_person_links
from newsfeed.services.persistence import PersistenceGateway
from newsfeed.settings import IngestSettings

PERSON_A = uuid.UUID("00000000-0000-0000-0000-00000000000a")
PERSON_B = uuid.UUID("00000000-0000-0000-0000-00000000000b")


@pytest.fixture
def session_factory(tmp_path):
    reset_engine()
    settings = IngestSettings(database_url=f"sqlite:///{tmp_path / 'newsfeed.db'}")
    init_db(settings)
    yield get_sessionmaker(settings)
    reset_engine()


@pytest.fixture
def gateway(session_factory):
    return PersistenceGateway(session_factory)


def _draft(url="https://www.example.com/news/1", content_hash="hash-1", persons=(PERSON_A,)):
    return ArticleDraft(
        url=url,
        source_domain="www.example.com",
        title="Fed holds",
        description="desc",
        content="body text",
        content_hash=content_hash,
        image_url=None,
        published_at=datetime(2025, 1, 14, tzinfo=timezone.utc),
        fetched_at=FETCHED_AT,
        persons=tuple(LinkedPerson(id=pid, slug=f"p-{i}") for i, pid in enumerate(persons)),
    )


def _count(session_factory, model):
    with transaction(session_factory) as session:
        return session.execute(select(func.count()).select_from(model)).scalar_one()


def test_save_article_inserts_summary_and_links(gateway, session_factory):
    outcome = gateway.save_article_result(_draft(persons=(PERSON_A, PERSON_B, PERSON_A)).with_summary("要約"))

    assert outcome.status == "inserted"
    with transaction(session_factory) as session:
        article = session.get(Article, outcome.article_id)
        assert article is not None
        assert article.url_normalized == "https://www.example.com/news/1"
        summary = session.execute(select(Summary).where(Summary.article_id == outcome.article_id)).scalar_one()
        assert summary.text == "要約"
        links = session.execute(select(ArticlePerson.person_id)).scalars().all()
        assert sorted(links) == sorted([PERSON_A, PERSON_B])


def test_save_without_summary_text_skips_summary_row(gateway, session_factory):
    outcome = gateway.save_article_result(_draft().with_summary(None))

    assert outcome.status == "inserted"
    assert _count(session_factory, Summary) == 0


def test_is_duplicate_article_by_normalized_url_or_hash(gateway):
    saved = gateway.save_article_result(_draft().with_summary("s"))

    by_url = gateway.is_duplicate_article("https://WWW.example.com/news/1/?utm_source=rss#frag", "other-hash")
    by_hash = gateway.is_duplicate_article("https://other.example.com/x", "hash-1")

    assert by_url is not None and by_url.article_id == saved.article_id
    assert by_hash is not None and by_hash.article_id == saved.article_id
    assert gateway.is_duplicate_article("https://other.example.com/x", None) is None


def test_save_returns_duplicate_without_touching_existing_rows(gateway, session_factory):
    first = gateway.save_article_result(_draft(persons=(PERSON_A,)).with_summary("original"))

    second = gateway.save_article_result(
        _draft(url="https://www.example.com/news/1?utm_medium=x", content_hash="hash-2", persons=(PERSON_B,)).with_summary(
            "replacement"
        )
    )

    assert second.status == "duplicate"
    assert second.article_id == first.article_id
    with transaction(session_factory) as session:
        summary = session.execute(select(Summary)).scalar_one()
        assert summary.text == "original"
        assert session.execute(select(ArticlePerson.person_id)).scalars().all() == [PERSON_A]
    assert _count(session_factory, Article) == 1


def test_losing_writer_reports_winner_id(gateway, session_factory, monkeypatch, caplog):
    winner = gateway.save_article_result(_draft().with_summary("winner"))
    # precheck misses, as it would for a writer that checked before the winner committed
    monkeypatch.setattr(gateway, "is_duplicate_article", lambda url, content_hash=None: None)

    with caplog.at_level(logging.INFO):
        loser = gateway.save_article_result(
            _draft(url="https://www.example.com/news/1/", content_hash="hash-9", persons=(PERSON_B,)).with_summary(
                "loser"
            )
        )

    assert loser.status == "duplicate"
    assert loser.article_id == winner.article_id
    assert _count(session_factory, Article) == 1
    assert any(r.getMessage() == "ingest.article.race_lost" for r in caplog.records)
    with transaction(session_factory) as session:
        assert session.execute(select(Summary.text)).scalar_one() == "winner"
        assert session.execute(select(ArticlePerson.person_id)).scalars().all() == [PERSON_A]


def test_losing_writer_on_content_hash(gateway, monkeypatch):
    winner = gateway.save_article_result(_draft().with_summary("winner"))
    monkeypatch.setattr(gateway, "is_duplicate_article", lambda url, content_hash=None: None)

    loser = gateway.save_article_result(_draft(url="https://mirror.example.org/copy").with_summary("loser"))

    assert loser.status == "duplicate"
    assert loser.article_id == winner.article_id


def test_replace_person_links_is_exact(gateway, session_factory):
    saved = gateway.save_article_result(_draft(persons=(PERSON_A, PERSON_B)).with_summary("s"))

    with transaction(session_factory) as session:
        assert replace_person_links(session, saved.article_id, [PERSON_B, PERSON_B]) == 1

    with transaction(session_factory) as session:
        assert session.execute(select(ArticlePerson.person_id)).scalars().all() == [PERSON_B]


def test_job_run_lifecycle(gateway, session_factory):
    started = datetime(2025, 1, 18, 9, 0, tzinfo=timezone.utc)
    job_id = gateway.record_job_start(started)

    with transaction(session_factory) as session:
        job = session.get(IngestJobRun, job_id)
        assert job.status == JobStatus.RUNNING
        assert (job.fetched, job.inserted, job.deduped, job.skipped, job.errors) == (0, 0, 0, 0, 0)
        assert job.finished_at is None

    gateway.complete_job_run(job_id, IngestStats(fetched=4, inserted=2, deduped=1, skipped=1, errors=0))

    with transaction(session_factory) as session:
        job = session.get(IngestJobRun, job_id)
        assert job.status == JobStatus.SUCCEEDED
        assert (job.fetched, job.inserted, job.deduped, job.skipped) == (4, 2, 1, 1)
        assert job.finished_at is not None


def test_failed_job_run_stores_code(gateway, session_factory):
    job_id = gateway.record_job_start()

    gateway.complete_job_run(
        job_id,
        IngestStats(errors=1),
        error_code="INGEST_JOB_FAILED",
        error_message="x" * 600,
    )

    with transaction(session_factory) as session:
        job = session.get(IngestJobRun, job_id)
        assert job.status == JobStatus.FAILED
        assert job.error_code == "INGEST_JOB_FAILED"
        assert len(job.error_message) == 512


def test_complete_unknown_job_raises(gateway):
    with pytest.raises(LookupError):
        gateway.complete_job_run(uuid.uuid4(), IngestStats())


def test_load_person_dictionary_only_active(gateway, session_factory):
    with transaction(session_factory) as session:
        seed_reference_data(
            session,
            institutions=(InstitutionSeed("BOJ", "日本銀行", "Bank of Japan"),),
            persons=(
                PersonSeed("BOJ", "kazuo-ueda", "植田 和男", "Kazuo Ueda", "総裁"),
                PersonSeed("BOJ", "retired-member", "退任 委員", "Retired Member", "審議委員", active=False),
            ),
            aliases={"kazuo-ueda": ["植田総裁", "Kazuo Ueda", "日銀総裁"]},
        )

    dictionary = gateway.load_person_dictionary()

    assert list(dictionary.by_slug) == ["kazuo-ueda"]
    entry = dictionary.by_slug["kazuo-ueda"]
    assert entry.person.institution_code == "BOJ"
    assert entry.person.institution_name_en == "Bank of Japan"
    assert set(entry.aliases) == {"植田総裁", "Kazuo Ueda", "日銀総裁"}
    assert dictionary.alias_to_slug["植田総裁"] == "kazuo-ueda"
    assert dictionary.alias_to_slug["植田 和男"] == "kazuo-ueda"
    assert "Retired Member" not in dictionary.alias_to_slug
