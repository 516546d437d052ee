import logging
import re
from datetime import datetime, timezone

import httpx
import pytest
from ingest_factories import make_person_entry

from newsfeed.connectors.google_news import GoogleNewsRssFetcher, build_query, select_image_url
from newsfeed.errors import FeedFetchError, FeedHTTPError
from newsfeed.models.domain import FetchContext

FEED_URL = re.compile(r"https://news\.google\.com/rss/search\?.*")

RSS_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:media="http://search.yahoo.com/mrss/">
  <channel>
    <title>Google News</title>
    <item>
      <title>Powell signals patience - Nikkei</title>
      <link>https://news.google.com/rss/articles/CBMiAAA?oc=5</link>
      <description>&lt;a href="https://www.nikkei.com/"&gt;Powell&lt;/a&gt; comments</description>
      <pubDate>Tue, 14 Jan 2025 08:00:00 GMT</pubDate>
      <media:content url="https://img.example.com/powell.jpg" medium="image" />
    </item>
    <item>
      <title>Duplicate link</title>
      <link>https://news.google.com/rss/articles/CBMiAAA?oc=5</link>
    </item>
    <item>
      <title>Second story</title>
      <link>https://news.google.com/rss/articles/CBMiBBB?oc=5</link>
    </item>
  </channel>
</rss>
"""

CONTEXT = FetchContext(timeout_seconds=5.0, retry_limit=0)


def test_build_query_quotes_terms_and_adds_institution():
    entry = make_person_entry(aliases=("Jerome Powell", "Jerome H. Powell", " "))

    assert build_query(entry) == (
        '"Jerome H. Powell" OR "ジェローム・パウエル" OR "Jerome Powell" AND ("FRB")'
    )


def test_build_query_without_institution_code():
    entry = make_person_entry(institution_code="", aliases=())

    assert build_query(entry) == '"Jerome H. Powell" OR "ジェローム・パウエル"'


def test_select_image_url_rules():
    assert select_image_url({"enclosures": [{"href": "https://img/a.jpg", "type": "image/jpeg"}]}) == "https://img/a.jpg"
    assert select_image_url({"enclosures": [{"href": "https://cdn/a.mp3", "type": "audio/mpeg"}]}) is None
    assert select_image_url({"media_content": [{"url": "https://img/b.png"}]}) == "https://img/b.png"
    assert select_image_url({"media_thumbnail": [{"url": "https://img/c.png", "type": "image/png"}]}) == (
        "https://img/c.png"
    )
    assert select_image_url({"media_content": [{"url": "https://v/d.mp4", "type": "video/mp4"}]}) is None
    assert select_image_url({}) is None


@pytest.mark.asyncio
async def test_fetch_parses_feed_and_dedupes_links(httpx_mock):
    httpx_mock.add_response(url=FEED_URL, content=RSS_XML, headers={"Content-Type": "application/rss+xml"})
    entry = make_person_entry()

    async with httpx.AsyncClient() as client:
        fetcher = GoogleNewsRssFetcher(client, user_agent="test-agent/1.0")
        candidates = await fetcher.fetch(entry, CONTEXT)

    assert [c.url for c in candidates] == [
        "https://news.google.com/rss/articles/CBMiAAA?oc=5",
        "https://news.google.com/rss/articles/CBMiBBB?oc=5",
    ]
    first = candidates[0]
    assert first.title == "Powell signals patience - Nikkei"
    assert first.source_domain == "news.google.com"
    assert first.image_url == "https://img.example.com/powell.jpg"
    assert first.published_at == datetime(2025, 1, 14, 8, 0, tzinfo=timezone.utc)
    assert first.description and "Powell" in first.description
    assert candidates[1].description is None

    request = httpx_mock.get_requests()[0]
    assert request.url.params["q"] == build_query(entry)
    assert request.url.params["hl"] == "ja"
    assert request.url.params["ceid"] == "JP:ja"
    assert request.headers["User-Agent"] == "test-agent/1.0"


@pytest.mark.asyncio
async def test_fetch_raises_http_error_and_logs(httpx_mock, caplog):
    httpx_mock.add_response(url=FEED_URL, status_code=503)

    async with httpx.AsyncClient() as client:
        fetcher = GoogleNewsRssFetcher(client)
        with pytest.raises(FeedHTTPError) as exc:
            await fetcher.fetch(make_person_entry(), CONTEXT)

    assert exc.value.status == 503
    assert exc.value.code == "RSS_HTTP_ERROR"
    record = next(r for r in caplog.records if r.getMessage() == "ingest.rss.error")
    assert record.levelno == logging.ERROR
    assert record.code == "RSS_HTTP_ERROR"
    assert record.slug == "jerome-h-powell"


@pytest.mark.asyncio
async def test_fetch_wraps_transport_errors(httpx_mock):
    httpx_mock.add_exception(httpx.ConnectError("refused"), url=FEED_URL)

    async with httpx.AsyncClient() as client:
        with pytest.raises(FeedFetchError) as exc:
            await GoogleNewsRssFetcher(client).fetch(make_person_entry(), CONTEXT)

    assert exc.value.code == "RSS_FETCH_FAILED"
    assert "refused" in str(exc.value)


@pytest.mark.asyncio
async def test_feed_is_parsed_off_the_event_loop(httpx_mock, monkeypatch):
    import threading

    import feedparser

    original = feedparser.parse
    threads = []

    def recording_parse(data):
        threads.append(threading.current_thread())
        return original(data)

    monkeypatch.setattr(feedparser, "parse", recording_parse)
    httpx_mock.add_response(url=FEED_URL, content=RSS_XML)

    async with httpx.AsyncClient() as client:
        candidates = await GoogleNewsRssFetcher(client).fetch(make_person_entry(), CONTEXT)

    assert len(candidates) == 2
    assert threads and threads[0] is not threading.main_thread()
