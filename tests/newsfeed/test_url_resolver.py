import json
import re
from urllib.parse import unquote

import httpx
import pytest

from newsfeed.connectors.resolver import (
    BATCHEXECUTE_ENDPOINT,
    GoogleNewsUrlResolver,
    build_batchexecute_body,
    extract_token,
    is_aggregator_url,
    parse_batchexecute_response,
)

AGGREGATOR_URL = "https://news.google.com/rss/articles/CBMiTOKEN123?oc=5"
PUBLISHER_URL = "https://www.nikkei.com/article/DGXZQOUB000001/"
META_URL = re.compile(r"https://news\.google\.com/articles/CBMiTOKEN123.*")
META_HTML = '<div jscontroller="x" data-n-a-sg="SIGNATURE" data-n-a-ts="1736900000"></div>'


def _rpc_response(url):
    inner = json.dumps(["garturlres", url, 1])
    return ")]}'\n\n" + json.dumps([["wrb.fr", "Fbv4je", inner, None, None, None, "generic"]])


def _browser(result=None, error=None):
    calls = []

    async def browser(url):
        calls.append(url)
        if error is not None:
            raise error
        return result

    browser.calls = calls  # type: ignore[attr-defined]
    return browser


def test_aggregator_detection_and_token():
    assert is_aggregator_url(AGGREGATOR_URL)
    assert not is_aggregator_url(PUBLISHER_URL)
    assert extract_token(AGGREGATOR_URL) == "CBMiTOKEN123"
    assert extract_token(PUBLISHER_URL) is None


def test_build_batchexecute_body_embeds_token_and_signature():
    body = build_batchexecute_body("CBMiTOKEN123", "1736900000", "SIGNATURE")

    assert body.startswith("f.req=")
    decoded = json.loads(unquote(body[len("f.req="):]))
    inner = json.loads(decoded[0][0][1])
    assert inner[0] == "garturlreq"
    assert inner[2:] == ["CBMiTOKEN123", "1736900000", "SIGNATURE"]


def test_parse_batchexecute_response_variants():
    assert parse_batchexecute_response(_rpc_response(PUBLISHER_URL)) == PUBLISHER_URL
    assert parse_batchexecute_response(_rpc_response("javascript:alert(1)")) is None
    assert parse_batchexecute_response("not json") is None
    assert parse_batchexecute_response(json.dumps([["di", 42]])) is None


@pytest.mark.asyncio
async def test_non_aggregator_url_is_returned_unchanged(httpx_mock):
    browser = _browser(result="https://elsewhere.example.com/")
    async with httpx.AsyncClient() as client:
        resolver = GoogleNewsUrlResolver(client, browser_resolver=browser)
        result = await resolver(PUBLISHER_URL)

    assert result.url == PUBLISHER_URL
    assert result.method == "fallback"
    assert browser.calls == []
    assert httpx_mock.get_requests() == []


@pytest.mark.asyncio
async def test_batchexecute_stage_resolves(httpx_mock):
    httpx_mock.add_response(method="GET", url=META_URL, text=META_HTML)
    httpx_mock.add_response(method="POST", url=BATCHEXECUTE_ENDPOINT, text=_rpc_response(PUBLISHER_URL))
    browser = _browser(result="https://unused.example.com/")

    async with httpx.AsyncClient() as client:
        result = await GoogleNewsUrlResolver(client, browser_resolver=browser).resolve(AGGREGATOR_URL)

    assert result.url == PUBLISHER_URL
    assert result.method == "batchexecute"
    assert browser.calls == []
    post = httpx_mock.get_requests(method="POST")[0]
    assert post.content.startswith(b"f.req=")


@pytest.mark.asyncio
async def test_browser_stage_used_when_metadata_missing(httpx_mock):
    httpx_mock.add_response(method="GET", url=META_URL, text="<html>no attributes</html>")
    browser = _browser(result=PUBLISHER_URL)

    async with httpx.AsyncClient() as client:
        result = await GoogleNewsUrlResolver(client, browser_resolver=browser).resolve(AGGREGATOR_URL)

    assert result.url == PUBLISHER_URL
    assert result.method == "playwright"
    assert browser.calls == [AGGREGATOR_URL]


@pytest.mark.asyncio
async def test_all_stages_failing_returns_fallback(httpx_mock):
    httpx_mock.add_exception(httpx.ReadTimeout("slow"), method="GET", url=META_URL)
    browser = _browser(error=RuntimeError("chromium missing"))

    async with httpx.AsyncClient() as client:
        result = await GoogleNewsUrlResolver(client, browser_resolver=browser).resolve(AGGREGATOR_URL)

    assert result.url == AGGREGATOR_URL
    assert result.method == "fallback"


@pytest.mark.asyncio
async def test_rpc_error_status_without_browser_returns_fallback(httpx_mock):
    httpx_mock.add_response(method="GET", url=META_URL, text=META_HTML)
    httpx_mock.add_response(method="POST", url=BATCHEXECUTE_ENDPOINT, status_code=500)

    async with httpx.AsyncClient() as client:
        result = await GoogleNewsUrlResolver(client, browser_resolver=None).resolve(AGGREGATOR_URL)

    assert result.method == "fallback"
    assert result.url == AGGREGATOR_URL
