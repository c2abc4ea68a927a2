"""Tests for URL fetching and per-source resolution."""

import asyncio
import time

import httpx
import pytest

from research_synth.core.exceptions import FetchError, FetchTimeout, UnsafeUrlError
from research_synth.schemas.synthesis import SourceInput
from research_synth.services.source_fetcher import fetch_sources
from research_synth.services.web_fetcher import fetch_url_text

from conftest import ARTICLE_HTML, html_transport

ARTICLE_URL = "https://example.com/solar"


def _fetch(url, routes):
    async def run():
        async with httpx.AsyncClient(transport=html_transport(routes)) as client:
            return await fetch_url_text(url, client=client)

    return asyncio.run(run())


def test_fetch_extracts_text_from_html():
    routes = {
        ARTICLE_URL: httpx.Response(200, headers={"content-type": "text/html; charset=utf-8"}, text=ARTICLE_HTML)
    }

    text = _fetch(ARTICLE_URL, routes)

    assert "Solar capacity grew by 30%" in text
    assert "tracking" not in text


def test_fetch_accepts_json_content_type():
    routes = {ARTICLE_URL: httpx.Response(200, json={"finding": "solar is cheap now"})}

    text = _fetch(ARTICLE_URL, routes)

    assert "solar is cheap now" in text


def test_fetch_rejects_error_status():
    with pytest.raises(FetchError, match="HTTP 404"):
        _fetch(ARTICLE_URL, {})


def test_fetch_rejects_binary_content_type():
    routes = {ARTICLE_URL: httpx.Response(200, headers={"content-type": "application/pdf"}, content=b"%PDF-1.7")}

    with pytest.raises(FetchError, match="Non-text content-type"):
        _fetch(ARTICLE_URL, routes)


def test_fetch_timeout_is_reported_as_fetch_timeout():
    routes = {ARTICLE_URL: httpx.ReadTimeout("too slow")}

    with pytest.raises(FetchTimeout):
        _fetch(ARTICLE_URL, routes)


def test_fetch_transport_error_is_fetch_error():
    routes = {ARTICLE_URL: httpx.ConnectError("refused")}

    with pytest.raises(FetchError):
        _fetch(ARTICLE_URL, routes)


@pytest.mark.parametrize(
    "url",
    [
        "ftp://example.com/file.txt",
        "http://localhost:8080/admin",
        "http://127.0.0.1/",
        "http://10.0.0.5/internal",
        "http:///no-host",
    ],
)
def test_unsafe_urls_are_refused(url):
    with pytest.raises(UnsafeUrlError):
        _fetch(url, {})


def test_fetch_sources_preserves_order_and_isolates_failures(settings):
    routes = {
        "https://example.com/a": httpx.Response(200, headers={"content-type": "text/html"}, text="<p>alpha page text</p>"),
        "https://example.com/c": httpx.Response(200, headers={"content-type": "text/plain"}, text="gamma page text"),
    }
    sources = [
        SourceInput(type="url", content="https://example.com/a"),
        SourceInput(type="url", content="https://example.com/b", label="Broken"),
        SourceInput(type="url", content="https://example.com/c"),
        SourceInput(type="text", content="  raw pasted notes about delta  "),
    ]

    async def run():
        async with httpx.AsyncClient(transport=html_transport(routes)) as client:
            return await fetch_sources(sources, settings=settings, client=client)

    fetched = asyncio.run(run())

    assert [f.id for f in fetched] == [0, 1, 2, 3]

    assert fetched[0].text == "alpha page text"
    assert fetched[0].label == "Source 1 (https://example.com/a)"
    assert fetched[0].url == "https://example.com/a"
    assert fetched[0].error is None

    assert fetched[1].text == ""
    assert fetched[1].label == "Broken"
    assert fetched[1].url == "https://example.com/b"
    assert "HTTP 404" in fetched[1].error
    assert fetched[1].failed

    assert fetched[2].text == "gamma page text"

    assert fetched[3].label == "Source 4"
    assert fetched[3].url is None
    assert fetched[3].text == "  raw pasted notes about delta  "


def test_text_sources_are_truncated(settings):
    sources = [SourceInput(type="text", content="y" * 20_000)]

    fetched = asyncio.run(fetch_sources(sources, settings=settings))

    assert len(fetched[0].text) == settings.max_source_chars


async def _trickle(chunks=20, delay=0.1):
    for _ in range(chunks):
        await asyncio.sleep(delay)
        yield b"x"


def test_slow_body_is_cut_off_at_the_total_deadline():
    def handler(request):
        return httpx.Response(200, headers={"content-type": "text/plain"}, content=_trickle())

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await fetch_url_text(ARTICLE_URL, timeout_s=0.5, client=client)

    started = time.perf_counter()
    with pytest.raises(FetchTimeout):
        asyncio.run(run())

    assert time.perf_counter() - started < 1.5


def test_slow_source_does_not_block_its_siblings(settings):
    def handler(request):
        if request.url.path == "/slow":
            return httpx.Response(200, headers={"content-type": "text/plain"}, content=_trickle())
        return httpx.Response(200, headers={"content-type": "text/plain"}, text="quick page text")

    sources = [
        SourceInput(type="url", content="https://example.com/slow"),
        SourceInput(type="url", content="https://example.com/quick"),
    ]
    fast_settings = settings.model_copy(update={"fetch_timeout_s": 0.5})

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await fetch_sources(sources, settings=fast_settings, client=client)

    fetched = asyncio.run(run())

    assert fetched[0].text == ""
    assert "Timed out" in fetched[0].error
    assert fetched[1].text == "quick page text"
