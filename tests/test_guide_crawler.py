"""Tests for title_proxy.guide.crawler — breadth-first guide crawl.

Mocking strategy:
- ``respx`` patches ``httpx`` at the transport layer so every page of the fake
  help site is served from memory.  Routes are created with
  ``assert_all_called=False`` because some tests register pages that must
  *not* be requested.
- The timeout test swaps in a fake client via ``client_factory`` whose ``get``
  never finishes in time.
"""

from __future__ import annotations

import asyncio

import httpx
import pytest
import respx

from title_proxy.guide.crawler import (
    MAX_LINKS_PER_PAGE,
    GuideCrawler,
    GuideCrawlError,
    GuideFetchError,
)
from title_proxy.guide.models import MAX_PAGE_TEXT_CHARS

ROOT = "https://example.com/portal/index.html"
BASE = "https://example.com/portal/"

_FILLER = (
    "This help page explains the feature in enough detail to be kept by the "
    "crawler as a real content page rather than a redirect stub."
)


def _page(title: str, *links: str, body: str = _FILLER) -> str:
    anchors = "".join(f'<a href="{href}">{href}</a>' for href in links)
    return (
        f"<html><head><title>{title}</title></head>"
        f"<body><h1>{title}</h1><p>{body}</p>{anchors}</body></html>"
    )


def _serve(url: str, html: str, status: int = 200, router=respx) -> respx.Route:
    return router.get(url).mock(return_value=httpx.Response(status, text=html))


# ---------------------------------------------------------------------------
# Traversal
# ---------------------------------------------------------------------------

class TestCrawlTraversal:
    async def test_root_and_in_scope_links_only(self) -> None:
        """Root with two in-scope links and one off-site link."""
        with respx.mock(assert_all_called=False) as respx_mock:
            _serve(ROOT, _page("Portal", "guide/a.html", "b.html", "https://other.example.org/x.html"), router=respx_mock)
            _serve(BASE + "guide/a.html", _page("Guide A"), router=respx_mock)
            _serve(BASE + "b.html", _page("Guide B"), router=respx_mock)
            offsite = _serve("https://other.example.org/x.html", _page("Elsewhere"), router=respx_mock)

            pages = await GuideCrawler(ROOT).crawl()

        assert [p.url for p in pages] == [ROOT, BASE + "guide/a.html", BASE + "b.html"]
        assert [p.title for p in pages] == ["Portal", "Guide A", "Guide B"]
        assert not offsite.called

    async def test_breadth_first_order(self) -> None:
        with respx.mock:
            _serve(ROOT, _page("Root", "a.html", "b.html"))
            _serve(BASE + "a.html", _page("A", "a1.html"))
            _serve(BASE + "b.html", _page("B"))
            _serve(BASE + "a1.html", _page("A1"))

            pages = await GuideCrawler(ROOT).crawl()

        assert [p.title for p in pages] == ["Root", "A", "B", "A1"]

    async def test_each_url_fetched_once(self) -> None:
        with respx.mock:
            _serve(ROOT, _page("Root", "a.html", "b.html"))
            _serve(BASE + "a.html", _page("A", "shared.html", "index.html"))
            _serve(BASE + "b.html", _page("B", "shared.html", "a.html"))
            shared = _serve(BASE + "shared.html", _page("Shared"))

            pages = await GuideCrawler(ROOT).crawl()

        assert shared.call_count == 1
        assert len(pages) == 4
        assert len({p.url for p in pages}) == 4

    async def test_out_of_scope_paths_not_followed(self) -> None:
        with respx.mock(assert_all_called=False) as respx_mock:
            _serve(ROOT, _page("Root", "/other/a.html", "manual.pdf", "sub/"), router=respx_mock)
            other = _serve("https://example.com/other/a.html", _page("Other"), router=respx_mock)
            pdf = _serve(BASE + "manual.pdf", "%PDF", router=respx_mock)
            _serve(BASE + "sub/", _page("Sub"), router=respx_mock)

            pages = await GuideCrawler(ROOT).crawl()

        assert [p.title for p in pages] == ["Root", "Sub"]
        assert not other.called
        assert not pdf.called

    async def test_links_per_page_capped(self) -> None:
        links = [f"p{i}.html" for i in range(MAX_LINKS_PER_PAGE + 10)]
        with respx.mock:
            _serve(ROOT, _page("Root", *links))
            children = respx.get(url__regex=r"https://example\.com/portal/p\d+\.html").mock(
                return_value=httpx.Response(200, text=_page("Child"))
            )

            pages = await GuideCrawler(ROOT, max_pages=500).crawl()

        assert children.call_count == MAX_LINKS_PER_PAGE
        assert len(pages) == MAX_LINKS_PER_PAGE + 1


# ---------------------------------------------------------------------------
# Page records
# ---------------------------------------------------------------------------

class TestPageRecords:
    async def test_short_pages_discarded_but_links_followed(self) -> None:
        with respx.mock:
            _serve(ROOT, _page("Root", "stub.html"))
            _serve(BASE + "stub.html", '<html><body><a href="real.html">go</a></body></html>')
            _serve(BASE + "real.html", _page("Real"))

            pages = await GuideCrawler(ROOT).crawl()

        assert [p.title for p in pages] == ["Root", "Real"]

    async def test_text_truncated(self) -> None:
        with respx.mock:
            _serve(ROOT, _page("Long", body="word " * 5000))

            pages = await GuideCrawler(ROOT).crawl()

        assert len(pages) == 1
        assert len(pages[0].text) == MAX_PAGE_TEXT_CHARS

    async def test_title_falls_back_to_url(self) -> None:
        with respx.mock:
            _serve(ROOT, f"<html><body><p>{_FILLER}</p></body></html>")

            pages = await GuideCrawler(ROOT).crawl()

        assert pages[0].title == ROOT
        assert pages[0].text == _FILLER

    async def test_max_pages_stops_crawl(self) -> None:
        with respx.mock(assert_all_called=False) as respx_mock:
            _serve(ROOT, _page("Root", "a.html", "b.html", "c.html", "d.html"), router=respx_mock)
            _serve(BASE + "a.html", _page("A"), router=respx_mock)
            _serve(BASE + "b.html", _page("B"), router=respx_mock)
            late_c = _serve(BASE + "c.html", _page("C"), router=respx_mock)
            late_d = _serve(BASE + "d.html", _page("D"), router=respx_mock)

            pages = await GuideCrawler(ROOT, max_pages=3).crawl()

        assert [p.title for p in pages] == ["Root", "A", "B"]
        assert not late_c.called
        assert not late_d.called

    async def test_root_without_content_yields_empty_result(self) -> None:
        with respx.mock:
            _serve(ROOT, "<html><body>moved</body></html>")

            pages = await GuideCrawler(ROOT).crawl()

        assert pages == []


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------

class TestCrawlFailures:
    async def test_failed_child_page_is_skipped(self) -> None:
        with respx.mock:
            _serve(ROOT, _page("Root", "missing.html", "broken.html", "ok.html"))
            _serve(BASE + "missing.html", "Not Found", status=404)
            respx.get(BASE + "broken.html").mock(side_effect=httpx.ConnectError("refused"))
            _serve(BASE + "ok.html", _page("OK"))

            pages = await GuideCrawler(ROOT).crawl()

        assert [p.title for p in pages] == ["Root", "OK"]

    async def test_root_http_error_raises(self) -> None:
        with respx.mock:
            _serve(ROOT, "Server Error", status=500)

            with pytest.raises(GuideCrawlError, match="HTTP 500"):
                await GuideCrawler(ROOT).crawl()

    async def test_root_connect_error_raises(self) -> None:
        with respx.mock:
            respx.get(ROOT).mock(side_effect=httpx.ConnectError("no route to host"))

            with pytest.raises(GuideCrawlError, match="guide root unreachable"):
                await GuideCrawler(ROOT).crawl()

    async def test_fetch_timeout_cancels_request(self) -> None:
        cancelled = asyncio.Event()

        class _SlowClient:
            async def __aenter__(self) -> "_SlowClient":
                return self

            async def __aexit__(self, *exc: object) -> None:
                return None

            async def get(self, url: str) -> httpx.Response:
                try:
                    await asyncio.sleep(10)
                except asyncio.CancelledError:
                    cancelled.set()
                    raise
                raise AssertionError("unreachable")

        crawler = GuideCrawler(ROOT, fetch_timeout=0.05, client_factory=lambda _t: _SlowClient())

        with pytest.raises(GuideCrawlError, match="timed out") as excinfo:
            await crawler.crawl()

        assert cancelled.is_set()
        assert isinstance(excinfo.value.__cause__, GuideFetchError)
