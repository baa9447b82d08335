"""Breadth-first crawler for the help-site guide.

The crawl starts at the configured root page and follows links that stay
inside :class:`~title_proxy.guide.scope.GuideScope`.  Pages are fetched one at
a time so the target site sees at most one request from us at any moment and
the traversal order is deterministic for a given link structure.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Callable, Deque, List

import httpx

from title_proxy.guide.links import extract_href_links, extract_title_from_html
from title_proxy.guide.models import MAX_PAGE_TEXT_CHARS, MIN_PAGE_TEXT_CHARS, PageRecord
from title_proxy.guide.scope import GuideScope
from title_proxy.guide.text import strip_html_to_text

logger = logging.getLogger(__name__)

# Links taken from a single page.
MAX_LINKS_PER_PAGE = 60

_DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; TitleProxy-GuideBot/1.0)",
    "Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.5",
}


class GuideCrawlError(Exception):
    """The crawl as a whole could not produce a result."""


class GuideFetchError(GuideCrawlError):
    """A single page could not be fetched."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"{url}: {reason}")


def _default_client_factory(timeout: float) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        headers=_DEFAULT_HEADERS,
        timeout=timeout,
        follow_redirects=True,
    )


class GuideCrawler:
    """Crawl the guide subtree below *root_url*.

    Args:
        root_url: Entry page; also defines the crawl scope.
        max_pages: Stop once this many page records have been collected.
        fetch_timeout: Seconds allowed for each page fetch.
        client_factory: Builds the ``httpx.AsyncClient`` for one crawl run.
    """

    def __init__(
        self,
        root_url: str,
        max_pages: int = 24,
        fetch_timeout: float = 12.0,
        client_factory: Callable[[float], httpx.AsyncClient] | None = None,
    ) -> None:
        self.root_url = root_url
        self.scope = GuideScope(root_url)
        self.max_pages = max_pages
        self.fetch_timeout = fetch_timeout
        self._client_factory = client_factory or _default_client_factory

    async def _fetch_html(self, client: httpx.AsyncClient, url: str) -> str:
        """GET *url* and return its body.

        ``asyncio.wait_for`` cancels the in-flight request when the timeout
        expires.

        Raises:
            GuideFetchError: On timeout, transport error or non-2xx status.
        """
        try:
            response = await asyncio.wait_for(client.get(url), timeout=self.fetch_timeout)
        except asyncio.TimeoutError:
            raise GuideFetchError(url, f"timed out after {self.fetch_timeout:g}s") from None
        except httpx.HTTPError as exc:
            raise GuideFetchError(url, f"{type(exc).__name__}: {exc}") from exc
        if not response.is_success:
            raise GuideFetchError(url, f"HTTP {response.status_code}")
        return response.text

    async def crawl(self) -> List[PageRecord]:
        """Run one breadth-first crawl and return the collected pages.

        A page that fails to load is skipped.  Only a failure on the root page
        aborts the crawl, because nothing else can be discovered without it.

        Raises:
            GuideCrawlError: If the root page cannot be fetched.
        """
        queue: Deque[str] = deque([self.root_url])
        queued: set[str] = {self.root_url}
        visited: set[str] = set()
        pages: List[PageRecord] = []

        async with self._client_factory(self.fetch_timeout) as client:
            while queue and len(pages) < self.max_pages:
                url = queue.popleft()
                if url in visited or not self.scope.allows(url):
                    continue
                visited.add(url)

                try:
                    html = await self._fetch_html(client, url)
                except GuideFetchError as exc:
                    if url == self.root_url:
                        raise GuideCrawlError(f"guide root unreachable: {exc}") from exc
                    logger.debug("Skipping guide page %s", exc)
                    continue

                text = strip_html_to_text(html)
                if len(text) > MIN_PAGE_TEXT_CHARS:
                    pages.append(
                        PageRecord(
                            url=url,
                            title=extract_title_from_html(html, url),
                            text=text[:MAX_PAGE_TEXT_CHARS],
                        )
                    )

                fresh = [
                    link
                    for link in extract_href_links(html, url)
                    if link not in queued and self.scope.allows(link)
                ][:MAX_LINKS_PER_PAGE]
                queued.update(fresh)
                queue.extend(fresh)

        logger.info(
            "Guide crawl of %s finished: %d page(s) kept, %d fetched",
            self.root_url,
            len(pages),
            len(visited),
        )
        return pages
