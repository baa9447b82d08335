"""In-memory TTL cache for the latest guide crawl.

Refresh policy
--------------
* A fresh entry is returned as-is; nothing is refreshed speculatively.
* An expired or missing entry triggers a crawl.  Success replaces the entry
  wholesale and keeps it for the full TTL.
* A failed crawl keeps the previous pages, records the error, and shortens
  the next retry to ``min(FAILURE_RETRY_SECONDS, ttl)``.

Concurrent callers that find the entry expired share a single in-flight crawl.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, List, Optional, Tuple

from title_proxy.config import Settings
from title_proxy.guide.crawler import GuideCrawler
from title_proxy.guide.models import GuideCacheEntry, GuideStatus, PageRecord

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 6 * 60 * 60
FAILURE_RETRY_SECONDS = 5 * 60


class GuideCache:
    """Owns the process-wide guide pages and refreshes them through *crawler*.

    Args:
        crawler: Source of fresh pages.  ``None`` disables the cache.
        ttl: Seconds a successful crawl stays fresh.
        enabled: Feature switch; a disabled cache always yields no pages.
        clock: Returns the current POSIX time; replaceable in tests.
    """

    def __init__(
        self,
        crawler: Optional[GuideCrawler],
        ttl: float = DEFAULT_TTL_SECONDS,
        enabled: bool = True,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._crawler = crawler
        self.ttl = ttl
        self.enabled = enabled and crawler is not None
        self._clock = clock
        self._entry: Optional[GuideCacheEntry] = None
        self._inflight: Optional[asyncio.Task[List[PageRecord]]] = None

    @property
    def entry(self) -> Optional[GuideCacheEntry]:
        return self._entry

    def get(self) -> Tuple[List[PageRecord], bool]:
        """Return ``(pages, is_stale)`` without triggering a crawl."""
        if self._entry is None:
            return [], True
        return list(self._entry.pages), self._clock() >= self._entry.expires_at

    async def refresh_if_expired(self) -> List[PageRecord]:
        """Return cached pages, crawling first if the entry is stale.

        Never raises for crawl failures; see the module docstring.
        """
        pages, stale = self.get()
        if not stale or self._crawler is None:
            return pages
        if self._inflight is None:
            self._inflight = asyncio.create_task(self._refresh(self._crawler))
        # A cancelled caller must not cancel the crawl other callers wait on.
        return list(await asyncio.shield(self._inflight))

    async def get_pages(self) -> List[PageRecord]:
        """Pages for context building; empty when the feature is disabled."""
        if not self.enabled:
            return []
        return await self.refresh_if_expired()

    async def _refresh(self, crawler: GuideCrawler) -> List[PageRecord]:
        try:
            try:
                pages = await crawler.crawl()
            except Exception as exc:
                now = self._clock()
                previous = self._entry.pages if self._entry else []
                message = str(exc) or type(exc).__name__
                logger.warning(
                    "Guide refresh failed (keeping %d cached page(s)): %s",
                    len(previous),
                    message,
                )
                self._entry = GuideCacheEntry(
                    pages=previous,
                    fetched_at=now,
                    expires_at=now + min(FAILURE_RETRY_SECONDS, self.ttl),
                    last_error=message,
                )
                return list(previous)

            now = self._clock()
            self._entry = GuideCacheEntry(
                pages=list(pages),
                fetched_at=now,
                expires_at=now + self.ttl,
                last_error="",
            )
            logger.info("Guide cache refreshed with %d page(s)", len(pages))
            return list(pages)
        finally:
            self._inflight = None

    def status(self) -> GuideStatus:
        entry = self._entry
        return GuideStatus(
            enabled=self.enabled,
            cached_pages=len(entry.pages) if entry else 0,
            fetched_at=entry.fetched_at if entry else None,
            expires_at=entry.expires_at if entry else None,
            last_error=entry.last_error if entry else "",
            root_url=self._crawler.root_url if self._crawler else "",
        )


def build_guide_cache(cfg: Settings) -> GuideCache:
    """Create the process-wide cache from *cfg*.

    A crawler is built whenever a root URL is configured so the status
    endpoint can report it; the cache only crawls when guide context is
    enabled.
    """
    crawler = None
    if cfg.guide_root_url:
        crawler = GuideCrawler(
            cfg.guide_root_url,
            max_pages=cfg.guide_max_pages,
            fetch_timeout=cfg.guide_fetch_timeout,
        )
    return GuideCache(crawler, ttl=cfg.guide_cache_ttl, enabled=cfg.guide_context_enabled)
