"""Data models for the guide crawl and context pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

# A fetched page becomes a record only when its text is longer than this.
MIN_PAGE_TEXT_CHARS = 80
MAX_PAGE_TEXT_CHARS = 12000


@dataclass(frozen=True)
class PageRecord:
    """One crawled help page, reduced to plain text."""

    url: str
    title: str
    text: str


@dataclass(frozen=True)
class ScoredPage:
    """A :class:`PageRecord` with its per-request relevance score."""

    page: PageRecord
    score: int


@dataclass
class GuideCacheEntry:
    """The most recent crawl outcome held by :class:`~title_proxy.guide.cache.GuideCache`.

    Timestamps are POSIX seconds.
    """

    pages: List[PageRecord] = field(default_factory=list)
    fetched_at: float = 0.0
    expires_at: float = 0.0
    last_error: str = ""


@dataclass(frozen=True)
class GuideStatus:
    """Snapshot of the cache for the health endpoint."""

    enabled: bool
    cached_pages: int
    fetched_at: float | None
    expires_at: float | None
    last_error: str
    root_url: str
