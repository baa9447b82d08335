"""Guide package: crawl the help site, cache it, and build prompt context."""

from title_proxy.guide.cache import GuideCache
from title_proxy.guide.context import GuideContextBuilder, pick_guide_snippet, tokenize
from title_proxy.guide.crawler import GuideCrawler, GuideCrawlError
from title_proxy.guide.models import PageRecord, ScoredPage

__all__ = [
    "GuideCache",
    "GuideContextBuilder",
    "GuideCrawler",
    "GuideCrawlError",
    "PageRecord",
    "ScoredPage",
    "pick_guide_snippet",
    "tokenize",
]
