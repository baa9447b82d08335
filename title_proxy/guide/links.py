"""Title and link extraction from raw guide HTML."""

from __future__ import annotations

import re
from typing import List
from urllib.parse import urljoin, urlsplit, urlunsplit

from title_proxy.guide.text import clean_inline, decode_html_entities

_TITLE_RE = re.compile(r"<title[^>]*>(.*?)</title\s*>", re.IGNORECASE | re.DOTALL)
_HREF_RE = re.compile(
    r"""\bhref\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>]+))""", re.IGNORECASE
)
_SKIPPED_SCHEMES = ("javascript:", "mailto:")


def extract_title_from_html(html: str, fallback: str) -> str:
    """Return the first ``<title>`` text, or *fallback* when absent or blank."""
    match = _TITLE_RE.search(html)
    if match:
        title = clean_inline(decode_html_entities(match.group(1)))
        if title:
            return title
    return fallback


def _resolve(href: str, current_url: str) -> str | None:
    """Resolve *href* to an absolute http(s) URL without query or fragment."""
    try:
        parts = urlsplit(urljoin(current_url, href))
    except ValueError:
        return None
    if parts.scheme not in ("http", "https") or not parts.netloc:
        return None
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def extract_href_links(html: str, current_url: str) -> List[str]:
    """Return absolute ``href`` targets in first-seen order.

    Empty values, ``#fragment`` links, ``javascript:`` and ``mailto:`` targets
    are skipped, as are values that do not resolve to an http(s) URL.
    """
    seen: set[str] = set()
    links: List[str] = []
    for m in _HREF_RE.finditer(html):
        href = next((g for g in m.groups() if g is not None), "").strip()
        if not href or href.startswith("#"):
            continue
        if href.lower().startswith(_SKIPPED_SCHEMES):
            continue
        url = _resolve(href, current_url)
        if url and url not in seen:
            seen.add(url)
            links.append(url)
    return links
