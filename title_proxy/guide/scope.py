"""Crawl scope: which URLs belong to the guide's documentation subtree."""

from __future__ import annotations

from urllib.parse import urlsplit

_DOCUMENT_SUFFIXES = (".htm", ".html", "/")


def _directory_prefix(path: str) -> str:
    """Return *path* up to and including its last ``/``."""
    if not path:
        return "/"
    return path[: path.rfind("/") + 1]


class GuideScope:
    """Confines a crawl to the root URL's host and containing directory.

    A root of ``https://example.com/portal/index.html`` admits
    ``https://example.com/portal/faq/a.html`` but not
    ``https://example.com/other/a.html`` or ``https://cdn.example.com/portal/``.
    """

    def __init__(self, root_url: str) -> None:
        parts = urlsplit(root_url)
        self.root_url = root_url
        self.host = parts.netloc.lower()
        self.prefix = _directory_prefix(parts.path)

    def allows(self, url: str) -> bool:
        try:
            parts = urlsplit(url)
        except ValueError:
            return False
        if parts.netloc.lower() != self.host:
            return False
        path = parts.path or "/"
        if not path.startswith(self.prefix):
            return False
        return path.lower().endswith(_DOCUMENT_SUFFIXES)


def is_allowed_guide_url(url: str, root_url: str) -> bool:
    """Return ``True`` if *url* lies inside the crawl scope of *root_url*."""
    return GuideScope(root_url).allows(url)
