"""FastAPI dependencies shared by the routers."""

from __future__ import annotations

import secrets

from fastapi import Header, Request

from title_proxy.api.errors import ProxyError
from title_proxy.config import settings
from title_proxy.guide.cache import GuideCache
from title_proxy.guide.context import GuideContextBuilder


def require_api_key() -> None:
    """Fail fast with 500 before doing any work when no API key is configured."""
    if not settings.openai_api_key:
        raise ProxyError(500, "OPENAI_API_KEY is not set")


def require_proxy_token(x_proxy_token: str = Header(default="")) -> None:
    """Check the shared ``x-proxy-token`` header when ``PROXY_TOKEN`` is set."""
    expected = settings.proxy_token
    if expected and not secrets.compare_digest(x_proxy_token.encode(), expected.encode()):
        raise ProxyError(401, "Unauthorized")


def get_guide_cache(request: Request) -> GuideCache:
    return request.app.state.guide_cache


def get_context_builder(request: Request) -> GuideContextBuilder:
    return GuideContextBuilder(get_guide_cache(request))
