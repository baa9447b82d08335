"""FastAPI application factory.

Lifespan
--------
On startup the app validates settings, configures logging and builds the
process-wide :class:`~title_proxy.guide.cache.GuideCache` (shared across all
requests via ``request.app.state.guide_cache``).  Nothing is crawled until the
first draft request needs guide context.

Routers
-------
    /health, /health/guide   — liveness and guide cache status
    /summarize-title         — one-line title from free text
    /draft-answer            — support reply draft with guide context
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from title_proxy import __version__
from title_proxy.api.errors import register_error_handlers
from title_proxy.api.routers import draft as draft_router
from title_proxy.api.routers import health as health_router
from title_proxy.api.routers import title as title_router
from title_proxy.config import configure_logging, settings
from title_proxy.guide.cache import build_guide_cache

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Validate configuration and create the guide cache."""
    settings.validate()
    configure_logging()
    app.state.guide_cache = build_guide_cache(settings)
    logger.info(
        "title-proxy ready (guide context %s, root=%r)",
        "on" if settings.guide_context_enabled else "off",
        settings.guide_root_url,
    )
    yield


def create_app() -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    app = FastAPI(
        title="Title Proxy",
        description=(
            "Proxy in front of a chat-completion API that produces one-line "
            "titles and drafts support replies enriched with help-site context."
        ),
        version=__version__,
        lifespan=lifespan,
    )
    register_error_handlers(app)

    app.include_router(health_router.router, tags=["health"])
    app.include_router(title_router.router, tags=["title"])
    app.include_router(draft_router.router, tags=["draft"])

    return app


# Module-level instance used by uvicorn:
#   uvicorn title_proxy.api.app:app
app = create_app()
