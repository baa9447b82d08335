"""Liveness and guide-cache status.

Routes
------
GET /health          {"ok": true}
GET /health/guide    Guide cache status (page count, timestamps, last error)
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from title_proxy.api.dependencies import get_guide_cache
from title_proxy.guide.cache import GuideCache

router = APIRouter()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class HealthOut(BaseModel):
    ok: bool = True


class GuideStatusOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    enabled: bool
    cached_pages: int
    fetched_at: Optional[datetime]
    expires_at: Optional[datetime]
    last_error: str
    root_url: str


def _as_datetime(ts: float | None) -> datetime | None:
    if ts is None:
        return None
    return datetime.fromtimestamp(ts, tz=timezone.utc)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/health", response_model=HealthOut)
def health_endpoint() -> HealthOut:
    return HealthOut()


@router.get("/health/guide", response_model=GuideStatusOut)
def guide_status_endpoint(cache: GuideCache = Depends(get_guide_cache)) -> GuideStatusOut:
    """Report what the guide cache currently holds, without refreshing it."""
    status = cache.status()
    return GuideStatusOut(
        enabled=status.enabled,
        cached_pages=status.cached_pages,
        fetched_at=_as_datetime(status.fetched_at),
        expires_at=_as_datetime(status.expires_at),
        last_error=status.last_error,
        root_url=status.root_url,
    )
