"""One-line title summarisation.

Routes
------
POST /summarize-title    Body: {"text": "..."}  →  {"title": "..."}
"""

from __future__ import annotations

import re
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from title_proxy.api.dependencies import require_api_key, require_proxy_token
from title_proxy.api.errors import ProxyError
from title_proxy.guide.text import clean_inline
from title_proxy.llm import chat_completion
from title_proxy.prompts import TITLE_SYSTEM_PROMPT

router = APIRouter()

# One leading and one trailing quote mark the model sometimes wraps titles in.
_EDGE_QUOTES_RE = re.compile(r'^["「]|["」]$')


class TitleRequest(BaseModel):
    text: Optional[str] = None


class TitleResponse(BaseModel):
    title: str


def strip_title_quotes(title: str) -> str:
    return _EDGE_QUOTES_RE.sub("", title)


async def summarize_title(text: str) -> str:
    """Ask the model for a title and clean it up; ``""`` if nothing came back."""
    raw = await chat_completion(
        TITLE_SYSTEM_PROMPT,
        text,
        temperature=0.2,
        max_tokens=80,
    )
    return strip_title_quotes(clean_inline(raw))


@router.post(
    "/summarize-title",
    response_model=TitleResponse,
    dependencies=[Depends(require_api_key), Depends(require_proxy_token)],
)
async def summarize_title_endpoint(body: TitleRequest) -> TitleResponse:
    source = clean_inline(body.text)
    if not source:
        raise ProxyError(400, "text is required")

    title = await summarize_title(source)
    if not title:
        raise ProxyError(502, "Empty summary result")
    return TitleResponse(title=title)
