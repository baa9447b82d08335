"""Support-reply drafting with reference answers and guide context.

Routes
------
POST /draft-answer
    Body: {"question": "...", "template": "...",
           "candidates": [{"question": "...", "answer": "..."}, ...]}
    →  {"answer": "..."}

Only the first eight candidates are used.  Guide context is optional: when the
help-site cache is disabled or empty the prompt says so and drafting proceeds.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict

from title_proxy.api.dependencies import (
    get_context_builder,
    require_api_key,
    require_proxy_token,
)
from title_proxy.api.errors import ProxyError
from title_proxy.guide.context import GuideContextBuilder
from title_proxy.guide.text import normalize_multiline
from title_proxy.llm import chat_completion
from title_proxy.prompts import DRAFT_SYSTEM_PROMPT, MAX_CANDIDATES, build_draft_prompt

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class Candidate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    question: Optional[str] = None
    answer: Optional[str] = None


class DraftRequest(BaseModel):
    question: Optional[str] = None
    template: Optional[str] = None
    candidates: Optional[List[Candidate]] = None


class DraftResponse(BaseModel):
    answer: str


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "/draft-answer",
    response_model=DraftResponse,
    dependencies=[Depends(require_api_key), Depends(require_proxy_token)],
)
async def draft_answer_endpoint(
    body: DraftRequest,
    builder: GuideContextBuilder = Depends(get_context_builder),
) -> DraftResponse:
    question = normalize_multiline(body.question)
    if not question:
        raise ProxyError(400, "question is required")

    template = normalize_multiline(body.template)
    candidates = [c.model_dump() for c in (body.candidates or [])[:MAX_CANDIDATES]]

    guide_context = await builder.build(question, candidates)
    logger.info(
        "Drafting answer with %d candidate(s), guide context %d char(s)",
        len(candidates),
        len(guide_context),
    )

    raw = await chat_completion(
        DRAFT_SYSTEM_PROMPT,
        build_draft_prompt(question, template, candidates, guide_context),
        temperature=0.3,
        max_tokens=900,
    )
    answer = normalize_multiline(raw)
    if not answer:
        raise ProxyError(502, "Empty draft result")
    return DraftResponse(answer=answer)
