"""Keyword scoring of cached guide pages and context-block assembly.

Seed tokens come from the incoming question plus its reference candidates.
Each cached page scores 3 points per token found in its title and 1 point per
token found only in its body.  The best pages are trimmed to a snippet around
the first keyword hit and rendered as numbered blocks for the draft prompt.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable, List, Mapping, Sequence

from title_proxy.guide.cache import GuideCache
from title_proxy.guide.models import PageRecord, ScoredPage
from title_proxy.guide.text import normalize_multiline

logger = logging.getLogger(__name__)

MAX_SEED_TOKENS = 24
MAX_SCORED_PAGES = 4
FALLBACK_PAGES = 2
SNIPPET_LIMIT = 540
SNIPPET_LEAD = 220
TITLE_WEIGHT = 3
BODY_WEIGHT = 1
BLOCK_SEPARATOR = "\n\n---\n\n"

# ASCII words (inner . _ - allowed, alphanumeric at both ends) or runs of
# Han / hiragana / katakana.
_TOKEN_RE = re.compile(
    r"[a-z0-9][a-z0-9._-]*[a-z0-9]"
    r"|[\u3040-\u30ff\u3400-\u4dbf\u4e00-\u9fff\uf900-\ufaff]{2,}"
)

STOP_WORDS = frozenset(
    {
        # Japanese function words and politeness
        "です", "ます", "でした", "ました", "ません", "ください", "ございます",
        "について", "として", "による", "により", "ため", "こと", "もの", "よう",
        "これ", "それ", "あれ", "この", "その", "あの", "どこ", "どの", "ここ",
        "する", "して", "した", "される", "できる", "できない", "できません",
        "ある", "あり", "いる", "なる", "ない", "から", "まで", "など",
        "お願い", "お願いします", "よろしく", "いたします", "思います",
        # Support-desk terms present in nearly every question
        "質問", "回答", "内容", "確認", "対応", "方法", "場合", "問題",
        "お客様", "ご質問", "ご確認", "お問い合わせ", "問い合わせ",
        # English / URL noise
        "the", "and", "for", "with", "from", "this", "that", "are", "you",
        "http", "https", "www", "com", "html",
    }
)


def tokenize(text: str) -> List[str]:
    """Split *text* into lower-cased, de-duplicated, stop-word-free tokens."""
    seen: set[str] = set()
    tokens: List[str] = []
    for token in _TOKEN_RE.findall(str(text or "").lower()):
        if token in seen or token in STOP_WORDS:
            continue
        seen.add(token)
        tokens.append(token)
    return tokens


def seed_tokens(
    question: str,
    candidates: Iterable[Mapping[str, Any]] = (),
    limit: int = MAX_SEED_TOKENS,
) -> List[str]:
    """Tokens from the question followed by each candidate's Q&A text."""
    parts = [str(question or "")]
    for candidate in candidates:
        parts.append(str(candidate.get("question") or ""))
        parts.append(str(candidate.get("answer") or ""))
    return tokenize("\n".join(parts))[:limit]


def score_page(page: PageRecord, tokens: Sequence[str]) -> int:
    title = page.title.lower()
    haystack = f"{title}\n{page.text.lower()}"
    score = 0
    for token in tokens:
        if token not in haystack:
            continue
        score += TITLE_WEIGHT if token in title else BODY_WEIGHT
    return score


def select_guide_pages(pages: Sequence[PageRecord], tokens: Sequence[str]) -> List[ScoredPage]:
    """Pick the pages worth quoting.

    The top ``MAX_SCORED_PAGES`` pages with a positive score win, ties kept in
    crawl order.  Without any keyword overlap the first ``FALLBACK_PAGES``
    pages are used so a non-empty cache always yields some context.
    """
    scored = [ScoredPage(page=page, score=score_page(page, tokens)) for page in pages]
    ranked = sorted(scored, key=lambda s: s.score, reverse=True)
    positive = [s for s in ranked if s.score > 0]
    if positive:
        return positive[:MAX_SCORED_PAGES]
    return scored[:FALLBACK_PAGES]


def pick_guide_snippet(page: PageRecord, tokens: Sequence[str], limit: int = SNIPPET_LIMIT) -> str:
    """Return up to *limit* characters of *page* around the first token hit.

    The window opens ``SNIPPET_LEAD`` characters before the earliest hit.  A
    clipped start moves forward past the next line break before the hit, and a
    clipped end moves back to the last line break after the hit, so lines are
    not cut in half.
    """
    text = normalize_multiline(page.text)
    if not tokens:
        return text[:limit]

    lowered = text.lower()
    offsets = [lowered.find(token.lower()) for token in tokens]
    offsets = [o for o in offsets if o >= 0]
    if not offsets:
        return text[:limit]

    hit = min(offsets)
    start = max(0, hit - SNIPPET_LEAD)
    end = min(len(text), start + limit)

    if start > 0:
        newline = text.find("\n", start, hit)
        if newline != -1:
            start = newline + 1
    if end < len(text):
        newline = text.rfind("\n", hit, end)
        if newline > start:
            end = newline

    return text[start:end].strip()


def format_guide_context(selected: Sequence[ScoredPage], tokens: Sequence[str]) -> str:
    blocks = []
    for i, scored in enumerate(selected, start=1):
        snippet = pick_guide_snippet(scored.page, tokens)
        blocks.append(f"#{i} {scored.page.title}\nURL: {scored.page.url}\n{snippet}")
    return BLOCK_SEPARATOR.join(blocks)


class GuideContextBuilder:
    """Builds the guide context block for a draft-answer request."""

    def __init__(self, cache: GuideCache) -> None:
        self.cache = cache

    async def build(
        self,
        question: str,
        candidates: Iterable[Mapping[str, Any]] = (),
    ) -> str:
        """Return the formatted context, or ``""`` when no guide pages exist.

        An empty string means "no guide information available"; it is never
        an error.
        """
        if not self.cache.enabled:
            return ""
        pages = await self.cache.get_pages()
        if not pages:
            return ""

        tokens = seed_tokens(question, candidates)
        selected = select_guide_pages(pages, tokens)
        logger.debug(
            "Guide context: %d token(s), selected %s",
            len(tokens),
            [(s.page.url, s.score) for s in selected],
        )
        return format_guide_context(selected, tokens)
