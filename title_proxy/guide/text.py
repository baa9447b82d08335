"""Whitespace normalisation and HTML-to-text conversion.

Help pages are simple static HTML, so plain regexes are enough: only
script/style removal and block-level line breaks need to survive.
"""

from __future__ import annotations

import re
from typing import Any

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------
_WS_RE = re.compile(r"\s+")
_TRAILING_WS_RE = re.compile(r"[^\S\n]+\n")
_BLANK_RUN_RE = re.compile(r"\n{3,}")
_ENTITY_RE = re.compile(r"&(#[0-9]+|#[xX][0-9a-fA-F]+|[a-zA-Z][a-zA-Z0-9]*);")
_SCRIPT_STYLE_RE = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_BR_RE = re.compile(r"<br\s*/?\s*>", re.IGNORECASE)
_BLOCK_CLOSE_RE = re.compile(
    r"</(?:p|div|section|article|li|h[1-6]|tr)\s*>", re.IGNORECASE
)
_INLINE_TAG_RE = re.compile(r"</?(?:a|span|strong|b|em|i|code)\b[^>]*>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_INLINE_SPACE_RE = re.compile(r"[^\S\n]+")
_LEADING_WS_RE = re.compile(r"^[^\S\n]+", re.MULTILINE)

_NAMED_ENTITIES = {
    "amp": "&",
    "lt": "<",
    "gt": ">",
    "quot": '"',
    "apos": "'",
    "nbsp": " ",
    "#39": "'",
}


def _to_str(value: Any) -> str:
    return "" if value is None else str(value)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def clean_inline(value: Any) -> str:
    """Collapse every whitespace run in *value* to one space and trim."""
    return _WS_RE.sub(" ", _to_str(value)).strip()


def normalize_multiline(value: Any) -> str:
    """Normalise line endings and blank lines in *value*.

    CRLF and CR become LF, whitespace before each newline is removed, runs of
    three or more newlines become a single blank line, and the result is
    trimmed.
    """
    text = _to_str(value).replace("\r\n", "\n").replace("\r", "\n")
    text = _TRAILING_WS_RE.sub("\n", text)
    text = _BLANK_RUN_RE.sub("\n\n", text)
    return text.strip()


def _decode_entity(match: re.Match[str]) -> str:
    name = match.group(1)
    if name in _NAMED_ENTITIES:
        return _NAMED_ENTITIES[name]
    if name.startswith("#"):
        digits = name[1:]
        try:
            if digits[:1] in ("x", "X"):
                code_point = int(digits[1:], 16)
            else:
                code_point = int(digits, 10)
            # Lone surrogates cannot be encoded as UTF-8.
            if 0xD800 <= code_point <= 0xDFFF:
                return match.group(0)
            return chr(code_point)
        except (ValueError, OverflowError):
            return match.group(0)
    return match.group(0)


def decode_html_entities(text: str) -> str:
    """Decode numeric entities and a small table of named ones.

    Unknown named entities and invalid code points are left untouched.

    >>> decode_html_entities("&amp;&#65;&#x42;")
    '&AB'
    """
    return _ENTITY_RE.sub(_decode_entity, _to_str(text))


def strip_html_to_text(html: str) -> str:
    """Turn an HTML document into readable plain text.

    ``<script>``/``<style>`` blocks are dropped with their content, ``<br>``
    and closing block-level tags become line breaks. Inline formatting tags
    (``<a>``, ``<b>``, ``<span>`` and similar) are removed outright and any
    other tag becomes a space. Entities are decoded last.
    """
    text = _SCRIPT_STYLE_RE.sub(" ", _to_str(html))
    text = _BR_RE.sub("\n", text)
    text = _BLOCK_CLOSE_RE.sub("\n", text)
    text = _INLINE_TAG_RE.sub("", text)
    text = _TAG_RE.sub(" ", text)
    text = decode_html_entities(text)
    text = _INLINE_SPACE_RE.sub(" ", text)
    text = _LEADING_WS_RE.sub("", text)
    return normalize_multiline(text)
