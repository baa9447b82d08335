"""Chat-completion client for the OpenAI-compatible API.

Only the non-streaming ``/chat/completions`` call is needed: both endpoints
send a system prompt plus one user message and read back the first choice.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from title_proxy.config import settings

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """Base class for chat-completion failures."""


class LLMConfigError(LLMError):
    """The API key is missing."""


class LLMRequestError(LLMError):
    """The API answered with a non-2xx status.

    ``detail`` carries the upstream response body for the caller.
    """

    def __init__(self, status_code: int, detail: str) -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"chat completion failed with HTTP {status_code}")


def _first_choice_text(payload: Any) -> str:
    try:
        content = payload["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return ""
    return content if isinstance(content, str) else ""


async def chat_completion(
    system: str,
    user: str,
    *,
    temperature: float,
    max_tokens: int,
) -> str:
    """Send one system + user exchange and return the reply text.

    Args:
        system: System prompt.
        user: User message.
        temperature: Sampling temperature.
        max_tokens: Upper bound on generated tokens.

    Returns:
        The first choice's message content, or ``""`` if the reply had none.

    Raises:
        LLMConfigError: If ``OPENAI_API_KEY`` is not set.
        LLMRequestError: If the API returns a non-2xx status.
        httpx.HTTPError: On transport failures.
    """
    api_key = settings.openai_api_key
    if not api_key:
        raise LLMConfigError("OPENAI_API_KEY is not set")

    async with httpx.AsyncClient(timeout=settings.openai_timeout) as client:
        response = await client.post(
            settings.chat_completions_url,
            headers={"Authorization": f"Bearer {api_key}"},
            json={
                "model": settings.openai_model,
                "temperature": temperature,
                "max_tokens": max_tokens,
                "messages": [
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
            },
        )

    if not response.is_success:
        logger.warning("Chat completion returned HTTP %d", response.status_code)
        raise LLMRequestError(response.status_code, response.text)

    try:
        payload = response.json()
    except ValueError:
        return ""
    return _first_choice_text(payload)
