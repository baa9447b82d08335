"""Error responses for the proxy endpoints.

Every failure is rendered as ``{"error": "...", "detail": "..."}`` where
``detail`` is present only when there is something useful to add (e.g. the
upstream API's response body).
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from title_proxy.llm import LLMConfigError, LLMRequestError

logger = logging.getLogger(__name__)


class ProxyError(Exception):
    """An error with an HTTP status and a short public message."""

    def __init__(self, status_code: int, error: str, detail: Any = None) -> None:
        self.status_code = status_code
        self.error = error
        self.detail = detail
        super().__init__(error)


def error_response(status_code: int, error: str, detail: Any = None) -> JSONResponse:
    content: dict[str, Any] = {"error": error}
    if detail is not None:
        content["detail"] = detail
    return JSONResponse(status_code=status_code, content=content)


async def proxy_error_handler(request: Request, exc: ProxyError) -> JSONResponse:
    return error_response(exc.status_code, exc.error, exc.detail)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ())[1:]) or "body"
    return error_response(400, f"{field}: {first.get('msg', 'invalid request')}")


async def llm_config_error_handler(request: Request, exc: LLMConfigError) -> JSONResponse:
    return error_response(500, str(exc))


async def llm_request_error_handler(request: Request, exc: LLMRequestError) -> JSONResponse:
    return error_response(502, "OpenAI request failed", exc.detail)


async def transport_error_handler(request: Request, exc: httpx.HTTPError) -> JSONResponse:
    logger.warning("Upstream transport error on %s: %s", request.url.path, exc)
    return error_response(500, str(exc) or type(exc).__name__)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ProxyError, proxy_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(LLMConfigError, llm_config_error_handler)
    app.add_exception_handler(LLMRequestError, llm_request_error_handler)
    app.add_exception_handler(httpx.HTTPError, transport_error_handler)
