"""Centralised settings for the title proxy.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).  Settings are read once
at startup; there is no hot reload.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlsplit

from dotenv import load_dotenv

# Load .env from the project root (one level up from the package)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

_TRUTHY = {"1", "true", "yes", "on"}


class ConfigError(ValueError):
    """Raised by :meth:`Settings.validate` when a value is out of range."""


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in _TRUTHY


def _is_http_url(value: str) -> bool:
    parts = urlsplit(value)
    return parts.scheme in ("http", "https") and bool(parts.netloc)


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # HTTP server
    # ------------------------------------------------------------------
    host: str = field(default_factory=lambda: os.environ.get("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.environ.get("PORT", "3000")))
    proxy_token: str = field(
        default_factory=lambda: os.environ.get("PROXY_TOKEN", "")
    )
    log_level: str = field(
        default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO").upper()
    )

    # ------------------------------------------------------------------
    # Chat completion model
    # ------------------------------------------------------------------
    openai_api_key: str = field(
        default_factory=lambda: os.environ.get("OPENAI_API_KEY", "")
    )
    openai_model: str = field(
        default_factory=lambda: os.environ.get("OPENAI_MODEL", "gpt-4o-mini")
    )
    openai_base_url: str = field(
        default_factory=lambda: os.environ.get(
            "OPENAI_BASE_URL", "https://api.openai.com/v1"
        )
    )
    openai_timeout: float = field(
        default_factory=lambda: float(os.environ.get("OPENAI_TIMEOUT", "60.0"))
    )

    # ------------------------------------------------------------------
    # Guide crawler / context
    # ------------------------------------------------------------------
    guide_root_url: str = field(
        default_factory=lambda: os.environ.get("GUIDE_ROOT_URL", "").strip()
    )
    guide_context_flag: bool = field(
        default_factory=lambda: _env_flag("GUIDE_CONTEXT_ENABLED", "true")
    )
    guide_max_pages: int = field(
        default_factory=lambda: int(os.environ.get("GUIDE_MAX_PAGES", "24"))
    )
    guide_cache_ttl_ms: int = field(
        default_factory=lambda: int(os.environ.get("GUIDE_CACHE_TTL_MS", str(6 * 60 * 60 * 1000)))
    )
    guide_fetch_timeout_ms: int = field(
        default_factory=lambda: int(os.environ.get("GUIDE_FETCH_TIMEOUT_MS", "12000"))
    )

    @property
    def guide_context_enabled(self) -> bool:
        """Guide context is gathered only when switched on and a root is set."""
        return self.guide_context_flag and bool(self.guide_root_url)

    @property
    def guide_cache_ttl(self) -> float:
        """Cache TTL in seconds."""
        return self.guide_cache_ttl_ms / 1000

    @property
    def guide_fetch_timeout(self) -> float:
        """Per-fetch timeout in seconds."""
        return self.guide_fetch_timeout_ms / 1000

    @property
    def chat_completions_url(self) -> str:
        return f"{self.openai_base_url.rstrip('/')}/chat/completions"

    def validate(self) -> None:
        """Check every value once at startup.

        Raises:
            ConfigError: Describing the first invalid setting found.
        """
        if not 1 <= self.port <= 65535:
            raise ConfigError(f"PORT must be between 1 and 65535, got {self.port}")
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ConfigError(f"LOG_LEVEL {self.log_level!r} is not a logging level")
        if not self.openai_model.strip():
            raise ConfigError("OPENAI_MODEL must not be empty")
        if not _is_http_url(self.openai_base_url):
            raise ConfigError(f"OPENAI_BASE_URL {self.openai_base_url!r} is not an http(s) URL")
        if self.openai_timeout <= 0:
            raise ConfigError("OPENAI_TIMEOUT must be positive")
        if self.guide_root_url and not _is_http_url(self.guide_root_url):
            raise ConfigError(f"GUIDE_ROOT_URL {self.guide_root_url!r} is not an http(s) URL")
        if not 1 <= self.guide_max_pages <= 500:
            raise ConfigError(
                f"GUIDE_MAX_PAGES must be between 1 and 500, got {self.guide_max_pages}"
            )
        if self.guide_cache_ttl_ms < 1000:
            raise ConfigError("GUIDE_CACHE_TTL_MS must be at least 1000")
        if not 100 <= self.guide_fetch_timeout_ms <= 120_000:
            raise ConfigError(
                "GUIDE_FETCH_TIMEOUT_MS must be between 100 and 120000, "
                f"got {self.guide_fetch_timeout_ms}"
            )


def configure_logging(level: str | None = None) -> None:
    """Install the root log format used by the server and the CLI."""
    logging.basicConfig(
        level=level or settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


# Module-level singleton; import this everywhere:
#   from title_proxy.config import settings
settings = Settings()
