"""Tests for the title-proxy CLI (serve is not exercised)."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import httpx
import pytest
import respx
from typer.testing import CliRunner

from cli.main import app
from title_proxy.llm import LLMConfigError

runner = CliRunner()

ROOT = "https://example.com/portal/index.html"
BASE = "https://example.com/portal/"

_FILLER = (
    "This help page explains the feature in enough detail to be kept by the "
    "crawler as a real content page rather than a redirect stub."
)


def _page(title: str, *links: str, body: str = _FILLER) -> str:
    anchors = "".join(f'<a href="{href}">{href}</a>' for href in links)
    return (
        f"<html><head><title>{title}</title></head>"
        f"<body><h1>{title}</h1><p>{body}</p>{anchors}</body></html>"
    )


@pytest.fixture(autouse=True)
def cli_settings(monkeypatch):
    """Known-good settings with no guide root configured."""
    monkeypatch.setattr("title_proxy.config.settings.guide_root_url", "")
    monkeypatch.setattr("title_proxy.config.settings.guide_max_pages", 24)
    monkeypatch.setattr("title_proxy.config.settings.guide_fetch_timeout_ms", 12000)
    monkeypatch.setattr("title_proxy.config.settings.log_level", "WARNING")


def test_invalid_config_exits_2(monkeypatch):
    """A setting out of range stops every command before it runs."""
    monkeypatch.setattr("title_proxy.config.settings.guide_max_pages", 0)

    result = runner.invoke(app, ["guide", "crawl", "--root", ROOT])

    assert result.exit_code == 2
    assert "GUIDE_MAX_PAGES" in result.output


# ---------------------------------------------------------------------------
# title
# ---------------------------------------------------------------------------

def test_title_prints_clean_title():
    llm = AsyncMock(return_value="「請求書PDFを再発行できない」")
    with patch("title_proxy.api.routers.title.chat_completion", new=llm):
        result = runner.invoke(app, ["title", "--text", "請求書の PDF を\nもう一度出したい"])

    assert result.exit_code == 0, result.output
    assert result.output.strip() == "請求書PDFを再発行できない"
    assert llm.call_args.args[1] == "請求書の PDF を もう一度出したい"


def test_title_blank_text_exits_1():
    result = runner.invoke(app, ["title", "--text", "   "])

    assert result.exit_code == 1
    assert "text is required" in result.output


def test_title_llm_error_exits_1():
    llm = AsyncMock(side_effect=LLMConfigError("OPENAI_API_KEY is not set"))
    with patch("title_proxy.api.routers.title.chat_completion", new=llm):
        result = runner.invoke(app, ["title", "--text", "something"])

    assert result.exit_code == 1
    assert "OPENAI_API_KEY is not set" in result.output


def test_title_transport_error_exits_1():
    llm = AsyncMock(side_effect=httpx.ConnectError("connection refused"))
    with patch("title_proxy.api.routers.title.chat_completion", new=llm):
        result = runner.invoke(app, ["title", "--text", "something"])

    assert result.exit_code == 1
    assert "[title] connection refused" in result.output


# ---------------------------------------------------------------------------
# guide crawl
# ---------------------------------------------------------------------------

def test_guide_crawl_lists_pages():
    with respx.mock(assert_all_called=False) as respx_mock:
        respx_mock.get(ROOT).mock(return_value=httpx.Response(200, text=_page("Portal", "csv.html")))
        respx_mock.get(BASE + "csv.html").mock(return_value=httpx.Response(200, text=_page("CSV import")))

        result = runner.invoke(app, ["guide", "crawl", "--root", ROOT])

    assert result.exit_code == 0, result.output
    assert f"  {ROOT}  'Portal'" in result.output
    assert f"  {BASE}csv.html  'CSV import'" in result.output
    assert "[guide crawl] 2 page(s)." in result.output


def test_guide_crawl_respects_max_pages():
    with respx.mock(assert_all_called=False) as respx_mock:
        respx_mock.get(ROOT).mock(return_value=httpx.Response(200, text=_page("Portal", "csv.html")))
        csv = respx_mock.get(BASE + "csv.html").mock(
            return_value=httpx.Response(200, text=_page("CSV import"))
        )

        result = runner.invoke(app, ["guide", "crawl", "--root", ROOT, "--max-pages", "1"])

    assert result.exit_code == 0, result.output
    assert "[guide crawl] 1 page(s)." in result.output
    assert not csv.called


def test_guide_crawl_uses_configured_root(monkeypatch):
    monkeypatch.setattr("title_proxy.config.settings.guide_root_url", ROOT)
    with respx.mock:
        respx.get(ROOT).mock(return_value=httpx.Response(200, text=_page("Portal")))

        result = runner.invoke(app, ["guide", "crawl"])

    assert result.exit_code == 0, result.output
    assert "[guide crawl] 1 page(s)." in result.output


def test_guide_crawl_root_failure_exits_1():
    with respx.mock:
        respx.get(ROOT).mock(return_value=httpx.Response(503, text="down"))

        result = runner.invoke(app, ["guide", "crawl", "--root", ROOT])

    assert result.exit_code == 1
    assert "guide root unreachable" in result.output


def test_guide_crawl_without_root_exits_1():
    result = runner.invoke(app, ["guide", "crawl"])

    assert result.exit_code == 1
    assert "No root URL" in result.output


# ---------------------------------------------------------------------------
# guide context
# ---------------------------------------------------------------------------

def test_guide_context_prints_blocks():
    with respx.mock(assert_all_called=False) as respx_mock:
        respx_mock.get(ROOT).mock(return_value=httpx.Response(200, text=_page("Portal", "csv.html")))
        respx_mock.get(BASE + "csv.html").mock(
            return_value=httpx.Response(
                200, text=_page("CSV import", body=_FILLER + " Upload the CSV file from Settings.")
            )
        )

        result = runner.invoke(app, ["guide", "context", "--question", "CSV upload", "--root", ROOT])

    assert result.exit_code == 0, result.output
    assert "#1 CSV import" in result.output
    assert f"URL: {BASE}csv.html" in result.output


def test_guide_context_reports_crawl_failure():
    with respx.mock:
        respx.get(ROOT).mock(return_value=httpx.Response(503, text="down"))

        result = runner.invoke(app, ["guide", "context", "--question", "CSV", "--root", ROOT])

    assert result.exit_code == 0
    assert "Crawl failed" in result.output
    assert "No guide context available." in result.output
