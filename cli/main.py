"""title-proxy CLI — entry-point for running and inspecting the proxy.

Usage:
    title-proxy --help

Commands:
    serve           → run the HTTP server
    title           → summarise text into a one-line title
    guide crawl     → crawl the help site once and list the pages found
    guide context   → print the guide context a draft request would receive
"""

from __future__ import annotations

import asyncio
from typing import Optional

import httpx
import typer

from title_proxy.config import ConfigError, configure_logging, settings

app = typer.Typer(
    name="title-proxy",
    help="Title / draft-answer proxy CLI.",
    no_args_is_help=True,
)


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override LOG_LEVEL."),
) -> None:
    """Validate settings and set up logging before any command runs."""
    if log_level:
        settings.log_level = log_level.upper()
    try:
        settings.validate()
    except ConfigError as exc:
        typer.echo(f"[config] {exc}", err=True)
        raise typer.Exit(2)
    configure_logging()


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------

@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, help="Bind address (default: HOST)."),
    port: Optional[int] = typer.Option(None, help="Port (default: PORT)."),
) -> None:
    """Run the proxy with uvicorn."""
    import uvicorn

    uvicorn.run(
        "title_proxy.api.app:app",
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level.lower(),
    )


@app.command("title")
def title(
    text: str = typer.Option(..., help="Text to summarise."),
) -> None:
    """Summarise TEXT into a one-line title using the configured model."""
    from title_proxy.api.routers.title import summarize_title
    from title_proxy.guide.text import clean_inline
    from title_proxy.llm import LLMError

    source = clean_inline(text)
    if not source:
        typer.echo("[title] text is required", err=True)
        raise typer.Exit(1)
    try:
        result = asyncio.run(summarize_title(source))
    except (LLMError, httpx.HTTPError) as exc:
        typer.echo(f"[title] {exc or type(exc).__name__}", err=True)
        raise typer.Exit(1)
    if not result:
        typer.echo("[title] Empty summary result", err=True)
        raise typer.Exit(1)
    typer.echo(result)


# ---------------------------------------------------------------------------
# Guide commands
# ---------------------------------------------------------------------------
guide_app = typer.Typer(help="Help-site guide crawl and context.", no_args_is_help=True)
app.add_typer(guide_app, name="guide")


def _root_or_exit(root: Optional[str]) -> str:
    root_url = root or settings.guide_root_url
    if not root_url:
        typer.echo("[guide] No root URL. Set GUIDE_ROOT_URL or pass --root.", err=True)
        raise typer.Exit(1)
    return root_url


@guide_app.command("crawl")
def guide_crawl(
    root: Optional[str] = typer.Option(None, help="Root page (default: GUIDE_ROOT_URL)."),
    max_pages: Optional[int] = typer.Option(None, "--max-pages", help="Page limit."),
) -> None:
    """Crawl the guide once and list every page kept."""
    from title_proxy.guide.crawler import GuideCrawler, GuideCrawlError

    root_url = _root_or_exit(root)
    crawler = GuideCrawler(
        root_url,
        max_pages=max_pages or settings.guide_max_pages,
        fetch_timeout=settings.guide_fetch_timeout,
    )
    typer.echo(f"[guide crawl] Crawling {root_url!r} …")
    try:
        pages = asyncio.run(crawler.crawl())
    except GuideCrawlError as exc:
        typer.echo(f"[guide crawl] {exc}", err=True)
        raise typer.Exit(1)

    if not pages:
        typer.echo("[guide crawl] No pages with usable text.")
        return
    for page in pages:
        typer.echo(f"  {page.url}  {page.title!r}  ({len(page.text)} chars)")
    typer.echo(f"[guide crawl] {len(pages)} page(s).")


@guide_app.command("context")
def guide_context(
    question: str = typer.Option(..., help="Question to build context for."),
    root: Optional[str] = typer.Option(None, help="Root page (default: GUIDE_ROOT_URL)."),
) -> None:
    """Crawl the guide and print the context block for QUESTION."""
    from title_proxy.guide.cache import GuideCache
    from title_proxy.guide.context import GuideContextBuilder
    from title_proxy.guide.crawler import GuideCrawler

    root_url = _root_or_exit(root)
    cache = GuideCache(
        GuideCrawler(
            root_url,
            max_pages=settings.guide_max_pages,
            fetch_timeout=settings.guide_fetch_timeout,
        ),
        ttl=settings.guide_cache_ttl,
    )
    context = asyncio.run(GuideContextBuilder(cache).build(question))

    status = cache.status()
    if status.last_error:
        typer.echo(f"[guide context] Crawl failed: {status.last_error}", err=True)
    if not context:
        typer.echo("[guide context] No guide context available.")
        return
    typer.echo(context)


if __name__ == "__main__":
    app()
