"""Command-line interface for PageLens."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import click
import structlog
from rich.console import Console
from rich.markup import escape

from pagelens import __version__
from pagelens.config import Config, load_config
from pagelens.exceptions import ConfigError
from pagelens.observability import configure_logging, set_enabled
from pagelens.page import Page

err_console = Console(stderr=True)
logger = structlog.get_logger(__name__)

PROJECTION_FIELDS = (
    "url",
    "scheme",
    "host",
    "port",
    "title",
    "description",
    "meta",
    "links",
    "images",
    "javascripts",
    "stylesheets",
    "favicon",
    "language",
    "structured_data",
    "microdata",
    "security_info",
    "content_type",
    "size",
    "load_time",
    "technologies",
    "tag_count",
    "response",
    "error",
)


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", type=click.Path(exists=True, dir_okay=False), help="Configuration file path")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level (overrides the configuration file)",
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], log_level: Optional[str]) -> None:
    """PageLens - extract metadata from web pages."""
    ctx.ensure_object(dict)
    try:
        settings = load_config(Path(config) if config else None)
    except ConfigError as e:
        err_console.print(f"[red]Configuration error: {escape(str(e))}[/red]")
        ctx.exit(2)

    if log_level:
        monitoring = settings.monitoring.model_copy(update={"log_level": log_level.upper()})
        settings = settings.model_copy(update={"monitoring": monitoring})

    configure_logging(settings.monitoring)
    set_enabled(settings.monitoring.metrics_enabled)
    ctx.obj["config"] = settings


def _project(page: Page, fields: Sequence[str], domain: Optional[str], words: Sequence[str]) -> Dict[str, Any]:
    data = page.to_dict()
    if fields:
        data = {name: data[name] for name in fields}
    if domain is not None:
        data["domain_links"] = page.domain_links(domain or None)
        data["domain_images"] = page.domain_images(domain or None)
    if words:
        data["find"] = page.find(list(words))
    return data


def _emit(
    ctx: click.Context,
    page: Page,
    fields: Sequence[str],
    domain: Optional[str],
    words: Sequence[str],
    pretty: bool,
) -> None:
    data = _project(page, fields, domain, words)
    click.echo(json.dumps(data, indent=2 if pretty else None, ensure_ascii=False, default=str))
    if not page.success:
        message = escape(page.error_message or "")
        err_console.print(f"[red]Failed to inspect {escape(page.request.raw_url)}: {message}[/red]")
        ctx.exit(1)


def _projection_options(command: Any) -> Any:
    options = [
        click.option(
            "--field",
            "-f",
            "fields",
            multiple=True,
            type=click.Choice(PROJECTION_FIELDS),
            help="Only print these fields (can be used multiple times)",
        ),
        click.option(
            "--domain",
            default=None,
            help="Add links and images within this domain; pass an empty string for the page's own domain",
        ),
        click.option("--find", "words", multiple=True, help="Count occurrences of a word (can be used multiple times)"),
        click.option("--pretty/--compact", default=True, help="Indent the JSON output"),
    ]
    for option in reversed(options):
        command = option(command)
    return command


@cli.command()
@click.argument("url")
@_projection_options
@click.pass_context
def inspect(
    ctx: click.Context,
    url: str,
    fields: tuple[str, ...],
    domain: Optional[str],
    words: tuple[str, ...],
    pretty: bool,
) -> None:
    """Fetch URL and print its metadata as JSON."""
    config: Config = ctx.obj["config"]
    logger.info("Inspecting page", url=url)
    page = Page(url, config=config)
    _emit(ctx, page, fields, domain, words, pretty)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--url", required=True, help="URL the file was retrieved from; relative links resolve against it")
@_projection_options
@click.pass_context
def parse(
    ctx: click.Context,
    file: Path,
    url: str,
    fields: tuple[str, ...],
    domain: Optional[str],
    words: tuple[str, ...],
    pretty: bool,
) -> None:
    """Print metadata of a local HTML FILE as JSON, without network access."""
    config: Config = ctx.obj["config"]
    html = file.read_text(encoding="utf-8", errors="replace")
    logger.info("Parsing local file", path=str(file), url=url)
    page = Page.from_html(html, url, config=config)
    _emit(ctx, page, fields, domain, words, pretty)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
