"""
Command line interface for the inkpress site generator.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .config import ConfigError, SiteConfig, get_settings, load_config
from .config.models import DEFAULT_CONFIG_NAME
from .pipeline import BuildReport, SiteBuilder, install_transformers
from .web import ScaffoldReport, generate_site_skeleton

console = Console()
app = typer.Typer(help="Build static sites from s-expression templates.")
logger = logging.getLogger(__name__)

LOG_LEVELS = ["critical", "error", "warning", "info", "debug"]


def _configure_logging(level_name: str) -> None:
    env_override = get_settings().log_level
    level_str = (env_override or level_name or "info").upper()
    if level_str not in {lvl.upper() for lvl in LOG_LEVELS}:
        level_str = "INFO"
    logging.basicConfig(
        level=getattr(logging, level_str, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.debug("Logging configured at %s", level_str)


def _default_config_path() -> Path:
    return get_settings().config_path or Path(DEFAULT_CONFIG_NAME)


def _resolve_config_path(value: Optional[Path]) -> Path:
    """Ensure config path exists and return absolute path."""
    resolved = (value or _default_config_path()).expanduser().resolve()
    if not resolved.exists():
        raise typer.BadParameter(f"No config file found at {resolved}")
    if not resolved.is_file():
        raise typer.BadParameter(f"Config path must be a file, got directory: {resolved}")
    return resolved


def _load_config_or_exit(path: Path) -> SiteConfig:
    try:
        return load_config(path)
    except ConfigError as exc:
        console.print(f"[bold red]Configuration error:[/] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc


def _make_builder(config: SiteConfig) -> SiteBuilder:
    install_transformers(config)
    return SiteBuilder(config)


def _print_build_report(report: BuildReport) -> None:
    table = Table(title="Build Summary")
    table.add_column("Key")
    table.add_column("Value", overflow="fold")
    for key, value in report.summary_rows():
        table.add_row(key, value)
    console.print(table)
    if report.failures:
        console.print("[bold red]Some pages could not be compiled:[/]")
        for label, reason in report.failures.items():
            console.print(f"- {escape(label)}: {escape(reason)}")


def _print_scaffold_report(report: ScaffoldReport) -> None:
    table = Table(title="Scaffold Summary")
    table.add_column("Key")
    table.add_column("Value")
    for key, value in report.summary_rows():
        table.add_row(key, value)
    console.print(table)


_CONFIG_OPTION_HELP = f"Path to the site configuration TOML (default: $INKPRESS_CONFIG or ./{DEFAULT_CONFIG_NAME})."


@app.callback(invoke_without_command=True)
def _root_command(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show inkpress version and exit.",
        is_flag=True,
    ),
    log_level: str = typer.Option(
        "info",
        "--log-level",
        help="Logging level (critical, error, warning, info, debug).",
        show_default=True,
        case_sensitive=False,
    ),
) -> None:
    """
    Default command when no subcommand is selected.
    """
    _configure_logging(log_level)

    if version:
        console.print(f"[bold green]inkpress[/] {__version__}")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(
            "[bold yellow]inkpress[/] is ready. Run [cyan]inkpress init my-site[/] to start a site "
            "or [cyan]inkpress build[/] inside one.",
        )


@app.command()
def build(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help=_CONFIG_OPTION_HELP),
) -> None:
    """
    Compile every template and every tag page into the public directory.
    """
    config_path = _resolve_config_path(config)
    logger.info("Loading configuration from %s", config_path)
    site_config = _load_config_or_exit(config_path)
    builder = _make_builder(site_config)
    report = builder.build()
    _print_build_report(report)
    if not report.succeeded:
        raise typer.Exit(code=1)
    console.print("[bold green]Build completed.[/]")


@app.command()
def template(
    names: List[str] = typer.Argument(..., help="Template names relative to the template directory."),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help=_CONFIG_OPTION_HELP),
) -> None:
    """
    Compile only the named templates.
    """
    site_config = _load_config_or_exit(_resolve_config_path(config))
    builder = _make_builder(site_config)
    results = [builder.compile_template(name) for name in names]
    _print_build_report(builder.report)
    if not all(results):
        raise typer.Exit(code=1)


@app.command()
def tag(
    names: List[str] = typer.Argument(..., help="Tag names whose index pages should be compiled."),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help=_CONFIG_OPTION_HELP),
) -> None:
    """
    Compile only the index pages of the named tags.
    """
    site_config = _load_config_or_exit(_resolve_config_path(config))
    builder = _make_builder(site_config)
    results = [builder.compile_tag(name) for name in names]
    _print_build_report(builder.report)
    if not all(results):
        raise typer.Exit(code=1)


@app.command()
def posts(
    tag_filter: List[str] = typer.Option(None, "--tag", "-t", help="Only list posts carrying these tags."),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help=_CONFIG_OPTION_HELP),
) -> None:
    """
    List posts newest first, with their URLs and tags.
    """
    site_config = _load_config_or_exit(_resolve_config_path(config))
    builder = SiteBuilder(site_config)
    entries = builder.get_posts(tag_filter or None)

    table = Table(title="Posts")
    table.add_column("Date")
    table.add_column("Title", overflow="fold")
    table.add_column("URL", overflow="fold")
    table.add_column("Tags")
    for entry in entries:
        table.add_row(
            entry.date.isoformat(),
            entry.title or entry.name,
            entry.url,
            ", ".join(entry.options.tag_names),
        )
    console.print(table)

    tags_table = Table(title="Tags")
    tags_table.add_column("Tag")
    tags_table.add_column("Posts")
    for item in builder.get_tags(entries):
        tags_table.add_row(item.name, str(item.count))
    console.print(tags_table)


@app.command()
def init(
    directory: Path = typer.Argument(Path("."), help="Directory to create the site in."),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Site name (defaults to the directory name)."),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Rewrite starter files even if they already exist.",
    ),
) -> None:
    """
    Create a starter site: configuration, layouts, an index page, a feed and a welcome post.
    """
    report = generate_site_skeleton(directory, name=name, force=force)
    _print_scaffold_report(report)


def main() -> None:
    """
    Entry-point used by the console script defined in pyproject.toml.
    """
    app()
