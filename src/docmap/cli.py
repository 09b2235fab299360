"""CLI interface for docmap.

Command-line tool for serving and inspecting documentation navigation.
"""

import json
import logging
from pathlib import Path

import click

from docmap.config import Config
from docmap.core.normalize import NormalizationResult, normalize_pages, to_url_path
from docmap.core.page_map import PageMapElement, PageMapError, load_page_map, split_meta

_VIEWS = ("all", "directories", "docs", "flat", "navbar")


@click.group()
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable debug logging",
)
def cli(verbose: bool) -> None:
    """docmap - Navigation models for documentation sites."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover docmap.toml)",
)
@click.option(
    "--page-map",
    type=click.Path(exists=True, path_type=Path, dir_okay=False),
    default=None,
    help="Page-map JSON file (overrides config)",
)
@click.option(
    "--host",
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    help="Port to bind to (overrides config)",
)
@click.option(
    "--live-reload/--no-live-reload",
    default=None,
    help="Enable/disable live reload (overrides config, default: enabled)",
)
@click.option(
    "--cache/--no-cache",
    default=None,
    help="Enable/disable result caching (overrides config, default: enabled)",
)
def serve(
    config_path: Path | None,
    page_map: Path | None,
    host: str | None,
    port: int | None,
    live_reload: bool | None,
    cache: bool | None,
) -> None:
    """Start the navigation API server."""
    from docmap.server import run_server

    try:
        config = Config.load(config_path)
    except (FileNotFoundError, ValueError) as e:
        raise click.ClickException(str(e)) from e

    config = config.with_overrides(
        host=host,
        port=port,
        page_map=page_map,
        cache_enabled=cache,
        live_reload_enabled=live_reload,
    )

    click.echo(f"Starting server on {config.server.host}:{config.server.port}")
    click.echo(f"Page map: {config.site.page_map}")
    if config.cache.enabled:
        click.echo(f"Cache: {config.cache.max_entries} entries")
    else:
        click.echo("Cache: disabled")
    if config.live_reload.enabled:
        click.echo("Live reload: enabled")
    else:
        click.echo("Live reload: disabled")

    verbose = logging.getLogger().isEnabledFor(logging.DEBUG)
    run_server(config, verbose=verbose)


@cli.command()
@click.argument("page_map_file", type=click.Path(exists=True, path_type=Path, dir_okay=False))
@click.option(
    "--route",
    "-r",
    default="/",
    help="Requested route (default: /)",
)
@click.option(
    "--view",
    type=click.Choice(_VIEWS),
    default="all",
    help="Which part of the result to print",
)
def normalize(page_map_file: Path, route: str, view: str) -> None:
    """Print the navigation model of a page map for a route."""
    page_map = _load(page_map_file)
    result = normalize_pages(page_map, to_url_path(route))
    click.echo(json.dumps(_select_view(result, view), indent=2))


@cli.command()
@click.argument("page_map_file", type=click.Path(exists=True, path_type=Path, dir_okay=False))
def check(page_map_file: Path) -> None:
    """Validate a page map and report its size."""
    page_map = _load(page_map_file)
    folders, files = _count_nodes(page_map)
    click.echo(f"Page map OK: {folders} folders, {files} files")


def _load(path: Path) -> list[PageMapElement]:
    try:
        return load_page_map(path)
    except (FileNotFoundError, PageMapError) as e:
        raise click.ClickException(str(e)) from e


def _select_view(result: NormalizationResult, view: str) -> object:
    data = result.to_dict()
    if view == "directories":
        return data["directories"]
    if view == "docs":
        return data["docsDirectories"]
    if view == "flat":
        return data["flatDocsDirectories"]
    if view == "navbar":
        return data["topLevelNavbarItems"]
    return data


def _count_nodes(page_map: list[PageMapElement]) -> tuple[int, int]:
    """Count folders and leaf nodes recursively."""
    folders = 0
    files = 0
    _, nodes = split_meta(page_map)
    for node in nodes:
        if node.children is not None:
            folders += 1
            child_folders, child_files = _count_nodes(node.children)
            folders += child_folders
            files += child_files
        else:
            files += 1
    return folders, files


def main() -> None:
    """Entry point for the docmap command."""
    cli()
