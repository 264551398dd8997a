"""CLI entry point for apidoc-extractor."""

import logging
import sys
from pathlib import Path

import click

from apidoc_extractor.config import ExtractorConfig, load_config
from apidoc_extractor.emitter.json_doc import write_json
from apidoc_extractor.emitter.markdown import write_markdown
from apidoc_extractor.errors import ConfigError, ProjectError
from apidoc_extractor.extractor.aggregate import extract_endpoints
from apidoc_extractor.parser.base import EndpointDocument
from apidoc_extractor.source.project import Project

FORMATS = {"json": ["json"], "markdown": ["markdown"], "all": ["json", "markdown"]}


def configure_logging(level: int = logging.INFO) -> None:
    """Send log records to stderr, one timestamped line each."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
        force=True,
    )


def _load(root: Path, overrides: dict) -> tuple[ExtractorConfig, list[EndpointDocument]]:
    """Load config and project, then extract all endpoints."""
    try:
        config = load_config(root, overrides)
        project = Project.load(root, config)
    except (ConfigError, ProjectError) as e:
        raise click.ClickException(str(e)) from e
    return config, extract_endpoints(project)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """Build endpoint docs from NestJS controller decorators."""
    configure_logging(logging.DEBUG if verbose else logging.WARNING)


@main.command()
@click.argument("root", default=".", type=click.Path(file_okay=False, path_type=Path))
@click.option("--format", "fmt", default=None, type=click.Choice(list(FORMATS)), help="Output document(s) to write.")
@click.option("-o", "--output", default=None, type=click.Path(file_okay=False, path_type=Path), help="Output directory, relative to ROOT unless absolute.")
@click.option("--pattern", default=None, help="Glob selecting controller files.")
def generate(root: Path, fmt: str | None, output: Path | None, pattern: str | None):
    """Extract endpoint documentation and write it under the output directory."""
    overrides = {
        "formats": FORMATS[fmt] if fmt else None,
        "output_dir": str(output) if output else None,
        "pattern": pattern,
    }
    config, endpoints = _load(root, overrides)

    output_dir = root / config.output_dir
    if "json" in config.formats:
        path = write_json(endpoints, output_dir / config.json_filename)
        click.echo(f"API documentation extracted and saved to {path}")
    if "markdown" in config.formats:
        path = write_markdown(endpoints, output_dir / config.markdown_filename)
        click.echo(f"API documentation generated in {path}")


@main.command()
@click.argument("root", default=".", type=click.Path(file_okay=False, path_type=Path))
@click.option("--pattern", default=None, help="Glob selecting controller files.")
def routes(root: Path, pattern: str | None):
    """List the extracted endpoints as 'VERB route' lines."""
    _, endpoints = _load(root, {"pattern": pattern})
    for ep in endpoints:
        click.echo(f"{ep.method:<7} {ep.route}")
    click.echo(f"Found {len(endpoints)} endpoints.")
