"""CLI entry point for go-openapi-gen."""

import logging
from pathlib import Path

import click

from go_openapi_gen.analyzer.models import ConflictPolicy
from go_openapi_gen.analyzer.project import ProjectAnalyzer
from go_openapi_gen.config import GeneratorConfig, load_config
from go_openapi_gen.errors import GoOpenAPIError
from go_openapi_gen.generator.generator import Generator
from go_openapi_gen.heuristics.loader import load_heuristics
from go_openapi_gen.output import detect_format, write_document

POLICIES = [p.value for p in ConflictPolicy]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _build_config(config_path: Path | None, **overrides) -> GeneratorConfig:
    """Config file values, overridden by the options given on the command line."""
    config = load_config(config_path) if config_path else GeneratorConfig()
    given = {key: value for key, value in overrides.items() if value is not None}
    if not given:
        return config
    return GeneratorConfig.model_validate({**config.model_dump(), **given})


def _project_analyzer(config: GeneratorConfig) -> ProjectAnalyzer:
    return ProjectAnalyzer(
        config.project_path,
        sdk_package=config.sdk_package,
        routes_pattern=config.routes_pattern,
        heuristics=load_heuristics(config.heuristics),
        conflict_policy=config.conflict_policy,
    )


def _report_directory(label: str, path: Path) -> None:
    if path.is_dir():
        click.echo(f"{label} directory found: {path}")
    else:
        click.echo(f"Warning: {label} directory not found: {path}")


@click.group()
def main():
    """go-openapi-gen: generate OpenAPI documents from Go (Fiber) source code."""
    pass


@main.command()
@click.option("-c", "--config", "config_path", default=None, type=click.Path(exists=True, dir_okay=False, path_type=Path), help="JSON or YAML config file.")
@click.option("-p", "--project", "project_path", default=None, type=click.Path(path_type=Path), help="Go project root.")
@click.option("-o", "--output", "output_path", default=None, type=click.Path(path_type=Path), help="Output file path.")
@click.option("--format", "output_format", default=None, type=click.Choice(["auto", "json", "yaml"]), help="Output format.")
@click.option("--server", "server_url", default=None, help="Server URL.")
@click.option("--title", default=None, help="API title.")
@click.option("--api-version", "version", default=None, help="API version.")
@click.option("--description", default=None, help="API description.")
@click.option("--routes-pattern", default=None, help="Glob of route files, relative to the project.")
@click.option("--sdk-package", default=None, help="Directory (and package) holding the models.")
@click.option("--conflict-policy", default=None, type=click.Choice(POLICIES), help="How to resolve model name conflicts.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def generate(config_path: Path | None, verbose: bool, **options):
    """Analyze a Go project and write its OpenAPI document."""
    _configure_logging(verbose)
    try:
        config = _build_config(config_path, **options)
        analyzer = _project_analyzer(config)

        _report_directory("SDK", analyzer.sdk_dir)
        _report_directory("Routes", config.project_path / config.routes_pattern.split("/", 1)[0])

        click.echo(f"Analyzing {config.project_path}...")
        analysis = analyzer.analyze()
        click.echo(f"Found {len(analysis.models)} models and {len(analysis.routes)} routes.")

        document = Generator(config.document_config(), analyzer.heuristics).generate(analysis)

        fmt = config.output_format
        if fmt == "auto":
            fmt = detect_format(config.output_path)
        size = write_document(document, config.output_path, fmt)
    except GoOpenAPIError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"OpenAPI document saved to {config.output_path} ({size} bytes)")


@main.command()
@click.option("-c", "--config", "config_path", default=None, type=click.Path(exists=True, dir_okay=False, path_type=Path), help="JSON or YAML config file.")
@click.option("-p", "--project", "project_path", default=None, type=click.Path(path_type=Path), help="Go project root.")
@click.option("--routes-pattern", default=None, help="Glob of route files, relative to the project.")
@click.option("--sdk-package", default=None, help="Directory (and package) holding the models.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def routes(config_path: Path | None, verbose: bool, **options):
    """List the routes discovered in a Go project."""
    _configure_logging(verbose)
    try:
        analysis = _project_analyzer(_build_config(config_path, **options)).analyze()
    except GoOpenAPIError as e:
        raise click.ClickException(str(e)) from e

    for route in analysis.routes:
        click.echo(f"{route.method} {route.path} -> {route.handler}")
    click.echo(f"Found {len(analysis.routes)} routes.")
