"""CLI entry point for roadmapgen.

Every option of ``generate`` can also be set through the environment
variables the CI workflow exports (GITHUB_TOKEN, GITHUB_ORG, PROJECT_ID,
README_PATH, MAX_ITEMS, DRY_RUN, VERBOSE).
"""

from __future__ import annotations

import logging
import signal
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import click

from roadmapgen import __version__
from roadmapgen.config import ConfigError, RoadmapConfig
from roadmapgen.github import (
    GitHubClient,
    GitHubError,
    ProjectNotFoundError,
    TokenResolutionError,
    resolve_token,
)
from roadmapgen.logging import setup_logging
from roadmapgen.pipeline import (
    CancellationToken,
    MermaidValidationError,
    PipelineError,
    RoadmapPipeline,
)
from roadmapgen.readme import ReadmeError
from roadmapgen.validator import MermaidValidator

logger = logging.getLogger("roadmapgen.cli")

_org_option = click.option(
    "--org",
    "organization",
    envvar=["GITHUB_ORG", "ORGANIZATION"],
    help="GitHub organization owning the project [env: GITHUB_ORG, ORGANIZATION]",
)
_token_option = click.option(
    "--token",
    envvar="GITHUB_TOKEN",
    default="",
    show_default=False,
    help="GitHub token; the GitHub CLI is asked when empty [env: GITHUB_TOKEN]",
)
_verbose_option = click.option(
    "-v",
    "--verbose",
    envvar="VERBOSE",
    is_flag=True,
    help="Enable debug logging [env: VERBOSE]",
)


@contextmanager
def cancel_on_signals(token: CancellationToken) -> Iterator[None]:
    """Cancel the token and exit on SIGINT/SIGTERM while the block runs."""

    def handle(signum: int, frame: object) -> None:
        name = signal.Signals(signum).name
        token.cancel(name)
        logger.warning("Received %s, shutting down", name)
        sys.exit(128 + signum)

    previous = {sig: signal.signal(sig, handle) for sig in (signal.SIGINT, signal.SIGTERM)}
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


@click.group()
@click.version_option(__version__)
def main() -> None:
    """roadmapgen - render a GitHub Project as a Mermaid Gantt roadmap."""
    pass


@main.command()
@_org_option
@_token_option
@click.option(
    "--project",
    "project_number",
    envvar="PROJECT_ID",
    type=int,
    default=1,
    show_default=True,
    help="Project number [env: PROJECT_ID]",
)
@click.option(
    "--readme",
    "readme_path",
    envvar="README_PATH",
    type=click.Path(dir_okay=False, path_type=Path),
    default=Path("README.md"),
    show_default=True,
    help="File to splice the roadmap into [env: README_PATH]",
)
@click.option(
    "--max-items",
    envvar="MAX_ITEMS",
    type=int,
    default=50,
    show_default=True,
    help="Maximum tasks on the chart, 0 for no limit [env: MAX_ITEMS]",
)
@click.option(
    "--dry-run",
    envvar="DRY_RUN",
    is_flag=True,
    help="Run every stage but do not write the README [env: DRY_RUN]",
)
@click.option(
    "--repository",
    envvar="GITHUB_REPOSITORY",
    default=None,
    help="owner/repo this run belongs to [env: GITHUB_REPOSITORY]",
)
@click.option(
    "-c",
    "--config",
    "overrides_path",
    envvar="ROADMAP_CONFIG",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML file with chart and field mapping overrides [env: ROADMAP_CONFIG]",
)
@_verbose_option
def generate(
    organization: str | None,
    token: str,
    project_number: int,
    readme_path: Path,
    max_items: int,
    dry_run: bool,
    repository: str | None,
    overrides_path: Path | None,
    verbose: bool,
) -> None:
    """Generate the roadmap and update the README."""
    setup_logging("DEBUG" if verbose else None)

    try:
        config = RoadmapConfig.create(
            organization=organization,
            project_number=project_number,
            token=token,
            readme_path=readme_path,
            max_items=max_items,
            dry_run=dry_run,
            verbose=verbose,
            repository=repository,
            overrides_path=overrides_path,
        )
        github_token = resolve_token(config.token)
    except (ConfigError, TokenResolutionError) as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    cancel = CancellationToken()
    try:
        with cancel_on_signals(cancel), GitHubClient(github_token) as client:
            result = RoadmapPipeline(config, client).run(cancel)
    except ProjectNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        if e.available_projects:
            click.echo("Available projects:", err=True)
            for project in e.available_projects:
                click.echo(f"  #{project.number}: {project.title}", err=True)
        sys.exit(1)
    except MermaidValidationError as e:
        click.echo(f"Error: {e}", err=True)
        if e.line:
            click.echo(f"  Offending line: {e.line}", err=True)
        for warning in e.warnings:
            click.echo(f"  - {warning}", err=True)
        sys.exit(1)
    except (GitHubError, ReadmeError, PipelineError) as e:
        click.echo(f"Roadmap generation failed: {e}", err=True)
        if verbose:
            logger.exception("Roadmap generation failed")
        sys.exit(1)

    if result.validation.warning:
        click.echo(f"Warning: {result.validation.warning}", err=True)

    if result.dry_run:
        click.echo(result.chart)
        click.echo(result.statistics_text)
        click.echo("Dry run completed - no files were modified")
    else:
        click.echo(f"Updated {result.readme_path}")


@main.command()
@_org_option
@_token_option
@_verbose_option
def projects(organization: str | None, token: str, verbose: bool) -> None:
    """List the organization's projects."""
    setup_logging("DEBUG" if verbose else "WARNING")

    if not organization:
        click.echo("Configuration error: GITHUB_ORG or ORGANIZATION is required", err=True)
        sys.exit(1)

    try:
        github_token = resolve_token(token)
        with GitHubClient(github_token) as client:
            found = client.get_organization_projects(organization)
    except TokenResolutionError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)
    except GitHubError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if not found:
        click.echo(f"No projects found in {organization}")
        return
    for project in found:
        closed = " [closed]" if project.closed else ""
        click.echo(f"#{project.number}: {project.title} ({project.visibility}){closed}")


@main.command()
@click.argument("chart_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_verbose_option
def validate(chart_path: Path, verbose: bool) -> None:
    """Validate a Mermaid chart file."""
    setup_logging("DEBUG" if verbose else None)

    chart = chart_path.read_text(encoding="utf-8")
    validator = MermaidValidator()
    result = validator.validate(chart)

    for warning in validator.check_common_issues(chart):
        click.echo(f"  - {warning}")

    if result.warning:
        click.echo(f"Warning: {result.warning}")
    if not result.valid:
        click.echo(f"Invalid Mermaid syntax: {result.error}", err=True)
        if result.line:
            click.echo(f"  Line {result.line_number}: {result.line}", err=True)
        sys.exit(1)

    click.echo(f"{chart_path}: valid")


if __name__ == "__main__":
    main()
