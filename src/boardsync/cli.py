"""CLI entry point for boardsync.

Creates one issue per kanban row and adds each to an existing project board:

    boardsync run owner/repo kanban.csv assignees_map.csv --project-title "Kanban - v1"
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from boardsync.config import (
    BACKENDS,
    BoardSyncConfig,
    ConfigError,
    find_config,
    get_token,
    load_config,
)
from boardsync.logging import setup_logging
from boardsync.records import AssignmentResolver, MalformedInputError, load
from boardsync.reporter import RunReporter
from boardsync.sync import SyncEngine, preview
from boardsync.tracker import (
    GhCliTransport,
    GitHubTracker,
    HttpTransport,
    ProjectSelector,
    TrackerError,
    split_repo,
)
from boardsync.tracker.transport import Transport

logger = logging.getLogger("boardsync.cli")


class SetupError(Exception):
    """The run cannot start (missing credentials or tools)."""


def load_settings(
    config_path: Path | None,
    backend: str | None,
    timeout: float | None,
    max_retries: int | None,
) -> BoardSyncConfig:
    """Load the config file (if any) and apply command-line overrides.

    Raises:
        ConfigError: If the file or an override is invalid.
    """
    if config_path is None:
        config_path = find_config()
    config = load_config(config_path) if config_path is not None else BoardSyncConfig()

    if backend is not None:
        config.backend = backend
    if timeout is not None:
        config.timeout = timeout
    if max_retries is not None:
        config.max_retries = max_retries
    config.validate()
    return config


def build_tracker(repo: str, config: BoardSyncConfig) -> GitHubTracker:
    """Build the GitHub tracker for the configured backend.

    Raises:
        SetupError: If the token or the gh CLI is missing.
    """
    transport: Transport
    if config.backend == "gh":
        gh = GhCliTransport(gh_path=config.gh_path, timeout=config.timeout)
        if not gh.check_available():
            raise SetupError("gh CLI not found. Install from https://cli.github.com/")
        transport = gh
    else:
        token = get_token()
        if not token:
            raise SetupError("Set GITHUB_TOKEN or GH_TOKEN, or use --backend gh")
        transport = HttpTransport(token=token, api_url=config.api_url, timeout=config.timeout)
    return GitHubTracker(repo, transport)


def select_project(
    project_id: str | None, project_title: str | None, project: str | None
) -> ProjectSelector:
    """Build the project selector from the mutually exclusive options."""
    given = [value for value in (project_id, project_title, project) if value]
    if len(given) != 1:
        raise click.UsageError(
            "Provide exactly one of --project-id, --project-title or --project."
        )
    if project_id:
        return ProjectSelector(project_id=project_id)
    if project_title:
        return ProjectSelector(title=project_title)
    return ProjectSelector.parse(given[0])


@click.group()
@click.version_option(package_name="boardsync")
def main() -> None:
    """boardsync - create tracker issues from a kanban CSV and add them to a project."""
    pass


@main.command()
@click.argument("repo")
@click.argument("kanban_csv", type=click.Path(path_type=Path))
@click.argument("assignees_csv", type=click.Path(path_type=Path))
@click.option("--project-title", help="Title of the destination project")
@click.option("--project-id", help="Node id of the destination project (PVT_...)")
@click.option("--project", "project", help="Project id or title")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to boardsync.yaml (auto-detected if not specified)",
)
@click.option(
    "--backend",
    type=click.Choice(BACKENDS),
    default=None,
    help="api: GitHub API with GITHUB_TOKEN; gh: the gh CLI's login",
)
@click.option("--timeout", type=float, default=None, help="Per-request timeout in seconds")
@click.option(
    "--max-retries",
    type=click.IntRange(min=0),
    default=None,
    help="Extra attempts on rate limits and connection failures",
)
@click.option("--dry-run", is_flag=True, help="Show the issues that would be created")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def run(
    repo: str,
    kanban_csv: Path,
    assignees_csv: Path,
    project_title: str | None,
    project_id: str | None,
    project: str | None,
    config_path: Path | None,
    backend: str | None,
    timeout: float | None,
    max_retries: int | None,
    dry_run: bool,
    verbose: bool,
) -> None:
    """Create issues in REPO from KANBAN_CSV and add them to a project.

    ASSIGNEES_CSV maps the kanban Assignee column to GitHub handles
    (csv_label,github_user; lines starting with # are ignored).
    """
    try:
        split_repo(repo)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="REPO") from e

    try:
        config = load_settings(config_path, backend, timeout, max_retries)
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    setup_logging(config.logging, verbose=verbose)

    try:
        records, assignees = load(kanban_csv, assignees_csv)
    except MalformedInputError as e:
        click.echo(f"Input error: {e}", err=True)
        sys.exit(1)

    resolver = AssignmentResolver(assignees)
    click.echo(f"Loaded {len(records)} task(s) and {len(assignees)} assignee mapping(s)")

    if dry_run:
        for record, payload in zip(records, preview(records, resolver)):
            click.echo(f"\n--- row {record.row_number}: {payload.title}")
            click.echo(f"labels: {', '.join(payload.labels) or '-'}")
            click.echo(f"assignee: {payload.assignee or '-'}")
            click.echo(payload.body)
        return

    selector = select_project(project_id, project_title, project)
    try:
        tracker = build_tracker(repo, config)
    except SetupError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    reporter = RunReporter(echo=click.echo)
    engine = SyncEngine(
        gateway=tracker,
        resolver=resolver,
        repo=repo,
        max_retries=config.max_retries,
        retry_delay=config.retry_delay,
    )

    try:
        click.echo(f"Resolving project {selector}...")
        results = engine.run(records, selector, on_result=reporter.report_result)
    except TrackerError as e:
        logger.error("Aborting before any issue was created: %s", e)
        click.echo(f"Project error: {e}", err=True)
        sys.exit(1)
    finally:
        tracker.close()

    summary = reporter.report(results, per_record=False)
    sys.exit(summary.exit_code)
