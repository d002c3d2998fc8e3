"""Command-line interface for prmap."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from prmap import __version__
from prmap.config import (
    ProjectConfig,
    load_config,
    save_config,
    set_config_value,
)
from prmap.exceptions import ConfigError, PRMapError
from prmap.github.pull_requests import PullRequest, load_pull_requests
from prmap.ui.console import Console

console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_inputs(repo: str, prs_json: str) -> tuple[Path, ProjectConfig, list[PullRequest]]:
    """Open the repository, its config and the pull request list or exit."""
    from prmap.git.commands import open_repository

    try:
        root = open_repository(repo)
        config = load_config(root)
        pull_requests = load_pull_requests(prs_json)
    except PRMapError as e:
        console.error(str(e))
        sys.exit(1)
    return root, config, pull_requests


def _apply_overrides(
    config: ProjectConfig,
    limit: int | None = None,
    remote_template: str | None = None,
    keep_going: bool = False,
    no_fetch: bool = False,
) -> ProjectConfig:
    if limit is not None:
        config.max_pull_requests = limit
    if remote_template:
        try:
            config = set_config_value(config, "sync.remote_template", remote_template)
        except ConfigError as e:
            console.error(str(e))
            sys.exit(1)
    if keep_going:
        config.keep_going = True
    if no_fetch:
        config.sync.enabled = False
    return config


def _run_stage(description: str, stage, *args, **kwargs):
    """Run one pipeline stage under a progress bar, exiting on failure."""
    with console.progress() as progress:
        task = progress.add_task(description, total=None)

        def on_progress(label: str, current: int, total: int):
            progress.update(task, total=total, completed=current, description=label)

        try:
            return stage(*args, on_progress=on_progress, **kwargs)
        except PRMapError as e:
            progress.stop()
            console.error(str(e))
            sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="prmap")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """prmap - see which files your open pull requests pile up on."""
    _setup_logging(verbose)


@main.command()
@click.argument("repo", type=click.Path(exists=True, file_okay=False))
@click.argument("prs_json", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", default=None, help="Report file (default: prmap.html).")
@click.option("--limit", "-n", default=None, type=click.IntRange(min=1),
              help="Number of pull requests to consider (default: 100).")
@click.option("--remote-template", default=None,
              help="Fetch remote, with {owner} and {repo} placeholders.")
@click.option("--keep-going", "-k", is_flag=True,
              help="Skip pull requests that cannot be fetched or diffed.")
@click.option("--no-fetch", is_flag=True, help="Use local branches as they are.")
@click.option("--title", default=None, help="Report page title.")
def build(
    repo: str, prs_json: str, output: str | None, limit: int | None,
    remote_template: str | None, keep_going: bool, no_fetch: bool, title: str | None,
):
    """Fetch pull requests, diff them and write the HTML heat map.

    PRS_JSON is the output of:

        gh pr list --json id,number,baseRefName,headRefName,headRefOid,headRepository,headRepositoryOwner

    Examples:

        prmap build ../myrepo prs.json

        prmap build ../myrepo prs.json --keep-going --output reports/map.html
    """
    from prmap.pipeline import run_pipeline

    root, config, pull_requests = _load_inputs(repo, prs_json)
    config = _apply_overrides(config, limit, remote_template, keep_going, no_fetch)
    if title:
        config.report.title = title

    console.info(
        f"Mapping {min(len(pull_requests), config.max_pull_requests)} "
        f"pull request(s) in {root}"
    )
    summary = _run_stage(
        "Running...", run_pipeline, root, pull_requests, config, output=output,
    )

    console.show_summary(summary)
    console.show_skipped(summary.skipped)

    from prmap.report.impact import hottest

    console.show_hottest(hottest(summary.rows))
    console.success(f"Report written to {summary.output}")


@main.command()
@click.argument("repo", type=click.Path(exists=True, file_okay=False))
@click.argument("prs_json", type=click.Path(exists=True, dir_okay=False))
@click.option("--limit", "-n", default=None, type=click.IntRange(min=1),
              help="Number of pull requests to consider (default: 100).")
@click.option("--remote-template", default=None,
              help="Fetch remote, with {owner} and {repo} placeholders.")
@click.option("--keep-going", "-k", is_flag=True,
              help="Skip pull requests that cannot be fetched.")
def sync(repo: str, prs_json: str, limit: int | None, remote_template: str | None,
         keep_going: bool):
    """Fetch pull request heads into local pull-request-<number> branches."""
    from prmap.pipeline import ItemStatus, synchronize

    root, config, pull_requests = _load_inputs(repo, prs_json)
    config = _apply_overrides(config, limit, remote_template, keep_going)

    results = _run_stage("Fetching...", synchronize, root, pull_requests, config)

    fetched = sum(1 for r in results if r.status == ItemStatus.FETCHED)
    current = sum(1 for r in results if r.status == ItemStatus.UP_TO_DATE)
    console.success(f"Fetched {fetched} branch(es), {current} already up to date")
    console.show_skipped([r for r in results if r.status == ItemStatus.SKIPPED])


@main.command()
@click.argument("repo", type=click.Path(exists=True, file_okay=False))
@click.argument("prs_json", type=click.Path(exists=True, dir_okay=False))
@click.option("--limit", "-n", default=None, type=click.IntRange(min=1),
              help="Number of pull requests to consider (default: 100).")
@click.option("--keep-going", "-k", is_flag=True,
              help="Skip pull requests that cannot be diffed.")
@click.option(
    "--format", "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format.",
)
def touched(repo: str, prs_json: str, limit: int | None, keep_going: bool,
            output_format: str):
    """Show the old-side lines each pull request touches, without fetching."""
    from prmap.pipeline import ItemStatus, aggregate

    root, config, pull_requests = _load_inputs(repo, prs_json)
    config = _apply_overrides(config, limit, keep_going=keep_going)

    lookup, results = _run_stage("Diffing...", aggregate, root, pull_requests, config)

    if output_format == "json":
        data = {
            str(number): {path: sorted(lines) for path, lines in files.items()}
            for number, files in lookup.items()
        }
        click.echo(json.dumps(data, indent=2))
    else:
        console.show_touched(lookup)
    console.show_skipped([r for r in results if r.status == ItemStatus.SKIPPED])


# =========================================================================
# Config Management
# =========================================================================

@main.command("config")
@click.argument("action", type=click.Choice(["set", "get", "show"]))
@click.argument("key", required=False)
@click.argument("value", required=False)
@click.option("--path", "-p", default=".", help="Path to the repository.")
def config_cmd(action: str, key: str | None, value: str | None, path: str):
    """Manage the repository's prmap configuration (.prmap/config.json)."""
    root = Path(path).resolve()
    if not root.exists():
        console.error(f"Path does not exist: {path}")
        sys.exit(1)
    try:
        config = load_config(root)
    except ConfigError as e:
        console.error(str(e))
        sys.exit(1)

    if action == "show":
        console.console.print_json(json.dumps(config.model_dump(), indent=2))
    elif action == "get":
        if not key:
            console.error("Usage: prmap config get <key>")
            sys.exit(1)
        data = config.model_dump()
        for part in key.split("."):
            if isinstance(data, dict) and part in data:
                data = data[part]
            else:
                console.error(f"Unknown key: {key}")
                sys.exit(1)
        console.console.print(f"{key} = {data}", markup=False)
    elif action == "set":
        if not key or value is None:
            console.error("Usage: prmap config set <key> <value>")
            sys.exit(1)
        # Try to parse as JSON for non-string values
        try:
            parsed_value = json.loads(value)
        except json.JSONDecodeError:
            parsed_value = value
        try:
            config = set_config_value(config, key, parsed_value)
        except KeyError:
            console.error(f"Unknown config key: {key}")
            sys.exit(1)
        except ConfigError as e:
            console.error(str(e))
            sys.exit(1)
        save_config(root, config)
        console.success(f"Set {key} = {parsed_value}")


if __name__ == "__main__":
    main()
