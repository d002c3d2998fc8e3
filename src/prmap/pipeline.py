"""The prmap pipeline.

Runs the three stages strictly in order:
1. Synchronize every pull request head into a local branch
2. Diff each pull request against its merge base and collect touched lines
3. Walk the working tree and render the heat map

By default the first failure aborts the run. With `keep_going` set, a
pull request whose branch, commits or merge base cannot be resolved is
skipped and recorded in the run summary instead.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from prmap.config import ProjectConfig
from prmap.exceptions import RepositoryError, ReportWriteError
from prmap.git import commands
from prmap.git.aggregator import AggregateLookup, touched_lines
from prmap.git.sync import sync_pull_request
from prmap.github.pull_requests import PullRequest
from prmap.report.impact import ReportRow, build_rows_for_tree
from prmap.report.renderer import render_report

logger = logging.getLogger("prmap.pipeline")

ProgressCallback = Callable[[str, int, int], None]


class ItemStatus(str, Enum):
    """Outcome of one pull request in one stage."""

    FETCHED = "fetched"
    UP_TO_DATE = "up_to_date"
    DIFFED = "diffed"
    SKIPPED = "skipped"


@dataclass
class ItemResult:
    number: int
    stage: str  # 'sync' or 'diff'
    status: ItemStatus
    reason: str = ""


@dataclass
class RunSummary:
    """Everything a run produced."""
    lookup: AggregateLookup = field(default_factory=dict)
    results: list[ItemResult] = field(default_factory=list)
    rows: list[ReportRow] = field(default_factory=list)
    html: str = ""
    output: Path | None = None

    @property
    def skipped(self) -> list[ItemResult]:
        return [r for r in self.results if r.status == ItemStatus.SKIPPED]

    @property
    def fetch_count(self) -> int:
        return sum(1 for r in self.results if r.status == ItemStatus.FETCHED)


def select_pull_requests(pull_requests: list[PullRequest], limit: int) -> list[PullRequest]:
    """The subsequence every stage works on: the first `limit`, in input order."""
    return pull_requests[:limit]


def _skip_or_raise(
    config: ProjectConfig, pr: PullRequest, stage: str, error: RepositoryError
) -> ItemResult:
    if not config.keep_going:
        raise error
    logger.warning("Skipping PR #%d during %s: %s", pr.number, stage, error)
    return ItemResult(pr.number, stage, ItemStatus.SKIPPED, str(error))


def synchronize(
    root: Path,
    pull_requests: list[PullRequest],
    config: ProjectConfig | None = None,
    on_progress: ProgressCallback | None = None,
) -> list[ItemResult]:
    """Fetch every selected pull request whose local branch is missing or stale."""
    if config is None:
        config = ProjectConfig()

    selected = select_pull_requests(pull_requests, config.max_pull_requests)
    results: list[ItemResult] = []
    for i, pr in enumerate(selected):
        if on_progress:
            on_progress(f"Fetching #{pr.number}", i + 1, len(selected))
        try:
            fetched = sync_pull_request(root, pr, config.sync)
        except RepositoryError as e:
            results.append(_skip_or_raise(config, pr, "sync", e))
            continue
        status = ItemStatus.FETCHED if fetched else ItemStatus.UP_TO_DATE
        results.append(ItemResult(pr.number, "sync", status))
    return results


def aggregate(
    root: Path,
    pull_requests: list[PullRequest],
    config: ProjectConfig | None = None,
    exclude: set[int] | None = None,
    on_progress: ProgressCallback | None = None,
) -> tuple[AggregateLookup, list[ItemResult]]:
    """Build the pull request number -> touched line map lookup.

    `exclude` holds numbers already skipped by an earlier stage; they are
    reported as skipped again and kept out of the lookup.
    """
    if config is None:
        config = ProjectConfig()
    exclude = exclude or set()

    selected = select_pull_requests(pull_requests, config.max_pull_requests)
    lookup: AggregateLookup = {}
    results: list[ItemResult] = []
    for i, pr in enumerate(selected):
        if on_progress:
            on_progress(f"Diffing #{pr.number}", i + 1, len(selected))
        if pr.number in exclude:
            results.append(
                ItemResult(pr.number, "diff", ItemStatus.SKIPPED, "branch not synchronized")
            )
            continue
        try:
            lookup[pr.number] = touched_lines(root, pr, config.diff)
        except RepositoryError as e:
            results.append(_skip_or_raise(config, pr, "diff", e))
            continue
        results.append(ItemResult(pr.number, "diff", ItemStatus.DIFFED))
    return lookup, results


def write_report(html: str, output: str | Path) -> Path:
    """Write the rendered document, creating parent directories."""
    output = Path(output)
    try:
        data = html.encode("utf-8")
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(data)
    except (OSError, UnicodeError) as e:
        raise ReportWriteError(f"Cannot write report to {output}: {e}") from e
    return output


def run_pipeline(
    repo_path: str | Path,
    pull_requests: list[PullRequest],
    config: ProjectConfig | None = None,
    output: str | Path | None = None,
    on_progress: ProgressCallback | None = None,
) -> RunSummary:
    """Run synchronize, aggregate and render, then write the report.

    Pass `output=None` to use the configured output path; the document is only
    written once every stage has succeeded.
    """
    if config is None:
        config = ProjectConfig()

    root = commands.open_repository(repo_path)
    summary = RunSummary()

    sync_results: list[ItemResult] = []
    if config.sync.enabled:
        logger.info("Fetching pull requests...")
        sync_results = synchronize(root, pull_requests, config, on_progress)
    summary.results.extend(sync_results)

    logger.info("Calculating diffs...")
    skipped = {r.number for r in sync_results if r.status == ItemStatus.SKIPPED}
    lookup, diff_results = aggregate(root, pull_requests, config, skipped, on_progress)
    summary.lookup = lookup
    summary.results.extend(diff_results)

    summary.rows = build_rows_for_tree(root, lookup)
    summary.html = render_report(
        summary.rows,
        title=config.report.title,
        heading=config.report.heading,
        total_pull_requests=len(lookup),
    )
    summary.output = write_report(summary.html, output or config.report.output)
    return summary
