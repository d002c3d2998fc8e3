"""Diff aggregation - which old-side lines each pull request touches.

For every pull request the head commit is diffed against its merge base with
the target branch. All old-side lines covered by a hunk are recorded,
including the context lines around the actual change, so pull requests that
edit code near each other also show up as overlapping.
"""

from __future__ import annotations

import fnmatch
import logging
from pathlib import Path, PurePosixPath

from prmap.config import DiffConfig
from prmap.git import commands
from prmap.git.diff_parser import FileDiff, parse_diff
from prmap.github.pull_requests import PullRequest

logger = logging.getLogger("prmap.aggregator")

TouchedLineMap = dict[str, set[int]]
AggregateLookup = dict[int, TouchedLineMap]


def is_ignored(path: str, patterns: list[str]) -> bool:
    """Check a repository-relative path against the ignore patterns."""
    name = PurePosixPath(path).name
    for pattern in patterns:
        if fnmatch.fnmatch(path, pattern) or fnmatch.fnmatch(name, pattern):
            return True
    return False


def collect_touched_lines(
    file_diffs: list[FileDiff],
    ignore_files: list[str] | None = None,
) -> TouchedLineMap:
    """Merge the old-side hunk ranges of each file into a TouchedLineMap.

    Hunks with an empty old side (pure insertions, new files) record nothing.
    """
    ignore_files = ignore_files or []
    touched: TouchedLineMap = {}
    for fd in file_diffs:
        if fd.old_path is None:
            continue
        if is_ignored(fd.old_path, ignore_files):
            continue
        for hunk in fd.hunks:
            if hunk.old_count == 0:
                continue
            touched.setdefault(fd.old_path, set()).update(hunk.old_lines)
    return touched


def touched_lines(root: Path, pr: PullRequest, config: DiffConfig | None = None) -> TouchedLineMap:
    """Compute the TouchedLineMap of one pull request.

    Raises:
        RefNotFoundError: the target branch has no local counterpart.
        RepositoryError: the head commit or merge base cannot be resolved,
            or git fails to produce the diff.
    """
    if config is None:
        config = DiffConfig()
    timeout = config.git_timeout

    head = commands.require_commit(root, pr.source_commit, timeout=timeout)
    target_tip = commands.require_branch_tip(root, pr.target_branch, timeout=timeout)
    base = commands.merge_base(root, target_tip, head, timeout=timeout)

    diff_text = commands.diff_trees(
        root, base, head, context_lines=config.context_lines, timeout=timeout
    )
    file_diffs = parse_diff(diff_text)
    touched = collect_touched_lines(file_diffs, config.ignore_files)

    logger.debug(
        "PR #%d: merge base %s, %d file(s) in diff, %d touched",
        pr.number, base[:12], len(file_diffs), len(touched),
    )
    return touched
