"""Thin wrappers over the git command line.

Every call runs `git` with the repository as working directory and returns
decoded stdout. Failures surface as `GitCommandError` (or a subclass) so
callers can decide whether a single pull request is skippable.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from prmap.exceptions import (
    FetchError,
    GitCommandError,
    RefNotFoundError,
    RepositoryError,
)

logger = logging.getLogger("prmap.git")

# Keep output stable regardless of the user's git configuration.
_BASE_ARGS = [
    "git", "-c", "core.quotepath=false", "-c", "color.ui=false", "-c", "color.diff=false",
]


def run_git(
    root: Path,
    args: list[str],
    timeout: float | None = 60.0,
    error_class: type[GitCommandError] = GitCommandError,
) -> str:
    """Run a git command in `root` and return its stdout."""
    cmd = _BASE_ARGS + args
    logger.debug("Running %s in %s", " ".join(cmd), root)
    try:
        result = subprocess.run(
            cmd,
            cwd=root,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise error_class(cmd, -1, f"timed out after {timeout}s") from e
    except FileNotFoundError as e:
        raise RepositoryError(f"git executable not found or bad directory {root}: {e}") from e

    if result.returncode != 0:
        raise error_class(cmd, result.returncode, result.stderr)
    return result.stdout


def open_repository(path: str | Path) -> Path:
    """Resolve `path` to the top level of a git working tree."""
    root = Path(path).resolve()
    if not root.is_dir():
        raise RepositoryError(f"Path does not exist or is not a directory: {path}")
    try:
        toplevel = run_git(root, ["rev-parse", "--show-toplevel"]).strip()
    except GitCommandError as e:
        raise RepositoryError(f"Not a git repository: {root}") from e
    return Path(toplevel).resolve()


def resolve_commit(root: Path, rev: str, timeout: float | None = 60.0) -> str | None:
    """Return the commit id `rev` points at, or None if it does not resolve."""
    try:
        out = run_git(
            root, ["rev-parse", "--verify", "--quiet", f"{rev}^{{commit}}"], timeout=timeout
        )
    except GitCommandError as e:
        # --quiet exits 1 with no output for a missing ref
        if e.returncode == 1:
            return None
        raise
    return out.strip() or None


def branch_tip(root: Path, branch: str, timeout: float | None = 60.0) -> str | None:
    """Commit id at the tip of local branch `branch`, or None if absent."""
    return resolve_commit(root, f"refs/heads/{branch}", timeout=timeout)


def require_branch_tip(root: Path, branch: str, timeout: float | None = 60.0) -> str:
    """Like `branch_tip` but raises RefNotFoundError for a missing branch."""
    tip = branch_tip(root, branch, timeout=timeout)
    if tip is None:
        raise RefNotFoundError(branch)
    return tip


def require_commit(root: Path, commit_id: str, timeout: float | None = 60.0) -> str:
    """Check that `commit_id` names a commit object in the repository."""
    resolved = resolve_commit(root, commit_id, timeout=timeout)
    if resolved is None:
        raise RepositoryError(f"Commit {commit_id} not found in the repository")
    return resolved


def merge_base(root: Path, first: str, second: str, timeout: float | None = 60.0) -> str:
    """Best common ancestor of two commits."""
    try:
        out = run_git(root, ["merge-base", first, second], timeout=timeout)
    except GitCommandError as e:
        # merge-base exits 1 when the histories are unrelated
        if e.returncode == 1 and not e.stderr:
            raise RepositoryError(
                f"No merge base between {first[:12]} and {second[:12]}"
            ) from e
        raise
    return out.strip()


def diff_trees(
    root: Path,
    old: str,
    new: str,
    context_lines: int = 3,
    timeout: float | None = 60.0,
) -> str:
    """Unified diff between the trees of two commits."""
    return run_git(
        root,
        [
            "diff",
            "--no-color",
            "--no-ext-diff",
            "--no-textconv",
            "--no-renames",
            "--src-prefix=a/",
            "--dst-prefix=b/",
            f"--unified={context_lines}",
            old,
            new,
            "--",
        ],
        timeout=timeout,
    )


def fetch(
    root: Path,
    remote: str,
    refspec: str,
    timeout: float | None = 300.0,
) -> None:
    """Run `git fetch <remote> <refspec>` in the repository."""
    run_git(root, ["fetch", remote, refspec], timeout=timeout, error_class=FetchError)
