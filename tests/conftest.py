"""Shared test fixtures for prmap."""

from __future__ import annotations

import json
import shutil
import subprocess
from pathlib import Path

import pytest

GIT_IDENTITY = [
    "-c", "user.name=Test User",
    "-c", "user.email=test@example.com",
    "-c", "commit.gpgsign=false",
    "-c", "init.defaultBranch=main",
]


def _git(cwd: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *GIT_IDENTITY, *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def _write_lines(path: Path, count: int, prefix: str = "line") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("".join(f"{prefix} {i}\n" for i in range(1, count + 1)))


def _replace_line(path: Path, number: int, text: str) -> None:
    lines = path.read_text().splitlines(keepends=True)
    lines[number - 1] = text + "\n"
    path.write_text("".join(lines))


def _commit_all(cwd: Path, message: str) -> str:
    _git(cwd, "add", "-A")
    _git(cwd, "commit", "-q", "--allow-empty", "-m", message)
    return _git(cwd, "rev-parse", "HEAD")


class GitHelper:
    """Small toolbox for building throw-away repositories in tests."""

    git = staticmethod(_git)
    write_lines = staticmethod(_write_lines)
    replace_line = staticmethod(_replace_line)
    commit_all = staticmethod(_commit_all)

    @staticmethod
    def branch(repo: Path, name: str, edit=None, base: str = "main") -> str:
        """Create `name` from `base`, apply `edit(repo)`, commit, and go back to `base`."""
        _git(repo, "checkout", "-q", "-b", name, base)
        if edit is not None:
            edit(repo)
        sha = _commit_all(repo, f"work on {name}")
        _git(repo, "checkout", "-q", base)
        return sha

    @staticmethod
    def pr_record(
        number: int,
        branch: str,
        sha: str,
        owner: str = "alice",
        repo: str = "repo",
        base: str = "main",
    ) -> dict:
        """A pull request entry shaped like `gh pr list --json` output."""
        return {
            "id": f"PR_kwDO{number:04d}",
            "number": number,
            "baseRefName": base,
            "headRefName": branch,
            "headRefOid": sha,
            "headRepository": {"id": "R_1", "name": repo},
            "headRepositoryOwner": {"id": "U_1", "login": owner},
        }


@pytest.fixture
def gh() -> GitHelper:
    if shutil.which("git") is None:
        pytest.skip("git executable not available")
    return GitHelper()


@pytest.fixture
def git_repo(tmp_path: Path, gh: GitHelper) -> Path:
    """A repository on `main` with a.txt (10 lines) and b.txt (30 lines)."""
    root = tmp_path / "repo"
    root.mkdir()
    gh.git(root, "init", "-q", "-b", "main")
    gh.write_lines(root / "a.txt", 10, prefix="alpha")
    gh.write_lines(root / "b.txt", 30, prefix="bravo")
    gh.commit_all(root, "initial")
    return root


@pytest.fixture
def forks(tmp_path: Path) -> Path:
    """Directory standing in for the hosting service: forks/<owner>/<repo>."""
    path = tmp_path / "forks"
    path.mkdir()
    return path


@pytest.fixture
def remote_template(forks: Path) -> str:
    return str(forks / "{owner}" / "{repo}")


@pytest.fixture
def make_fork(git_repo: Path, forks: Path, gh: GitHelper):
    """Clone `git_repo` into forks/<owner>/<name> (once) and return its path."""

    def _make(owner: str = "alice", name: str = "repo") -> Path:
        path = forks / owner / name
        if not path.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
            gh.git(forks, "clone", "-q", str(git_repo), str(path))
        return path

    return _make


@pytest.fixture
def write_prs(tmp_path: Path):
    """Write pull request records to a JSON file and return its path."""

    def _write(records: list[dict], name: str = "prs.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(records))
        return path

    return _write
