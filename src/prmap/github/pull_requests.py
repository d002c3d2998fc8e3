"""Pull request descriptors read from `gh pr list --json` output.

The expected input is produced by:

    gh pr list --limit 500 --json id,number,baseRefName,headRefName,headRefOid,headRepository,headRepositoryOwner > prs.json
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from prmap.exceptions import InputError

LOCAL_BRANCH_PREFIX = "pull-request-"


class Repository(BaseModel):
    """The repository a pull request's head branch lives in."""

    model_config = ConfigDict(frozen=True)

    name: str


class Owner(BaseModel):
    """The user or organization owning the head repository."""

    model_config = ConfigDict(frozen=True)

    login: str


class PullRequest(BaseModel):
    """An open pull request, as far as prmap cares about it."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    number: int
    target_branch: str = Field(alias="baseRefName")
    source_branch: str = Field(alias="headRefName")
    source_commit: str = Field(alias="headRefOid")
    head_repository: Repository = Field(alias="headRepository")
    head_repository_owner: Owner = Field(alias="headRepositoryOwner")

    @field_validator("source_commit")
    @classmethod
    def _check_commit_id(cls, value: str) -> str:
        value = value.lower()
        if len(value) != 40 or any(c not in "0123456789abcdef" for c in value):
            raise ValueError(f"not a 40 character hex commit id: {value!r}")
        return value

    @property
    def source_owner(self) -> str:
        return self.head_repository_owner.login

    @property
    def source_repo(self) -> str:
        return self.head_repository.name

    @property
    def local_branch(self) -> str:
        """Name of the local branch the head commit is fetched into."""
        return f"{LOCAL_BRANCH_PREFIX}{self.number}"


def parse_pull_requests(data: object) -> list[PullRequest]:
    """Validate decoded JSON into pull requests, preserving input order."""
    if not isinstance(data, list):
        raise InputError("Pull request list must be a JSON array")

    pull_requests = []
    for index, entry in enumerate(data):
        try:
            pull_requests.append(PullRequest.model_validate(entry))
        except ValidationError as e:
            number = entry.get("number", "?") if isinstance(entry, dict) else "?"
            raise InputError(
                f"Invalid pull request at index {index} (number {number}): {e}"
            ) from e
    return pull_requests


def load_pull_requests(path: str | Path) -> list[PullRequest]:
    """Read and validate a pull request list from a JSON file."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise InputError(f"Cannot read pull request list {path}: {e}") from e
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise InputError(f"Malformed JSON in {path}: {e}") from e
    return parse_pull_requests(data)
