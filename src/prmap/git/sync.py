"""Branch synchronization - make each pull request head available locally.

Each pull request is fetched into `refs/heads/pull-request-<number>`. A fetch
only happens when that branch is missing or points somewhere other than the
pull request's head commit, so repeated runs against unchanged pull requests
do not touch the network.
"""

from __future__ import annotations

import logging
from pathlib import Path

from prmap.config import SyncConfig
from prmap.git import commands
from prmap.github.pull_requests import PullRequest

logger = logging.getLogger("prmap.sync")


def remote_for(pr: PullRequest, template: str) -> str:
    """Build the fetch remote for a pull request's head repository."""
    return template.format(owner=pr.source_owner, repo=pr.source_repo)


def refspec_for(pr: PullRequest) -> str:
    """`<source_branch>:pull-request-<number>`, forced so rewritten branches update."""
    return f"+{pr.source_branch}:refs/heads/{pr.local_branch}"


def needs_fetch(root: Path, pr: PullRequest) -> bool:
    """True when the local pull request branch is absent or stale."""
    local_tip = commands.branch_tip(root, pr.local_branch)
    if local_tip is None:
        logger.debug("PR #%d: no local branch %s", pr.number, pr.local_branch)
        return True
    if local_tip != pr.source_commit:
        logger.debug(
            "PR #%d: local branch at %s, head is %s",
            pr.number, local_tip[:12], pr.source_commit[:12],
        )
        return True
    return False


def sync_pull_request(root: Path, pr: PullRequest, config: SyncConfig | None = None) -> bool:
    """Ensure `pull-request-<number>` exists locally at the head commit.

    Returns True if a fetch was performed, False if the branch was already
    up to date. Raises FetchError when git fetch fails or times out.
    """
    if config is None:
        config = SyncConfig()

    if not needs_fetch(root, pr):
        return False

    remote = remote_for(pr, config.remote_template)
    refspec = refspec_for(pr)
    logger.info("Running git fetch %s %s", remote, refspec)
    commands.fetch(root, remote, refspec, timeout=config.fetch_timeout)
    return True
