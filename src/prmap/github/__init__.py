"""Pull request input handling."""

from prmap.github.pull_requests import PullRequest, load_pull_requests, parse_pull_requests

__all__ = ["PullRequest", "load_pull_requests", "parse_pull_requests"]
