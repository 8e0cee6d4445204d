"""GitHub API client for commit statuses and pull request lookups."""

from prbuild.github.client import GitHubAPIError, GitHubClient
from prbuild.github.models import CommitState, CommitStatus, PullRequestRef

__all__ = [
    "CommitState",
    "CommitStatus",
    "GitHubAPIError",
    "GitHubClient",
    "PullRequestRef",
]
