"""Commit status writes shared by the trigger and the synchronizer."""

from typing import Optional

import structlog

from prbuild.errors import StatusPostError
from prbuild.github.client import GitHubAPIError, GitHubClient
from prbuild.github.models import CommitState, CommitStatus, PullRequestRef
from prbuild.metrics import BuildMetrics, get_metrics

logger = structlog.get_logger()


class StatusPublisher:
    """Posts commit statuses under a fixed context label.

    Attributes:
        github: GitHub API client.
        context: Status context shown on the pull request.
    """

    def __init__(
        self,
        github: GitHubClient,
        context: str,
        metrics: Optional[BuildMetrics] = None,
    ):
        self.github = github
        self.context = context
        self.metrics = metrics or get_metrics()

    def publish(
        self,
        pull_request: PullRequestRef,
        state: CommitState,
        description: str,
        target_url: Optional[str] = None,
    ) -> CommitStatus:
        """Post a status on the pull request head commit.

        Returns:
            The status that was posted.

        Raises:
            StatusPostError: If GitHub rejects the write.
        """
        status = CommitStatus.for_pull_request(
            pull_request,
            state=state,
            context=self.context,
            description=description,
            target_url=target_url,
        )

        try:
            self.github.create_status(status)
        except GitHubAPIError as e:
            self.metrics.record_status_post(state.value, ok=False)
            raise StatusPostError(
                f"Could not set {state.value} status on {status.sha}: {e.message}",
                sha=status.sha,
                status_code=e.status_code,
            ) from e

        self.metrics.record_status_post(state.value, ok=True)
        return status
