"""Final commit status for a finished build.

Build status to commit state:

    SUCCEEDED                   -> success
    FAILED                      -> failure
    FAULT, STOPPED, TIMED_OUT   -> error
    anything else               -> pending
"""

from typing import Union

import structlog

from prbuild.builder.publisher import StatusPublisher
from prbuild.codebuild.models import BuildRecord, BuildStatus, console_url
from prbuild.credentials.provider import CredentialProvider
from prbuild.github.models import CommitState, CommitStatus, PullRequestRef

logger = structlog.get_logger()

_STATE_BY_BUILD_STATUS = {
    BuildStatus.SUCCEEDED.value: CommitState.SUCCESS,
    BuildStatus.FAILED.value: CommitState.FAILURE,
    BuildStatus.FAULT.value: CommitState.ERROR,
    BuildStatus.STOPPED.value: CommitState.ERROR,
    BuildStatus.TIMED_OUT.value: CommitState.ERROR,
}


def map_build_status(status: Union[str, BuildStatus, None]) -> CommitState:
    """Map a CodeBuild build status onto a GitHub commit state."""
    if isinstance(status, BuildStatus):
        status = status.value
    return _STATE_BY_BUILD_STATUS.get(status, CommitState.PENDING)


def describe_build_status(status: str) -> str:
    return f"Build {status}..."


class StatusSynchronizer:
    """Reflects a build's status onto its pull request head commit.

    Posting the same build status twice yields the same visible status.
    """

    def __init__(
        self,
        credentials: CredentialProvider,
        publisher: StatusPublisher,
        region: str,
    ):
        self.credentials = credentials
        self.publisher = publisher
        self.region = region

    def sync(self, pull_request: PullRequestRef, build: BuildRecord) -> CommitStatus:
        """Post the commit status matching the build's status.

        Returns:
            The posted status.

        Raises:
            CredentialError: If GitHub credentials cannot be loaded.
            StatusPostError: If GitHub rejects the write.
        """
        state = map_build_status(build.status)
        logger.info(
            "Syncing build status",
            pr=str(pull_request),
            sha=pull_request.head_sha,
            build_id=build.id,
            build_status=build.status,
            state=state.value,
        )

        self.credentials.authenticate(self.publisher.github)

        return self.publisher.publish(
            pull_request,
            state,
            describe_build_status(build.status),
            target_url=console_url(self.region, build.id),
        )
