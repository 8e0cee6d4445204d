"""Build start for a buildable pull request.

Sequence:
1. Authenticate the GitHub client (once per process).
2. Post a pending "setting up" status. If GitHub refuses it, for example
   because the token lacks permission, no build is started.
3. Start the CodeBuild project at source version pr/<number>.
4. Post a pending "running" status linking to the build console. This step
   is best effort: the build is already running, so a failure is logged.

No step is rolled back when a later one fails.
"""

from typing import Optional

import structlog

from prbuild.builder.publisher import StatusPublisher
from prbuild.codebuild.client import CodeBuildClient
from prbuild.codebuild.models import BuildRecord, console_url
from prbuild.credentials.provider import CredentialProvider
from prbuild.errors import StatusPostError
from prbuild.github.models import CommitState, PullRequestRef
from prbuild.metrics import BuildMetrics, get_metrics

logger = structlog.get_logger()

SETUP_DESCRIPTION = "Setting up the build..."
RUNNING_DESCRIPTION = "Build is running..."


class BuildTrigger:
    """Starts CodeBuild builds for pull requests.

    Attributes:
        credentials: Provider that authenticates the GitHub client.
        publisher: Commit status writer.
        codebuild: CodeBuild wrapper.
        project_name: CodeBuild project to start.
        region: AWS region, used for the console link.
    """

    def __init__(
        self,
        credentials: CredentialProvider,
        publisher: StatusPublisher,
        codebuild: CodeBuildClient,
        project_name: str,
        region: str,
        metrics: Optional[BuildMetrics] = None,
    ):
        self.credentials = credentials
        self.publisher = publisher
        self.codebuild = codebuild
        self.project_name = project_name
        self.region = region
        self.metrics = metrics or get_metrics()

    def trigger(self, pull_request: PullRequestRef) -> BuildRecord:
        """Start a build for an open pull request.

        Args:
            pull_request: The classified pull request.

        Returns:
            The started build.

        Raises:
            CredentialError: If GitHub credentials cannot be loaded.
            StatusPostError: If the setup status is rejected.
            BuildServiceError: If CodeBuild refuses to start the build.
        """
        log = logger.bind(pr=str(pull_request), sha=pull_request.head_sha)

        self.credentials.authenticate(self.publisher.github)

        self.publisher.publish(pull_request, CommitState.PENDING, SETUP_DESCRIPTION)
        log.info("Setup status posted")

        build = self.codebuild.start_build(
            self.project_name, pull_request.source_version
        )
        self.metrics.record_build_started()
        log = log.bind(build_id=build.id)

        try:
            self.publisher.publish(
                pull_request,
                CommitState.PENDING,
                RUNNING_DESCRIPTION,
                target_url=console_url(self.region, build.id),
            )
        except StatusPostError as e:
            log.warning("Running status not posted", error=str(e))
        else:
            log.info("Running status posted")

        return build
