"""Orchestrator connecting the stages of the build trigger.

Drives a webhook delivery through:
verify → classify → open check → authenticate → setup status → start build
→ running status.

Polling and the final status write are separate entry points, called by an
external step workflow once per wait cycle and once at the end.

Every stage raises on failure and nothing is retried here. The orchestrator
records the outcome in metrics and lets the exception reach the caller,
except for the final status write, which is best effort.

Source:
- prbuild/webhook/verifier.py (WebhookVerifier)
- prbuild/classifier/classifier.py (EventClassifier)
- prbuild/builder/trigger.py (BuildTrigger)
- prbuild/builder/poller.py (StatusPoller)
- prbuild/builder/synchronizer.py (StatusSynchronizer)
"""

from typing import Any, Dict, Optional

import structlog
from pydantic import BaseModel, ConfigDict

from prbuild.builder.poller import StatusPoller
from prbuild.builder.publisher import StatusPublisher
from prbuild.builder.synchronizer import StatusSynchronizer
from prbuild.builder.trigger import BuildTrigger
from prbuild.classifier.classifier import EventClassifier
from prbuild.codebuild.client import CodeBuildClient
from prbuild.codebuild.models import BuildRecord
from prbuild.config import Settings
from prbuild.credentials.parameter_store import ParameterStore
from prbuild.credentials.provider import CredentialProvider
from prbuild.errors import (
    AuthError,
    ClassificationError,
    PRBuildError,
    PullRequestNotOpenError,
    StatusPostError,
)
from prbuild.github.client import GitHubClient
from prbuild.github.models import CommitStatus, PullRequestRef
from prbuild.metrics import BuildMetrics, get_metrics
from prbuild.webhook.models import InboundEvent
from prbuild.webhook.verifier import WebhookVerifier

logger = structlog.get_logger()


class BuildResult(BaseModel):
    """Outcome of a successful start: the pull request and its build."""

    model_config = ConfigDict(frozen=True)

    pull_request: PullRequestRef
    build: BuildRecord

    def to_payload(self) -> Dict[str, Any]:
        """Step payload handed to the polling and completion steps."""
        return {
            "pull_request": self.pull_request.raw,
            "build": self.build.raw or {
                "id": self.build.id,
                "buildStatus": self.build.status,
                "sourceVersion": self.build.source_version,
            },
        }


class BuildOrchestrator:
    """Composes the build trigger stages.

    Attributes:
        verifier: Webhook signature verifier.
        classifier: Buildability classifier.
        trigger: Build starter.
        poller: Build status lookup.
        synchronizer: Final status writer.
        metrics: Prometheus metrics container.
    """

    def __init__(
        self,
        verifier: WebhookVerifier,
        classifier: EventClassifier,
        trigger: BuildTrigger,
        poller: StatusPoller,
        synchronizer: StatusSynchronizer,
        metrics: Optional[BuildMetrics] = None,
    ):
        self.verifier = verifier
        self.classifier = classifier
        self.trigger = trigger
        self.poller = poller
        self.synchronizer = synchronizer
        self.metrics = metrics or get_metrics()

    def start_build(self, event: InboundEvent) -> BuildResult:
        """Verify, classify and, when buildable, start a build.

        Args:
            event: The raw webhook delivery.

        Returns:
            The pull request and the started build.

        Raises:
            AuthError: If the delivery is not authentic.
            ClassificationError: If there is nothing to build.
            PRBuildError: If credentials, status writes or CodeBuild fail.
        """
        log = logger.bind(
            delivery_id=event.delivery_id,
            event_name=event.event_name,
        )

        try:
            self.verifier.verify(event)
        except AuthError as e:
            self.metrics.record_webhook_event("rejected")
            log.warning("Webhook rejected", error=str(e))
            raise

        try:
            pull_request = self.classifier.classify(event.payload())
            if not pull_request.is_open:
                raise PullRequestNotOpenError(pull_request.number, pull_request.state)
        except ClassificationError as e:
            self.metrics.record_webhook_event("ignored")
            log.info("Nothing to build", reason=str(e))
            raise
        except PRBuildError as e:
            self._record_failure(e)
            log.error("Classification failed", error=str(e))
            raise

        self.metrics.record_webhook_event("accepted")
        log = log.bind(pr=str(pull_request))

        try:
            build = self.trigger.trigger(pull_request)
        except PRBuildError as e:
            self._record_failure(e)
            log.error("Build trigger failed", error=str(e))
            raise

        log.info("Build triggered", build_id=build.id)
        return BuildResult(pull_request=pull_request, build=build)

    def check_build_status(self, build_id: str) -> BuildRecord:
        """Look up the current state of a build.

        Raises:
            BuildServiceError: If the build is unknown or the lookup fails.
        """
        try:
            return self.poller.poll(build_id)
        except PRBuildError as e:
            self._record_failure(e)
            logger.error("Build poll failed", build_id=build_id, error=str(e))
            raise

    def build_done(
        self, pull_request: PullRequestRef, build: BuildRecord
    ) -> Optional[CommitStatus]:
        """Post the final commit status for a build.

        A rejected status write is logged and None is returned.

        Raises:
            CredentialError: If GitHub credentials cannot be loaded.
        """
        try:
            return self.synchronizer.sync(pull_request, build)
        except StatusPostError as e:
            self._record_failure(e)
            logger.error(
                "Final status not posted",
                pr=str(pull_request),
                build_id=build.id,
                error=str(e),
            )
            return None
        except PRBuildError as e:
            self._record_failure(e)
            raise

    def _record_failure(self, error: Exception) -> None:
        self.metrics.record_error(type(error).__name__)


def create_orchestrator(
    settings: Settings,
    ssm_client=None,
    codebuild_client=None,
    github_client: Optional[GitHubClient] = None,
    metrics: Optional[BuildMetrics] = None,
) -> BuildOrchestrator:
    """Wire all dependencies into a BuildOrchestrator.

    Args:
        settings: Validated settings.
        ssm_client: Optional boto3 SSM client (for testing).
        codebuild_client: Optional boto3 CodeBuild client (for testing).
        github_client: Optional GitHub client (for testing).
        metrics: Optional metrics container (for testing).

    Returns:
        Fully wired BuildOrchestrator.
    """
    metrics = metrics or get_metrics()
    parameter_store = ParameterStore(ssm_client=ssm_client)
    github = github_client or GitHubClient(base_url=settings.github_base_url)
    codebuild = CodeBuildClient(codebuild_client=codebuild_client)

    credentials = CredentialProvider(
        parameter_store=parameter_store,
        username_parameter=settings.ssm_github_username,
        token_parameter=settings.ssm_github_access_token,
    )
    publisher = StatusPublisher(
        github=github,
        context=settings.github_status_context,
        metrics=metrics,
    )

    return BuildOrchestrator(
        verifier=WebhookVerifier(
            parameter_store=parameter_store,
            secret_parameter=settings.ssm_github_webhook_secret,
        ),
        classifier=EventClassifier(
            github=github,
            config=settings.build_config(),
            credentials=credentials,
        ),
        trigger=BuildTrigger(
            credentials=credentials,
            publisher=publisher,
            codebuild=codebuild,
            project_name=settings.build_project,
            region=settings.aws_default_region,
            metrics=metrics,
        ),
        poller=StatusPoller(codebuild=codebuild),
        synchronizer=StatusSynchronizer(
            credentials=credentials,
            publisher=publisher,
            region=settings.aws_default_region,
        ),
        metrics=metrics,
    )
