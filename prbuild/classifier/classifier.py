"""Buildability classification of verified webhook events.

Two event shapes can start a build:

1. A pull request lifecycle event whose action is enabled (opened,
   reopened, synchronize by default) while the pr_state trigger is on.
   The pull request embedded in the event is used as is.

2. A comment on a pull request whose body is the trigger phrase, posted by
   an allowed user while the pr_comment trigger is on. Comment events carry
   only the issue, so the full pull request is fetched from GitHub using
   the owner, repo and number taken from the issue's API URL.

Whether the pull request is open is checked by the caller.
"""

from typing import Optional, Protocol, Tuple
from urllib.parse import urlparse

import structlog

from prbuild.classifier.models import BuildConfig, TriggerKind
from prbuild.credentials.provider import CredentialProvider
from prbuild.errors import NotBuildableError
from prbuild.github.models import PullRequestRef
from prbuild.webhook.models import (
    IssueCommentEvent,
    OtherEvent,
    PullRequestEvent,
    WebhookPayload,
    decode_event,
)

logger = structlog.get_logger()


class PullRequestSource(Protocol):
    """Anything that can fetch a pull request object by number."""

    def get_pull_request(self, owner: str, repo: str, number: int) -> dict: ...


def parse_issue_url(url: str) -> Optional[Tuple[str, str, int]]:
    """Split an issue API URL into owner, repo and number.

    Accepts URLs of the form .../repos/<owner>/<repo>/issues/<number>.

    Returns:
        (owner, repo, number), or None if the URL does not have that shape.
    """
    segments = [s for s in urlparse(url).path.split("/") if s]
    if len(segments) < 5 or segments[-2] not in ("issues", "pulls"):
        return None
    if segments[-5] != "repos":
        return None
    owner, repo, number = segments[-4], segments[-3], segments[-1]
    if not number.isdigit():
        return None
    return owner, repo, int(number)


class EventClassifier:
    """Decides whether a webhook payload should start a build.

    Attributes:
        github: Client used to fetch pull requests for comment triggers.
        config: Trigger options.
        credentials: Provider that authenticates the client before the
                     pull request fetch. Optional for public repositories.
    """

    def __init__(
        self,
        github: PullRequestSource,
        config: BuildConfig,
        credentials: Optional[CredentialProvider] = None,
    ):
        self.github = github
        self.config = config
        self.credentials = credentials

    def classify(self, payload: dict) -> PullRequestRef:
        """Classify a decoded webhook body.

        Args:
            payload: The JSON webhook body.

        Returns:
            The pull request the build is for.

        Raises:
            NotBuildableError: If the event does not request a build.
            GitHubAPIError: If fetching the pull request for a comment fails.
            CredentialError: If credentials for that fetch cannot be loaded.
        """
        return self.classify_event(decode_event(payload))

    def classify_event(self, event: WebhookPayload) -> PullRequestRef:
        if isinstance(event, PullRequestEvent):
            return self._classify_pull_request(event)
        if isinstance(event, IssueCommentEvent):
            return self._classify_comment(event)
        if isinstance(event, OtherEvent):
            raise NotBuildableError("Event is neither a pull request nor a comment")
        raise TypeError(f"Unhandled event type: {type(event).__name__}")

    def _classify_pull_request(self, event: PullRequestEvent) -> PullRequestRef:
        if not self.config.is_enabled(TriggerKind.PR_STATE):
            raise NotBuildableError("Pull request triggers are disabled")

        if event.action not in self.config.pull_actions:
            raise NotBuildableError(
                f"Pull request action '{event.action}' is not a build action"
            )

        try:
            pull_request = PullRequestRef.from_github(event.pull_request)
        except ValueError as e:
            raise NotBuildableError(str(e)) from e

        logger.info(
            "Pull request event is buildable",
            pr=str(pull_request),
            action=event.action,
        )
        return pull_request

    def _classify_comment(self, event: IssueCommentEvent) -> PullRequestRef:
        if not self.config.is_enabled(TriggerKind.PR_COMMENT):
            raise NotBuildableError("Comment triggers are disabled")

        if not event.is_pull_request:
            raise NotBuildableError("Comment is not on a pull request")

        if event.action not in self.config.comment_actions:
            raise NotBuildableError(
                f"Comment action '{event.action}' is not a build action"
            )

        if not self.config.is_trigger_phrase(event.comment_body):
            raise NotBuildableError("Comment is not the build phrase")

        author = event.comment_author
        if self.config.build_users and (
            author is None or not self.config.is_allowed_user(author)
        ):
            raise NotBuildableError(f"User '{author}' may not trigger builds")

        location = parse_issue_url(event.issue_url or "")
        if location is None:
            raise NotBuildableError(f"Unrecognised issue URL: {event.issue_url}")

        owner, repo, number = location
        logger.info(
            "Comment requests a build",
            owner=owner,
            repo=repo,
            number=number,
            author=author,
        )

        if self.credentials is not None:
            self.credentials.authenticate(self.github)

        data = self.github.get_pull_request(owner, repo, number)
        try:
            return PullRequestRef.from_github(data)
        except ValueError as e:
            raise NotBuildableError(str(e)) from e
