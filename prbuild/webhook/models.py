"""GitHub webhook event models for the build trigger.

This module defines:
- InboundEvent: raw headers and body of a webhook delivery, as needed for
  signature verification
- PullRequestEvent / IssueCommentEvent / OtherEvent: the decoded payload,
  one variant per event shape the classifier distinguishes
- decode_event: picks the variant from the payload shape

GitHub Webhook Payload Shapes:
  pull_request:   {"action": "opened", "pull_request": {...}}
  issue_comment:  {"action": "created", "issue": {...}, "comment": {...}}
"""

import json
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from prbuild.errors import NotBuildableError

SIGNATURE_HEADER = "X-Hub-Signature"
EVENT_HEADER = "X-GitHub-Event"
DELIVERY_HEADER = "X-GitHub-Delivery"


class InboundEvent(BaseModel):
    """A webhook delivery exactly as received.

    Header names are stored lower-cased so lookups are case-insensitive,
    as HTTP requires. The body is kept as raw bytes because the signature
    is computed over the bytes GitHub sent, not over re-encoded JSON.

    Attributes:
        headers: Request headers with lower-cased names.
        body: Raw request body.
    """

    model_config = ConfigDict(frozen=True)

    headers: Dict[str, str] = Field(default_factory=dict)
    body: bytes = b""

    @field_validator("headers", mode="before")
    @classmethod
    def lower_header_names(cls, v: Optional[Mapping[str, Any]]) -> Dict[str, str]:
        if v is None:
            return {}
        return {str(k).lower(): str(val) for k, val in v.items() if val is not None}

    def header(self, name: str) -> Optional[str]:
        """Look up a header by name, ignoring case."""
        return self.headers.get(name.lower())

    @property
    def signature(self) -> Optional[str]:
        return self.header(SIGNATURE_HEADER)

    @property
    def event_name(self) -> Optional[str]:
        return self.header(EVENT_HEADER)

    @property
    def delivery_id(self) -> Optional[str]:
        return self.header(DELIVERY_HEADER)

    def payload(self) -> Dict[str, Any]:
        """Decode the body as a JSON object.

        Raises:
            NotBuildableError: If the body is not a JSON object.
        """
        try:
            data = json.loads(self.body)
        except ValueError as e:
            raise NotBuildableError(f"Payload is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise NotBuildableError("Payload is not a JSON object")
        return data


class PullRequestEvent(BaseModel):
    """A pull request lifecycle event."""

    action: Optional[str] = None
    pull_request: Dict[str, Any]


class IssueCommentEvent(BaseModel):
    """A comment posted on an issue or pull request."""

    action: Optional[str] = None
    issue: Dict[str, Any]
    comment: Dict[str, Any]

    @property
    def is_pull_request(self) -> bool:
        """True when the issue is a pull request.

        GitHub marks pull requests in the issues API with a pull_request key.
        """
        return bool(self.issue.get("pull_request"))

    @property
    def comment_body(self) -> str:
        body = self.comment.get("body")
        return body if isinstance(body, str) else ""

    @property
    def comment_author(self) -> Optional[str]:
        user = self.comment.get("user")
        if isinstance(user, dict) and isinstance(user.get("login"), str):
            return user["login"]
        return None

    @property
    def issue_url(self) -> Optional[str]:
        url = self.issue.get("url")
        return url if isinstance(url, str) else None


class OtherEvent(BaseModel):
    """Any payload the build trigger does not act on."""

    action: Optional[str] = None


WebhookPayload = Union[PullRequestEvent, IssueCommentEvent, OtherEvent]


def decode_event(payload: Any) -> WebhookPayload:
    """Decode a webhook payload into one of the known event shapes.

    Args:
        payload: The JSON-decoded webhook body.

    Returns:
        PullRequestEvent if the payload carries a pull request object,
        IssueCommentEvent if it carries both an issue and a comment,
        OtherEvent otherwise.
    """
    if not isinstance(payload, dict):
        return OtherEvent()

    action = payload.get("action")
    if not isinstance(action, str):
        action = None

    pull_request = payload.get("pull_request")
    if isinstance(pull_request, dict):
        return PullRequestEvent(action=action, pull_request=pull_request)

    issue = payload.get("issue")
    comment = payload.get("comment")
    if isinstance(issue, dict) and isinstance(comment, dict):
        return IssueCommentEvent(action=action, issue=issue, comment=comment)

    return OtherEvent(action=action)
