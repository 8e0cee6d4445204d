"""GitHub webhook verification and payload decoding.

The build trigger acts on two event shapes:
- pull_request (opened, reopened, synchronize)
- issue_comment (created) carrying the trigger phrase on a pull request
"""

from prbuild.webhook.models import (
    InboundEvent,
    IssueCommentEvent,
    OtherEvent,
    PullRequestEvent,
    WebhookPayload,
    decode_event,
)
from prbuild.webhook.verifier import WebhookVerifier, compute_signature

__all__ = [
    "InboundEvent",
    "IssueCommentEvent",
    "OtherEvent",
    "PullRequestEvent",
    "WebhookPayload",
    "WebhookVerifier",
    "compute_signature",
    "decode_event",
]
