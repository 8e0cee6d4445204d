"""Unit tests for webhook payload decoding."""

import pytest

from prbuild.errors import NotBuildableError
from prbuild.webhook import (
    InboundEvent,
    IssueCommentEvent,
    OtherEvent,
    PullRequestEvent,
    decode_event,
)

from factories import make_comment_payload, make_pr_payload


def test_pull_request_payload_decodes_to_pull_request_event():
    event = decode_event(make_pr_payload(action="synchronize"))

    assert isinstance(event, PullRequestEvent)
    assert event.action == "synchronize"
    assert event.pull_request["number"] == 42


def test_comment_payload_decodes_to_issue_comment_event():
    event = decode_event(make_comment_payload(body="Go CodeBuild Go", author="alice"))

    assert isinstance(event, IssueCommentEvent)
    assert event.is_pull_request
    assert event.comment_body == "Go CodeBuild Go"
    assert event.comment_author == "alice"
    assert event.issue_url == "https://api.github.com/repos/o/r/issues/42"


def test_comment_on_plain_issue_is_not_a_pull_request():
    event = decode_event(make_comment_payload(is_pull_request=False))

    assert isinstance(event, IssueCommentEvent)
    assert not event.is_pull_request


@pytest.mark.parametrize(
    "payload",
    [
        {"action": "created", "issue": {"number": 1}},
        {"action": "published", "release": {}},
        {"zen": "Keep it logically awesome."},
        {"action": "opened", "pull_request": None},
        [],
        None,
    ],
)
def test_other_shapes_decode_to_other_event(payload):
    assert isinstance(decode_event(payload), OtherEvent)


def test_comment_with_missing_user_has_no_author():
    payload = make_comment_payload()
    del payload["comment"]["user"]

    event = decode_event(payload)

    assert event.comment_author is None


def test_inbound_event_payload_rejects_non_json():
    event = InboundEvent(headers={}, body=b"not json")

    with pytest.raises(NotBuildableError):
        event.payload()


def test_inbound_event_payload_rejects_non_object():
    event = InboundEvent(headers={}, body=b"[1, 2]")

    with pytest.raises(NotBuildableError):
        event.payload()


def test_inbound_event_header_lookup_ignores_case():
    event = InboundEvent(
        headers={"x-github-event": "issue_comment", "X-GITHUB-DELIVERY": "d-1"},
        body=b"{}",
    )

    assert event.event_name == "issue_comment"
    assert event.delivery_id == "d-1"
    assert event.signature is None
