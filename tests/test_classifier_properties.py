"""Property-based tests for event buildability.

Pull request events are buildable exactly when the action is a build
action and the pr_state trigger is enabled. Comment events are buildable
exactly when every comment condition holds; turning any single condition
off makes the event not buildable.
"""

from unittest.mock import MagicMock

import pytest
from hypothesis import given, settings, strategies as st

from prbuild.classifier import BuildConfig, EventClassifier, TriggerKind
from prbuild.errors import NotBuildableError

from factories import make_comment_payload, make_pr_payload, make_pull_request

PR_ACTIONS = st.sampled_from(
    [
        "opened",
        "reopened",
        "synchronize",
        "closed",
        "edited",
        "labeled",
        "assigned",
        "review_requested",
        "ready_for_review",
    ]
)

TRIGGER_KINDS = st.frozensets(st.sampled_from(list(TriggerKind)))

PHRASE = "go codebuild go"


def _github(pull_request=None) -> MagicMock:
    github = MagicMock()
    github.get_pull_request.return_value = pull_request or make_pull_request()
    return github


def _is_buildable(classifier: EventClassifier, payload: dict) -> bool:
    try:
        classifier.classify(payload)
    except NotBuildableError:
        return False
    return True


@st.composite
def case_variants(draw: st.DrawFn, text: str) -> str:
    flags = draw(st.lists(st.booleans(), min_size=len(text), max_size=len(text)))
    return "".join(c.upper() if up else c.lower() for c, up in zip(text, flags))


class TestPullRequestBuildability:
    @given(action=PR_ACTIONS, kinds=TRIGGER_KINDS)
    @settings(max_examples=100)
    def test_buildable_iff_build_action_and_enabled(self, action, kinds) -> None:
        classifier = EventClassifier(_github(), BuildConfig(build_events=kinds))

        expected = (
            action in {"opened", "reopened", "synchronize"}
            and TriggerKind.PR_STATE in kinds
        )
        assert _is_buildable(classifier, make_pr_payload(action=action)) == expected

    @given(number=st.integers(min_value=1, max_value=10**6))
    @settings(max_examples=50)
    def test_embedded_pull_request_is_returned(self, number: int) -> None:
        github = _github()
        classifier = EventClassifier(github, BuildConfig())

        result = classifier.classify(make_pr_payload(number=number))

        assert result.number == number
        assert result.source_version == f"pr/{number}"
        github.get_pull_request.assert_not_called()


class TestCommentBuildability:
    @given(
        action_ok=st.booleans(),
        enabled=st.booleans(),
        phrase_ok=st.booleans(),
        on_pull_request=st.booleans(),
        allow_list=st.sampled_from(["none", "listed", "unlisted"]),
    )
    @settings(max_examples=200)
    def test_buildable_iff_all_conditions_hold(
        self, action_ok, enabled, phrase_ok, on_pull_request, allow_list
    ) -> None:
        kinds = {TriggerKind.PR_COMMENT} if enabled else {TriggerKind.PR_STATE}
        users = {
            "none": frozenset(),
            "listed": frozenset({"dev1", "dev2"}),
            "unlisted": frozenset({"dev2"}),
        }[allow_list]
        config = BuildConfig(build_events=frozenset(kinds), build_users=users)
        payload = make_comment_payload(
            body=PHRASE if phrase_ok else "please build",
            action="created" if action_ok else "edited",
            author="dev1",
            is_pull_request=on_pull_request,
        )

        expected = (
            action_ok
            and enabled
            and phrase_ok
            and on_pull_request
            and allow_list != "unlisted"
        )
        assert _is_buildable(EventClassifier(_github(), config), payload) == expected

    @given(body=case_variants(PHRASE))
    @settings(max_examples=100)
    def test_phrase_matches_in_any_case(self, body: str) -> None:
        config = BuildConfig(build_events=frozenset({TriggerKind.PR_COMMENT}))

        assert _is_buildable(
            EventClassifier(_github(), config), make_comment_payload(body=body)
        )

    @given(body=st.text(max_size=40))
    @settings(max_examples=100)
    def test_other_text_does_not_match(self, body: str) -> None:
        if body.casefold() == PHRASE:
            return
        config = BuildConfig(build_events=frozenset({TriggerKind.PR_COMMENT}))

        assert not _is_buildable(
            EventClassifier(_github(), config), make_comment_payload(body=body)
        )


@pytest.mark.parametrize("action", ["opened", "created", None])
def test_unrelated_payload_is_never_buildable(action):
    config = BuildConfig(build_events=frozenset(TriggerKind))
    payload = {"action": action, "repository": {"name": "r"}}

    assert not _is_buildable(EventClassifier(_github(), config), payload)
