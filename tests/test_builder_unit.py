"""Unit tests for BuildTrigger, StatusPoller and StatusSynchronizer."""

from unittest.mock import MagicMock

import pytest

from prbuild.builder import (
    RUNNING_DESCRIPTION,
    SETUP_DESCRIPTION,
    BuildTrigger,
    StatusPoller,
    StatusPublisher,
    StatusSynchronizer,
)
from prbuild.codebuild import BuildRecord, CodeBuildClient
from prbuild.credentials import CredentialProvider, ParameterStore
from prbuild.errors import (
    BuildNotFoundError,
    BuildServiceError,
    CredentialError,
    StatusPostError,
)
from prbuild.github import CommitState, GitHubAPIError, PullRequestRef

from factories import (
    FakeGitHub,
    client_error,
    make_build,
    make_codebuild_client,
    make_pull_request,
    make_ssm_client,
)

REGION = "eu-west-1"


def _credentials(ssm_client=None) -> CredentialProvider:
    return CredentialProvider(
        parameter_store=ParameterStore(ssm_client=ssm_client or make_ssm_client()),
        username_parameter="/ci/github/username",
        token_parameter="/ci/github/token",
    )


def _pull_request(**kwargs) -> PullRequestRef:
    return PullRequestRef.from_github(make_pull_request(**kwargs))


@pytest.fixture
def github():
    return FakeGitHub()


@pytest.fixture
def boto_codebuild():
    return make_codebuild_client()


@pytest.fixture
def trigger(github, boto_codebuild, metrics):
    return BuildTrigger(
        credentials=_credentials(),
        publisher=StatusPublisher(github, context="ci/codebuild", metrics=metrics),
        codebuild=CodeBuildClient(codebuild_client=boto_codebuild),
        project_name="pr-builds",
        region=REGION,
        metrics=metrics,
    )


@pytest.fixture
def synchronizer(github, metrics):
    return StatusSynchronizer(
        credentials=_credentials(),
        publisher=StatusPublisher(github, context="ci/codebuild", metrics=metrics),
        region=REGION,
    )


# ---------------------------------------------------------------------------
# BuildTrigger
# ---------------------------------------------------------------------------


def test_trigger_starts_build_and_posts_two_pending_statuses(trigger, github, boto_codebuild):
    build = trigger.trigger(_pull_request(number=42, sha="abc", owner="o", repo="r"))

    boto_codebuild.start_build.assert_called_once_with(
        projectName="pr-builds", sourceVersion="pr/42"
    )
    assert github.calls == [
        "authenticate",
        f"status:{SETUP_DESCRIPTION}",
        f"status:{RUNNING_DESCRIPTION}",
    ]

    setup, running = github.statuses
    assert (setup.sha, setup.state, setup.target_url) == ("abc", CommitState.PENDING, None)
    assert (running.sha, running.state) == ("abc", CommitState.PENDING)
    assert running.owner == "o" and running.repo == "r"
    assert running.context == "ci/codebuild"
    assert running.target_url == (
        f"https://{REGION}.console.aws.amazon.com/codebuild/home"
        f"?region={REGION}#/builds/{build.id}/view/new"
    )


def test_trigger_returns_started_build(trigger):
    build = trigger.trigger(_pull_request(number=7))

    assert build.id == "pr-builds:1"
    assert build.source_version == "pr/7"


def test_setup_status_failure_prevents_build(github, boto_codebuild, trigger):
    github.fail_statuses.add(SETUP_DESCRIPTION)

    with pytest.raises(StatusPostError) as exc_info:
        trigger.trigger(_pull_request())

    assert exc_info.value.status_code == 403
    boto_codebuild.start_build.assert_not_called()


def test_running_status_failure_is_not_fatal(github, trigger, boto_codebuild, metrics):
    github.fail_statuses.add(RUNNING_DESCRIPTION)

    build = trigger.trigger(_pull_request())

    assert build.id in boto_codebuild.builds
    assert [s.description for s in github.statuses] == [SETUP_DESCRIPTION]
    failed = metrics.registry.get_sample_value(
        "prbuild_status_posts_total", {"state": "pending", "result": "failed"}
    )
    assert failed == 1.0


def test_build_service_failure_propagates(github, boto_codebuild, trigger):
    boto_codebuild.start_build.side_effect = client_error(
        "ResourceNotFoundException", "StartBuild"
    )

    with pytest.raises(BuildServiceError):
        trigger.trigger(_pull_request())

    assert [s.description for s in github.statuses] == [SETUP_DESCRIPTION]


def test_credential_failure_prevents_everything(github, boto_codebuild, metrics):
    trigger = BuildTrigger(
        credentials=_credentials(make_ssm_client({})),
        publisher=StatusPublisher(github, context="ci/codebuild", metrics=metrics),
        codebuild=CodeBuildClient(codebuild_client=boto_codebuild),
        project_name="pr-builds",
        region=REGION,
        metrics=metrics,
    )

    with pytest.raises(CredentialError):
        trigger.trigger(_pull_request())

    assert github.calls == []
    boto_codebuild.start_build.assert_not_called()


def test_trigger_authenticates_once_per_process(trigger, github):
    trigger.trigger(_pull_request(number=1))
    trigger.trigger(_pull_request(number=2))

    assert github.calls.count("authenticate") == 1


def test_trigger_counts_started_builds(trigger, metrics):
    trigger.trigger(_pull_request())

    assert metrics.registry.get_sample_value("prbuild_builds_started_total") == 1.0


# ---------------------------------------------------------------------------
# StatusPoller
# ---------------------------------------------------------------------------


def test_poll_returns_record_verbatim():
    build = make_build(build_id="p:1", status="FAILED")
    poller = StatusPoller(CodeBuildClient(codebuild_client=make_codebuild_client({"p:1": build})))

    record = poller.poll("p:1")

    assert record.id == "p:1"
    assert record.status == "FAILED"
    assert record.raw == build


def test_poll_unknown_build():
    poller = StatusPoller(CodeBuildClient(codebuild_client=make_codebuild_client()))

    with pytest.raises(BuildNotFoundError):
        poller.poll("p:404")


# ---------------------------------------------------------------------------
# StatusSynchronizer
# ---------------------------------------------------------------------------


def test_timed_out_build_is_reported_as_error(synchronizer, github):
    build = BuildRecord(id="pr-builds:9", status="TIMED_OUT")

    status = synchronizer.sync(_pull_request(sha="abc"), build)

    assert status.state == CommitState.ERROR
    assert status.description == "Build TIMED_OUT..."
    assert status.sha == "abc"
    assert status.target_url.endswith("#/builds/pr-builds:9/view/new")
    assert github.statuses == [status]


@pytest.mark.parametrize(
    "build_status, state",
    [
        ("SUCCEEDED", CommitState.SUCCESS),
        ("FAILED", CommitState.FAILURE),
        ("FAULT", CommitState.ERROR),
        ("STOPPED", CommitState.ERROR),
        ("IN_PROGRESS", CommitState.PENDING),
    ],
)
def test_sync_posts_mapped_state(synchronizer, github, build_status, state):
    status = synchronizer.sync(_pull_request(), BuildRecord(id="p:1", status=build_status))

    assert status.state == state
    assert status.description == f"Build {build_status}..."


def test_sync_twice_posts_identical_status(synchronizer, github):
    pull_request = _pull_request()
    build = BuildRecord(id="p:1", status="SUCCEEDED")

    first = synchronizer.sync(pull_request, build)
    second = synchronizer.sync(pull_request, build)

    assert first == second
    assert github.statuses == [first, second]


def test_sync_rejected_status_raises(synchronizer, github):
    github.fail_statuses.add("Build FAILED...")

    with pytest.raises(StatusPostError):
        synchronizer.sync(_pull_request(), BuildRecord(id="p:1", status="FAILED"))


def test_sync_authenticates_before_posting(synchronizer, github):
    synchronizer.sync(_pull_request(), BuildRecord(id="p:1", status="SUCCEEDED"))

    assert github.calls == ["authenticate", "status:Build SUCCEEDED..."]


def test_publisher_wraps_github_error(metrics):
    github = MagicMock()
    github.create_status.side_effect = GitHubAPIError("GitHub API error: 422", status_code=422)
    publisher = StatusPublisher(github, context="ci", metrics=metrics)

    with pytest.raises(StatusPostError, match="pending") as exc_info:
        publisher.publish(_pull_request(sha="abc"), CommitState.PENDING, "x")

    assert exc_info.value.sha == "abc"
    assert exc_info.value.status_code == 422
