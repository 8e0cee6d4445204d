"""Unit tests for the FastAPI application."""

import json

import pytest
from fastapi.testclient import TestClient

from prbuild import main
from prbuild.orchestrator import create_orchestrator

from factories import (
    FakeGitHub,
    make_build,
    make_codebuild_client,
    make_pr_payload,
    make_settings,
    make_ssm_client,
    sign,
)


@pytest.fixture
def codebuild_client():
    return make_codebuild_client()


@pytest.fixture
def github():
    return FakeGitHub()


@pytest.fixture
def client(monkeypatch, codebuild_client, github, metrics):
    settings = make_settings()
    monkeypatch.setattr(main, "get_settings", lambda: settings)
    monkeypatch.setattr(main, "configure_logging", lambda level: None)
    monkeypatch.setattr(main, "get_metrics", lambda: metrics)
    monkeypatch.setattr(
        main,
        "orchestrator",
        create_orchestrator(
            settings,
            ssm_client=make_ssm_client(),
            codebuild_client=codebuild_client,
            github_client=github,
            metrics=metrics,
        ),
    )
    with TestClient(main.app) as test_client:
        yield test_client


def _post_webhook(client, payload, secret=None, event_name="pull_request"):
    body = json.dumps(payload).encode()
    signature = sign(body) if secret is None else sign(body, secret)
    return client.post(
        "/webhooks/github",
        content=body,
        headers={
            "Content-Type": "application/json",
            "X-Hub-Signature": signature,
            "X-GitHub-Event": event_name,
            "X-GitHub-Delivery": "d-1",
        },
    )


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_webhook_starts_build(client, codebuild_client):
    response = _post_webhook(client, make_pr_payload(number=42))

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "accepted"
    assert body["build"]["sourceVersion"] == "pr/42"
    codebuild_client.start_build.assert_called_once()


def test_webhook_bad_signature_is_401(client, codebuild_client):
    response = _post_webhook(client, make_pr_payload(), secret="wrong")

    assert response.status_code == 401
    assert response.json()["status"] == "rejected"
    codebuild_client.start_build.assert_not_called()


def test_webhook_not_buildable_is_acknowledged(client):
    response = _post_webhook(client, {"zen": "Design for failure."}, event_name="ping")

    assert response.status_code == 202
    assert response.json()["status"] == "ignored"


def test_webhook_setup_status_failure_is_502(client, github, codebuild_client):
    github.fail_statuses.add("Setting up the build...")

    response = _post_webhook(client, make_pr_payload())

    assert response.status_code == 502
    assert response.json()["error_type"] == "StatusPostError"
    codebuild_client.start_build.assert_not_called()


def test_get_build(client, codebuild_client):
    codebuild_client.builds["pr-builds:5"] = make_build(build_id="pr-builds:5", status="STOPPED")

    response = client.get("/builds/pr-builds:5")

    assert response.status_code == 200
    assert response.json()["build"]["buildStatus"] == "STOPPED"


def test_get_unknown_build_is_404(client):
    response = client.get("/builds/pr-builds:missing")

    assert response.status_code == 404


def test_sync_build_posts_status(client, github):
    response = client.post(
        "/builds/sync",
        json={
            "pull_request": make_pr_payload(sha="abc")["pull_request"],
            "build": make_build(build_id="pr-builds:5", status="SUCCEEDED"),
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "posted"
    assert body["commit_status"]["state"] == "success"
    assert github.statuses[-1].description == "Build SUCCEEDED..."


def test_sync_build_malformed_pull_request_is_422(client):
    response = client.post(
        "/builds/sync",
        json={"pull_request": {"number": 1}, "build": make_build()},
    )

    assert response.status_code == 422


def test_metrics_endpoint(client):
    _post_webhook(client, make_pr_payload())

    response = client.get("/metrics")

    assert response.status_code == 200
    assert "prbuild_builds_started_total" in response.text
