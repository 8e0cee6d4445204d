"""FastAPI application entry point for the build trigger.

Exposes the same operations as the function handlers over HTTP:

- POST /webhooks/github: verify, classify and start a build
- GET /builds/{build_id}: current status of a build
- POST /builds/sync: post the commit status for a build
- GET /health, GET /metrics

Errors map onto status codes: authentication failures are 401, events with
nothing to build are acknowledged with 202, unknown builds are 404 and
failures of AWS or GitHub are 502.
"""

from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from prbuild import __version__
from prbuild.codebuild.models import BuildRecord
from prbuild.config import Settings, get_settings
from prbuild.errors import (
    AuthError,
    BuildNotFoundError,
    ClassificationError,
    PRBuildError,
)
from prbuild.github.models import PullRequestRef
from prbuild.logging_config import configure_logging
from prbuild.metrics import get_metrics
from prbuild.orchestrator import BuildOrchestrator, create_orchestrator
from prbuild.webhook.models import InboundEvent

logger = structlog.get_logger()

# Initialized during lifespan startup
orchestrator: Optional[BuildOrchestrator] = None


def _log_configuration(settings: Settings) -> None:
    """Log configuration values. Only parameter names are logged, never values."""
    logger.info(
        "Build trigger configuration",
        github_base_url=settings.github_base_url,
        github_status_context=settings.github_status_context,
        ssm_github_username=settings.ssm_github_username,
        ssm_github_access_token=settings.ssm_github_access_token,
        ssm_github_webhook_secret=settings.ssm_github_webhook_secret,
        build_project=settings.build_project,
        region=settings.aws_default_region,
        build_events=[kind.value for kind in settings.build_events],
        build_users_count=len(settings.build_users),
        pull_actions=settings.pull_actions,
        comment_actions=settings.comment_actions,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    global orchestrator

    settings = get_settings()
    configure_logging(settings.log_level)
    _log_configuration(settings)

    if orchestrator is None:
        orchestrator = create_orchestrator(settings)

    logger.info("Build trigger started")

    yield

    github = orchestrator.trigger.publisher.github
    github.close()
    logger.info("Build trigger shutdown complete")


app = FastAPI(
    title="prbuild",
    description="Pull request builds on AWS CodeBuild triggered by GitHub webhooks",
    version=__version__,
    lifespan=lifespan,
)


def _get_orchestrator() -> BuildOrchestrator:
    if orchestrator is None:
        raise RuntimeError("Build trigger not initialized")
    return orchestrator


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    return JSONResponse(status_code=401, content={"status": "rejected", "message": str(exc)})


@app.exception_handler(ClassificationError)
async def classification_error_handler(
    request: Request, exc: ClassificationError
) -> JSONResponse:
    return JSONResponse(status_code=202, content={"status": "ignored", "message": str(exc)})


@app.exception_handler(BuildNotFoundError)
async def build_not_found_handler(
    request: Request, exc: BuildNotFoundError
) -> JSONResponse:
    return JSONResponse(status_code=404, content={"status": "error", "message": str(exc)})


@app.exception_handler(PRBuildError)
async def build_error_handler(request: Request, exc: PRBuildError) -> JSONResponse:
    return JSONResponse(
        status_code=502,
        content={
            "status": "error",
            "error_type": type(exc).__name__,
            "message": str(exc),
        },
    )


class SyncRequest(BaseModel):
    """Body of POST /builds/sync: the step payload of a finished build."""

    pull_request: Dict[str, Any]
    build: Dict[str, Any]


@app.get("/health")
async def health():
    return {"status": "healthy"}


@app.get("/metrics")
async def metrics():
    return Response(
        content=get_metrics().render(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )


@app.post("/webhooks/github")
async def github_webhook(request: Request):
    """GitHub webhook receiver.

    The raw body is read before any JSON decoding so the signature can be
    checked against the exact bytes GitHub signed.
    """
    event = InboundEvent(headers=dict(request.headers), body=await request.body())
    result = await run_in_threadpool(_get_orchestrator().start_build, event)
    return {"status": "accepted", **result.to_payload()}


@app.get("/builds/{build_id:path}")
def get_build(build_id: str):
    build = _get_orchestrator().check_build_status(build_id)
    return {"build": build.raw}


@app.post("/builds/sync")
def sync_build(body: SyncRequest):
    try:
        pull_request = PullRequestRef.from_github(body.pull_request)
        build = BuildRecord.from_codebuild(body.build)
    except ValueError as e:
        return JSONResponse(status_code=422, content={"status": "error", "message": str(e)})

    status = _get_orchestrator().build_done(pull_request, build)
    if status is None:
        return {"status": "not_posted"}
    return {"status": "posted", "commit_status": status.model_dump(mode="json")}


if __name__ == "__main__":
    import uvicorn

    dev_settings = get_settings()
    uvicorn.run(
        "prbuild.main:app",
        host=dev_settings.host,
        port=dev_settings.port,
    )
