"""Function entry points for the build step workflow.

Three handlers share one orchestrator per process:

- start_build: receives the webhook (API Gateway proxy event) and returns
  {"pull_request": ..., "build": ...}
- check_build_status: receives that payload and returns it with "build"
  replaced by the current CodeBuild record
- build_done: receives the final payload, posts the commit status and
  returns the payload with the posted "status" added

Failures propagate as exceptions; the workflow treats them as a failed step.
"""

import base64
import json
from typing import Any, Dict, Optional

import structlog

from prbuild.codebuild.models import BuildRecord
from prbuild.config import get_settings
from prbuild.github.models import PullRequestRef
from prbuild.logging_config import configure_logging
from prbuild.orchestrator import BuildOrchestrator, create_orchestrator
from prbuild.webhook.models import InboundEvent

logger = structlog.get_logger()

_orchestrator: Optional[BuildOrchestrator] = None


def get_orchestrator() -> BuildOrchestrator:
    """Return the process-wide orchestrator, wiring it on first use."""
    global _orchestrator
    if _orchestrator is None:
        settings = get_settings()
        configure_logging(settings.log_level)
        _orchestrator = create_orchestrator(settings)
    return _orchestrator


def set_orchestrator(orchestrator: Optional[BuildOrchestrator]) -> None:
    """Replace the process-wide orchestrator (for testing)."""
    global _orchestrator
    _orchestrator = orchestrator


def inbound_event_from_proxy(event: Dict[str, Any]) -> InboundEvent:
    """Build an InboundEvent from an API Gateway proxy event."""
    body = event.get("body") or ""
    if event.get("isBase64Encoded"):
        raw = base64.b64decode(body)
    elif isinstance(body, bytes):
        raw = body
    else:
        raw = body.encode("utf-8")
    return InboundEvent(headers=event.get("headers") or {}, body=raw)


def _json_safe(data: Any) -> Any:
    # boto3 returns datetimes in build records
    return json.loads(json.dumps(data, default=str))


def _require(event: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = event.get(key)
    if not isinstance(value, dict):
        raise ValueError(f"Step payload has no '{key}' object")
    return value


def start_build(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    result = get_orchestrator().start_build(inbound_event_from_proxy(event))
    return _json_safe(result.to_payload())


def check_build_status(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    build_id = _require(event, "build").get("id")
    if not build_id:
        raise ValueError("Step payload build has no id")

    build = get_orchestrator().check_build_status(build_id)

    response = dict(event)
    response["build"] = _json_safe(build.raw)
    return response


def build_done(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    pull_request = PullRequestRef.from_github(_require(event, "pull_request"))
    build = BuildRecord.from_codebuild(_require(event, "build"))

    logger.info("Found commit identifier", sha=pull_request.head_sha)
    status = get_orchestrator().build_done(pull_request, build)

    response = dict(event)
    response["status"] = status.model_dump(mode="json") if status else None
    return response
