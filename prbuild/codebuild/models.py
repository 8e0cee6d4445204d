"""CodeBuild build models.

This module defines:
- BuildStatus: lifecycle values CodeBuild reports for a build
- BuildRecord: the view of a build the trigger, poller and synchronizer share
"""

from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


class BuildStatus(str, Enum):
    """Build lifecycle values.

    CodeBuild reports IN_PROGRESS for a running build; RUNNING is accepted
    as well. Every other member is terminal.
    """

    IN_PROGRESS = "IN_PROGRESS"
    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    FAULT = "FAULT"
    STOPPED = "STOPPED"
    TIMED_OUT = "TIMED_OUT"


TERMINAL_STATUSES = frozenset(
    {
        BuildStatus.SUCCEEDED,
        BuildStatus.FAILED,
        BuildStatus.FAULT,
        BuildStatus.STOPPED,
        BuildStatus.TIMED_OUT,
    }
)


class BuildRecord(BaseModel):
    """A CodeBuild build as last observed.

    The record is created when the build starts and only ever changes on
    the CodeBuild side; this process re-reads it by id.

    Attributes:
        id: CodeBuild build id ("<project>:<uuid>").
        status: Build status string. Kept as a string so values CodeBuild
                adds later pass through unchanged.
        source_version: Source version the build was started with.
        raw: The build object as CodeBuild returned it.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    status: str = Field(default=BuildStatus.IN_PROGRESS.value)
    source_version: str = ""
    raw: Dict[str, Any] = Field(default_factory=dict, repr=False)

    @classmethod
    def from_codebuild(cls, build: Dict[str, Any]) -> "BuildRecord":
        """Build a record from a CodeBuild build dict.

        Raises:
            ValueError: If the build has no id.
        """
        build_id = build.get("id")
        if not build_id:
            raise ValueError("CodeBuild build has no id")
        return cls(
            id=build_id,
            status=build.get("buildStatus") or BuildStatus.IN_PROGRESS.value,
            source_version=build.get("sourceVersion", ""),
            raw=build,
        )

    @property
    def is_terminal(self) -> bool:
        return self.status in {s.value for s in TERMINAL_STATUSES}


def console_url(region: str, build_id: str) -> str:
    """Link to a build in the CodeBuild console."""
    return (
        f"https://{region}.console.aws.amazon.com/codebuild/home"
        f"?region={region}#/builds/{build_id}/view/new"
    )
