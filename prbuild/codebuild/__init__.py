"""AWS CodeBuild access for the build trigger."""

from prbuild.codebuild.client import CodeBuildClient
from prbuild.codebuild.models import (
    TERMINAL_STATUSES,
    BuildRecord,
    BuildStatus,
    console_url,
)

__all__ = [
    "BuildRecord",
    "BuildStatus",
    "CodeBuildClient",
    "TERMINAL_STATUSES",
    "console_url",
]
