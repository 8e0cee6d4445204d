"""CodeBuild access for starting and looking up builds."""

from typing import Any, Dict, List

import boto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError

from prbuild.codebuild.models import BuildRecord
from prbuild.errors import BuildNotFoundError, BuildServiceError

logger = structlog.get_logger()


class CodeBuildClient:
    """
    Thin wrapper over the boto3 CodeBuild client.

    Translates botocore failures into BuildServiceError and CodeBuild build
    dicts into BuildRecord. No retries.
    """

    def __init__(self, codebuild_client=None):
        """
        Initialize CodeBuildClient.

        Args:
            codebuild_client: Optional boto3 CodeBuild client (for testing)
        """
        self._codebuild = codebuild_client or boto3.client("codebuild")

    def _call(self, operation: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            return getattr(self._codebuild, operation)(**kwargs)
        except ClientError as e:
            error = e.response.get("Error", {})
            raise BuildServiceError(
                f"CodeBuild {operation} failed: {error.get('Code', '')} - "
                f"{error.get('Message', str(e))}"
            ) from e
        except BotoCoreError as e:
            raise BuildServiceError(
                f"CodeBuild {operation} connection error: {e}"
            ) from e

    def start_build(self, project_name: str, source_version: str) -> BuildRecord:
        """
        Start a build of a project at a source version.

        Args:
            project_name: CodeBuild project name
            source_version: Source version, e.g. "pr/42"

        Returns:
            BuildRecord for the started build

        Raises:
            BuildServiceError: If CodeBuild rejects the request
        """
        response = self._call(
            "start_build",
            projectName=project_name,
            sourceVersion=source_version,
        )
        build = response.get("build")
        if not build:
            raise BuildServiceError("CodeBuild start_build returned no build")

        try:
            record = BuildRecord.from_codebuild(build)
        except ValueError as e:
            raise BuildServiceError(str(e)) from e

        logger.info(
            "Build started",
            project=project_name,
            source_version=source_version,
            build_id=record.id,
        )
        return record

    def get_build(self, build_id: str) -> BuildRecord:
        """
        Look up a single build by id.

        Args:
            build_id: CodeBuild build id

        Returns:
            BuildRecord with the current status

        Raises:
            BuildNotFoundError: If CodeBuild does not know the id
            BuildServiceError: If the lookup fails
        """
        response = self._call("batch_get_builds", ids=[build_id])

        not_found: List[str] = response.get("buildsNotFound") or []
        builds: List[Dict[str, Any]] = response.get("builds") or []
        if build_id in not_found or not builds:
            raise BuildNotFoundError(build_id)

        return BuildRecord.from_codebuild(builds[0])
