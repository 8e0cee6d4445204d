"""Single-shot build status lookup.

The poller keeps no state. An external scheduler (a step workflow wait
loop) calls it until the build reaches a terminal status.
"""

import structlog

from prbuild.codebuild.client import CodeBuildClient
from prbuild.codebuild.models import BuildRecord

logger = structlog.get_logger()


class StatusPoller:
    def __init__(self, codebuild: CodeBuildClient):
        self.codebuild = codebuild

    def poll(self, build_id: str) -> BuildRecord:
        """Return the current record of a build.

        Raises:
            BuildNotFoundError: If CodeBuild does not know the id.
            BuildServiceError: If the lookup fails.
        """
        build = self.codebuild.get_build(build_id)
        logger.info(
            "Build polled",
            build_id=build.id,
            status=build.status,
            terminal=build.is_terminal,
        )
        return build
