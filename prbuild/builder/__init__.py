"""Build start, polling and commit status synchronization."""

from prbuild.builder.poller import StatusPoller
from prbuild.builder.publisher import StatusPublisher
from prbuild.builder.synchronizer import (
    StatusSynchronizer,
    describe_build_status,
    map_build_status,
)
from prbuild.builder.trigger import (
    RUNNING_DESCRIPTION,
    SETUP_DESCRIPTION,
    BuildTrigger,
)

__all__ = [
    "BuildTrigger",
    "RUNNING_DESCRIPTION",
    "SETUP_DESCRIPTION",
    "StatusPoller",
    "StatusPublisher",
    "StatusSynchronizer",
    "describe_build_status",
    "map_build_status",
]
