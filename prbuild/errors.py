"""Exception hierarchy for the build trigger.

Every failure surfaces as a subclass of PRBuildError so entry points can
translate errors into a single result channel. The category of failure is
carried by the class; the detail by the message.
"""

from typing import Optional


class PRBuildError(Exception):
    """Base exception for all build trigger failures."""

    pass


class AuthError(PRBuildError):
    """Raised when an inbound webhook cannot be authenticated."""

    pass


class MissingHeaderError(AuthError):
    """Raised when a required GitHub webhook header is absent.

    Attributes:
        header: Name of the missing header.
    """

    def __init__(self, header: str):
        self.header = header
        super().__init__(f"Missing required header: {header}")


class SignatureMismatchError(AuthError):
    """Raised when the X-Hub-Signature does not match the payload."""

    def __init__(self, message: str = "Webhook signature does not match payload"):
        super().__init__(message)


class ClassificationError(PRBuildError):
    """Raised when an event does not lead to a build.

    This is not an operational failure; it means there is nothing to do.
    """

    pass


class NotBuildableError(ClassificationError):
    """Raised when an event does not satisfy any trigger condition."""

    pass


class PullRequestNotOpenError(ClassificationError):
    """Raised when the classified pull request is not open.

    Attributes:
        number: The pull request number.
        state: The state GitHub reported for it.
    """

    def __init__(self, number: int, state: str):
        self.number = number
        self.state = state
        super().__init__(f"Pull request #{number} is {state}, not open")


class CredentialError(PRBuildError):
    """Raised when a secret cannot be read from the parameter store.

    Attributes:
        parameter: Name of the parameter that failed to load.
    """

    def __init__(self, message: str, parameter: Optional[str] = None):
        self.parameter = parameter
        super().__init__(message)


class BuildServiceError(PRBuildError):
    """Raised when CodeBuild rejects a start or lookup request."""

    pass


class BuildNotFoundError(BuildServiceError):
    """Raised when CodeBuild does not know the requested build id.

    Attributes:
        build_id: The build id that was looked up.
    """

    def __init__(self, build_id: str):
        self.build_id = build_id
        super().__init__(f"Build not found: {build_id}")


class StatusPostError(PRBuildError):
    """Raised when GitHub rejects a commit status write.

    Attributes:
        sha: The commit the status was meant for.
        status_code: HTTP status code returned by GitHub, if any.
    """

    def __init__(
        self,
        message: str,
        sha: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        self.sha = sha
        self.status_code = status_code
        super().__init__(message)
