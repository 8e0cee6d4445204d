"""Process-lifetime GitHub credentials.

The GitHub username and access token live in the parameter store. They are
read once, on first use, and kept for the life of the process. There is no
refresh; a rotated token takes effect on the next cold start.
"""

import threading
from typing import Optional, Protocol

import structlog
from pydantic import BaseModel, ConfigDict, SecretStr

from prbuild.credentials.parameter_store import ParameterStore

logger = structlog.get_logger()


class Credentials(BaseModel):
    """Basic-auth credentials for the GitHub API."""

    model_config = ConfigDict(frozen=True)

    username: str
    password: SecretStr


class Authenticatable(Protocol):
    """Client that accepts basic-auth credentials once per process."""

    @property
    def is_authenticated(self) -> bool: ...

    def authenticate(self, username: str, password: str) -> None: ...


class CredentialProvider:
    """Lazily loads and caches GitHub credentials.

    Initialization is single-flight: concurrent cold callers block on a lock
    and only the first one reads the parameter store.

    Attributes:
        username_parameter: SSM parameter name for the GitHub username.
        token_parameter: SSM parameter name for the GitHub access token.
    """

    def __init__(
        self,
        parameter_store: ParameterStore,
        username_parameter: str,
        token_parameter: str,
    ):
        self.parameter_store = parameter_store
        self.username_parameter = username_parameter
        self.token_parameter = token_parameter
        self._credentials: Optional[Credentials] = None
        self._lock = threading.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._credentials is not None

    def get_credentials(self) -> Credentials:
        """Return the cached credentials, loading them on first call.

        Raises:
            CredentialError: If either parameter cannot be read.
        """
        if self._credentials is not None:
            return self._credentials

        with self._lock:
            if self._credentials is None:
                logger.info("Loading GitHub credentials from parameter store")
                username = self.parameter_store.get_parameter(self.username_parameter)
                password = self.parameter_store.get_parameter(self.token_parameter)
                self._credentials = Credentials(
                    username=username,
                    password=SecretStr(password),
                )
        return self._credentials

    def authenticate(self, client: Authenticatable) -> None:
        """Attach credentials to a client unless it already has them.

        Raises:
            CredentialError: If credentials cannot be loaded.
        """
        if client.is_authenticated:
            logger.debug("GitHub client already authenticated")
            return

        logger.info("Authenticating GitHub client")
        credentials = self.get_credentials()
        client.authenticate(
            credentials.username,
            credentials.password.get_secret_value(),
        )
