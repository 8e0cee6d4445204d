"""GitHub API client for commit statuses and pull requests.

This module provides a small wrapper around the GitHub REST API for:
- Creating commit statuses
- Fetching pull request details

The client authenticates with HTTP basic auth (username plus access token)
once per process. It performs no retries: a failed request raises
GitHubAPIError immediately and the invoking scheduler decides what to do.
"""

from typing import Any, Dict, Optional

import httpx
import structlog

from prbuild.errors import PRBuildError
from prbuild.github.models import CommitStatus

logger = structlog.get_logger()


class GitHubAPIError(PRBuildError):
    """Raised when a GitHub API request fails.

    Attributes:
        message: Human-readable error description.
        status_code: HTTP status code from the response.
        response_body: Response body from GitHub API.
        request_url: The URL that was requested.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        request_url: Optional[str] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.response_body = response_body
        self.request_url = request_url
        super().__init__(message)


class GitHubClient:
    """Synchronous GitHub API client using basic auth.

    The client is created unauthenticated and receives credentials through
    authenticate(), typically from CredentialProvider. Until then requests
    are sent anonymously.

    Attributes:
        base_url: Base URL for GitHub API (default: https://api.github.com).
        timeout: Request timeout in seconds.

    Example:
        >>> client = GitHubClient()
        >>> client.authenticate("ci-bot", "ghp_xxx")
        >>> with client:
        ...     client.get_pull_request("owner", "repo", 42)
    """

    def __init__(
        self,
        base_url: str = "https://api.github.com",
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """Initialize the GitHub client.

        Args:
            base_url: Base URL for GitHub API. Use this to support
                      GitHub Enterprise Server endpoints.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (for testing).
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._auth: Optional[httpx.BasicAuth] = None
        self._client: Optional[httpx.Client] = None

    @property
    def is_authenticated(self) -> bool:
        return self._auth is not None

    def authenticate(self, username: str, password: str) -> None:
        """Attach basic-auth credentials to all subsequent requests."""
        self._auth = httpx.BasicAuth(username, password)
        if self._client is not None and not self._client.is_closed:
            self._client.auth = self._auth

    @property
    def client(self) -> httpx.Client:
        """Get the HTTP client, creating it if necessary."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                base_url=self.base_url,
                headers=self._default_headers(),
                auth=self._auth,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    def _default_headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "prbuild/1.0",
        }

    def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client is not None and not self._client.is_closed:
            self._client.close()
            self._client = None

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def _request(
        self,
        method: str,
        path: str,
        json_data: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """Make a single HTTP request.

        Args:
            method: HTTP method.
            path: API path (e.g., /repos/owner/repo/statuses/sha).
            json_data: Optional JSON body for the request.

        Returns:
            The HTTP response from GitHub.

        Raises:
            GitHubAPIError: If the request fails or GitHub returns >= 400.
        """
        try:
            response = self.client.request(method=method, url=path, json=json_data)
        except httpx.HTTPError as e:
            logger.error(
                "GitHub API request failed",
                method=method,
                path=path,
                error=str(e),
            )
            raise GitHubAPIError(
                message=f"GitHub API request failed: {e}",
                request_url=f"{self.base_url}{path}",
            ) from e

        if response.status_code >= 400:
            error_body = response.text
            logger.error(
                "GitHub API error",
                status_code=response.status_code,
                path=path,
                method=method,
                response_body=error_body[:500],
            )
            raise GitHubAPIError(
                message=f"GitHub API error: {response.status_code}",
                status_code=response.status_code,
                response_body=error_body,
                request_url=str(response.url),
            )

        return response

    def create_status(self, status: CommitStatus) -> Dict[str, Any]:
        """Create a commit status.

        Args:
            status: The status to post.

        Returns:
            The created status data from GitHub API.

        Raises:
            GitHubAPIError: If the request fails.
        """
        path = f"/repos/{status.owner}/{status.repo}/statuses/{status.sha}"

        logger.info(
            "Creating commit status",
            owner=status.owner,
            repo=status.repo,
            sha=status.sha,
            state=status.state.value,
            description=status.description,
        )

        response = self._request(
            method="POST",
            path=path,
            json_data=status.to_request_body(),
        )
        return response.json()

    def get_pull_request(self, owner: str, repo: str, number: int) -> Dict[str, Any]:
        """Get pull request details.

        Args:
            owner: Repository owner (user or organization).
            repo: Repository name.
            number: Pull request number.

        Returns:
            Pull request data from GitHub API.

        Raises:
            GitHubAPIError: If the request fails.
        """
        path = f"/repos/{owner}/{repo}/pulls/{number}"

        logger.debug(
            "Getting pull request details",
            owner=owner,
            repo=repo,
            number=number,
        )

        response = self._request(method="GET", path=path)
        return response.json()
