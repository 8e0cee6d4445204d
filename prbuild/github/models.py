"""GitHub data models for the build trigger.

This module defines:
- CommitState: the commit status vocabulary GitHub accepts
- PullRequestRef: the snapshot of a pull request taken at classification time
- CommitStatus: a status write aimed at a single commit

The models use Pydantic for validation, consistent with webhook/models.py.
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class CommitState(str, Enum):
    """Commit status states accepted by the GitHub statuses API."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"
    ERROR = "error"


class PullRequestRef(BaseModel):
    """Immutable snapshot of the pull request a build is for.

    Attributes:
        number: Pull request number within the base repository.
        state: Pull request state as reported by GitHub ("open", "closed").
        head_sha: Commit sha of the pull request head. Statuses land here.
        owner: Login of the base repository owner.
        repo: Base repository name.
        raw: The pull request object as GitHub returned it.
    """

    model_config = ConfigDict(frozen=True)

    number: int = Field(..., gt=0)
    state: str = Field(..., min_length=1)
    head_sha: str = Field(..., min_length=1)
    owner: str = Field(..., min_length=1)
    repo: str = Field(..., min_length=1)
    raw: Dict[str, Any] = Field(default_factory=dict, repr=False)

    @classmethod
    def from_github(cls, data: Dict[str, Any]) -> "PullRequestRef":
        """Build a snapshot from a GitHub pull request object.

        Args:
            data: Pull request JSON as found in webhook payloads or the
                  pulls API.

        Returns:
            PullRequestRef for the pull request.

        Raises:
            ValueError: If a required field is missing or invalid.
        """
        try:
            base_repo = data["base"]["repo"]
            return cls(
                number=data["number"],
                state=data["state"],
                head_sha=data["head"]["sha"],
                owner=base_repo["owner"]["login"],
                repo=base_repo["name"],
                raw=data,
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed pull request object: missing {e}") from e

    @property
    def is_open(self) -> bool:
        return self.state == "open"

    @property
    def source_version(self) -> str:
        """CodeBuild source version for the pull request head."""
        return f"pr/{self.number}"

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}#{self.number}"


class CommitStatus(BaseModel):
    """A commit status write.

    Attributes:
        owner: Repository owner login.
        repo: Repository name.
        sha: Commit the status is attached to.
        state: One of pending, success, failure, error.
        context: Label distinguishing this status from other checks.
        description: Short human-readable summary.
        target_url: Link shown next to the status.
    """

    model_config = ConfigDict(frozen=True)

    owner: str
    repo: str
    sha: str
    state: CommitState
    context: str
    description: str
    target_url: Optional[str] = None

    @classmethod
    def for_pull_request(
        cls,
        pull_request: PullRequestRef,
        state: CommitState,
        context: str,
        description: str,
        target_url: Optional[str] = None,
    ) -> "CommitStatus":
        return cls(
            owner=pull_request.owner,
            repo=pull_request.repo,
            sha=pull_request.head_sha,
            state=state,
            context=context,
            description=description,
            target_url=target_url,
        )

    def to_request_body(self) -> Dict[str, Any]:
        """Body for POST /repos/{owner}/{repo}/statuses/{sha}."""
        body: Dict[str, Any] = {
            "state": self.state.value,
            "context": self.context,
            "description": self.description,
        }
        if self.target_url is not None:
            body["target_url"] = self.target_url
        return body
