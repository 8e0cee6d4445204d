"""Build trigger configuration using pydantic-settings.

This module defines the Settings class that reads configuration from
environment variables. Variable names carry no prefix so that they match
the names the function deployment already sets (SSM_GITHUB_USERNAME,
BUILD_PROJECT, AWS_DEFAULT_REGION, ...).

List options (BUILD_EVENTS, BUILD_USERS, PULL_ACTIONS, COMMENT_ACTIONS) are
read as JSON arrays.
"""

from functools import lru_cache
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from prbuild.classifier.models import (
    DEFAULT_BUILD_COMMENT,
    DEFAULT_COMMENT_ACTIONS,
    DEFAULT_PULL_ACTIONS,
    BuildConfig,
    TriggerKind,
)


class Settings(BaseSettings):
    """Build trigger configuration from environment variables.

    Required fields (must be set via environment variables):
    - ssm_github_username: SSM parameter holding the GitHub username
    - ssm_github_access_token: SSM parameter holding the GitHub access token
    - ssm_github_webhook_secret: SSM parameter holding the webhook secret
    - build_project: Name of the CodeBuild project to start
    """

    model_config = SettingsConfigDict(
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Secret store parameter names
    # -------------------------------------------------------------------------
    ssm_github_username: str

    ssm_github_access_token: str

    ssm_github_webhook_secret: str

    # -------------------------------------------------------------------------
    # GitHub Configuration
    # -------------------------------------------------------------------------
    # Context label shown next to the commit status
    github_status_context: str = "codebuild"

    # Base URL for GitHub API (supports GitHub Enterprise)
    github_base_url: str = "https://api.github.com"

    # -------------------------------------------------------------------------
    # CodeBuild Configuration
    # -------------------------------------------------------------------------
    build_project: str

    # Only used to build the console link for commit statuses
    aws_default_region: str = "us-east-1"

    # -------------------------------------------------------------------------
    # Trigger Configuration
    # -------------------------------------------------------------------------
    build_events: List[TriggerKind] = [TriggerKind.PR_STATE]

    build_users: List[str] = []

    build_comment: str = DEFAULT_BUILD_COMMENT

    pull_actions: List[str] = sorted(DEFAULT_PULL_ACTIONS)

    comment_actions: List[str] = sorted(DEFAULT_COMMENT_ACTIONS)

    # -------------------------------------------------------------------------
    # Server Configuration
    # -------------------------------------------------------------------------
    host: str = "0.0.0.0"

    port: int = 8080

    log_level: str = "INFO"

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator(
        "ssm_github_username",
        "ssm_github_access_token",
        "ssm_github_webhook_secret",
        "build_project",
        "github_status_context",
    )
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Validate that required names are not blank."""
        if not v or not v.strip():
            raise ValueError("value cannot be empty")
        return v.strip()

    @field_validator("github_base_url")
    @classmethod
    def validate_github_base_url(cls, v: str) -> str:
        """Validate that the GitHub base URL is an http(s) URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("github_base_url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("build_comment")
    @classmethod
    def validate_build_comment(cls, v: str) -> str:
        """Validate that the trigger phrase is not blank."""
        if not v.strip():
            raise ValueError("build_comment cannot be blank")
        return v.strip()

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate that port is in valid range."""
        if not 1 <= v <= 65535:
            raise ValueError("port must be between 1 and 65535")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that the log level is a standard level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {v}")
        return level

    def build_config(self) -> BuildConfig:
        """Project the trigger options into a BuildConfig."""
        return BuildConfig(
            build_events=frozenset(self.build_events),
            build_users=frozenset(self.build_users),
            build_comment=self.build_comment,
            pull_actions=frozenset(self.pull_actions),
            comment_actions=frozenset(self.comment_actions),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Create and return the process-wide Settings instance.

    Raises:
        pydantic.ValidationError: If required fields are missing or invalid.
    """
    return Settings()
