"""Classifier configuration models.

This module defines the options that decide whether an inbound event is
buildable:
- TriggerKind: the two kinds of event that can start a build
- BuildConfig: enabled trigger kinds, commenter allow-list, trigger phrase
  and the action verbs accepted per event kind

The models use Pydantic for validation, consistent with config.py.
"""

from enum import Enum
from typing import FrozenSet

from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_BUILD_COMMENT = "go codebuild go"
DEFAULT_PULL_ACTIONS = frozenset({"opened", "reopened", "synchronize"})
DEFAULT_COMMENT_ACTIONS = frozenset({"created"})


class TriggerKind(str, Enum):
    """Kinds of GitHub event that may trigger a build.

    Attributes:
        PR_STATE: Pull request lifecycle events (opened, reopened, synchronize).
        PR_COMMENT: A comment on a pull request matching the trigger phrase.
    """

    PR_STATE = "pr_state"
    PR_COMMENT = "pr_comment"


class BuildConfig(BaseModel):
    """Options controlling event buildability.

    Attributes:
        build_events: Trigger kinds that are enabled.
        build_users: Logins allowed to trigger builds by comment. An empty
                     set means anyone may.
        build_comment: The trigger phrase, compared case-insensitively.
        pull_actions: Pull request actions that trigger a build.
        comment_actions: Issue comment actions that trigger a build.
    """

    model_config = ConfigDict(frozen=True)

    build_events: FrozenSet[TriggerKind] = Field(
        default=frozenset({TriggerKind.PR_STATE}),
        description="Trigger kinds enabled for this deployment",
    )

    build_users: FrozenSet[str] = Field(
        default_factory=frozenset,
        description="Commenter allow-list; empty means unrestricted",
    )

    build_comment: str = Field(
        default=DEFAULT_BUILD_COMMENT,
        min_length=1,
        description="Comment text that requests a build",
    )

    pull_actions: FrozenSet[str] = Field(
        default=DEFAULT_PULL_ACTIONS,
        description="Pull request actions that trigger a build",
    )

    comment_actions: FrozenSet[str] = Field(
        default=DEFAULT_COMMENT_ACTIONS,
        description="Issue comment actions that trigger a build",
    )

    @field_validator("build_comment")
    @classmethod
    def validate_build_comment(cls, v: str) -> str:
        """Validate that the trigger phrase is not blank."""
        if not v.strip():
            raise ValueError("build_comment cannot be blank")
        return v.strip()

    def is_enabled(self, kind: TriggerKind) -> bool:
        """Check whether a trigger kind is enabled."""
        return kind in self.build_events

    def is_trigger_phrase(self, text: str) -> bool:
        """Check whether a comment body is exactly the trigger phrase, ignoring case."""
        return text.casefold() == self.build_comment.casefold()

    def is_allowed_user(self, login: str) -> bool:
        """Check whether a commenter may trigger builds."""
        if not self.build_users:
            return True
        return login in self.build_users
