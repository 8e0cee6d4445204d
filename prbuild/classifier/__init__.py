"""Buildability classification for webhook events."""

from prbuild.classifier.classifier import EventClassifier, parse_issue_url
from prbuild.classifier.models import BuildConfig, TriggerKind

__all__ = [
    "BuildConfig",
    "EventClassifier",
    "TriggerKind",
    "parse_issue_url",
]
