"""Prometheus metrics for the build trigger.

Metrics Defined:
- prbuild_webhook_events_total: Counter of inbound events by result
- prbuild_builds_started_total: Counter of CodeBuild builds started
- prbuild_status_posts_total: Counter of commit status writes by state/result
- prbuild_errors_total: Counter of failed invocations by error type

Metrics are exposed at the `/metrics` endpoint in Prometheus format.
"""

from typing import Optional

from prometheus_client import REGISTRY, CollectorRegistry, Counter, generate_latest


class BuildMetrics:
    """Container for the build trigger's Prometheus metrics.

    Supports custom registries for testing.

    Example:
        >>> metrics = BuildMetrics(registry=CollectorRegistry())
        >>> metrics.record_webhook_event("accepted")
        >>> metrics.record_status_post("pending", ok=True)
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """Initialize metrics.

        Args:
            registry: Optional Prometheus registry. If None, uses the
                      default REGISTRY. Pass a custom registry for testing.
        """
        self.registry = registry or REGISTRY

        self.webhook_events_total = Counter(
            "prbuild_webhook_events_total",
            "Inbound webhook events by outcome",
            labelnames=["result"],
            registry=self.registry,
        )

        self.builds_started_total = Counter(
            "prbuild_builds_started_total",
            "CodeBuild builds started for pull requests",
            registry=self.registry,
        )

        self.status_posts_total = Counter(
            "prbuild_status_posts_total",
            "GitHub commit status writes",
            labelnames=["state", "result"],
            registry=self.registry,
        )

        self.errors_total = Counter(
            "prbuild_errors_total",
            "Failed invocations by error type",
            labelnames=["error_type"],
            registry=self.registry,
        )

    def record_webhook_event(self, result: str) -> None:
        """Record an inbound event outcome (accepted, ignored, rejected)."""
        self.webhook_events_total.labels(result=result).inc()

    def record_build_started(self) -> None:
        self.builds_started_total.inc()

    def record_status_post(self, state: str, ok: bool) -> None:
        """Record a commit status write attempt."""
        self.status_posts_total.labels(
            state=state, result="ok" if ok else "failed"
        ).inc()

    def record_error(self, error_type: str) -> None:
        self.errors_total.labels(error_type=error_type).inc()

    def render(self) -> bytes:
        """Render the registry in Prometheus text format."""
        return generate_latest(self.registry)


_metrics: Optional[BuildMetrics] = None


def get_metrics() -> BuildMetrics:
    """Return the process-wide metrics container, creating it on first use."""
    global _metrics
    if _metrics is None:
        _metrics = BuildMetrics()
    return _metrics
