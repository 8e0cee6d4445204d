"""Pull-request build trigger for GitHub and AWS CodeBuild.

This package receives GitHub webhook events and drives them through:
- Webhook signature verification
- Buildability classification (pull-request lifecycle and comment triggers)
- CodeBuild build start with pending commit statuses
- Build status polling and final commit status synchronization
"""

__version__ = "1.0.0"
