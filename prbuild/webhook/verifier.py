"""GitHub webhook signature verification.

GitHub signs each delivery with HMAC-SHA1 over the raw body, using the
shared secret configured on the webhook, and sends the digest as
`X-Hub-Signature: sha1=<hex>`. Verification must pass before any other
processing.
"""

import hashlib
import hmac

import structlog

from prbuild.credentials.parameter_store import ParameterStore
from prbuild.errors import MissingHeaderError, SignatureMismatchError
from prbuild.webhook.models import (
    DELIVERY_HEADER,
    EVENT_HEADER,
    SIGNATURE_HEADER,
    InboundEvent,
)

logger = structlog.get_logger()

REQUIRED_HEADERS = (SIGNATURE_HEADER, EVENT_HEADER, DELIVERY_HEADER)


def compute_signature(secret: str, body: bytes) -> str:
    """Compute the X-Hub-Signature value for a body."""
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha1).hexdigest()
    return f"sha1={digest}"


class WebhookVerifier:
    """Authenticates inbound GitHub webhook deliveries.

    The shared secret is read from the parameter store on every call, so a
    rotated secret is picked up without a restart.

    Attributes:
        parameter_store: Source of the shared secret.
        secret_parameter: Parameter name holding the shared secret.
    """

    def __init__(self, parameter_store: ParameterStore, secret_parameter: str):
        self.parameter_store = parameter_store
        self.secret_parameter = secret_parameter

    def verify(self, event: InboundEvent) -> None:
        """Verify headers and signature of a delivery.

        Args:
            event: The raw inbound event.

        Raises:
            MissingHeaderError: If a required GitHub header is absent.
            SignatureMismatchError: If the signature does not match the body.
            CredentialError: If the shared secret cannot be read.
        """
        for name in REQUIRED_HEADERS:
            if not event.header(name):
                logger.warning("Webhook header missing", header=name)
                raise MissingHeaderError(name)

        secret = self.parameter_store.get_parameter(self.secret_parameter)
        expected = compute_signature(secret, event.body)

        if not hmac.compare_digest(
            expected.encode("utf-8"), event.signature.encode("utf-8")
        ):
            logger.warning(
                "Webhook signature mismatch",
                delivery_id=event.delivery_id,
                event_name=event.event_name,
            )
            raise SignatureMismatchError()

        logger.debug(
            "Webhook signature verified",
            delivery_id=event.delivery_id,
            event_name=event.event_name,
        )
