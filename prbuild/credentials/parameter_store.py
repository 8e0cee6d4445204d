"""Secret lookup backed by AWS Systems Manager Parameter Store."""

import boto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError

from prbuild.errors import CredentialError

logger = structlog.get_logger()


class ParameterStore:
    """
    Key to decrypted-value lookup over SSM SecureString parameters.

    Every call goes to SSM; caching is the caller's decision.
    """

    def __init__(self, ssm_client=None):
        """
        Initialize ParameterStore.

        Args:
            ssm_client: Optional boto3 SSM client (for testing)
        """
        self._ssm = ssm_client or boto3.client("ssm")

    def get_parameter(self, name: str) -> str:
        """
        Read and decrypt a parameter value.

        Args:
            name: Parameter name

        Returns:
            The decrypted parameter value

        Raises:
            CredentialError: If SSM rejects the request or the response has no value
        """
        try:
            response = self._ssm.get_parameter(Name=name, WithDecryption=True)
        except ClientError as e:
            error = e.response.get("Error", {})
            logger.error(
                "Parameter lookup failed",
                parameter=name,
                error_code=error.get("Code", ""),
            )
            raise CredentialError(
                f"SSM error reading {name}: {error.get('Code', '')} - "
                f"{error.get('Message', str(e))}",
                parameter=name,
            ) from e
        except BotoCoreError as e:
            logger.error("Parameter store unreachable", parameter=name, error=str(e))
            raise CredentialError(
                f"SSM connection error reading {name}: {e}",
                parameter=name,
            ) from e

        try:
            return response["Parameter"]["Value"]
        except (KeyError, TypeError) as e:
            raise CredentialError(
                f"SSM returned no value for {name}", parameter=name
            ) from e
