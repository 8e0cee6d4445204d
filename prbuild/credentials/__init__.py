"""GitHub credential loading backed by AWS SSM Parameter Store."""

from prbuild.credentials.parameter_store import ParameterStore
from prbuild.credentials.provider import CredentialProvider, Credentials

__all__ = [
    "CredentialProvider",
    "Credentials",
    "ParameterStore",
]
