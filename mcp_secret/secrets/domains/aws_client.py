"""AWS Secrets Manager vault."""
import logging
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .errors import VaultError, VaultErrorKind
from .vault import Vault

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"ResourceNotFoundException"}
_PERMISSION_CODES = {
    "AccessDeniedException",
    "UnrecognizedClientException",
    "InvalidSignatureException",
    "ExpiredTokenException",
}


class AWSVault(Vault):
    """
    AWS Secrets Manager vault implementation.

    Secret ids are passed through unchanged: Secrets Manager accepts both
    plain names and full ARNs.
    """

    name = "aws"
    description = "AWS Secrets Manager vault implementation"
    optional_params = ("profile", "region", "access_key_id", "secret_access_key", "session_token")

    def __init__(self, client: Optional[Any] = None):
        super().__init__()
        self._client = client
        self._initialized = False

    @property
    def client(self):
        """Lazy-initialize client."""
        if self._client is None:
            self._client = self._create_client()
        return self._client

    def _create_client(self):
        config = self._config or {}
        session_kwargs: Dict[str, Any] = {}

        if config.get("profile"):
            session_kwargs["profile_name"] = config["profile"]
        if config.get("region"):
            session_kwargs["region_name"] = config["region"]
        if config.get("access_key_id") and config.get("secret_access_key"):
            session_kwargs["aws_access_key_id"] = config["access_key_id"]
            session_kwargs["aws_secret_access_key"] = config["secret_access_key"]
            if config.get("session_token"):
                session_kwargs["aws_session_token"] = config["session_token"]
            logger.debug("Using static AWS access keys")

        session = boto3.Session(**session_kwargs)
        return session.client("secretsmanager")

    def validate_config(self, config: Dict[str, Any]) -> bool:
        # Static keys come in pairs
        if bool(config.get("access_key_id")) != bool(config.get("secret_access_key")):
            logger.error("AWS vault needs both access_key_id and secret_access_key, or neither")
            return False
        return True

    def initialize(self, config: Dict[str, Any]) -> None:
        self._config = config
        self._initialized = True

    def fetch_raw(self, canonical_id: str) -> str:
        if not self._initialized:
            raise VaultError("AWS vault not initialized. Call initialize() first.")

        try:
            response = self.client.get_secret_value(SecretId=canonical_id)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            if code in _NOT_FOUND_CODES:
                kind = VaultErrorKind.NOT_FOUND
            elif code in _PERMISSION_CODES:
                kind = VaultErrorKind.PERMISSION_DENIED
            else:
                kind = VaultErrorKind.UNAVAILABLE
            raise VaultError(f"Error retrieving secret {canonical_id}: {e}", kind) from e
        except BotoCoreError as e:
            raise VaultError(f"Error retrieving secret {canonical_id}: {e}") from e

        if response.get("SecretString"):
            return response["SecretString"]

        if response.get("SecretBinary"):
            return bytes(response["SecretBinary"]).decode("utf-8")

        raise VaultError(f"Secret value is empty: {canonical_id}")
