"""GCP Secret Manager vault."""
import os
import re
import logging
from typing import Any, Dict, Optional

from google.api_core import exceptions as api_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import secretmanager

from .errors import ConfigError, FormatError, ResolutionError, VaultError, VaultErrorKind
from .models import ResolvedContext
from .project_resolver import CREDENTIALS_ENV_VAR, parse_credentials, resolve_project_context
from .vault import Vault

logger = logging.getLogger(__name__)

CANONICAL_PREFIX = "projects/"
DEFAULT_VERSION = "latest"
FULL_FORMAT = "projects/PROJECT_ID/secrets/SECRET_NAME/versions/VERSION"

_CANONICAL_PATTERN = re.compile(r"^projects/[^/]+/secrets/[^/]+(/versions/[^/]+)?$")


def _canonical(project_id: str, secret_name: str, version: str = DEFAULT_VERSION) -> str:
    return f"projects/{project_id}/secrets/{secret_name}/versions/{version}"


def normalize_secret_id(identifier: str, project_id: Optional[str]) -> str:
    """
    Expand a GCP secret identifier to projects/P/secrets/S/versions/V.

    Accepted shapes:
        projects/P/secrets/S[/versions/V]   full format, version defaults to latest
        SECRET                              secret in the resolved project
        PROJECT/SECRET                      when PROJECT equals the resolved project
        SECRET/VERSION                      otherwise
        PROJECT/SECRET/VERSION

    Args:
        identifier: Secret identifier as supplied by the user
        project_id: Resolved project id, or None

    Returns:
        Canonical identifier

    Raises:
        FormatError: If the identifier has none of the accepted shapes
        ResolutionError: If a shorthand identifier is used without a project id
    """
    if identifier.startswith(CANONICAL_PREFIX):
        name = identifier.rstrip("/")
        match = _CANONICAL_PATTERN.match(name)
        if not match:
            raise FormatError(
                f"Invalid secret ID format: {identifier}. Use format: {FULL_FORMAT}"
            )
        if match.group(1) is None:
            name = f"{name}/versions/{DEFAULT_VERSION}"
        return name

    if not project_id:
        raise ResolutionError(
            f"Cannot use shorthand secret ID '{identifier}' without a GCP project id. "
            f"Provide it via --vault-project-id or VAULT_PROJECT_ID, a service account key file "
            f"(--vault-key-filename or {CREDENTIALS_ENV_VAR}), inline --vault-credentials, "
            f"or 'gcloud config set project'. Or use the full format: {FULL_FORMAT}"
        )

    parts = identifier.split("/")
    if any(not part for part in parts):
        parts = []

    if len(parts) == 1:
        return _canonical(project_id, parts[0])

    if len(parts) == 2:
        if parts[0] == project_id:
            logger.warning(
                f"Interpreting '{identifier}' as PROJECT/SECRET because '{parts[0]}' is the "
                f"resolved project id. Use the full format if you meant SECRET/VERSION."
            )
            return _canonical(parts[0], parts[1])
        return _canonical(project_id, parts[0], parts[1])

    if len(parts) == 3:
        return _canonical(parts[0], parts[1], parts[2])

    raise FormatError(
        f"Invalid secret ID format: {identifier}. Use one of: {FULL_FORMAT}, "
        f"SECRET_NAME, PROJECT_ID/SECRET_NAME, SECRET_NAME/VERSION, "
        f"PROJECT_ID/SECRET_NAME/VERSION"
    )


class GCPVault(Vault):
    """GCP Secret Manager vault implementation."""

    name = "gcp"
    description = "GCP Secret Manager vault implementation"
    optional_params = ("project_id", "key_filename", "credentials")

    def __init__(self, client: Optional[secretmanager.SecretManagerServiceClient] = None):
        super().__init__()
        self._client = client
        self._initialized = False
        self.context = ResolvedContext()

    @property
    def client(self) -> secretmanager.SecretManagerServiceClient:
        """Lazy-initialize client."""
        if self._client is None:
            self._client = self._create_client()
        return self._client

    def _create_client(self) -> secretmanager.SecretManagerServiceClient:
        """
        Build the SDK client.

        Priority order:
        1. key_filename parameter
        2. GOOGLE_APPLICATION_CREDENTIALS (picked up by the SDK)
        3. Inline credentials
        4. Application Default Credentials
        """
        config = self._config or {}
        client_class = secretmanager.SecretManagerServiceClient

        if config.get("key_filename"):
            logger.debug(f"Using service account key file: {config['key_filename']}")
            return client_class.from_service_account_file(config["key_filename"])

        if os.getenv(CREDENTIALS_ENV_VAR):
            logger.debug(f"Using {CREDENTIALS_ENV_VAR}: {os.environ[CREDENTIALS_ENV_VAR]}")
            return client_class()

        credentials = parse_credentials(config.get("credentials"))
        if credentials:
            logger.debug("Using inline service account credentials")
            return client_class.from_service_account_info(credentials)

        logger.debug("Using Application Default Credentials")
        return client_class()

    def validate_config(self, config: Dict[str, Any]) -> bool:
        try:
            parse_credentials(config.get("credentials"))
        except ConfigError as e:
            logger.error(f"Invalid GCP vault configuration: {e}")
            return False
        return True

    def initialize(self, config: Dict[str, Any]) -> None:
        self._config = config
        self.context = resolve_project_context(config)
        self._initialized = True

    def normalize_secret_id(self, identifier: str) -> str:
        return normalize_secret_id(identifier, self.context.project_id)

    def fetch_raw(self, canonical_id: str) -> str:
        if not self._initialized:
            raise VaultError("GCP vault not initialized. Call initialize() first.")

        try:
            response = self.client.access_secret_version(request={"name": canonical_id})
        except api_exceptions.NotFound as e:
            raise VaultError(f"Secret {canonical_id} not found: {e}", VaultErrorKind.NOT_FOUND) from e
        except (api_exceptions.PermissionDenied, api_exceptions.Unauthenticated) as e:
            raise VaultError(
                f"Permission denied for secret {canonical_id}: {e}", VaultErrorKind.PERMISSION_DENIED
            ) from e
        except (api_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError) as e:
            raise VaultError(f"GCP fetch failed for {canonical_id}: {e}") from e

        data = response.payload.data if response.payload else None
        if not data:
            raise VaultError(f"Secret value is empty: {canonical_id}")

        return data.decode("UTF-8")
