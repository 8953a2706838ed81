"""
Vault capability interface.

Every secrets backend (AWS Secrets Manager, GCP Secret Manager, ...) exposes
the same small surface; the resolution pipeline only depends on this class.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple


class Vault(ABC):
    """
    Abstract base class for vault backends.

    Lifecycle: construct, validate_config(params), initialize(params), then
    any number of get_secret()/fetch_raw() calls.
    """

    name: str = "base"
    description: str = ""
    optional_params: Tuple[str, ...] = ()

    def __init__(self):
        self._config: Optional[Dict[str, Any]] = None

    @abstractmethod
    def initialize(self, config: Dict[str, Any]) -> None:
        """
        Prepare the backend client.

        Args:
            config: Backend parameters (snake_case keys)
        """
        pass

    @abstractmethod
    def fetch_raw(self, canonical_id: str) -> str:
        """
        Fetch a secret value by its canonical identifier.

        Args:
            canonical_id: Fully-qualified identifier accepted by the backend

        Returns:
            The raw secret value

        Raises:
            VaultError: NOT_FOUND, PERMISSION_DENIED or UNAVAILABLE
        """
        pass

    def validate_config(self, config: Dict[str, Any]) -> bool:
        """Return False if the parameters cannot form a valid configuration."""
        return True

    def normalize_secret_id(self, identifier: str) -> str:
        """Convert a user-supplied identifier into the canonical form."""
        return identifier

    def get_secret(self, identifier: str) -> str:
        """Normalize an identifier and fetch its raw value."""
        return self.fetch_raw(self.normalize_secret_id(identifier))

    def get_config(self) -> Optional[Dict[str, Any]]:
        return self._config
