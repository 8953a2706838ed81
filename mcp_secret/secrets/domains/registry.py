"""Vault types and vault construction."""
import logging
from typing import Dict, Type

from .aws_client import AWSVault
from .config_loader import canonicalize_params
from .errors import ConfigError
from .gcp_client import GCPVault
from .models import VaultConfig
from .vault import Vault

logger = logging.getLogger(__name__)


def default_vault_types() -> Dict[str, Type[Vault]]:
    """Vault types available to the CLI, keyed by --vault-type name."""
    return {
        AWSVault.name: AWSVault,
        GCPVault.name: GCPVault,
    }


def create_vault(config: VaultConfig, vault_types: Dict[str, Type[Vault]]) -> Vault:
    """
    Instantiate, validate and initialize the configured vault.

    Args:
        config: Vault type and parameters
        vault_types: Mapping of type name to vault class

    Returns:
        Initialized vault

    Raises:
        ConfigError: If the type is unknown or the parameters are invalid
    """
    vault_class = vault_types.get(config.type)
    if vault_class is None:
        raise ConfigError(
            f"Vault plugin '{config.type}' not found. "
            f"Available plugins: {', '.join(sorted(vault_types))}"
        )

    vault = vault_class()
    params = canonicalize_params(config.params, vault.optional_params)

    if not vault.validate_config(params):
        raise ConfigError(f"Invalid configuration for vault plugin '{config.type}'")

    vault.initialize(params)
    logger.debug(f"Initialized {vault.description} with parameters: {', '.join(sorted(params)) or '(none)'}")
    return vault
