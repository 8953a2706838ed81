"""Workflow for resolving secret references into environment variables."""
import logging
from typing import Dict, Mapping

from ..domains.errors import SecretError, VaultError
from ..domains.json_path import extract_json_value
from ..domains.models import SecretReference
from ..domains.reference import parse_reference
from ..domains.vault import Vault

logger = logging.getLogger(__name__)


def resolve_secret(reference: SecretReference, vault: Vault) -> str:
    """
    Fetch one secret and apply its JSON path, if any.

    Args:
        reference: Parsed secret reference
        vault: Initialized vault

    Returns:
        Final secret value
    """
    canonical_id = vault.normalize_secret_id(reference.identifier)
    logger.debug(f"Fetching {reference.target_env_var} from {canonical_id}")

    raw_value = vault.fetch_raw(canonical_id)

    if reference.json_path is None:
        return raw_value
    return extract_json_value(raw_value, reference.json_path)


def resolve_secrets(assignments: Mapping[str, str], vault: Vault) -> Dict[str, str]:
    """
    Resolve ENV_VAR -> token assignments into ENV_VAR -> secret value.

    Args:
        assignments: Target variable names mapped to IDENTIFIER[#path] tokens
        vault: Initialized vault

    Returns:
        Target variable names mapped to secret values

    Behavior:
        - Every token is parsed before the first fetch
        - Secrets are fetched one at a time, in the order given
        - The first failure stops resolution; no partial result is returned
        - Errors carry the failing variable name and token
    """
    result: Dict[str, str] = {}

    references = []
    for env_var, token in assignments.items():
        try:
            references.append(parse_reference(env_var, token))
        except SecretError as e:
            raise e.attach(env_var, token)

    for reference in references:
        env_var, token = reference.target_env_var, reference.raw_token
        try:
            result[env_var] = resolve_secret(reference, vault)
        except SecretError as e:
            raise e.attach(env_var, token)
        except Exception as e:
            raise VaultError(f"Unexpected vault failure: {e}").attach(env_var, token) from e

    logger.debug(f"Resolved {len(result)} secret(s)")
    return result
