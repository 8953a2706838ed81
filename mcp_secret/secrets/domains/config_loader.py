"""Vault configuration loader for mcp-secret.

Configuration is layered, highest priority first:
1. --vault-type=TYPE / --vault-KEY=VALUE command line arguments
2. VAULT_TYPE / VAULT_KEY environment variables
3. The `vault:` section of a YAML config file
"""
import os
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple
import yaml

from .errors import ConfigError
from .models import VaultConfig

logger = logging.getLogger(__name__)

VAULT_ARG_PREFIX = "--vault-"
VAULT_ENV_PREFIX = "VAULT_"
CONFIG_ENV_VAR = "MCP_SECRET_CONFIG"
DEFAULT_CONFIG_PATH = Path.home() / ".config" / "mcp-secret" / "config.yml"

CONFIG_FORMAT_HELP = (
    "Required format:\n"
    "vault:\n"
    "  type: gcp\n"
    "  project_id: your-project-id"
)


def is_vault_arg(arg: str) -> bool:
    return arg.startswith(VAULT_ARG_PREFIX)


def remove_vault_args(args: Sequence[str]) -> List[str]:
    return [arg for arg in args if not is_vault_arg(arg)]


def _squash(key: str) -> str:
    return key.replace("-", "").replace("_", "").lower()


def canonicalize_params(params: Mapping[str, Any], known: Sequence[str]) -> Dict[str, Any]:
    """
    Map parameter names onto a vault's known snake_case names.

    Matching ignores case, '-' and '_', so projectId, project-id and
    PROJECT_ID all become project_id. Unknown names are dropped.
    """
    lookup = {_squash(name): name for name in known}
    result: Dict[str, Any] = {}
    for key, value in params.items():
        name = lookup.get(_squash(key))
        if name is None:
            logger.debug(f"Ignoring unknown vault parameter: {key}")
            continue
        result[name] = value
    return result


def parse_from_args(args: Sequence[str]) -> Tuple[Optional[str], Dict[str, Any]]:
    """
    Parse --vault-type=TYPE and --vault-KEY=VALUE arguments.

    Values are split on the first '=' only, so they may contain '='.

    Returns:
        Tuple of vault type (or None) and parameters
    """
    vault_type: Optional[str] = None
    params: Dict[str, Any] = {}

    for arg in args:
        if not is_vault_arg(arg):
            continue
        key, sep, value = arg[len(VAULT_ARG_PREFIX):].partition("=")
        if not key or not sep or not value:
            raise ConfigError(f"Invalid vault argument '{arg}'. Use --vault-KEY=VALUE.")
        if key == "type":
            vault_type = value
        else:
            params[key] = value

    return vault_type, params


def parse_from_env(environ: Optional[Mapping[str, str]] = None) -> Tuple[Optional[str], Dict[str, Any]]:
    """
    Parse vault configuration from environment variables.

    Expected format: VAULT_TYPE=aws VAULT_PROFILE=dev VAULT_REGION=us-east-1
    """
    if environ is None:
        environ = os.environ

    vault_type = environ.get("VAULT_TYPE") or None
    params: Dict[str, Any] = {}

    for key, value in environ.items():
        if key.startswith(VAULT_ENV_PREFIX) and key != "VAULT_TYPE" and value:
            params[key[len(VAULT_ENV_PREFIX):].lower()] = value

    return vault_type, params


def get_config_path(explicit_path: Optional[str] = None,
                    environ: Optional[Mapping[str, str]] = None) -> Optional[Path]:
    """
    Get config file path.

    Priority order:
    1. Explicit path (--config)
    2. MCP_SECRET_CONFIG environment variable
    3. Default location: ~/.config/mcp-secret/config.yml, if it exists

    Returns:
        Path to the config file, or None when no file is configured

    Raises:
        ConfigError: If an explicitly named config file does not exist
    """
    if environ is None:
        environ = os.environ

    named = explicit_path or environ.get(CONFIG_ENV_VAR)
    if named:
        config_path = Path(named).expanduser()
        if not config_path.is_file():
            raise ConfigError(f"Configuration file not found at: {config_path}")
        logger.debug(f"Using config file: {config_path}")
        return config_path

    if DEFAULT_CONFIG_PATH.is_file():
        logger.debug(f"Using default config location: {DEFAULT_CONFIG_PATH}")
        return DEFAULT_CONFIG_PATH

    return None


def load_config_file(config_path: Path) -> Tuple[Optional[str], Dict[str, Any]]:
    """
    Load and validate the vault section of a YAML config file.

    Returns:
        Tuple of vault type (or None) and parameters

    Raises:
        ConfigError: If the file is unreadable, invalid or lacks a vault section
    """
    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML config at {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config file at {config_path}: {e}") from e

    if not config:
        raise ConfigError(f"Config file at {config_path} is empty")

    if not isinstance(config, dict) or 'vault' not in config:
        raise ConfigError(f"Missing 'vault' section in config at {config_path}\n{CONFIG_FORMAT_HELP}")

    section = config['vault']
    if not isinstance(section, dict):
        raise ConfigError(f"'vault' section in config at {config_path} must be a mapping\n{CONFIG_FORMAT_HELP}")

    params = dict(section)
    vault_type = params.pop('type', None)
    logger.info(f"Vault configuration loaded from {config_path}")
    return vault_type, params


def get_vault_config(args: Sequence[str],
                     config_path: Optional[str] = None,
                     environ: Optional[Mapping[str, str]] = None) -> VaultConfig:
    """
    Build the vault configuration from CLI arguments, environment and config file.

    Parameters from all layers are merged, higher layers winning per key.
    The vault type comes from the highest layer that names one.

    Raises:
        ConfigError: If no layer names a vault type, or a layer is invalid
    """
    layers = []

    path = get_config_path(config_path, environ)
    if path is not None:
        layers.append(load_config_file(path))
    layers.append(parse_from_env(environ))
    layers.append(parse_from_args(args))

    vault_type: Optional[str] = None
    # squashed name -> (spelling, value); differently spelled keys are one parameter
    merged: Dict[str, Tuple[str, Any]] = {}
    for layer_type, layer_params in layers:
        if layer_type:
            vault_type = layer_type
        for key, value in layer_params.items():
            merged[_squash(key)] = (key, value)
    params = dict(merged.values())

    if not vault_type:
        raise ConfigError(
            "No vault configuration found. Please specify --vault-type or set VAULT_TYPE "
            "environment variable."
        )

    return VaultConfig(type=str(vault_type), params=params)
