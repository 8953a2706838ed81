"""Domain models for secret resolution."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class SecretReference:
    """One ENV_VAR=IDENTIFIER[#path] assignment, split into its parts."""
    raw_token: str
    target_env_var: str
    identifier: str
    json_path: Optional[str] = None


class ProjectSource(Enum):
    """Where a GCP project id was found."""
    EXPLICIT = "explicit"
    KEY_FILE = "key_file"
    CREDENTIALS = "credentials"
    GCLOUD_CONFIG = "gcloud_config"


@dataclass(frozen=True)
class ResolvedContext:
    """Project id used to expand GCP shorthand identifiers."""
    project_id: Optional[str] = None
    source: Optional[ProjectSource] = None


@dataclass
class VaultConfig:
    """Vault type plus its parameters."""
    type: str
    params: Dict[str, Any] = field(default_factory=dict)
