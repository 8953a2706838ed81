"""GCP project id resolution from configuration, credentials and gcloud."""
import os
import json
import logging
import subprocess
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

from .errors import ConfigError
from .models import ProjectSource, ResolvedContext

logger = logging.getLogger(__name__)

CREDENTIALS_ENV_VAR = "GOOGLE_APPLICATION_CREDENTIALS"

ProjectResolver = Callable[[Dict[str, Any], Mapping[str, str]], Optional[str]]


def _read_key_file(path: str) -> Dict[str, Any]:
    try:
        with open(path, 'r') as f:
            key_file = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigError(f"Failed to read or parse key file {path}: {e}") from e

    if not isinstance(key_file, dict):
        raise ConfigError(f"Key file {path} must contain a JSON object")
    return key_file


def parse_credentials(credentials: Any) -> Optional[Dict[str, Any]]:
    """
    Normalize inline credentials given as a mapping or a JSON string.

    Returns:
        Credentials dict, or None if nothing was given

    Raises:
        ConfigError: If the credentials are not a JSON object
    """
    if credentials is None or credentials == "":
        return None
    if isinstance(credentials, dict):
        return credentials
    if isinstance(credentials, str):
        try:
            parsed = json.loads(credentials)
        except ValueError as e:
            raise ConfigError(f"Inline credentials are not valid JSON: {e}") from e
        if isinstance(parsed, dict):
            return parsed
    raise ConfigError("Inline credentials must be a JSON object")


def from_explicit_param(params: Dict[str, Any], environ: Mapping[str, str]) -> Optional[str]:
    return params.get("project_id") or None


def from_key_file(params: Dict[str, Any], environ: Mapping[str, str]) -> Optional[str]:
    """Project id from the key file parameter, else GOOGLE_APPLICATION_CREDENTIALS."""
    path = params.get("key_filename") or environ.get(CREDENTIALS_ENV_VAR)
    if not path:
        return None
    return _read_key_file(path).get("project_id") or None


def from_inline_credentials(params: Dict[str, Any], environ: Mapping[str, str]) -> Optional[str]:
    credentials = parse_credentials(params.get("credentials"))
    if not credentials:
        return None
    return credentials.get("project_id") or None


def from_gcloud_config(params: Dict[str, Any], environ: Mapping[str, str]) -> Optional[str]:
    """Ask the gcloud CLI for its default project."""
    try:
        result = subprocess.run(
            ["gcloud", "config", "get-value", "project"],
            capture_output=True, text=True, check=True
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug(f"gcloud project lookup failed: {e}")
        return None

    project_id = result.stdout.strip()
    if not project_id or project_id == "(unset)":
        return None
    return project_id


PROJECT_RESOLVERS: Sequence[Tuple[ProjectSource, ProjectResolver]] = (
    (ProjectSource.EXPLICIT, from_explicit_param),
    (ProjectSource.KEY_FILE, from_key_file),
    (ProjectSource.CREDENTIALS, from_inline_credentials),
    (ProjectSource.GCLOUD_CONFIG, from_gcloud_config),
)


def resolve_project_context(
    params: Dict[str, Any],
    environ: Optional[Mapping[str, str]] = None,
    resolvers: Sequence[Tuple[ProjectSource, ProjectResolver]] = PROJECT_RESOLVERS,
) -> ResolvedContext:
    """
    Determine the implicit GCP project id.

    Priority order (first match wins):
    1. project_id parameter
    2. project_id in the service account key file (key_filename parameter
       or GOOGLE_APPLICATION_CREDENTIALS)
    3. project_id in inline credentials
    4. gcloud config get-value project

    Returns:
        ResolvedContext; project_id is None when no source had one

    Raises:
        ConfigError: If a referenced key file or inline credentials are unreadable
    """
    if environ is None:
        environ = os.environ

    for source, resolver in resolvers:
        project_id = resolver(params, environ)
        if project_id:
            logger.debug(f"Using GCP project '{project_id}' from {source.value}")
            return ResolvedContext(project_id=project_id, source=source)

    logger.debug("No GCP project id resolved; only full secret ids can be used")
    return ResolvedContext()
