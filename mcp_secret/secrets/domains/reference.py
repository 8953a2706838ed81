"""Splitting of IDENTIFIER[#path] tokens into their parts."""
from typing import Optional, Tuple

from .errors import FormatError
from .json_path import validate_path
from .models import SecretReference

PATH_DELIMITER = "#"


def split_reference(token: str) -> Tuple[str, Optional[str]]:
    """
    Split a token on the last '#' into (identifier, json_path).

    Identifiers may themselves contain '#', so only the last occurrence
    separates the path: "my#secret#a.b" -> ("my#secret", "a.b").

    Args:
        token: Secret reference token

    Returns:
        Tuple of identifier and JSON path (None when no '#' is present)

    Raises:
        FormatError: If the identifier or the path after '#' is empty,
            or the path is malformed
    """
    index = token.rfind(PATH_DELIMITER)
    if index == -1:
        identifier, path = token, None
    else:
        identifier, path = token[:index], token[index + 1:]
        if not path:
            raise FormatError(
                f"JSON path cannot be empty after delimiter '{PATH_DELIMITER}' in '{token}'"
            )
        validate_path(path)

    if not identifier:
        raise FormatError(f"Secret identifier cannot be empty in '{token}'")

    return identifier, path


def parse_reference(env_var: str, token: str) -> SecretReference:
    """Build a SecretReference for one ENV_VAR=token assignment."""
    identifier, path = split_reference(token)
    return SecretReference(
        raw_token=token,
        target_env_var=env_var,
        identifier=identifier,
        json_path=path,
    )
