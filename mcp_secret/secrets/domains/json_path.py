"""Extraction of a single scalar field from a JSON secret via a dot path."""
import json
import logging
from typing import Any

from .errors import FormatError, KeyNotFoundError, NotJsonError, ShapeError

logger = logging.getLogger(__name__)


class _FloatLiteral(str):
    """A JSON float kept as the text it was stored with."""


def _describe(value: Any) -> str:
    """Human readable JSON kind of a parsed value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "a boolean"
    if isinstance(value, (int, float, _FloatLiteral)):
        return "a number"
    if isinstance(value, str):
        return "a string"
    if isinstance(value, list):
        return "an array"
    if isinstance(value, dict):
        return "an object"
    return type(value).__name__


def _reject_constant(name: str) -> Any:
    # json accepts NaN/Infinity by default, JSON itself does not
    raise ValueError(f"Invalid JSON constant: {name}")


def validate_path(path: str) -> None:
    """
    Validate a dot-separated JSON path.

    Args:
        path: Path such as "db.host"

    Raises:
        FormatError: If the path is empty, starts or ends with a dot,
            or contains an empty segment
    """
    if not path:
        raise FormatError("JSON path cannot be empty. Expected format: key.subkey")

    if path.startswith(".") or path.endswith(".") or ".." in path:
        raise FormatError(
            f"Invalid JSON path '{path}'. Paths must be dot-separated keys "
            f"without empty segments, for example: key.subkey"
        )


def extract_json_value(raw: str, path: str) -> str:
    """
    Extract a scalar value from a JSON object secret.

    Args:
        raw: Raw secret value as returned by the vault
        path: Dot-separated path to the value

    Returns:
        The value as a string. Floats keep the literal text they were stored
        with (1E5 stays 1E5), integers and booleans use their JSON text form.

    Raises:
        FormatError: Malformed path
        NotJsonError: Secret value is not valid JSON
        ShapeError: A non-object on the way, or a null/array/object at the end
        KeyNotFoundError: A path segment does not exist
    """
    validate_path(path)

    try:
        document = json.loads(raw, parse_float=_FloatLiteral, parse_constant=_reject_constant)
    except ValueError as e:
        logger.debug(f"JSON parse failed for path '{path}': {e}")
        raise NotJsonError(
            f"Secret value is not valid JSON, cannot extract '{path}'. "
            f"If you did not intend JSON extraction, remove the '#{path}' suffix "
            f"to use the raw secret value."
        ) from e

    if not isinstance(document, dict):
        raise ShapeError(
            f"Secret value must be a JSON object to extract '{path}', "
            f"but it is {_describe(document)}."
        )

    current: Any = document
    traversed = []
    for segment in path.split("."):
        if not isinstance(current, dict):
            prefix = ".".join(traversed)
            raise ShapeError(
                f"Cannot extract '{path}': value at '{prefix}' is "
                f"{_describe(current)}, not an object."
            )

        if segment not in current:
            location = ".".join(traversed) or "(root)"
            available = list(current.keys())
            raise KeyNotFoundError(
                f"Key '{segment}' not found at {location} while extracting '{path}'. "
                f"Available keys: {', '.join(available) if available else '(none)'}",
                key=segment,
                available=available,
            )

        current = current[segment]
        traversed.append(segment)

    if current is None:
        raise ShapeError(
            f"Value at '{path}' is null. Only non-null primitive values "
            f"(string, number, boolean) can be extracted."
        )

    if isinstance(current, (dict, list)):
        raise ShapeError(
            f"Value at '{path}' is {_describe(current)}, cannot extract structured data. "
            f"Arrays and objects are not supported; store them as separate secrets."
        )

    if isinstance(current, _FloatLiteral):
        return str(current)

    if isinstance(current, str):
        return current

    return json.dumps(current)
