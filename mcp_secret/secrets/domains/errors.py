"""Error types raised while configuring vaults and resolving secrets."""
from enum import Enum
from typing import Optional


class McpSecretError(Exception):
    """Base class for all mcp-secret errors."""
    pass


class ConfigError(McpSecretError):
    """Configuration error exception."""
    pass


class CommandError(McpSecretError):
    """The wrapped command could not be started."""
    pass


class SecretError(McpSecretError):
    """
    Error raised while resolving a single secret reference.

    The resolution pipeline attaches the target environment variable and the
    raw token before re-raising, so the final message tells the user which
    assignment failed.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.env_var: Optional[str] = None
        self.token: Optional[str] = None

    def attach(self, env_var: str, token: str) -> "SecretError":
        self.env_var = env_var
        self.token = token
        return self

    def __str__(self) -> str:
        if self.env_var is None:
            return self.message
        return f"Failed to resolve secret for {self.env_var} ('{self.token}'): {self.message}"


class FormatError(SecretError):
    """Malformed reference token, JSON path or shorthand identifier."""
    pass


class ResolutionError(SecretError):
    """A shorthand identifier needs a project id that could not be resolved."""
    pass


class NotJsonError(SecretError):
    """A JSON path was requested but the secret value is not JSON."""
    pass


class ShapeError(SecretError):
    """JSON value is not an object where one is needed, or not a scalar at the end of a path."""
    pass


class KeyNotFoundError(SecretError):
    """A JSON path segment does not exist."""

    def __init__(self, message: str, key: str, available: list):
        super().__init__(message)
        self.key = key
        self.available = available


class VaultErrorKind(Enum):
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    UNAVAILABLE = "unavailable"


class VaultError(SecretError):
    """Failure reported by the vault backend."""

    def __init__(self, message: str, kind: VaultErrorKind = VaultErrorKind.UNAVAILABLE):
        super().__init__(message)
        self.kind = kind
