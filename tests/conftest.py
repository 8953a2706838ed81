"""Shared fixtures for the mcp-secret test suite."""
import os
from typing import Dict, List

import pytest

from mcp_secret.secrets.domains.errors import VaultError, VaultErrorKind
from mcp_secret.secrets.domains.vault import Vault


class FakeVault(Vault):
    """In-memory vault that records every fetch."""

    name = "fake"
    description = "In-memory test vault"
    optional_params = ("prefix",)

    def __init__(self, secrets: Dict[str, str] = None):
        super().__init__()
        self.secrets = dict(secrets or {})
        self.fetched: List[str] = []

    def initialize(self, config):
        self._config = config

    def normalize_secret_id(self, identifier: str) -> str:
        prefix = (self._config or {}).get("prefix", "")
        return f"{prefix}{identifier}"

    def fetch_raw(self, canonical_id: str) -> str:
        self.fetched.append(canonical_id)
        if canonical_id not in self.secrets:
            raise VaultError(f"Secret {canonical_id} not found", VaultErrorKind.NOT_FOUND)
        return self.secrets[canonical_id]


@pytest.fixture
def fake_vault():
    """Fake vault preloaded with a plain and a JSON secret."""
    vault = FakeVault({
        "api-key": "s3cr3t",
        "db": '{"db": {"host": "postgres", "port": 5432, "ssl": true}}',
    })
    vault.initialize({})
    return vault


@pytest.fixture
def clean_vault_env(monkeypatch, tmp_path):
    """Remove VAULT_* and credential variables so tests see a known environment."""
    from mcp_secret.secrets.domains import config_loader

    for key in list(os.environ):
        if key.startswith("VAULT_") or key in ("MCP_SECRET_CONFIG", "GOOGLE_APPLICATION_CREDENTIALS"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(config_loader, "DEFAULT_CONFIG_PATH", tmp_path / "missing" / "config.yml")
    return tmp_path
