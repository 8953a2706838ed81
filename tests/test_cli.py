"""Test suite for the mcp-secret command line interface."""
import subprocess
from unittest import mock

import pytest

from conftest import FakeVault
from mcp_secret.cli import main as cli
from mcp_secret.cli.validators import parse_assignments, validate_env_var_name


@pytest.fixture
def fake_run(monkeypatch):
    """Replace subprocess.run with a mock returning exit code 0."""
    run = mock.Mock(return_value=subprocess.CompletedProcess([], 0))
    monkeypatch.setattr(cli.subprocess, "run", run)
    return run


@pytest.fixture
def fake_types(monkeypatch):
    """Route vault construction to FakeVault and expose the created instance."""
    created = []

    class RecordingVault(FakeVault):
        def __init__(self):
            super().__init__({
                "api-key": "s3cr3t",
                "db": '{"db": {"host": "postgres", "port": 5432}}',
            })
            created.append(self)

    monkeypatch.setattr(cli, "default_vault_types", lambda: {"fake": RecordingVault})
    return created


def _run_main(argv):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(argv)
    return exc_info.value.code


class TestSplitCommand:
    """Test suite for split_command."""

    def test_splits_on_double_dash(self):
        head, command = cli.split_command(["--vault-type=aws", "A=b", "--", "node", "server.js", "--", "x"])

        assert head == ["--vault-type=aws", "A=b"]
        assert command == ["node", "server.js", "--", "x"]

    def test_without_double_dash_leading_options_are_wrapper_options(self):
        head, command = cli.split_command(["--vault-type=aws", "-c", "cfg.yml", "node", "-v"])

        assert head == ["--vault-type=aws", "-c", "cfg.yml"]
        assert command == ["node", "-v"]

    def test_without_double_dash_assignments_are_command(self):
        head, command = cli.split_command(["A=b", "node"])

        assert head == []
        assert command == ["A=b", "node"]


class TestValidators:
    """Test suite for CLI validators."""

    def test_parse_assignments_keeps_order(self):
        result = parse_assignments(["B=second#x.y", "A=first", "C=arn:aws:x=y"])

        assert list(result.items()) == [("B", "second#x.y"), ("A", "first"), ("C", "arn:aws:x=y")]

    def test_missing_equals(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            parse_assignments(["API_KEY"])

        assert exc_info.value.code == 2
        assert "Invalid format: 'API_KEY'. Use key=value." in capsys.readouterr().err

    def test_empty_reference(self):
        with pytest.raises(SystemExit) as exc_info:
            parse_assignments(["API_KEY="])

        assert exc_info.value.code == 2

    def test_duplicate_variable(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            parse_assignments(["A=x", "A=y"])

        assert exc_info.value.code == 2
        assert "more than once" in capsys.readouterr().err

    @pytest.mark.parametrize("name", ["1ABC", "MY-VAR", "MY VAR", ""])
    def test_invalid_env_var_names(self, name):
        with pytest.raises(SystemExit) as exc_info:
            validate_env_var_name(name)

        assert exc_info.value.code == 2

    @pytest.mark.parametrize("name", ["A", "_A", "DB_HOST_2", "lower"])
    def test_valid_env_var_names(self, name):
        validate_env_var_name(name)


class TestMain:
    """End-to-end CLI behaviour with a fake vault and a mocked child process."""

    def test_injects_secrets_and_mirrors_exit_code(self, clean_vault_env, fake_run, fake_types, monkeypatch):
        monkeypatch.setenv("EXISTING", "kept")
        fake_run.return_value = subprocess.CompletedProcess([], 3)

        code = _run_main([
            "--vault-type=fake", "API_KEY=api-key", "DB_HOST=db#db.host", "DB_PORT=db#db.port",
            "--", "node", "server.js",
        ])

        assert code == 3
        command = fake_run.call_args[0][0]
        env = fake_run.call_args[1]["env"]
        assert command == ["node", "server.js"]
        assert env["API_KEY"] == "s3cr3t"
        assert env["DB_HOST"] == "postgres"
        assert env["DB_PORT"] == "5432"
        assert env["EXISTING"] == "kept"

    def test_vault_type_from_environment(self, clean_vault_env, fake_run, fake_types, monkeypatch):
        monkeypatch.setenv("VAULT_TYPE", "fake")
        monkeypatch.setenv("VAULT_PREFIX", "")

        assert _run_main(["API_KEY=api-key", "--", "true"]) == 0
        assert fake_types[0].fetched == ["api-key"]

    def test_failure_never_starts_command(self, clean_vault_env, fake_run, fake_types, capsys):
        code = _run_main(["--vault-type=fake", "A=missing", "B=api-key", "--", "node"])

        assert code == 1
        fake_run.assert_not_called()
        assert fake_types[0].fetched == ["missing"]
        err = capsys.readouterr().err
        assert err.startswith("Error: Failed to resolve secret for A ('missing')")

    def test_json_error_reported(self, clean_vault_env, fake_run, fake_types, capsys):
        code = _run_main(["--vault-type=fake", "DB_USER=db#db.user", "--", "node"])

        assert code == 1
        fake_run.assert_not_called()
        assert "Available keys: host, port" in capsys.readouterr().err

    def test_no_assignments_skips_vault(self, clean_vault_env, fake_run, fake_types):
        assert _run_main(["--", "node", "server.js"]) == 0
        assert fake_types == []
        fake_run.assert_called_once()

    def test_no_command(self, clean_vault_env, fake_run, capsys):
        assert _run_main(["--vault-type=fake", "A=api-key", "--"]) == 2
        assert "No command specified" in capsys.readouterr().err
        fake_run.assert_not_called()

    def test_missing_vault_config(self, clean_vault_env, fake_run, capsys):
        assert _run_main(["A=api-key", "--", "node"]) == 1
        assert "No vault configuration found" in capsys.readouterr().err
        fake_run.assert_not_called()

    def test_unknown_vault_type(self, clean_vault_env, fake_run, fake_types, capsys):
        assert _run_main(["--vault-type=azure", "A=api-key", "--", "node"]) == 1
        assert "Vault plugin 'azure' not found" in capsys.readouterr().err

    def test_unknown_option_is_usage_error(self, clean_vault_env, fake_run):
        assert _run_main(["--bogus", "A=api-key", "--", "node"]) == 2
        fake_run.assert_not_called()

    def test_command_not_found(self, clean_vault_env, fake_run, capsys):
        fake_run.side_effect = FileNotFoundError(2, "No such file or directory", "nope")

        assert _run_main(["--", "nope"]) == 1
        assert "Error executing command" in capsys.readouterr().err

    def test_child_killed_by_signal(self, clean_vault_env, fake_run):
        fake_run.return_value = subprocess.CompletedProcess([], -15)

        assert _run_main(["--", "node"]) == 143

    def test_config_file_option(self, clean_vault_env, fake_run, fake_types, tmp_path):
        config = tmp_path / "config.yml"
        config.write_text("vault:\n  type: fake\n  prefix: ''\n")

        assert _run_main(["--config", str(config), "API_KEY=api-key", "--", "node"]) == 0
        assert fake_run.call_args[1]["env"]["API_KEY"] == "s3cr3t"

    def test_version(self, capsys):
        assert _run_main(["--version"]) == 0
        assert "mcp-secret 0.1.0" in capsys.readouterr().out
