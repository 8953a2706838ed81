"""CLI entrypoint for mcp-secret."""
import os
import sys
import argparse
import subprocess
import logging
from typing import Dict, List, Sequence, Tuple

from mcp_secret.secrets.domains.config_loader import get_vault_config, is_vault_arg, remove_vault_args
from mcp_secret.secrets.domains.errors import CommandError
from mcp_secret.secrets.domains.registry import create_vault, default_vault_types
from mcp_secret.secrets.workflows.secret_operations import resolve_secrets

from .validators import parse_assignments

VERSION = "0.1.0"
USAGE_FORMAT = "mcp-secret [ENV_VAR=secret_key...] -- command [args...]"

# Configure logging to stderr
logging.basicConfig(
    level=logging.WARNING,
    format="%(message)s",
    stream=sys.stderr
)
logger = logging.getLogger(__name__)

_OPTIONS_WITH_VALUE = ("-c", "--config")


def split_command(argv: Sequence[str]) -> Tuple[List[str], List[str]]:
    """
    Split argv into wrapper arguments and the wrapped command.

    With '--' everything after it is the command. Without it, leading
    options belong to the wrapper and the command starts at the first
    non-option argument.
    """
    argv = list(argv)
    if "--" in argv:
        index = argv.index("--")
        return argv[:index], argv[index + 1:]

    head: List[str] = []
    index = 0
    while index < len(argv) and argv[index].startswith("-"):
        head.append(argv[index])
        if argv[index] in _OPTIONS_WITH_VALUE and index + 1 < len(argv):
            index += 1
            head.append(argv[index])
        index += 1
    return head, argv[index:]


def run_command(command: Sequence[str], env: Dict[str, str]) -> int:
    """
    Run the wrapped command with the given environment and inherited stdio.

    Returns:
        The child's exit code, or 128 + signal number if it was killed
    """
    logger.debug(f"Running command: {command[0]}")
    try:
        result = subprocess.run(list(command), env=env, check=False)
    except OSError as e:
        raise CommandError(f"Error executing command: {e}") from e

    if result.returncode < 0:
        return 128 - result.returncode
    return result.returncode


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcp-secret",
        usage="%(prog)s [options] [--vault-KEY=VALUE ...] [ENV_VAR=SECRET_ID[#path] ...] -- command [args ...]",
        description="Fetch secrets from a cloud vault and run a command with them as environment variables",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
        epilog="""
Vault options:
  --vault-type=aws|gcp            Vault backend (or VAULT_TYPE)
  --vault-KEY=VALUE               Backend parameter (or VAULT_KEY)
    aws: profile, region, access-key-id, secret-access-key, session-token
    gcp: project-id, key-filename, credentials

Secret references:
  ENV_VAR=SECRET_ID               Whole secret value
  ENV_VAR=SECRET_ID#db.password   One field of a JSON object secret

GCP secret ids:
  projects/P/secrets/S[/versions/V], S, P/S, S/V, P/S/V

Exit codes:
  0 - Success
  1 - Runtime error (configuration, secret resolution, command not startable)
  2 - Usage error (invalid arguments)
  Otherwise the exit code of the wrapped command

Configuration:
  Vault settings may also be stored in a YAML file under a 'vault:' key.
  Location: --config, MCP_SECRET_CONFIG, or ~/.config/mcp-secret/config.yml
        """
    )
    parser.add_argument(
        "assignments",
        nargs="*",
        metavar="ENV_VAR=SECRET_ID[#path]",
        help="Environment variable to set from a secret"
    )
    parser.add_argument(
        "-c", "--config",
        help="Path to a YAML config file with a 'vault' section"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging and print full error traces"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"mcp-secret {VERSION}"
    )
    return parser


def main(argv: Sequence[str] = None):
    """Main CLI entrypoint.

    Exit codes:
        0 - Success
        1 - Runtime errors (configuration, vault, secret resolution, spawn)
        2 - Usage errors (invalid arguments)
        Otherwise the wrapped command's exit code
    """
    if argv is None:
        argv = sys.argv[1:]

    head, command = split_command(argv)
    vault_args = [arg for arg in head if is_vault_arg(arg)]

    parser = build_parser()
    args = parser.parse_intermixed_args(remove_vault_args(head))

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if not command:
        print(f"Error: No command specified. Use format: {USAGE_FORMAT}", file=sys.stderr)
        sys.exit(2)

    assignments = parse_assignments(args.assignments)

    try:
        secrets: Dict[str, str] = {}
        if assignments:
            config = get_vault_config(vault_args, config_path=args.config)
            vault = create_vault(config, default_vault_types())
            secrets = resolve_secrets(assignments, vault)

        exit_code = run_command(command, {**os.environ, **secrets})
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        logger.debug("Full error trace:", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
