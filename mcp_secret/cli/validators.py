"""Input validation for CLI arguments."""
import re
import sys
from typing import Dict, Sequence

ENV_VAR_PATTERN = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')


def validate_env_var_name(name: str) -> None:
    """
    Validate an environment variable name.

    Args:
        name: Variable name to validate

    Raises:
        SystemExit with code 2 if validation fails
    """
    if not ENV_VAR_PATTERN.match(name):
        print(f"Error: Invalid environment variable name '{name}'", file=sys.stderr)
        print("\nNames must start with a letter or underscore and contain only", file=sys.stderr)
        print("letters, numbers and underscores (_).", file=sys.stderr)
        print("\nExamples of valid names:", file=sys.stderr)
        print("  ✓ DATABASE_URL", file=sys.stderr)
        print("  ✓ _API_KEY", file=sys.stderr)
        sys.exit(2)


def parse_assignments(tokens: Sequence[str]) -> Dict[str, str]:
    """
    Parse ENV_VAR=SECRET_ID[#path] tokens.

    Tokens are split on the first '=' so secret ids may contain '='.

    Args:
        tokens: Assignment tokens in command line order

    Returns:
        Variable names mapped to secret reference tokens, in order

    Raises:
        SystemExit with code 2 on malformed or duplicate assignments
    """
    assignments: Dict[str, str] = {}

    for token in tokens:
        name, sep, value = token.partition("=")
        if not sep:
            print(f"Error: Invalid format: '{token}'. Use key=value.", file=sys.stderr)
            sys.exit(2)

        validate_env_var_name(name)

        if not value:
            print(f"Error: Secret reference for '{name}' cannot be empty", file=sys.stderr)
            sys.exit(2)

        if name in assignments:
            print(f"Error: Environment variable '{name}' is assigned more than once", file=sys.stderr)
            sys.exit(2)

        assignments[name] = value

    return assignments
