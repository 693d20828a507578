"""Input validation for CLI arguments."""
import re
import sys
from typing import Tuple


def validate_property_key(key: str) -> None:
    """
    Validate a property key as produced from secret filenames.

    Keys are lower case and contain no whitespace or path separators.

    Args:
        key: Property key to validate

    Raises:
        SystemExit with code 2 if validation fails
    """
    if not key:
        print("Error: Property key cannot be empty", file=sys.stderr)
        sys.exit(2)

    pattern = r'^[^\s/A-Z]+$'

    if not re.match(pattern, key):
        print(f"Error: Invalid property key '{key}'", file=sys.stderr)
        print("\nProperty keys are lower case and contain no whitespace or '/'.", file=sys.stderr)
        print("\nExamples of valid keys:", file=sys.stderr)
        print("  ✓ spring.datasource.password", file=sys.stderr)
        print("  ✓ api-key", file=sys.stderr)
        print("\nExamples of invalid keys:", file=sys.stderr)
        print("  ✗ SPRING_DATASOURCE_PASSWORD (use the normalized form)", file=sys.stderr)
        print("  ✗ db password (contains space)", file=sys.stderr)
        sys.exit(2)


def parse_override(value: str) -> Tuple[str, str]:
    """
    Split a --set argument into key and value.

    Args:
        value: Argument in the form KEY=VALUE

    Returns:
        Tuple of (key, value)

    Raises:
        SystemExit with code 2 if the argument has no '=' or an empty key
    """
    key, sep, property_value = value.partition("=")
    key = key.strip()
    if not sep or not key:
        print(f"Error: Invalid override '{value}', expected KEY=VALUE", file=sys.stderr)
        print("\nExample: --set secrets.file.base-dir=/var/run/secrets", file=sys.stderr)
        sys.exit(2)
    return key, property_value
