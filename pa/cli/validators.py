"""Input validation for CLI arguments."""
import sys

from pa.store.domains import naming
from pa.store.domains.models import InvalidIdentifier


def validate_identifier(value: str, field: str) -> None:
    """
    Validate a site or account given on the command line.

    Sites and accounts become part of the file name '<site>:<account>.age',
    so they cannot be empty and cannot contain ':' or whitespace.

    Args:
        value: Value to validate (None means "select interactively")
        field: "site" or "account"

    Raises:
        SystemExit with code 2 if validation fails
    """
    if value is None:
        return

    try:
        naming.check_field(value, field)
    except InvalidIdentifier as e:
        print(f"Error: {e}", file=sys.stderr)
        print(f"\nA {field} cannot contain colons (:) or whitespace.", file=sys.stderr)
        print("\nExamples of valid identifiers:", file=sys.stderr)
        print("  ✓ github.com alice", file=sys.stderr)
        print("  ✓ mail.example.org alice@example.org", file=sys.stderr)
        print("\nExamples of invalid identifiers:", file=sys.stderr)
        print("  ✗ 'my bank' alice (contains space)", file=sys.stderr)
        print("  ✗ host:8080 alice (contains colon)", file=sys.stderr)
        sys.exit(2)
