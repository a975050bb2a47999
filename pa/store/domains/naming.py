"""Mapping between (site, account) pairs and encrypted file names.

File names look like ``<site>:<account>.age``. The colon separates the two
fields, so neither field may contain one, and whitespace is rejected so that
padded display strings can be split back into their fields.
"""
import logging
import re
from typing import Optional

from .models import Entry, InvalidIdentifier, MalformedEntry

logger = logging.getLogger(__name__)

EXTENSION = ".age"
SEPARATOR = ":"

_RESERVED = re.compile(r"[:\s]")


def check_field(value: str, field: str) -> None:
    """
    Validate a single site or account value.

    Args:
        value: The value to check
        field: Field name used in the error message ("site" or "account")

    Raises:
        InvalidIdentifier: If the value is empty or contains ':' or whitespace
    """
    if not value:
        raise InvalidIdentifier(f"{field} cannot be empty")
    if _RESERVED.search(value):
        raise InvalidIdentifier(
            f"Invalid {field} '{value}': ':' and whitespace are not allowed"
        )


def encode(site: str, account: str) -> str:
    """Return the file name for (site, account)."""
    check_field(site, "site")
    check_field(account, "account")
    return f"{site}{SEPARATOR}{account}{EXTENSION}"


def parse_filename(filename: str) -> Entry:
    """
    Strictly decode a file name into an Entry.

    Raises:
        MalformedEntry: If the name lacks the extension, the separator,
            or either field is invalid
    """
    if not filename.endswith(EXTENSION):
        raise MalformedEntry(f"'{filename}' does not end with {EXTENSION}")

    stem = filename[:-len(EXTENSION)]
    fields = stem.split(SEPARATOR, 1)
    if len(fields) < 2:
        raise MalformedEntry(f"'{filename}' has no '{SEPARATOR}' separator")

    site, account = fields
    try:
        check_field(site, "site")
        check_field(account, "account")
    except InvalidIdentifier as e:
        raise MalformedEntry(f"'{filename}': {e}") from e

    return Entry(site=site, account=account)


def decode(filename: str) -> Optional[Entry]:
    """Decode a file name, returning None when it is malformed."""
    try:
        return parse_filename(filename)
    except MalformedEntry as e:
        logger.debug(f"Skipping malformed entry: {e}")
        return None
