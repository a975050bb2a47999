"""Random password generation."""
import secrets

DEFAULT_LENGTH = 50
DEFAULT_PATTERN = "_A-Z-a-z-0-9"


def expand_pattern(pattern: str) -> str:
    """
    Expand a tr-style character class into the characters it names.

    ``x-y`` is an inclusive range, anything else is taken literally, so
    ``_A-Z-a-z-0-9`` gives letters, digits, underscore and hyphen.
    Duplicates are dropped and first-seen order is kept.

    Raises:
        ValueError: If a range is reversed
    """
    chars = []
    i = 0
    while i < len(pattern):
        if i + 2 < len(pattern) and pattern[i + 1] == "-":
            start, end = pattern[i], pattern[i + 2]
            if ord(start) > ord(end):
                raise ValueError(f"Invalid range '{start}-{end}' in pattern '{pattern}'")
            chars.extend(chr(c) for c in range(ord(start), ord(end) + 1))
            i += 3
        else:
            chars.append(pattern[i])
            i += 1
    return "".join(dict.fromkeys(chars))


def random_string(length: int = DEFAULT_LENGTH, alphabet: str = expand_pattern(DEFAULT_PATTERN)) -> str:
    """Return a string of `length` characters drawn uniformly from alphabet."""
    if length <= 0:
        raise ValueError("length must be positive")
    if not alphabet:
        raise ValueError("alphabet cannot be empty")
    return "".join(secrets.choice(alphabet) for _ in range(length))
