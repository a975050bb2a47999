"""Domain models and errors for the password store."""
from dataclasses import dataclass


@dataclass(frozen=True)
class Entry:
    """One stored credential, identified by its (site, account) pair."""
    site: str
    account: str

    def __str__(self) -> str:
        return f"{self.site}:{self.account}"


class PaError(Exception):
    """Base class for password store errors."""
    pass


class InvalidIdentifier(PaError):
    """Site or account is empty or contains a reserved character."""
    pass


class PasswordMismatch(PaError):
    """The two typed passwords differ."""
    pass


class EmptyPassword(PaError):
    """An empty password was given or typed."""
    pass


class NotFound(PaError):
    """No entry exists for the requested identifier."""
    pass


class Conflict(PaError):
    """The target identifier is already taken."""
    pass


class CryptoFailure(PaError):
    """The external encryption tool failed or is missing."""
    pass


class CryptoTimeout(CryptoFailure):
    """The external encryption tool did not exit in time."""
    pass


class Aborted(PaError):
    """The user declined a confirmation or cancelled a selection."""
    pass


class MalformedEntry(PaError):
    """A file name in the store does not decode to an entry."""
    pass
