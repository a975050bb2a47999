"""Workflows for adding, showing, editing, deleting and renaming passwords."""
import logging
from typing import Callable, List, Optional, Tuple

from ..domains import naming
from ..domains.generator import DEFAULT_LENGTH, DEFAULT_PATTERN, expand_pattern, random_string
from ..domains.models import (
    Entry, Aborted, Conflict, CryptoFailure, EmptyPassword, NotFound, PasswordMismatch,
)
from ..domains.store import Store
from . import selector

logger = logging.getLogger(__name__)


class PasswordOperations:
    """
    The user-facing workflows, composed from a store, a crypto gateway and a host.

    `crypto` needs ``encrypt(plaintext, recipients_file)`` and
    ``decrypt(ciphertext, identities_file)``, both returning bytes.

    `host` is the interactive surface and needs:
        prompt(text, default=None) -> str
        prompt_secret(text) -> str
        confirm(text, default=False) -> bool
        select(prompt, displays) -> Optional[int]
        copy_to_clipboard(data: bytes) -> None
        width() -> int

    Every mutating workflow validates and confirms before touching the store;
    a declined confirmation raises Aborted and leaves the store unchanged.
    """

    def __init__(self, store: Store, crypto, host,
                 length: int = DEFAULT_LENGTH,
                 alphabet: Optional[str] = None,
                 alignment: str = "relative",
                 generate: Callable[[int, str], str] = random_string):
        self.store = store
        self.crypto = crypto
        self.host = host
        self.length = length
        self.alphabet = alphabet or expand_pattern(DEFAULT_PATTERN)
        self.alignment = alignment
        self._generate = generate

    # -- selection -----------------------------------------------------------

    def candidates(self, entries: Optional[List[Entry]] = None) -> List[selector.Candidate]:
        """Display rows for the given entries (default: the whole store)."""
        if entries is None:
            entries = self.store.list()
        width = self.host.width() if self.alignment == "absolute" else None
        return selector.build_candidates(entries, self.alignment, width)

    def list_entries(self) -> List[selector.Candidate]:
        """Display rows for every entry, sorted by site then account."""
        entries = sorted(self.store.list(), key=lambda e: (e.site, e.account))
        return self.candidates(entries)

    def _target(self, site: Optional[str], account: Optional[str], prompt: str) -> Entry:
        if site is not None:
            naming.check_field(site, "site")
        if account is not None:
            naming.check_field(account, "account")
        if site is not None and account is not None:
            return Entry(site, account)

        entries = self.store.list()
        if site is not None:
            entries = [e for e in entries if e.site == site]
            if not entries:
                raise NotFound(f"No entries for site {site}")
        if account is not None:
            entries = [e for e in entries if e.account == account]
            if not entries:
                raise NotFound(f"No entries for account {account}")
        return selector.resolve(prompt, self.candidates(entries), self.host.select)

    def _require(self, entry: Entry) -> None:
        if not self.store.exists(entry.site, entry.account):
            raise NotFound(f"No entry for {entry}")

    def _confirm(self, text: str, assume_yes: bool) -> None:
        if assume_yes:
            return
        if not self.host.confirm(text, default=False):
            raise Aborted("Aborted")

    # -- passwords -----------------------------------------------------------

    def _obtain_password(self, password: Optional[str], generate: Optional[bool]) -> str:
        if password is not None:
            if not password:
                raise EmptyPassword("Password cannot be empty")
            return password

        if generate is None:
            generate = self.host.confirm("Generate a password?", default=False)

        if generate:
            logger.debug(f"Generating a {self.length}-character password")
            return self._generate(self.length, self.alphabet)

        first = self.host.prompt_secret("Enter a password: ")
        if not first:
            raise EmptyPassword("Password cannot be empty")
        second = self.host.prompt_secret("Enter the password again: ")
        if first != second:
            raise PasswordMismatch("Passwords don't match")
        return first

    # -- workflows -----------------------------------------------------------

    def add(self, site: str, account: str, password: Optional[str] = None,
            generate: Optional[bool] = None, overwrite: bool = False) -> Entry:
        """
        Encrypt a new password and store it under (site, account).

        Args:
            site: Site name, no ':' or whitespace
            account: Account name, no ':' or whitespace
            password: Password to store; asked for or generated when None
            generate: True to generate, False to type it in, None to ask
            overwrite: Replace an existing entry instead of failing

        Returns:
            The created Entry

        Raises:
            InvalidIdentifier, Conflict, EmptyPassword, PasswordMismatch,
            CryptoFailure
        """
        naming.check_field(site, "site")
        naming.check_field(account, "account")

        if not overwrite and self.store.exists(site, account):
            raise Conflict(f"Entry {site}:{account} already exists")

        secret = self._obtain_password(password, generate)
        ciphertext = self.crypto.encrypt(secret.encode(), self.store.recipients_file)
        self.store.write(site, account, ciphertext)

        entry = Entry(site, account)
        logger.info(f"Saved {entry}")
        return entry

    def show(self, site: Optional[str] = None, account: Optional[str] = None) -> str:
        """
        Decrypt an entry and hand the password to the clipboard.

        Returns:
            The decrypted password
        """
        entry = self._target(site, account, "Show: ")
        ciphertext = self.store.read(entry.site, entry.account)
        plaintext = self.crypto.decrypt(ciphertext, self.store.identities_file)
        try:
            password = plaintext.decode()
        except UnicodeDecodeError:
            raise CryptoFailure(f"Decrypted password for {entry} is not valid UTF-8")
        self.host.copy_to_clipboard(plaintext)
        logger.info(f"Decrypted {entry}")
        return password

    def edit(self, site: Optional[str] = None, account: Optional[str] = None,
             password: Optional[str] = None, generate: Optional[bool] = None,
             assume_yes: bool = False) -> Entry:
        """Replace the password of an existing entry."""
        entry = self._target(site, account, "Edit: ")
        self._require(entry)
        self._confirm(f"Change the password for {entry}?", assume_yes)
        return self.add(entry.site, entry.account, password, generate, overwrite=True)

    def delete(self, site: Optional[str] = None, account: Optional[str] = None,
               assume_yes: bool = False) -> Entry:
        entry = self._target(site, account, "Delete: ")
        self._require(entry)
        self._confirm(f"Delete {entry}?", assume_yes)
        self.store.delete(entry.site, entry.account)
        return entry

    def rename(self, site: Optional[str] = None, account: Optional[str] = None,
               new_site: Optional[str] = None, new_account: Optional[str] = None,
               assume_yes: bool = False) -> Tuple[Entry, Entry]:
        """
        Move an entry to a new (site, account).

        Missing new values are prompted for, defaulting to the current ones.
        An occupied target is rejected with Conflict. Renaming to the same
        identifier changes nothing.

        Returns:
            (old entry, new entry)
        """
        entry = self._target(site, account, "Rename: ")
        self._require(entry)

        if new_site is None:
            new_site = self.host.prompt("New site", default=entry.site)
        if new_account is None:
            new_account = self.host.prompt("New account", default=entry.account)

        naming.check_field(new_site, "site")
        naming.check_field(new_account, "account")
        target = Entry(new_site, new_account)

        if target == entry:
            logger.info(f"{entry} unchanged")
            return entry, target
        if self.store.exists(target.site, target.account):
            raise Conflict(f"Entry {target} already exists")

        self._confirm(f"Rename {entry} to {target}?", assume_yes)
        self.store.rename(entry.site, entry.account, target.site, target.account)
        return entry, target
