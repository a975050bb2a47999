"""Filesystem-backed repository of encrypted password entries."""
import os
import logging
import tempfile
from pathlib import Path
from typing import List, Union

from . import naming
from .models import Entry, NotFound, Conflict

logger = logging.getLogger(__name__)

PASSWORDS_DIR = "passwords"
IDENTITIES_FILE = "identities"
RECIPIENTS_FILE = "recipients"

# Names that never correspond to an entry
RESERVED_NAMES = frozenset({
    IDENTITIES_FILE, RECIPIENTS_FILE, ".", "..", ".git", ".hg", ".svn",
})


class Store:
    """
    Directory of ``<site>:<account>.age`` files plus the key files.

    Layout under the base directory:
        passwords/<site>:<account>.age
        identities
        recipients
    """

    def __init__(self, base_dir: Union[str, Path]):
        self.base_dir = Path(base_dir)
        self.passwords_dir = self.base_dir / PASSWORDS_DIR

    @property
    def identities_file(self) -> Path:
        return self.base_dir / IDENTITIES_FILE

    @property
    def recipients_file(self) -> Path:
        return self.base_dir / RECIPIENTS_FILE

    def path_for(self, site: str, account: str) -> Path:
        return self.passwords_dir / naming.encode(site, account)

    def list(self) -> List[Entry]:
        """
        List entries in directory enumeration order.

        Reserved names, sub-directories and names that fail to decode
        are skipped.

        Returns:
            List of Entry, unsorted
        """
        if not self.passwords_dir.is_dir():
            logger.debug(f"Store directory does not exist yet: {self.passwords_dir}")
            return []

        entries = []
        with os.scandir(self.passwords_dir) as it:
            for dirent in it:
                if dirent.name in RESERVED_NAMES or dirent.is_dir():
                    continue
                entry = naming.decode(dirent.name)
                if entry is not None:
                    entries.append(entry)
        return entries

    def exists(self, site: str, account: str) -> bool:
        return self.path_for(site, account).is_file()

    def read(self, site: str, account: str) -> bytes:
        path = self.path_for(site, account)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            raise NotFound(f"No entry for {site}:{account}")

    def write(self, site: str, account: str, ciphertext: bytes) -> None:
        """
        Create or replace the ciphertext file for (site, account).

        The content goes to a temporary file in the same directory first and
        is then moved over the target, so a failed write never leaves a
        truncated entry behind. Any previous content is discarded.
        """
        path = self.path_for(site, account)
        self.passwords_dir.mkdir(mode=0o700, parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(dir=self.passwords_dir, prefix=".tmp-")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(ciphertext)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

        logger.info(f"Wrote {path}")

    def delete(self, site: str, account: str) -> None:
        path = self.path_for(site, account)
        try:
            path.unlink()
        except FileNotFoundError:
            raise NotFound(f"No entry for {site}:{account}")
        logger.info(f"Deleted {path}")

    def rename(self, old_site: str, old_account: str, new_site: str, new_account: str) -> None:
        """
        Move an entry to a new identifier.

        Raises:
            NotFound: If the source entry does not exist
            Conflict: If the target identifier is already taken
        """
        source = self.path_for(old_site, old_account)
        target = self.path_for(new_site, new_account)

        if not source.is_file():
            raise NotFound(f"No entry for {old_site}:{old_account}")

        # link() fails on an existing target, unlike rename()
        try:
            os.link(source, target)
        except FileExistsError:
            raise Conflict(f"Entry {new_site}:{new_account} already exists")
        except FileNotFoundError:
            raise NotFound(f"No entry for {old_site}:{old_account}")
        source.unlink()
        logger.info(f"Renamed {source.name} -> {target.name}")
