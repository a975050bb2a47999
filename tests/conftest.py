"""Shared fixtures: an on-disk store with fake crypto and a scripted host."""
from pathlib import Path

import pytest

from pa.store.domains.models import CryptoFailure
from pa.store.domains.store import Store
from pa.store.workflows.password_operations import PasswordOperations


class FakeCrypto:
    """Reversible stand-in for age: reverses the bytes behind a header."""

    HEADER = b"fake-age\n"

    def __init__(self):
        self.fail = False
        self.encrypt_calls = []
        self.decrypt_calls = []

    def encrypt(self, plaintext, recipients_file):
        self.encrypt_calls.append((plaintext, Path(recipients_file)))
        if self.fail:
            raise CryptoFailure("age failed (exit 1): boom")
        if not plaintext:
            raise CryptoFailure("Refusing to encrypt an empty secret")
        return self.HEADER + plaintext[::-1]

    def decrypt(self, ciphertext, identities_file):
        self.decrypt_calls.append((ciphertext, Path(identities_file)))
        if self.fail or not ciphertext.startswith(self.HEADER):
            raise CryptoFailure("age failed (exit 1): no identity matched")
        return ciphertext[len(self.HEADER):][::-1]


class FakeHost:
    """Host whose answers are queued up front by the test."""

    def __init__(self):
        self.prompts = []
        self.secrets = []
        self.confirms = []
        self.selection = None
        self.columns = 80
        self.copied = []
        self.asked = []
        self.offered = []

    def prompt(self, text, default=None):
        self.asked.append(text)
        answer = self.prompts.pop(0) if self.prompts else ""
        return answer or (default or "")

    def prompt_secret(self, text):
        self.asked.append(text)
        return self.secrets.pop(0)

    def confirm(self, text, default=False):
        self.asked.append(text)
        return self.confirms.pop(0) if self.confirms else default

    def select(self, prompt, displays):
        self.offered.append(list(displays))
        if self.selection is None:
            return None
        if isinstance(self.selection, int):
            return self.selection
        return list(displays).index(self.selection)

    def copy_to_clipboard(self, data):
        self.copied.append(data)

    def width(self):
        return self.columns


@pytest.fixture
def store_dir(tmp_path):
    base = tmp_path / "pa"
    (base / "passwords").mkdir(parents=True)
    (base / "identities").write_text("AGE-SECRET-KEY-1FAKE\n")
    (base / "recipients").write_text("age1fake\n")
    return base


@pytest.fixture
def store(store_dir):
    return Store(store_dir)


@pytest.fixture
def crypto():
    return FakeCrypto()


@pytest.fixture
def host():
    return FakeHost()


@pytest.fixture
def ops(store, crypto, host):
    return PasswordOperations(store, crypto, host, length=50)


def _snapshot(directory):
    """Map of relative path -> bytes for every file under directory."""
    return {
        str(p.relative_to(directory)): p.read_bytes()
        for p in sorted(Path(directory).rglob("*")) if p.is_file()
    }


@pytest.fixture
def snapshot():
    return _snapshot
