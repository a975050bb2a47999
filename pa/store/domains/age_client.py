"""Wrapper around the age command-line tool."""
import logging
import subprocess
from pathlib import Path
from typing import List, Union

from .models import CryptoFailure, CryptoTimeout

logger = logging.getLogger(__name__)

AGE_REPO_URL = "https://github.com/FiloSottile/age"
DEFAULT_TIMEOUT = 30


class AgeClient:
    """
    Encrypt and decrypt secrets by running ``age`` as a subprocess.

    Arguments are always passed as an argument vector, never through a shell,
    and plaintext only ever travels over stdin/stdout. Each call runs the tool
    exactly once; failures are not retried.
    """

    def __init__(self, binary: str = "age", timeout: float = DEFAULT_TIMEOUT):
        self.binary = binary
        self.timeout = timeout

    def _run(self, args: List[str], input_data: bytes) -> bytes:
        command = [self.binary, *args]
        logger.debug(f"Running {self.binary} {args[0]}")
        try:
            result = subprocess.run(
                command,
                input=input_data,
                capture_output=True,
                timeout=self.timeout,
                check=False
            )
        except FileNotFoundError:
            raise CryptoFailure(
                f"'{self.binary}' is not installed. See {AGE_REPO_URL} for installation instructions."
            )
        except subprocess.TimeoutExpired:
            raise CryptoTimeout(f"'{self.binary}' did not finish within {self.timeout}s")

        if result.returncode != 0:
            stderr = result.stderr.decode(errors="replace").strip()
            logger.debug(f"{self.binary} exited with code {result.returncode}")
            raise CryptoFailure(f"{self.binary} failed (exit {result.returncode}): {stderr}")

        return result.stdout

    def encrypt(self, plaintext: bytes, recipients_file: Union[str, Path]) -> bytes:
        """
        Encrypt plaintext to every recipient listed in recipients_file.

        Raises:
            CryptoFailure: If plaintext is empty or age fails
            CryptoTimeout: If age does not exit in time
        """
        if not plaintext:
            raise CryptoFailure("Refusing to encrypt an empty secret")

        ciphertext = self._run(["--encrypt", "--recipients-file", str(recipients_file)], plaintext)
        if not ciphertext:
            raise CryptoFailure(f"{self.binary} produced no output")
        return ciphertext

    def decrypt(self, ciphertext: bytes, identities_file: Union[str, Path]) -> bytes:
        """Decrypt ciphertext with the keys in identities_file."""
        return self._run(["--decrypt", "--identity", str(identities_file)], ciphertext)
