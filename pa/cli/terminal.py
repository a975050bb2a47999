"""Terminal implementation of the interactive host used by the workflows."""
import getpass
import logging
import shutil
import subprocess
import sys
from typing import List, Optional, Sequence

import pyperclip

from pa.store.domains.models import PaError

logger = logging.getLogger(__name__)

# Columns the menu ("nnn) ") and fzf (pointer and marker) put before each row
ROW_DECORATION = 5


def fuzzy_match(query: str, text: str) -> bool:
    """True if the characters of query appear in text in order (case-insensitive)."""
    it = iter(text.lower())
    return all(ch in it for ch in query.lower())


class TerminalHost:
    """Prompts on stdin/stderr, fuzzy selection through fzf or a numbered menu."""

    def prompt(self, text: str, default: Optional[str] = None) -> str:
        suffix = f" [{default}]" if default else ""
        answer = input(f"{text}{suffix}: ").strip()
        return answer or (default or "")

    def prompt_secret(self, text: str) -> str:
        return getpass.getpass(text)

    def confirm(self, text: str, default: bool = False) -> bool:
        hint = "(Y/n)" if default else "(y/N)"
        try:
            answer = input(f"{text} {hint}: ").strip().lower()
        except EOFError:
            return False
        if not answer:
            return default
        return answer in ("y", "yes")

    def width(self) -> int:
        """Columns left for a selectable row after the selection UI decorates it."""
        return max(shutil.get_terminal_size().columns - ROW_DECORATION, 1)

    def copy_to_clipboard(self, data: bytes) -> None:
        try:
            pyperclip.copy(data.decode())
        except pyperclip.PyperclipException as e:
            raise PaError(f"Clipboard unavailable: {e}")

    def select(self, prompt: str, displays: Sequence[str]) -> Optional[int]:
        """Return the index of the chosen display string, or None on cancel."""
        if shutil.which("fzf"):
            return self._select_fzf(prompt, displays)
        return self._select_menu(prompt, displays)

    def _select_fzf(self, prompt: str, displays: Sequence[str]) -> Optional[int]:
        result = subprocess.run(
            ["fzf", "--prompt", prompt, "--no-multi", "--height", "40%", "--reverse"],
            input="\n".join(displays),
            stdout=subprocess.PIPE,
            text=True,
            check=False
        )
        # fzf exits 1 on no match and 130 on Ctrl-C/Esc
        if result.returncode != 0:
            logger.debug(f"fzf exited with code {result.returncode}")
            return None
        choice = result.stdout.rstrip("\n")
        try:
            return list(displays).index(choice)
        except ValueError:
            return None

    def _select_menu(self, prompt: str, displays: Sequence[str]) -> Optional[int]:
        shown: List[int] = list(range(len(displays)))
        while True:
            for n, index in enumerate(shown, 1):
                print(f"{n:>3}) {displays[index]}", file=sys.stderr)
            try:
                answer = input(f"{prompt}").strip()
            except EOFError:
                return None
            if not answer:
                return None

            if answer.isdigit():
                n = int(answer)
                if 1 <= n <= len(shown):
                    return shown[n - 1]
                print(f"Pick a number between 1 and {len(shown)}", file=sys.stderr)
                continue

            matches = [i for i in shown if fuzzy_match(answer, displays[i])]
            if len(matches) == 1:
                return matches[0]
            if not matches:
                print(f"No match for '{answer}'", file=sys.stderr)
                continue
            shown = matches
