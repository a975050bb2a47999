"""Interactive selection of a single entry from the store."""
import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence

from ..domains.models import Entry, Aborted, NotFound

logger = logging.getLogger(__name__)

# Gap between the longest site and the account column in relative mode
RELATIVE_GAP = 3

SelectFn = Callable[[str, Sequence[str]], Optional[int]]


@dataclass(frozen=True)
class Candidate:
    """A selectable row: padded display text plus the entry it stands for."""
    display: str
    site: str
    account: str

    @property
    def entry(self) -> Entry:
        return Entry(self.site, self.account)


def _pad(site: str, account: str, padding: int) -> str:
    # Always keep one space so the display can be split back into fields
    return site + " " * max(padding, 1) + account


def build_candidates(entries: Iterable[Entry], alignment: str = "relative",
                     width: Optional[int] = None) -> List[Candidate]:
    """
    Build display rows that line up the account column.

    Args:
        entries: Entries to display, order is preserved
        alignment: "relative" pads every site to the longest site plus
            RELATIVE_GAP columns; "absolute" right-aligns accounts to `width`
        width: Rendering width, required for "absolute"

    Returns:
        List of Candidate in input order
    """
    entries = list(entries)

    if alignment == "absolute":
        if width is None:
            raise ValueError("absolute alignment needs a width")
        return [
            Candidate(_pad(e.site, e.account, width - len(e.site) - len(e.account)), e.site, e.account)
            for e in entries
        ]

    if alignment != "relative":
        raise ValueError(f"Unknown alignment: {alignment}")

    column = max((len(e.site) for e in entries), default=0) + RELATIVE_GAP
    return [
        Candidate(_pad(e.site, e.account, column - len(e.site)), e.site, e.account)
        for e in entries
    ]


def split_display(display: str) -> Entry:
    """
    Split a padded display string back into its entry.

    The run of padding spaces is the only separator; identifiers never
    contain whitespace.

    Raises:
        ValueError: If the string does not hold exactly two fields
    """
    fields = display.split()
    if len(fields) != 2:
        raise ValueError(f"Cannot split display string: {display!r}")
    return Entry(fields[0], fields[1])


def resolve(prompt: str, candidates: Sequence[Candidate], select: SelectFn) -> Entry:
    """
    Ask the user to pick one candidate.

    Args:
        prompt: Text shown next to the completion input
        candidates: Rows from build_candidates
        select: Host callback receiving (prompt, display strings) and
            returning the chosen index, or None when the user aborts

    Raises:
        NotFound: If there is nothing to select from
        Aborted: If the user cancels the selection
    """
    if not candidates:
        raise NotFound("The store is empty")

    index = select(prompt, [c.display for c in candidates])
    if index is None:
        raise Aborted("No entry selected")

    entry = split_display(candidates[index].display)
    logger.debug(f"Selected {entry}")
    return entry
