"""Generation, ranking and windowing of the branch list."""
from typing import List, NamedTuple, Sequence, Union

from git_hop.fuzzy import fuzzy_match, matched_count
from git_hop.repository import BranchRecord, CurrentHead

QUICK_SELECT_SIZE = 10
# Search bar plus one spare row
RESERVED_ROWS = 2


class HeadEntry(NamedTuple):
    head: CurrentHead
    match_score: float


class BranchEntry(NamedTuple):
    branch: BranchRecord
    match_score: float


ListEntry = Union[HeadEntry, BranchEntry]


class Window(NamedTuple):
    top: int
    bottom: int  # inclusive


def head_display_name(head: CurrentHead) -> str:
    return head.sha if head.detached else head.branch_name


def entry_branch_name(entry: ListEntry) -> str:
    """Name to switch to for a list entry (the short sha for a detached HEAD)."""
    if isinstance(entry, HeadEntry):
        return head_display_name(entry.head)
    return entry.branch.name


def score_candidate(query: str, candidate: str) -> float:
    """Score candidate against query for list filtering.

    An empty query matches everything with the top score. A candidate that
    shares no character with the query scores 0 so the filter drops it.
    """
    if query == '':
        return 1
    if matched_count(query, candidate) == 0:
        return 0
    return fuzzy_match(query, candidate)


def generate_list(head: CurrentHead, branches: Sequence[BranchRecord], query: str) -> List[ListEntry]:
    """Build the ranked list of entries visible for a query.

    The HEAD entry is always first in construction and always kept. The
    branch HEAD points to is not repeated as a branch entry. With an empty
    query branches are ordered by last switch time, most recent first,
    below HEAD; otherwise all entries are ordered by match score.

    Args:
        head: Current HEAD of the repository
        branches: Every known branch with its last switch time
        query: Current search string

    Returns:
        Entries in display order
    """
    head_entry = HeadEntry(head, score_candidate(query, head_display_name(head)))

    branch_entries = [
        BranchEntry(branch, score_candidate(query, branch.name))
        for branch in branches
        if head.detached or branch.name != head.branch_name
    ]
    branch_entries = [entry for entry in branch_entries if entry.match_score > 0]

    if query == '':
        branch_entries.sort(key=lambda entry: entry.branch.last_switch, reverse=True)
        return [head_entry] + branch_entries

    entries: List[ListEntry] = [head_entry] + branch_entries
    entries.sort(key=lambda entry: entry.match_score, reverse=True)
    return entries


def compute_window(total: int, highlighted: int, viewport_rows: int) -> Window:
    """Compute the visible slice of the list.

    Keeps the highlighted line centered while never scrolling past either
    end of the list.

    Args:
        total: Number of list lines
        highlighted: Index of the highlighted line
        viewport_rows: Terminal height

    Returns:
        Window with inclusive top and bottom indexes
    """
    size = viewport_rows - RESERVED_ROWS
    half = size // 2

    top = max(0, min(total - size, highlighted - half))
    bottom = top + size - 1

    return Window(top, bottom)


def quick_select_entries(entries: Sequence[ListEntry]) -> List[BranchEntry]:
    """Branch entries reachable with Alt+digit, HEAD excluded."""
    return [entry for entry in entries if isinstance(entry, BranchEntry)][:QUICK_SELECT_SIZE]
