"""Terminal painting with plain ANSI escape sequences.

The screen is never fully cleared. Each repaint moves the cursor back to
the first painted row, erases everything below it and writes the new
lines. The terminal is never asked where the cursor is, so the number of
rows written by the last paint is remembered in RenderState.
"""
import platform
import re
from typing import List, NamedTuple, Sequence, TextIO

from git_hop.listing import (
    BranchEntry,
    HeadEntry,
    ListEntry,
    compute_window,
    head_display_name,
    quick_select_entries,
)

INDEX_PADDING = '   '
INDEX_COLUMN_WIDTH = len(INDEX_PADDING)
MORE_INDICATOR_COLUMN_WIDTH = 5
SEARCH_PLACEHOLDER = 'Search'
HINT_MIN_WIDTH = 25
MESSAGE_MARGIN = '  '

ESCAPE_CODE_PATTERN = re.compile(r'\x1b.+?m', re.IGNORECASE)


def dim(s: str) -> str:
    return f"\x1b[2m{s}\x1b[22m"


def bold(s: str) -> str:
    return f"\x1b[1m{s}\x1b[22m"


def highlight(s: str) -> str:
    return f"\x1b[38;5;4m{s}\x1b[39m"


def green(s: str) -> str:
    return f"\x1b[38;5;2m{s}\x1b[39m"


def yellow(s: str) -> str:
    return f"\x1b[38;5;3m{s}\x1b[39m"


def red(s: str) -> str:
    return f"\x1b[38;5;1m{s}\x1b[39m"


def strip_escape_codes(s: str) -> str:
    return ESCAPE_CODE_PATTERN.sub('', s)


def truncate(s: str, max_width: int) -> str:
    """Cut s to max_width characters, ending with an ellipsis when cut."""
    truncated = s[:max(0, max_width)]

    if len(truncated) < len(s):
        truncated = truncated[:-1] + '…'

    return truncated


def wrap_text(text: str, columns: int) -> List[str]:
    """Word wrap text to a number of columns.

    Escape codes do not count towards the line width. Words longer than
    a line are not broken.

    Args:
        text: Single paragraph, may contain ANSI SGR codes
        columns: Maximum visible line width

    Returns:
        Wrapped lines, empty for empty text
    """
    if text == '':
        return []

    words = text.split(' ')
    lines = [words[0]]

    for word in words[1:]:
        current = lines[-1]
        # +1 for the space in front of the word
        if len(strip_escape_codes(current)) + len(strip_escape_codes(word)) + 1 <= columns:
            lines[-1] = current + ' ' + word
        else:
            lines.append(word)

    return lines


class Layout(NamedTuple):
    branch_name_width: int
    more_indicator_width: int


def calculate_layout(columns: int, branch_names: Sequence[str]) -> Layout:
    """Size the branch name column to the longest name that fits."""
    longest = max((len(name) for name in branch_names), default=0)
    branch_name_width = max(0, min(columns - INDEX_COLUMN_WIDTH - MORE_INDICATOR_COLUMN_WIDTH, longest))
    spacing = columns - INDEX_COLUMN_WIDTH - branch_name_width - MORE_INDICATOR_COLUMN_WIDTH

    return Layout(branch_name_width, spacing + MORE_INDICATOR_COLUMN_WIDTH)


def quick_select_modifier() -> str:
    return '⌥' if platform.system() == 'Darwin' else 'Alt'


class RenderState:
    """Cursor row, counted from the top of the last paint (1-based).

    Kept apart from the session state because it changes as a side
    effect of painting, not of application logic.
    """

    def __init__(self):
        self.cursor_y = 1


class Renderer:
    """Paints the List and Message scenes to a terminal stream.

    Attributes:
        output: Stream the escape sequences and lines are written to
        render_state: Remembered cursor row of the last paint
    """

    def __init__(self, output: TextIO):
        self.output = output
        self.render_state = RenderState()

    def _write(self, s: str) -> None:
        self.output.write(s)
        self.output.flush()

    def cursor_to(self, x: int, y: int) -> None:
        """Move the cursor to column x of painted row y (both 1-based)."""
        y_delta = self.render_state.cursor_y - y

        # \x1b[0A still moves one row up, so skip the move entirely
        if y_delta > 0:
            self._write(f"\x1b[{y_delta}A")

        self._write(f"\x1b[{x}G")
        self.render_state.cursor_y = y

    def clear(self) -> None:
        """Erase everything painted since the first row of the last paint."""
        self.cursor_to(1, 1)
        self._write("\x1b[0J")

    def render(self, lines: Sequence[str]) -> None:
        self._write('\n'.join(lines))
        self.render_state.cursor_y = len(lines)

    # Views

    def view_head(self, entry: HeadEntry) -> str:
        head = entry.head
        if head.detached:
            return INDEX_PADDING + f"{bold(head.sha)} {dim('(detached)')}"
        return INDEX_PADDING + bold(head.branch_name)

    def view_branch(self, entry: BranchEntry, index: int, layout: Layout) -> str:
        index_column = f" {dim(str(index))} " if index < 10 else INDEX_PADDING
        name = truncate(entry.branch.name, layout.branch_name_width).ljust(layout.branch_name_width)
        return index_column + name

    def view_list_lines(self, entries: Sequence[ListEntry], layout: Layout) -> List[str]:
        lines = []
        quick_select_index = -1

        for entry in entries:
            if isinstance(entry, HeadEntry):
                lines.append(self.view_head(entry))
            else:
                quick_select_index += 1
                lines.append(self.view_branch(entry, quick_select_index, layout))

        return lines

    def view_list(self, state) -> List[str]:
        if not state.entries:
            return [INDEX_PADDING + dim('No such branches')]

        layout = calculate_layout(state.columns, [branch.name for branch in state.branches])
        window = compute_window(len(state.entries), state.highlighted, state.rows)
        last_index = len(state.entries) - 1

        lines = []
        for index, line in enumerate(self.view_list_lines(state.entries, layout)):
            if index == state.highlighted:
                line = highlight(line)
            if index == window.bottom and window.bottom < last_index:
                line += dim('   ↓ '.rjust(layout.more_indicator_width))
            lines.append(line)

        return lines[window.top:window.bottom + 1]

    def view_search(self, query: str, width: int) -> str:
        if query == '':
            return dim(SEARCH_PLACEHOLDER.ljust(width))
        return truncate(query, width).ljust(width)

    def view_quick_select_hint(self, max_index: int, width: int) -> str:
        trailing_index = f"..{max_index}" if max_index > 0 else ''
        return dim(f"{quick_select_modifier()}+0{trailing_index} quick select ".rjust(width))

    def view_search_line(self, state) -> str:
        search_width = min(
            state.columns - INDEX_COLUMN_WIDTH,
            max(len(state.query), len(SEARCH_PLACEHOLDER)),
        )
        line = INDEX_PADDING + self.view_search(state.query, search_width)
        hint_width = state.columns - (INDEX_COLUMN_WIDTH + search_width)

        if hint_width < HINT_MIN_WIDTH:
            return line

        quick_select = quick_select_entries(state.entries)
        if not quick_select:
            return line

        return line + self.view_quick_select_hint(len(quick_select) - 1, hint_width)

    def view_non_interactive_list(self, state) -> None:
        """Print one plain branch name per line, HEAD included, for piping."""
        lines = []
        for entry in state.entries:
            if isinstance(entry, HeadEntry):
                lines.append(head_display_name(entry.head))
            else:
                lines.append(entry.branch.name)

        # Trailing empty line ends the output with a newline
        self.render(lines + [''])

    def view_list_scene(self, state) -> None:
        lines = [self.view_search_line(state)] + self.view_list(state)

        self.clear()
        self.render(lines)
        self.cursor_to(INDEX_COLUMN_WIDTH + state.query_cursor + 1, 1)

    def view_message_scene(self, messages: Sequence[str], columns: int) -> None:
        body = []
        for message in messages:
            if message == '':
                body.append('')
                continue
            body.extend(wrap_text(message, columns - len(MESSAGE_MARGIN)))

        lines = [''] + [MESSAGE_MARGIN + line for line in body] + ['', '']

        self.clear()
        self.render(lines)
