"""Interactive branch switching session."""
import enum
import logging
import os
import sys
import termios
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence

from git_hop import __version__, keys
from git_hop.git import GitCommandResult, GitOrchestrator
from git_hop.listing import (
    BranchEntry,
    HeadEntry,
    ListEntry,
    entry_branch_name,
    generate_list,
    quick_select_entries,
)
from git_hop.render import Renderer, bold, green, yellow
from git_hop.repository import BranchRecord, CurrentHead
from git_hop.updates import UpdateChecker, is_newer

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 1024


class Scene(enum.Enum):
    LIST = 'list'
    MESSAGE = 'message'


@dataclass
class SessionState:
    """Application state of one session.

    Attributes:
        rows: Terminal height
        columns: Terminal width
        head: Current HEAD of the repository
        branches: Every branch with its last switch time
        highlighted: Index of the highlighted list line
        query: Search string
        query_cursor: Cursor offset inside the search string
        entries: Ranked list for the current query
        scene: Scene shown on the next paint
        messages: Lines of the Message scene
        interactive: False when output is not a terminal
    """
    rows: int
    columns: int
    head: CurrentHead
    branches: List[BranchRecord] = field(default_factory=list)
    highlighted: int = 0
    query: str = ''
    query_cursor: int = 0
    entries: List[ListEntry] = field(default_factory=list)
    scene: Scene = Scene.LIST
    messages: List[str] = field(default_factory=list)
    interactive: bool = True


@contextmanager
def raw_mode(fd: int) -> Iterator[None]:
    """Put a terminal in raw input mode for the duration of the block.

    Input is delivered byte by byte without echo, line editing or signal
    keys (Ctrl-C arrives as 0x03). Output processing stays on so "\\n"
    still starts a new line.
    """
    old_settings = termios.tcgetattr(fd)
    settings = termios.tcgetattr(fd)

    settings[0] &= ~(termios.BRKINT | termios.ICRNL | termios.INPCK | termios.ISTRIP | termios.IXON)
    settings[2] |= termios.CS8
    settings[3] &= ~(termios.ECHO | termios.ICANON | termios.IEXTEN | termios.ISIG)
    settings[6][termios.VMIN] = 1
    settings[6][termios.VTIME] = 0

    termios.tcsetattr(fd, termios.TCSAFLUSH, settings)
    try:
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)


class Session:
    """Wires key input, list generation, git commands and painting together.

    Every action that changes the repository ends the process through
    sys.exit with the git exit status, after showing the Message scene.

    Attributes:
        state: Application state
        renderer: Terminal painter
        git: Git command runner of the repository
        update_checker: Background version lookup, if one was started
    """

    def __init__(self, state: SessionState, renderer: Renderer, git: GitOrchestrator,
                 update_checker: Optional[UpdateChecker] = None):
        self.state = state
        self.renderer = renderer
        self.git = git
        self.update_checker = update_checker
        self.refresh_list()

    def refresh_list(self) -> None:
        state = self.state
        state.entries = generate_list(state.head, state.branches, state.query)

    def view(self) -> None:
        state = self.state

        if state.scene == Scene.MESSAGE:
            self.renderer.view_message_scene(state.messages, state.columns)
        elif not state.interactive:
            self.renderer.view_non_interactive_list(state)
        else:
            self.renderer.view_list_scene(state)

    def finish(self, messages: List[str], status: int) -> None:
        """Show messages and end the process with status."""
        self.state.scene = Scene.MESSAGE
        self.state.messages = messages
        self.view()
        sys.exit(status)

    def finish_with(self, result: GitCommandResult, extra: Sequence[str] = ()) -> None:
        messages = list(result.message)
        if result.status == 0:
            messages.extend(extra)
        self.finish(messages, result.status)

    # Entry points

    def list_branches(self) -> None:
        """Print the ranked branch list without any interaction."""
        self.state.interactive = False
        self.view()
        sys.exit(0)

    def jump_to(self, args: Sequence[str]) -> None:
        """Switch using git switch arguments, falling back to the best fuzzy match.

        Args:
            args: Arguments for git switch, the first one doubles as search query
        """
        result = self.git.switch(args)

        if result.status == 0:
            self.finish(result.message, 0)

        state = self.state
        state.query = args[0]
        state.query_cursor = len(state.query)
        self.refresh_list()

        # HEAD is always listed, only branch entries count as matches
        if not any(isinstance(entry, BranchEntry) for entry in state.entries):
            self.finish([f"{bold(yellow(state.query))} does not match any branch"], 1)

        self.switch_to_entry(state.entries[0])

    def create_branch(self, args: Sequence[str]) -> None:
        self.finish_with(self.git.create(args))

    def rename_branch(self, current_name: str, new_name: str) -> None:
        self.finish_with(self.git.rename(current_name, new_name), ['Renamed.'])

    def delete_branches(self, names: Sequence[str]) -> None:
        self.finish_with(self.git.delete(names))

    def run(self, input_file) -> None:
        """Paint the list and process key input until an action ends the session.

        Args:
            input_file: Terminal input, usually sys.stdin
        """
        self.view()

        if not self.state.interactive:
            sys.exit(0)

        input_fd = input_file.fileno()
        with raw_mode(input_fd):
            while True:
                data = os.read(input_fd, READ_CHUNK_SIZE)
                if not data:
                    # Input closed
                    self.renderer.clear()
                    sys.exit(0)
                self.handle_input(data)

    # Key handling

    def handle_input(self, data: bytes) -> None:
        for key in keys.decode_keys(data):
            if keys.is_special_key(key):
                self.handle_special_key(key)
            else:
                self.handle_text_key(key)

    def switch_to_entry(self, entry: ListEntry) -> None:
        branch_name = entry_branch_name(entry)

        if isinstance(entry, HeadEntry):
            self.finish([f"Staying on {bold(branch_name)}"], 0)

        self.finish_with(self.git.switch([branch_name]))

    def handle_special_key(self, key: bytes) -> None:
        """Apply a navigation or editing key.

        Supported keys:
            03           Ctrl-C, quit
            0d           Enter, switch to the highlighted entry
            1b5b41/42    Up / Down, move the highlight
            1b5b44/43    Left / Right, move the search cursor
            7f, 08       Delete / Backspace, remove the character before the cursor
            1b30..1b39   Alt+0..9, quick select
        """
        state = self.state

        if key == keys.CTRL_C:
            self.renderer.clear()
            sys.exit(0)

        elif key == keys.ENTER:
            self.switch_to_entry(state.entries[state.highlighted])

        elif key == keys.UP:
            state.highlighted = max(0, state.highlighted - 1)
            self.view()

        elif key == keys.DOWN:
            state.highlighted = min(len(state.entries) - 1, state.highlighted + 1)
            self.view()

        elif key == keys.RIGHT:
            if state.query_cursor == len(state.query):
                return
            state.query_cursor += 1
            self.view()

        elif key == keys.LEFT:
            if state.query_cursor == 0:
                return
            state.query_cursor -= 1
            self.view()

        elif key in (keys.DELETE, keys.BACKSPACE):
            if state.query_cursor == 0:
                return
            state.query = state.query[:state.query_cursor - 1] + state.query[state.query_cursor:]
            state.query_cursor -= 1
            self.refresh_list()
            state.highlighted = 0
            self.view()

        elif keys.is_meta_digit(key):
            index = keys.meta_digit(key)
            quick_select = quick_select_entries(state.entries)
            if index < len(quick_select):
                self.switch_to_entry(quick_select[index])

        else:
            logger.debug("Ignoring key %r", key)

    def handle_text_key(self, key: bytes) -> None:
        state = self.state
        text = key.decode('utf-8', errors='replace')

        state.query = state.query[:state.query_cursor] + text + state.query[state.query_cursor:]
        state.query_cursor += len(text)
        self.refresh_list()
        state.highlighted = 0
        self.view()

    # Exit

    def update_notice(self) -> List[str]:
        """Lines announcing a newer release, empty when there is none."""
        if self.update_checker is None:
            return []

        latest = self.update_checker.latest_version
        if latest is None or not is_newer(latest, __version__):
            return []

        return [
            '',
            f"New version of git-hop is available: {yellow(__version__)} → {green(latest)}.",
            '',
            f"{bold('pip install --upgrade git-hop')} to update.",
        ]

    def handle_exit(self) -> None:
        """Append the update notice, if any, to the final screen."""
        notice = self.update_notice()
        if not notice:
            return

        self.state.scene = Scene.MESSAGE
        self.state.messages = self.state.messages + notice
        self.view()
