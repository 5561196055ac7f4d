"""Running git sub-commands and keeping the usage store in step."""
import logging
import subprocess
import time
from typing import Callable, List, NamedTuple, Optional, Sequence

from git_hop.errors import SubprocessLaunchError
from git_hop.render import dim, green, red
from git_hop.store import UsageStore

logger = logging.getLogger(__name__)

STATUS_INDICATOR = '‣ '


class GitCommandResult(NamedTuple):
    status: int
    message: List[str]  # indicator + command, then output lines
    stdout: str
    stderr: str


def clean_lines(text: str) -> List[str]:
    """Split command output into lines, dropping the empty ones."""
    return [line for line in text.strip().split('\n') if line != '']


def git_command(command: str, args: Sequence[str], cwd: Optional[str] = None) -> GitCommandResult:
    """Run a git sub-command and collect its outcome.

    A nonzero exit status is a normal result, reported through the
    returned status and message.

    Args:
        command: Git sub-command, e.g. "switch"
        args: Arguments following the sub-command
        cwd: Folder to run git in, the current one by default

    Returns:
        Exit status, message block and raw output streams

    Raises:
        SubprocessLaunchError: If the git executable cannot be started
    """
    command_string = ' '.join(['git', command, *args])
    logger.debug("Running %s", command_string)

    try:
        result = subprocess.run(
            ['git', command, *args],
            capture_output=True,
            text=True,
            encoding='utf-8',
            errors='replace',
            cwd=cwd,
        )
    except OSError as e:
        raise SubprocessLaunchError(command_string) from e

    logger.debug("%s exited with %d", command_string, result.returncode)

    status_color = red if result.returncode > 0 else green
    message = [
        status_color(STATUS_INDICATOR) + dim(command_string),
        *clean_lines(result.stdout),
        *clean_lines(result.stderr),
    ]

    return GitCommandResult(result.returncode, message, result.stdout, result.stderr)


def is_option(argument: str) -> bool:
    return argument.startswith('-')


def now_millis() -> int:
    return int(time.time() * 1000)


class GitOrchestrator:
    """Runs the branch changing git commands of a repository.

    Successful commands are mirrored into the usage store; failed ones
    leave it untouched.

    Attributes:
        repo_root: Repository root folder git runs in
        store: Usage store of the repository
        clock: Source of epoch millis timestamps
    """

    def __init__(self, repo_root: str, store: UsageStore, clock: Callable[[], int] = now_millis):
        self.repo_root = repo_root
        self.store = store
        self.clock = clock

    def run(self, command: str, args: Sequence[str]) -> GitCommandResult:
        return git_command(command, args, cwd=self.repo_root)

    def switch(self, args: Sequence[str]) -> GitCommandResult:
        """git switch <args>; records the branch when args name exactly one branch."""
        result = self.run('switch', args)
        branch_name = args[0] if len(args) == 1 and not is_option(args[0]) else None

        if result.status == 0 and branch_name is not None:
            self.store.record_switch(branch_name, self.clock())

        return result

    def create(self, args: Sequence[str]) -> GitCommandResult:
        """git switch --create <name> [start-point]"""
        result = self.run('switch', ['--create', *args])

        if result.status == 0:
            self.store.record_switch(args[0], self.clock())

        return result

    def rename(self, current_name: str, new_name: str) -> GitCommandResult:
        result = self.run('branch', ['--move', current_name, new_name])

        if result.status == 0:
            self.store.rename(current_name, new_name)

        return result

    def delete(self, names: Sequence[str]) -> GitCommandResult:
        result = self.run('branch', ['--delete', *names])

        if result.status == 0:
            self.store.delete(names)

        return result
