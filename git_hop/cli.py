"""Command line entry point.

Usage:
    git hop                        interactive branch list
    git hop <switch arguments>     git switch, or best fuzzy match on failure
    git hop new <name> [start]     create a branch and switch to it
    git hop rename <old> <new>     rename a branch
    git hop delete <names...>      delete branches
    git hop --list | -l            print branches, most recent first
    git hop --version | -v
    git hop --help | -h
"""
import logging
import os
import re
import shutil
import sys
from typing import List, Optional

from git_hop import __version__
from git_hop.config import load_config
from git_hop.errors import LogFileError, UserInputError
from git_hop.git import GitOrchestrator
from git_hop.render import Renderer, bold, dim, red, wrap_text, yellow
from git_hop.repository import locate_repository, read_branches, read_current_head
from git_hop.session import Session, SessionState
from git_hop.store import UsageStore
from git_hop.updates import UpdateChecker

logger = logging.getLogger(__name__)

LOG_FILE_ENV = 'GIT_HOP_LOG'
LOG_FORMAT = '%(asctime)s %(name)s %(levelname)s %(message)s'
ISSUES_URL = 'https://github.com/git-hop/git-hop/issues'

INFO_COMMANDS = ['--list', '-l', '--version', '-v', '-h', '--help']
BRANCH_COMMANDS = ['new', 'rename', 'delete']

HELP_TEXT = """
{bold}git hop{/bold} {dim}switch branches by recent usage or fuzzy search{/dim}

{bold}Usage{/bold}

  git hop                       {wrap:32}Interactive list of branches, most recently switched first. Type to search, arrows to move, Enter to switch, Alt+0..9 to pick one of the first ten branches, Ctrl+C to quit.{/wrap}
  git hop <switch arguments>    {wrap:32}Run git switch. When it fails, switch to the branch best matching the first argument.{/wrap}
  git hop new <name> [start]    {wrap:32}Create a branch and switch to it.{/wrap}
  git hop rename <old> <new>    {wrap:32}Rename a branch.{/wrap}
  git hop delete <names...>     {wrap:32}Delete branches.{/wrap}
  git hop --list, -l            {wrap:32}Print branches, most recently switched first.{/wrap}
  git hop --version, -v         {wrap:32}Print the version.{/wrap}
  git hop --help, -h            {wrap:32}Print this help.{/wrap}

{dim}Switch history is kept in .hop/data.json at the repository root.{/dim}
"""


def is_sub_command(args: List[str]) -> bool:
    if not args:
        return False
    return args[0] in INFO_COMMANDS or (len(args) > 1 and args[0] in BRANCH_COMMANDS)


def format_help(text: str, columns: int) -> str:
    """Expand {bold}, {dim} and {wrap:N} markup of the help text.

    A wrapped block is laid out to the terminal width minus N, with every
    continuation line indented by N spaces.
    """
    text = re.sub(r'\{bold\}(.+?)\{/bold\}', lambda m: bold(m.group(1)), text)
    text = re.sub(r'\{dim\}(.+?)\{/dim\}', lambda m: dim(m.group(1)), text)

    def wrap(match):
        padding = int(match.group(1))
        lines = wrap_text(match.group(2).strip(), columns - padding)
        return '\n'.join(line if i == 0 else ' ' * padding + line for i, line in enumerate(lines))

    return re.sub(r'\{wrap:(\d+)\}(.+?)\{/wrap\}', wrap, text)


def configure_logging(config) -> None:
    """Send logs to a file when one is configured; the terminal is the UI."""
    log_file = os.environ.get(LOG_FILE_ENV) or config['log_file']
    if not log_file:
        return

    try:
        handler = logging.FileHandler(log_file, encoding='utf-8')
    except OSError as e:
        raise LogFileError(log_file) from e

    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger = logging.getLogger('git_hop')
    package_logger.addHandler(handler)
    package_logger.setLevel(config['log_level'])


def error_messages(error: Exception) -> List[str]:
    if isinstance(error, UserInputError):
        return [f"{yellow(error.title)} {error.message}"]

    return [
        f"{red('Error:')} {error}",
        '',
        bold('What to do?'),
        'Help improve git-hop, create an issue with this error and steps to reproduce it. Thank you!',
        '',
        f"Issues: {ISSUES_URL}",
    ]


def execute_sub_command(session: Session, name: str, args: List[str]) -> None:
    if name in ('--list', '-l'):
        session.list_branches()
    elif name == 'new':
        session.create_branch(args)
    elif name == 'rename':
        if len(args) < 2:
            raise UserInputError(
                'Wrong Format.',
                f"You should specify both current and new branch name, {bold('git hop rename <old branch name> <new branch name>')}.",
            )
        session.rename_branch(args[0], args[1])
    elif name == 'delete':
        session.delete_branches(args)
    else:
        raise UserInputError(
            f"Unknown command {bold(f'git hop {name}')}",
            f"See {bold('git hop --help')} for the list of supported commands.",
        )


def create_session(renderer: Renderer, config, interactive: bool) -> Session:
    """Read repository state and set up a session for the working directory."""
    repo_root = locate_repository(os.getcwd())
    store = UsageStore(repo_root)
    store.ensure()

    columns, rows = shutil.get_terminal_size()
    state = SessionState(
        rows=rows,
        columns=columns,
        head=read_current_head(repo_root),
        branches=read_branches(repo_root, store),
        interactive=interactive,
    )

    update_checker = None
    if interactive and config['check_updates']:
        update_checker = UpdateChecker(timeout=config['update_timeout'])

    return Session(state, renderer, GitOrchestrator(repo_root, store), update_checker)


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for git-hop.

    Exits with the git exit status after repository changing commands,
    0 after informational ones and 1 on errors.
    """
    args = sys.argv[1:] if argv is None else argv

    if args[:1] in (['--version'], ['-v']):
        sys.stdout.write(f"{__version__}\n")
        sys.exit(0)

    if args[:1] in (['--help'], ['-h']):
        sys.stdout.write(format_help(HELP_TEXT, shutil.get_terminal_size().columns))
        sys.exit(0)

    renderer = Renderer(sys.stdout)
    session = None

    try:
        config = load_config()
        configure_logging(config)

        session = create_session(renderer, config, sys.stdout.isatty())

        if not args:
            # Only the interactive list runs long enough for the lookup to finish
            if session.update_checker is not None:
                session.update_checker.start()
            session.run(sys.stdin)
        elif is_sub_command(args):
            execute_sub_command(session, args[0], args[1:])
        else:
            session.jump_to(args)
    except Exception as e:
        logger.debug("Fatal error", exc_info=True)
        if session is None:
            renderer.view_message_scene(error_messages(e), shutil.get_terminal_size().columns)
            sys.exit(1)
        session.finish(error_messages(e), 1)
    finally:
        if session is not None:
            session.handle_exit()


if __name__ == "__main__":
    main()
