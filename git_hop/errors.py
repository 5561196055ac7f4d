"""Exception hierarchy for git-hop.

Everything raised by git-hop itself inherits from HopError and is
reported once, at the top level, in the Message scene.
"""


class HopError(Exception):
    """Base exception for all git-hop errors."""


class UserInputError(HopError):
    """Raised for bad sub-commands or missing arguments.

    Reported as a short titled message without any stack detail.
    """

    def __init__(self, title: str, message: str) -> None:
        self.title = title
        self.message = message
        super().__init__(f"{title} {message}")


class RepositoryNotFoundError(UserInputError):
    """Raised when no git repository encloses the working directory."""

    def __init__(self, start: str) -> None:
        self.start = start
        super().__init__(
            "You're not in Git repo.",
            "There is no Git repository in current or any parent folder.",
        )


class StoreCorruptError(HopError):
    """Raised when the usage store file does not hold valid JSON."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f'JSON in "{path}" is not valid, could not parse it.')


class StoreWriteError(HopError):
    """Raised when the usage store file cannot be written."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f'Could not write data into "{path}".')


class SubprocessLaunchError(HopError):
    """Raised when the git executable could not be started at all.

    A git process that runs and exits nonzero is not an error.
    """

    def __init__(self, command: str) -> None:
        self.command = command
        super().__init__(f"Could not run {command}.")


class LogFileError(UserInputError):
    """Raised when the configured log file cannot be opened."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(
            "Can't write log.",
            f'Could not open "{path}", check log_file in the config or GIT_HOP_LOG.',
        )
