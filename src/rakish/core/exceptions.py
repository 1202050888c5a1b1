from __future__ import annotations

from typing import Sequence


class RakishError(Exception):
    """Base class for all errors that abort a build."""


class RakefileNotFound(RakishError):
    def __init__(self, candidates: Sequence[str]) -> None:
        self.candidates = list(candidates)

    def __str__(self) -> str:
        return f"No Rakefile found (looking for: {', '.join(self.candidates)})"


class OptionError(RakishError):
    pass


class UnrecognizedOption(OptionError):
    def __init__(self, option: str) -> None:
        self.option = option

    def __str__(self) -> str:
        return f"unrecognized option `{self.option}'"


class InvalidOptionValue(OptionError):
    pass


class RequiredFileNotFound(RakishError):
    def __init__(self, name: str) -> None:
        self.name = name

    def __str__(self) -> str:
        return f"no such file to load -- {self.name}"


class UnknownImportLoader(RakishError):
    def __init__(self, filename: str, extension: str) -> None:
        self.filename = filename
        self.extension = extension

    def __str__(self) -> str:
        return f"no loader registered for {self.extension or 'files without extension'!r} (importing {self.filename!r})"


class TaskNotFound(RakishError):
    def __init__(self, name: str) -> None:
        self.name = name

    def __str__(self) -> str:
        return f"Don't know how to build task '{self.name}'"


class TaskActionError(RakishError):
    """Wraps an arbitrary exception raised by an action of a task."""

    def __init__(self, task_name: str, cause: BaseException) -> None:
        self.task_name = task_name
        self.cause = cause

    def __str__(self) -> str:
        return f"task '{self.task_name}' failed: {str(self.cause) or type(self.cause).__name__}"


class ShellCommandError(RakishError):
    def __init__(self, command: str, returncode: int) -> None:
        self.command = command
        self.returncode = returncode

    def __str__(self) -> str:
        return f'command "{self.command}" returned exit code {self.returncode}'


class ExitRequested(Exception):
    """Raised by informational options (help, usage, version) to end the program successfully."""
