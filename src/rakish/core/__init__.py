__version__ = "0.1.0"

from rakish.core.application import Application
from rakish.core.context import ExecutionContext
from rakish.core.exceptions import (
    ExitRequested,
    InvalidOptionValue,
    OptionError,
    RakefileNotFound,
    RakishError,
    RequiredFileNotFound,
    ShellCommandError,
    TaskActionError,
    TaskNotFound,
    UnknownImportLoader,
    UnrecognizedOption,
)
from rakish.core.graph import TaskGraph
from rakish.core.loader import ImportLoader
from rakish.core.locator import find_rakefile_location
from rakish.core.options import Options
from rakish.core.task import Action, Task

__all__ = [
    "Action",
    "Application",
    "ExecutionContext",
    "ExitRequested",
    "ImportLoader",
    "InvalidOptionValue",
    "OptionError",
    "Options",
    "RakefileNotFound",
    "RakishError",
    "RequiredFileNotFound",
    "ShellCommandError",
    "Task",
    "TaskActionError",
    "TaskGraph",
    "TaskNotFound",
    "UnknownImportLoader",
    "UnrecognizedOption",
    "find_rakefile_location",
]
