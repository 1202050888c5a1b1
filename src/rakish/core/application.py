""" This module provides the :class:`Application` class which ties the pieces of a build together: it parses the
command line, locates and evaluates the rakefile, loads imported files and invokes the requested tasks. """

from __future__ import annotations

import builtins
import contextlib
import logging
import os
import re
import sys
import traceback
from functools import partial
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence

from termcolor import colored

from rakish.core.cli.parser import CommandLineParser
from rakish.core.context import ExecutionContext
from rakish.core.exceptions import ExitRequested, RequiredFileNotFound
from rakish.core.graph import TaskGraph
from rakish.core.loader import ImportLoader, Loader
from rakish.core.loader.python_script import PythonScriptLoader
from rakish.core.locator import find_rakefile_location
from rakish.core.options import Options
from rakish.core.task import Action, Task
from rakish.core.util.importing import find_file_on_path
from rakish.core.util.text import format_cycle, pluralize

logger = logging.getLogger(__name__)
print = partial(builtins.print, flush=True)

DEFAULT_TASK = "default"
ENV_ASSIGNMENT = re.compile(r"^(\w+)=(.*)$", re.DOTALL)
MAX_REPORTED_CYCLES = 5
TRACE_HINT = "(See full trace by running task with --trace)"


class Application:
    """A single run of the build driver. Every application has its own tasks, options and execution context, so
    any number of applications can exist in the same process."""

    def __init__(self, name: str = "rakish") -> None:
        self.name = name
        self.tasks = TaskGraph()
        self.options = Options()
        self.context = ExecutionContext()
        self.imports = ImportLoader(self.tasks)
        self.script_loader = PythonScriptLoader(self)
        self.imports.register_loader(".py", self.script_loader)

        #: The name of the rakefile once it was found. An empty string if the build runs without a rakefile.
        self.rakefile: Optional[str] = None
        self.top_level_tasks: List[str] = []
        self._required: set[Path] = set()

    def __repr__(self) -> str:
        return f"Application({self.name!r}, rakefile={self.rakefile!r})"

    # Build script interface

    def set_pending_comment(self, comment: str | None) -> None:
        """Set the comment for the next task that is declared."""

        self.tasks.set_pending_comment(comment)

    def take_pending_comment(self) -> str | None:
        return self.tasks.take_pending_comment()

    def intern(self, name: str) -> Task:
        return self.tasks.intern(name)

    def lookup(self, name: str) -> Task | None:
        return self.tasks.lookup(name)

    def define_task(self, name: str, prerequisites: Iterable[str] = (), action: Action | None = None) -> Task:
        return self.tasks.define(name, prerequisites, action)

    def add_loader(self, extension: str, loader: Loader) -> None:
        self.imports.register_loader(extension, loader)

    def add_import(self, filename: str) -> None:
        self.imports.add_import(filename)

    def load_imports(self) -> None:
        self.imports.drain_imports(self.context)

    def require(self, name: str) -> None:
        """Evaluate the build script *name* (with or without the `.py` suffix), looked up in the current directory
        and in `sys.path`. Every file is only evaluated once.

        :raise RequiredFileNotFound: If no such file exists.
        """

        path = find_file_on_path(name, sys.path)
        if path is None:
            raise RequiredFileNotFound(name)
        if path in self._required:
            logger.debug("%s was already required", path)
            return
        self._required.add(path)
        self.script_loader.load_script(path)

    # Command line

    def handle_options(self, argv: Sequence[str]) -> List[str]:
        """Parse the command line options in *argv* and return the remaining arguments."""

        remainder = CommandLineParser(self).parse(argv)
        if self.options.classic_namespace:
            self.context.classic_globals.update(
                show_tasks=self.options.show_tasks,
                show_prereqs=self.options.show_prereqs,
                trace=self.options.trace,
                dryrun=self.options.dryrun,
                silent=self.options.silent,
            )
        return remainder

    def collect_tasks(self, args: Iterable[str]) -> List[str]:
        """Returns the task names in *args*. Arguments in the form `NAME=VALUE` are set in the environment instead.
        If no task names are given, the default task is returned."""

        tasks = []
        for arg in args:
            match = ENV_ASSIGNMENT.match(arg)
            if match:
                logger.debug("setting environment variable %s", match.group(1))
                os.environ[match.group(1)] = match.group(2)
            else:
                tasks.append(arg)
        return tasks or [DEFAULT_TASK]

    def init(self, argv: Sequence[str] | None = None) -> None:
        remainder = self.handle_options(sys.argv[1:] if argv is None else argv)
        if self.options.trace:
            logging.getLogger("rakish").setLevel(logging.DEBUG)
        self.top_level_tasks = self.collect_tasks(remainder)

    # Rakefile

    def find_rakefile_location(self) -> tuple[str, Path]:
        candidates = self.options.rakefile_candidates
        return find_rakefile_location(
            Path.cwd(),
            candidates,
            allow_empty="" in candidates,
            search_parents=not self.options.nosearch,
        )

    def load_rakefile(self) -> None:
        """Locate the rakefile, change into its directory and evaluate it. Then queue the files in the rakelib
        directories and load all pending imports."""

        self.rakefile, directory = self.find_rakefile_location()
        if self.rakefile:
            os.chdir(directory)
            if not self.options.silent:
                print(f"(in {directory})")
            self.script_loader.load_script(directory / self.rakefile)

        for rakelib_dir in self.options.rakelib_dirs:
            for path in sorted(Path(rakelib_dir).glob("*.py")):
                self.add_import(str(path))

        self.load_imports()

    # Top level

    def display_tasks_and_comments(self) -> None:
        tasks = self.tasks.tasks_matching(self.options.show_task_pattern)
        width = max((len(task.name) for task in tasks), default=0)
        for task in tasks:
            if task.comment:
                print(f"{self.name} {task.name.ljust(width)}  # {task.comment}")
            else:
                print(f"{self.name} {task.name}")

    def display_prerequisites(self) -> None:
        for name in self.top_level_tasks:
            lines = self.tasks.prerequisite_tree(name)
            print(f"{self.name} {lines[0]}")
            for line in lines[1:]:
                print(line)

    def invoke_tasks(self) -> None:
        cycles = self.tasks.find_cycles(self.top_level_tasks)
        if cycles:
            shown = "; ".join(map(format_cycle, cycles[:MAX_REPORTED_CYCLES]))
            if len(cycles) > MAX_REPORTED_CYCLES:
                shown += f"; and {len(cycles) - MAX_REPORTED_CYCLES} more"
            logger.warning(
                "found %d %s of tasks with dependency cycles, tasks on a cycle run only once: %s",
                len(cycles),
                pluralize("group", cycles),
                shown,
            )
        for name in self.top_level_tasks:
            self.tasks.invoke(name, self.context)

    def top_level(self) -> None:
        if self.options.show_tasks:
            self.display_tasks_and_comments()
        elif self.options.show_prereqs:
            self.display_prerequisites()
        else:
            self.invoke_tasks()

    def run(self, argv: Sequence[str] | None = None) -> None:
        """Run the build with the given command line. Exits the process with status 1 if the build fails and
        with status 0 if an informational option such as `--help` was given."""

        with self.standard_exception_handling():
            self.init(argv)
            self.load_rakefile()
            self.top_level()

    @contextlib.contextmanager
    def standard_exception_handling(self) -> Iterator[None]:
        """Turns errors into an exit status. The level of the `rakish` logger, which `--trace` raises, is restored
        on the way out."""

        rakish_logger = logging.getLogger("rakish")
        level = rakish_logger.level
        try:
            yield
        except ExitRequested:
            sys.exit(0)
        except Exception as exc:
            self.display_error(exc)
            sys.exit(1)
        finally:
            rakish_logger.setLevel(level)

    def display_error(self, exc: BaseException) -> None:
        print(colored(f"{self.name} aborted!", "red", attrs=["bold"]), file=sys.stderr)
        print(exc, file=sys.stderr)
        if self.options.trace:
            traceback.print_exception(type(exc), exc, exc.__traceback__, file=sys.stderr)
            return

        location = self._find_rakefile_frame(exc)
        if location:
            print(location, file=sys.stderr)
        print(TRACE_HINT, file=sys.stderr)

    def _find_rakefile_frame(self, exc: BaseException) -> str | None:
        """Returns the innermost `file:line` of the traceback of *exc* (or the exception it was raised from) that
        points into the rakefile."""

        if not self.rakefile:
            return None
        rakefile = os.path.abspath(self.rakefile)
        current: BaseException | None = exc
        while current is not None:
            for frame in reversed(traceback.extract_tb(current.__traceback__)):
                if os.path.abspath(frame.filename) == rakefile:
                    return f"{frame.filename}:{frame.lineno}"
            current = current.__cause__
        return None
