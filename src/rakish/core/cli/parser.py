""" The command line parser of the build driver. Options are applied in the order they appear on the command line
because some of them have immediate side effects (extending the search path, loading files, printing the help). """

from __future__ import annotations

import argparse
import builtins
import logging
import re
import sys
from functools import partial
from typing import TYPE_CHECKING, Any, Callable, List, NoReturn, Sequence

from rakish.core.exceptions import ExitRequested, InvalidOptionValue, UnrecognizedOption

if TYPE_CHECKING:
    from rakish.core.application import Application

logger = logging.getLogger(__name__)
print = partial(builtins.print, flush=True)

USAGE = "%(prog)s [-f rakefile] {options} targets..."
IGNORED_EXPLICIT_ARGUMENT = re.compile(r"ignored explicit argument '(.+)'\Z")


class _ArgumentParser(argparse.ArgumentParser):
    #: The arguments currently being parsed.
    args: Sequence[str] = ()

    def error(self, message: str) -> NoReturn:
        # A flag that takes no value followed by an unknown short flag in the same argument, e.g. `-sx`.
        match = IGNORED_EXPLICIT_ARGUMENT.search(message)
        if match:
            explicit = match.group(1)
            for arg in self.args:
                if not arg.startswith("--") and arg.startswith("-") and arg.endswith(explicit):
                    raise UnrecognizedOption(f"-{explicit[0]}")
        raise InvalidOptionValue(message)


class _Callback(argparse.Action):
    """Calls *callback* with the option value as soon as the option is encountered."""

    def __init__(
        self,
        option_strings: Sequence[str],
        dest: str,
        callback: Callable[[Any], None],
        nargs: int | str | None = 0,
        **kwargs: Any,
    ) -> None:
        super().__init__(option_strings, dest, nargs=nargs, default=argparse.SUPPRESS, **kwargs)
        self.callback = callback

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: Any,
        option_string: str | None = None,
    ) -> None:
        self.callback(values)


class CommandLineParser:
    """Parses the command line into the :class:`~rakish.core.options.Options` and the
    :class:`~rakish.core.context.ExecutionContext` of an :class:`~rakish.core.application.Application`."""

    def __init__(self, app: Application) -> None:
        self.app = app
        self.parser = self._get_argument_parser()

    @property
    def prog(self) -> str:
        return self.app.name

    def _get_argument_parser(self) -> _ArgumentParser:
        parser = _ArgumentParser(
            self.prog,
            usage=USAGE,
            add_help=False,
            formatter_class=lambda prog: argparse.HelpFormatter(prog, width=120, max_help_position=40),
            description="Locate the rakefile, then invoke the targets (or the \"default\" task) in dependency order.",
        )
        add = partial(parser.add_argument, action=_Callback)

        add(
            "-C",
            "--classic-namespace",
            callback=self._classic_namespace,
            help="make the option flags available as globals in build scripts",
        )
        add("-n", "--dry-run", callback=self._dry_run, help="do a dry run without executing actions")
        add("-H", "--help", callback=self._help, help="display this help message")
        add(
            "-I",
            "--libdir",
            metavar="LIBDIR",
            nargs=None,
            callback=self._libdir,
            help="include LIBDIR in the search path for required modules",
        )
        add("-N", "--nosearch", callback=self._nosearch, help="do not search parent directories for the rakefile")
        add("-P", "--prereqs", callback=self._prereqs, help="display the tasks and dependencies, then exit")
        add("-q", "--quiet", callback=self._quiet, help="do not log messages to standard output")
        add(
            "-f",
            "--rakefile",
            metavar="FILE",
            nargs="?",
            const="",
            callback=self._rakefile,
            help="use FILE as the rakefile (without FILE, run without a rakefile)",
        )
        add(
            "-R",
            "--rakelibdir",
            metavar="RAKELIBDIR",
            nargs=None,
            callback=self._rakelibdir,
            help="auto-import any .py files in RAKELIBDIR, separated by colons [default: rakelib]",
        )
        add(
            "-r",
            "--require",
            metavar="MODULE",
            nargs=None,
            callback=self._require,
            help="load MODULE before executing the rakefile",
        )
        add(
            "-s",
            "--silent",
            callback=self._silent,
            help="like --quiet, but also suppresses the 'in directory' announcement",
        )
        add(
            "-T",
            "--tasks",
            metavar="PATTERN",
            nargs="?",
            const="",
            callback=self._tasks,
            help="display the tasks (matching optional PATTERN) with descriptions, then exit",
        )
        add("-t", "--trace", callback=self._trace, help="turn on invoke/execute tracing, enable full backtrace")
        add("-h", "--usage", callback=self._usage, help="display usage")
        add("-v", "--verbose", callback=self._verbose, help="log messages to standard output")
        add("-V", "--version", callback=self._version, help="display the program version")
        parser.add_argument("targets", metavar="target", nargs="*", help="tasks to invoke or NAME=VALUE assignments")
        return parser

    def parse(self, argv: Sequence[str]) -> List[str]:
        """Apply the options in *argv* and return the remaining arguments.

        :raise UnrecognizedOption: If *argv* contains an option that is not known.
        :raise InvalidOptionValue: If an option is missing its value or the value is invalid.
        :raise ExitRequested: If an informational option was handled.
        """

        self.parser.args = list(argv)
        args, extras = self.parser.parse_known_intermixed_args(self.parser.args)
        for arg in extras:
            if arg.startswith("-") and arg != "-":
                raise UnrecognizedOption(arg.partition("=")[0])
        return list(args.targets) + extras

    # Handlers

    def _classic_namespace(self, _value: None) -> None:
        self.app.options.classic_namespace = True

    def _dry_run(self, _value: None) -> None:
        options, context = self.app.options, self.app.context
        options.dryrun = True
        options.trace = True
        context.dryrun = True
        context.trace = True
        context.verbose = True
        context.nowrite = True

    def _help(self, _value: None) -> None:
        print(self.parser.format_help(), end="")
        raise ExitRequested()

    def _libdir(self, value: str) -> None:
        if value not in sys.path:
            logger.debug("adding %r to sys.path", value)
            sys.path.append(value)

    def _nosearch(self, _value: None) -> None:
        self.app.options.nosearch = True

    def _prereqs(self, _value: None) -> None:
        self.app.options.show_prereqs = True

    def _quiet(self, _value: None) -> None:
        self.app.context.verbose = False

    def _rakefile(self, value: str) -> None:
        self.app.options.rakefile_candidates = [value]

    def _rakelibdir(self, value: str) -> None:
        self.app.options.rakelib_dirs = [x for x in value.split(":") if x]

    def _require(self, value: str) -> None:
        self.app.require(value)

    def _silent(self, _value: None) -> None:
        self.app.context.verbose = False
        self.app.options.silent = True

    def _tasks(self, value: str) -> None:
        try:
            pattern = re.compile(value)
        except re.error as exc:
            raise InvalidOptionValue(f"invalid task pattern {value!r}: {exc}")
        self.app.options.show_tasks = True
        self.app.options.show_task_pattern = pattern

    def _trace(self, _value: None) -> None:
        self.app.options.trace = True
        self.app.context.trace = True
        self.app.context.verbose = True

    def _usage(self, _value: None) -> None:
        print(self.parser.format_usage(), end="")
        raise ExitRequested()

    def _verbose(self, _value: None) -> None:
        self.app.context.verbose = True

    def _version(self, _value: None) -> None:
        from rakish.core import __version__

        print(f"{self.prog}, version {__version__}")
        raise ExitRequested()
