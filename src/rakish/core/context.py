from __future__ import annotations

import builtins
import dataclasses
import logging
import shlex
import subprocess as sp
import sys
from functools import partial
from typing import Any, Dict

from rakish.core.exceptions import ShellCommandError

logger = logging.getLogger(__name__)
print = partial(builtins.print, flush=True)


@dataclasses.dataclass
class ExecutionContext:
    """The execution flags of a build. An instance is passed to every task action.

    :attr:`verbose` and :attr:`nowrite` are the flags that actions are expected to honor, :attr:`trace` and
    :attr:`dryrun` control how tasks are narrated and executed."""

    verbose: bool = False
    nowrite: bool = False
    trace: bool = False
    dryrun: bool = False

    #: Option values mirrored for build scripts when classic namespace mode is enabled.
    classic_globals: Dict[str, Any] = dataclasses.field(default_factory=dict)

    def narrate(self, message: str) -> None:
        print(message, file=sys.stderr)

    def sh(self, *command: str, check: bool = True) -> int:
        """Run an external command. The command is echoed if :attr:`verbose` is set and not run at all if
        :attr:`nowrite` is set.

        :raise ShellCommandError: If *check* is enabled and the command returns a non-zero exit code.
        """

        if not command:
            raise ValueError("no command specified")

        quoted = " ".join(map(shlex.quote, command))
        if self.verbose:
            self.narrate(quoted)
        if self.nowrite:
            logger.debug("not running command (nowrite): %s", quoted)
            return 0

        returncode = sp.call(list(command))
        if check and returncode != 0:
            raise ShellCommandError(quoted, returncode)
        return returncode
