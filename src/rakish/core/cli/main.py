from __future__ import annotations

import logging
import os
import sys
from typing import NoReturn

from termcolor import colored

from rakish.core.application import Application


def _init_logging() -> None:
    logging.basicConfig(
        level=logging.WARNING,
        format=f"{colored('%(levelname)-7s', 'magenta')} | {colored('%(name)-24s', 'blue')} | "
        f"{colored('%(message)s', 'cyan')}",
    )


def main_internal(prog: str, argv: list[str] | None) -> NoReturn:
    _init_logging()
    Application(prog).run(sys.argv[1:] if argv is None else argv)
    sys.exit(0)


def main(prog: str = "rakish", argv: list[str] | None = None) -> NoReturn:
    profile_outfile = os.getenv("RAKISH_PROFILING")
    if profile_outfile:
        import cProfile as profile

        with open(profile_outfile, "w"):  # Make sure the file exists
            pass

        prof = profile.Profile()
        try:
            prof.runcall(main_internal, prog, argv)
        finally:
            prof.dump_stats(profile_outfile)
    else:
        main_internal(prog, argv)


if __name__ == "__main__":
    main()
