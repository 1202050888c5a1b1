""" Locates the rakefile of a build by searching the current directory and its parents. """

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from rakish.core.exceptions import RakefileNotFound

logger = logging.getLogger(__name__)


def _find_in_directory(directory: Path, candidates: Sequence[str]) -> str | None:
    """Returns the name of the first entry in *directory* that matches one of the *candidates* (compared without
    regard to case). An exact match is preferred over a match that differs in case."""

    try:
        entries = sorted(p.name for p in directory.iterdir() if p.is_file())
    except OSError as exc:
        logger.debug("cannot list %s (%s)", directory, exc)
        return None

    for candidate in candidates:
        if not candidate:
            continue
        if candidate in entries:
            return candidate
        for entry in entries:
            if entry.lower() == candidate.lower():
                return entry
    return None


def find_rakefile_location(
    start_dir: Path,
    candidates: Sequence[str],
    *,
    allow_empty: bool = False,
    search_parents: bool = True,
) -> tuple[str, Path]:
    """Find the rakefile starting at *start_dir*, moving up to the parent directory until a file is found.

    This function does not change the working directory; that is up to the caller.

    :param start_dir: The directory to start searching in.
    :param candidates: The file names to look for, in order of preference.
    :param allow_empty: Succeed without searching, returning an empty name and *start_dir*. This is used when
        the build is fine without a rakefile.
    :param search_parents: If disabled, only *start_dir* is searched.
    :return: The name of the rakefile and the directory that contains it.
    :raise RakefileNotFound: If the file system root is reached without finding a rakefile.
    """

    if allow_empty:
        return "", start_dir

    directory = start_dir.absolute()
    while True:
        name = _find_in_directory(directory, candidates)
        if name is not None:
            logger.debug("found rakefile %r in %s", name, directory)
            return name, directory
        if not search_parents or directory.parent == directory:
            raise RakefileNotFound(candidates)
        directory = directory.parent
