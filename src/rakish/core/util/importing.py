from __future__ import annotations

import contextlib
import sys
from pathlib import Path
from typing import Iterable, Iterator


@contextlib.contextmanager
def append_to_sys_path(path: Iterable[str]) -> Iterator[None]:
    """Temporarily append to `sys.path`. Entries that were added to `sys.path` by someone else in the meantime
    are kept."""

    added = [p for p in path if p not in sys.path]
    sys.path += added
    try:
        yield
    finally:
        for p in added:
            if p in sys.path:
                sys.path.remove(p)


def find_file_on_path(name: str, search_path: Iterable[str], suffixes: Iterable[str] = ("", ".py")) -> Path | None:
    """Returns the first existing file named *name* (with any of the *suffixes* appended) in the current directory
    or any of the directories in *search_path*."""

    suffixes = list(suffixes)
    for directory in (".", *search_path):
        for suffix in suffixes:
            candidate = Path(directory or ".") / (name + suffix)
            if candidate.is_file():
                return candidate.resolve()
    return None
