""" Loading of imported build files. An import is queued while a build script is evaluated and loaded after the
script has finished. If a task exists with the same name as the imported file, that task is invoked first, which
allows a build to generate the file it is about to import. """

from __future__ import annotations

import collections
import logging
import os
from typing import Any, Callable, Deque, Dict, List, Set

from typing_extensions import TypeAlias

from rakish.core.context import ExecutionContext
from rakish.core.exceptions import UnknownImportLoader
from rakish.core.graph import TaskGraph

#: A loader is called with the name of the file to load.
Loader: TypeAlias = Callable[[str], Any]

logger = logging.getLogger(__name__)


def _normalize_extension(extension: str) -> str:
    return extension if not extension or extension.startswith(".") else f".{extension}"


class ImportLoader:
    def __init__(self, graph: TaskGraph) -> None:
        self._graph = graph
        self._loaders: Dict[str, Loader] = {}
        self._pending: Deque[str] = collections.deque()
        self._imported: Set[str] = set()

    @property
    def pending(self) -> List[str]:
        return list(self._pending)

    @property
    def imported(self) -> Set[str]:
        return set(self._imported)

    def register_loader(self, extension: str, loader: Loader) -> None:
        """Register the *loader* for files ending with *extension* (with or without the leading dot)."""

        if not callable(loader):
            raise TypeError(f"loader must be callable, got {type(loader).__name__}")
        self._loaders[_normalize_extension(extension)] = loader

    def get_loader(self, filename: str) -> Loader:
        """
        :raise UnknownImportLoader: If no loader is registered for the extension of *filename*.
        """

        extension = os.path.splitext(filename)[1]
        try:
            return self._loaders[extension]
        except KeyError:
            raise UnknownImportLoader(filename, extension)

    def add_import(self, filename: str) -> None:
        self._pending.append(filename)

    def load(self, filename: str) -> None:
        """Load *filename* with the loader registered for its extension. A task that generates an imported file
        may call this itself, in which case the file is not loaded a second time when the imports are drained."""

        loader = self.get_loader(filename)
        logger.debug("loading %r", filename)
        self._imported.add(filename)
        loader(filename)

    def drain_imports(self, context: ExecutionContext) -> None:
        """Load all pending imports in the order they were added. Loading a file may add more imports, which are
        loaded in the same pass."""

        while self._pending:
            filename = self._pending.popleft()
            if filename in self._imported:
                continue
            if filename in self._graph:
                self._graph.invoke(filename, context)
            if filename not in self._imported:
                self.load(filename)
