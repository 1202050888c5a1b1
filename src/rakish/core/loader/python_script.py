""" Implements a loader for Python build scripts. These Python scripts have access to importing certain build
related members from the :mod:`rakish.api` module; note that these members are only available when imported in
the context of a script executed by this loader and not otherwise. """

from __future__ import annotations

import contextlib
import logging
import sys
import types
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Iterable, Iterator

from rakish.core.task import Action
from rakish.core.util.importing import append_to_sys_path

if TYPE_CHECKING:
    from rakish.core.application import Application

logger = logging.getLogger(__name__)


class PythonScriptLoader:
    """Evaluates a Python build script with :mod:`rakish.api` bound to the given application."""

    def __init__(self, app: Application) -> None:
        self.app = app

    def __call__(self, filename: str) -> None:
        self.load_script(Path(filename))

    def load_script(self, file: Path) -> None:
        logger.debug("evaluating build script %s", file)
        with inject_rakish_api_module(self.app, file) as (_api_module, script_module):
            namespace = vars(script_module)
            namespace.update(self.app.context.classic_globals)
            code = compile(file.read_text(), filename=str(file), mode="exec")
            with append_to_sys_path([str(file.parent.absolute())]):
                exec(code, namespace)


def _make_api_functions(app: Application) -> dict[str, Any]:
    def desc(comment: str) -> None:
        """Set the comment of the next task that is declared."""

        app.set_pending_comment(comment)

    def task(name: str, prerequisites: Iterable[str] = (), action: Action | None = None) -> Callable[[Action], Action]:
        """Declare the task *name*. Returns a decorator that adds the decorated function as an action."""

        if isinstance(prerequisites, str):
            prerequisites = [prerequisites]
        declared = app.define_task(name, prerequisites, action)

        def decorator(func: Action) -> Action:
            app.tasks.enhance(declared, action=func)
            return func

        return decorator

    def imports(*filenames: str) -> None:
        """Load the given files after the current build script."""

        for filename in filenames:
            app.add_import(filename)

    return {
        "desc": desc,
        "task": task,
        "imports": imports,
        "sh": app.context.sh,
    }


@contextlib.contextmanager
def inject_rakish_api_module(app: Application, file: Path) -> Iterator[tuple[types.ModuleType, types.ModuleType]]:
    api_module_name = "rakish.api"

    # Create the temporary replacement for the rakish.api module that the script will import from.
    api_module: Any = types.ModuleType(api_module_name)
    api_module.app = app
    api_module.ctx = app.context
    api_module.rakefile = app.rakefile
    vars(api_module).update(_make_api_functions(app))
    vars(api_module).update(app.context.classic_globals)

    # In order for @dataclass decorators to work in a build script, it must be able to look up its module
    # in sys.modules.
    script_module = types.ModuleType(f"_rakish__{file.stem}_{id(file)}")
    script_module.__file__ = str(file)

    old_module = sys.modules.get(api_module_name)
    try:
        sys.modules[api_module_name] = api_module
        sys.modules[script_module.__name__] = script_module
        yield api_module, script_module
    finally:
        del sys.modules[script_module.__name__]
        if old_module is None:
            sys.modules.pop(api_module_name)
        else:
            sys.modules[api_module_name] = old_module
