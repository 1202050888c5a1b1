"""
This file serves as a proxy for Mypy type hints. Importing it in a normal Python script results in a
:class:`RuntimeError`, you can only import from this module when your code is loaded as a build script.
"""

from typing import Callable, Optional

from rakish.core.application import Application
from rakish.core.context import ExecutionContext
from rakish.core.task import Action

app: Application
ctx: ExecutionContext
rakefile: Optional[str]
desc: Callable[[str], None]
task: Callable[..., Callable[[Action], Action]]
imports: Callable[..., None]
sh: Callable[..., int]

# Only present when the build runs with --classic-namespace.
show_tasks: Optional[bool]
show_prereqs: Optional[bool]
trace: Optional[bool]
dryrun: Optional[bool]
silent: Optional[bool]

raise RuntimeError(f"you cannot import from {__name__} directly; make sure your script is loaded by rakish")
