from __future__ import annotations

import dataclasses
from typing import List, Optional, Pattern

DEFAULT_RAKEFILES = ("rakefile", "Rakefile", "rakefile.py", "Rakefile.py")
DEFAULT_RAKELIB_DIR = "rakelib"


@dataclasses.dataclass
class Options:
    """The options collected from the command line. Flags are `None` until they are set on the command line, which
    allows telling apart an option that was not requested from one that was explicitly disabled."""

    show_tasks: Optional[bool] = None
    show_task_pattern: Optional[Pattern[str]] = None
    show_prereqs: Optional[bool] = None
    trace: Optional[bool] = None
    dryrun: Optional[bool] = None
    silent: Optional[bool] = None
    nosearch: Optional[bool] = None
    classic_namespace: Optional[bool] = None
    rakefile_candidates: List[str] = dataclasses.field(default_factory=lambda: list(DEFAULT_RAKEFILES))
    rakelib_dirs: List[str] = dataclasses.field(default_factory=lambda: [DEFAULT_RAKELIB_DIR])
