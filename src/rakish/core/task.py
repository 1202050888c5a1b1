""" This module provides the :class:`Task` class which represents a named unit of work in a build. A task has an
ordered list of prerequisites (the names of other tasks) and an ordered list of actions that run once all
prerequisites have been invoked. """

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING, Any, Callable, Iterable, List, Optional

from typing_extensions import TypeAlias

if TYPE_CHECKING:
    from rakish.core.context import ExecutionContext

#: An action is called with the execution context of the current build.
Action: TypeAlias = Callable[["ExecutionContext"], Any]


@dataclasses.dataclass
class Task:
    """Represents a logical unit of work."""

    name: str
    comment: Optional[str] = None
    prerequisites: List[str] = dataclasses.field(default_factory=list)
    actions: List[Action] = dataclasses.field(default_factory=list)

    #: Set the first time the task is invoked. A task is never executed twice in the same build.
    invoked: bool = False

    def __repr__(self) -> str:
        return f"Task({self.name})"

    def add_comment(self, comment: str | None) -> None:
        """Attach *comment* unless the task already carries one."""

        if comment and self.comment is None:
            self.comment = comment

    def enhance(self, prerequisites: Iterable[str] = (), action: Action | None = None) -> Task:
        """Append *prerequisites* and, if given, *action*. Does not reset the :attr:`invoked` flag."""

        self.prerequisites.extend(str(name) for name in prerequisites)
        if action is not None:
            if not callable(action):
                raise TypeError(f"action must be callable, got {type(action).__name__}")
            self.actions.append(action)
        return self
