from __future__ import annotations

import logging
import os
import re
from typing import Iterable, Iterator, List, Pattern

from networkx import DiGraph, descendants, find_cycle, strongly_connected_components

from rakish.core.context import ExecutionContext
from rakish.core.exceptions import RakishError, TaskActionError, TaskNotFound
from rakish.core.task import Action, Task

logger = logging.getLogger(__name__)


class TaskGraph:
    """The task graph stores all tasks of a build by name and invokes them in dependency order.

    Tasks reference their prerequisites by name, so a prerequisite does not need to exist when it is declared.
    The order in which tasks were first registered is retained and used whenever tasks are listed."""

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}

        # The comment to attach to the next task that gets created.
        self._pending_comment: str | None = None

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, name: str) -> bool:
        return name in self._tasks

    def __iter__(self) -> Iterator[Task]:
        return iter(self._tasks.values())

    # Pending comment

    def set_pending_comment(self, comment: str | None) -> None:
        self._pending_comment = comment

    def take_pending_comment(self) -> str | None:
        """Returns the pending comment and clears it."""

        comment, self._pending_comment = self._pending_comment, None
        return comment

    # Lookup and creation

    def lookup(self, name: str) -> Task | None:
        return self._tasks.get(name)

    def intern(self, name: str) -> Task:
        """Returns the task named *name*. If it does not exist, it is created and receives the pending comment."""

        task = self._tasks.get(name)
        if task is None:
            task = Task(name, comment=self.take_pending_comment())
            self._tasks[name] = task
            logger.debug("created task %r", name)
        return task

    def define(self, name: str, prerequisites: Iterable[str] = (), action: Action | None = None) -> Task:
        """Declares a task. Declaring a task that already exists merges the prerequisites and action into it. The
        pending comment is always consumed, but it only attaches to a task that has no comment yet."""

        task = self.intern(name)
        task.add_comment(self.take_pending_comment())
        return self.enhance(task, prerequisites, action)

    def enhance(self, task: Task, prerequisites: Iterable[str] = (), action: Action | None = None) -> Task:
        return task.enhance(prerequisites, action)

    # Invocation

    def invoke(self, name: str, context: ExecutionContext) -> None:
        """Invoke the task named *name*: its prerequisites are invoked in declaration order, then its actions
        are executed. A task that was invoked before is not invoked again, which also breaks dependency cycles.

        :raise TaskNotFound: If no task named *name* exists and *name* is not an existing file.
        :raise TaskActionError: If an action raised an exception.
        """

        task = self._tasks.get(name)
        if task is not None:
            self._invoke_task(task, context)
        elif os.path.exists(name):
            logger.debug("requested task %r is an existing file", name)
        else:
            raise TaskNotFound(name)

    def _invoke_task(self, task: Task, context: ExecutionContext) -> None:
        if context.trace:
            context.narrate(f"** Invoke {task.name}" + ("" if task.invoked else " (first_time)"))
        if task.invoked:
            return
        task.invoked = True

        for name in task.prerequisites:
            prerequisite = self._tasks.get(name)
            if prerequisite is not None:
                self._invoke_task(prerequisite, context)
            elif os.path.exists(name):
                logger.debug("prerequisite %r of task %r is an existing file", name, task.name)
            else:
                raise TaskNotFound(name)

        self._execute_task(task, context)

    def _execute_task(self, task: Task, context: ExecutionContext) -> None:
        if context.dryrun:
            context.narrate(f"** Execute (dry run) {task.name}")
            return
        if context.trace:
            context.narrate(f"** Execute {task.name}")

        for action in task.actions:
            try:
                action(context)
            except RakishError:
                raise
            except Exception as exc:
                raise TaskActionError(task.name, exc) from exc

    # Inspection

    def tasks_matching(self, pattern: Pattern[str] | str | None = None) -> List[Task]:
        """Returns all tasks whose name matches *pattern* in the order they were registered."""

        if pattern is None:
            return list(self._tasks.values())
        if isinstance(pattern, str):
            pattern = re.compile(pattern)
        return [task for task in self._tasks.values() if pattern.search(task.name)]

    def prerequisite_tree(self, name: str, indent: str = "    ") -> List[str]:
        """Returns the lines of the prerequisite tree of the task named *name*. The first line is the name of the
        task, every following line is a prerequisite indented once per level. A task that is already being
        rendered further up in the same branch is listed but not expanded again."""

        lines: list[str] = []
        active: set[str] = set()

        def _render(name: str, depth: int) -> None:
            lines.append(indent * depth + name)
            task = self._tasks.get(name)
            if task is None or name in active:
                return
            active.add(name)
            for prerequisite in task.prerequisites:
                _render(prerequisite, depth + 1)
            active.discard(name)

        _render(name, 0)
        return lines

    def to_digraph(self) -> DiGraph:
        """Returns a :class:`networkx.DiGraph` with an edge from every task to each of its registered
        prerequisites."""

        digraph = DiGraph()
        for task in self._tasks.values():
            digraph.add_node(task.name, data=task)
        for task in self._tasks.values():
            for name in task.prerequisites:
                if name in self._tasks:
                    digraph.add_edge(task.name, name)
        return digraph

    def find_cycles(self, roots: Iterable[str] | None = None) -> List[List[str]]:
        """Returns one example cycle for every group of registered tasks that depend on each other. Each cycle
        starts and ends with the same name. If *roots* is given, only tasks reachable from these are considered.

        Individual cycles are not enumerated, their number can grow exponentially with the number of tasks."""

        digraph = self.to_digraph()
        if roots is not None:
            reachable: set[str] = set()
            for root in roots:
                if root in digraph:
                    reachable.add(root)
                    reachable.update(descendants(digraph, root))
            digraph = digraph.subgraph(reachable)

        cycles = []
        for component in strongly_connected_components(digraph):
            start = min(component)
            if len(component) == 1 and not digraph.has_edge(start, start):
                continue
            edges = find_cycle(digraph.subgraph(component), source=start)
            cycles.append([edges[0][0]] + [target for _source, target in edges])
        return sorted(cycles)
