"""
TaskForest - id-indexed arena over a task forest

The recursive Task list stays the source of truth; TaskForest adds the index
tables the engines query on every event (id -> task, id -> parent id,
id -> tasks depending on it) so that lookups are O(1) instead of a
depth-first search per call.
"""

from typing import Dict, Iterator, List, Optional

from .task import Task, TaskId


class TaskForest:
    """Read-only index over a forest snapshot."""

    def __init__(self, tasks: Optional[List[Task]] = None):
        self.tasks: List[Task] = list(tasks or [])
        self._by_id: Dict[TaskId, Task] = {}
        self._parent: Dict[TaskId, Optional[TaskId]] = {}
        self._sources: Dict[TaskId, List[TaskId]] = {}

        stack = [(task, None) for task in reversed(self.tasks)]
        while stack:
            task, parent_id = stack.pop()
            # First occurrence wins, matching get_task_by_id's search order.
            if task.id in self._by_id:
                continue
            self._by_id[task.id] = task
            self._parent[task.id] = parent_id
            for dep in task.dependents:
                self._sources.setdefault(dep, []).append(task.id)
            stack.extend((sub, task.id) for sub in reversed(task.sub_tasks))

    def __contains__(self, task_id: TaskId) -> bool:
        return task_id in self._by_id

    def __iter__(self) -> Iterator[Task]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)

    def get(self, task_id: TaskId) -> Optional[Task]:
        return self._by_id.get(task_id)

    def parent_of(self, task_id: TaskId) -> Optional[Task]:
        """Direct parent task, None for root-level or unknown ids."""
        parent_id = self._parent.get(task_id)
        return self._by_id.get(parent_id) if parent_id is not None else None

    def ancestors(self, task_id: TaskId) -> List[Task]:
        """Ancestors from the direct parent up to the root-level task."""
        chain = []
        parent = self.parent_of(task_id)
        while parent is not None:
            chain.append(parent)
            parent = self.parent_of(parent.id)
        return chain

    def is_descendant(self, task_id: TaskId, ancestor_id: TaskId) -> bool:
        return any(a.id == ancestor_id for a in self.ancestors(task_id))

    def dependency_sources(self, task_id: TaskId) -> List[TaskId]:
        """Ids of the tasks listing task_id among their dependents."""
        return list(self._sources.get(task_id, []))

    def roots(self) -> List[Task]:
        """Root-level tasks of the forest (not dependency roots)."""
        return list(self.tasks)
