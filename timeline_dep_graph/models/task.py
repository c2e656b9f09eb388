"""
Task module - the recursive task structure and pure query functions over it

A forest is a plain list of root-level Task values. Every function here is
side-effect free: nothing mutates its input forest.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional, Set

from .enums import Status

TaskId = str


@dataclass(eq=False)
class Task:
    """
    A single node in the dependency graph.

    Attributes:
        id: Unique, stable identifier; cannot be reassigned
        name: Display label
        status: Current status (see Status for priority order)
        dependents: Ids of the tasks this task's completion unblocks
        sub_tasks: Child tasks, owned exclusively by this task
        start_time: When the task started; None means not started
        finish_time: When the task finished; None means still running
    """
    id: TaskId
    name: str
    status: Status = Status.UNKNOWN
    dependents: List[TaskId] = field(default_factory=list)
    sub_tasks: List["Task"] = field(default_factory=list)
    start_time: Optional[datetime] = None
    finish_time: Optional[datetime] = None

    def __post_init__(self):
        if not isinstance(self.status, Status):
            self.status = Status(self.status)

    def __setattr__(self, key: str, value: Any) -> None:
        if key == "id" and "id" in self.__dict__:
            raise AttributeError("Task.id is immutable")
        super().__setattr__(key, value)

    @property
    def is_expandable(self) -> bool:
        return len(self.sub_tasks) > 0

    def clone(self) -> "Task":
        """Deep copy; the clone shares no lists with the original."""
        return Task(
            id=self.id,
            name=self.name,
            status=self.status,
            dependents=list(self.dependents),
            sub_tasks=[t.clone() for t in self.sub_tasks],
            start_time=self.start_time,
            finish_time=self.finish_time,
        )

    def walk(self) -> Iterator["Task"]:
        """Yield this task and all of its descendants, depth first."""
        yield self
        for sub in self.sub_tasks:
            yield from sub.walk()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status.value,
            "dependents": list(self.dependents),
            "startTime": self.start_time.isoformat() if self.start_time else None,
            "finishTime": self.finish_time.isoformat() if self.finish_time else None,
            "subTasks": [t.to_dict() for t in self.sub_tasks],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        """
        Build a task tree from a dict.

        Accepts camelCase (subTasks, startTime, finishTime) and snake_case keys.
        Timestamps are ISO 8601 strings; a missing value, null or the string
        "undefined" means the timestamp is absent.
        """
        sub_tasks = data.get("subTasks", data.get("sub_tasks", [])) or []
        return cls(
            id=str(data["id"]),
            name=data.get("name", str(data["id"])),
            status=Status(data.get("status", Status.UNKNOWN.value)),
            dependents=[str(d) for d in data.get("dependents", []) or []],
            sub_tasks=[cls.from_dict(sub) for sub in sub_tasks],
            start_time=_parse_time(data.get("startTime", data.get("start_time"))),
            finish_time=_parse_time(data.get("finishTime", data.get("finish_time"))),
        )


def _parse_time(value: Any) -> Optional[datetime]:
    if value is None or value == "undefined" or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def tasks_from_json(text: str) -> List[Task]:
    """Parse a JSON array of task objects into a forest."""
    return [Task.from_dict(item) for item in json.loads(text)]


def tasks_to_json(tasks: List[Task], indent: Optional[int] = 2) -> str:
    return json.dumps([t.to_dict() for t in tasks], indent=indent)


# ============================================================================
# COMPARISON
# ============================================================================

def equal_task_fields(task1: Task, task2: Task) -> bool:
    """
    Checks if the tasks' own fields are equal, ignoring dependents and sub-tasks.

    Timestamps compare by instant; two absent timestamps are equal.
    """
    return (
        task1.id == task2.id
        and task1.name == task2.name
        and task1.status == task2.status
        and task1.start_time == task2.start_time
        and task1.finish_time == task2.finish_time
    )


def equals_task(task1: Task, task2: Task) -> bool:
    """
    Checks if the tasks are equal in value.

    Fields must match, dependents must match as sets and sub-tasks must match
    recursively regardless of their order.
    """
    return (
        equal_task_fields(task1, task2)
        and set(task1.dependents) == set(task2.dependents)
        and equals_task_array(task1.sub_tasks, task2.sub_tasks)
    )


def equals_task_array(arr1: List[Task], arr2: List[Task]) -> bool:
    """Checks if two task lists are equal as multisets keyed by id."""
    if len(arr1) != len(arr2):
        return False

    sorted1 = sorted(arr1, key=lambda t: t.id)
    sorted2 = sorted(arr2, key=lambda t: t.id)
    return all(equals_task(a, b) for a, b in zip(sorted1, sorted2))


# ============================================================================
# GRAPH QUERIES
# ============================================================================

def root_tasks(tasks: List[Task]) -> List[Task]:
    """
    Return the tasks of the given list that no other task depends on.

    A task is a root when no dependency chain starting anywhere in the forest
    reaches it. The traversal is bounded by a visited set, so it terminates on
    cyclic input; tasks on a cycle are never roots.

    Args:
        tasks: Forest representing a directed acyclic graph

    Returns:
        Tasks, in input order, that are not reachable through dependents
    """
    visited: Set[TaskId] = set()
    for task in tasks:
        if task.id not in visited:
            _mark_reachable(tasks, task, visited)
    return [t for t in tasks if t.id not in visited]


def leaf_tasks(tasks: List[Task]) -> List[Task]:
    """Return the tasks that have no dependents at all."""
    return [t for t in tasks if not t.dependents]


def internal_leaf_tasks(tasks: List[Task]) -> List[Task]:
    """
    Return the tasks that no sibling in the list depends on them to unblock.

    Unlike leaf_tasks(), dependents pointing outside the list are ignored, so
    a sub-forest whose tasks all feed an outside task still has leaves.
    """
    ids = {t.id for t in tasks}
    return [t for t in tasks if not any(dep in ids for dep in t.dependents)]


def get_task_by_id(tasks: List[Task], task_id: TaskId) -> Optional[Task]:
    """
    Depth-first search for a task, sub-tasks included.

    Returns:
        The task, or None when no task has this id
    """
    for task in tasks:
        if task.id == task_id:
            return task
        found = get_task_by_id(task.sub_tasks, task_id)
        if found:
            return found
    return None


def get_super_task(tasks: List[Task], task_id: TaskId) -> Optional[Task]:
    """
    Return the direct parent of the task with the given id.

    Returns:
        The parent task, or None for root-level or unknown ids
    """
    for task in tasks:
        for sub in task.sub_tasks:
            if sub.id == task_id:
                return task
        parent = get_super_task(task.sub_tasks, task_id)
        if parent:
            return parent
    return None


def _mark_reachable(tasks: List[Task], start: Task, visited: Set[TaskId]) -> None:
    stack = [start]
    while stack:
        curr = stack.pop()
        for dep in curr.dependents:
            if dep in visited:
                continue
            visited.add(dep)
            dep_task = get_task_by_id(tasks, dep)
            if dep_task:
                stack.append(dep_task)


# ============================================================================
# TEMPORAL FILTERING
# ============================================================================

def patch_and_filter_tasks(tasks: List[Task], curr_time: datetime) -> List[Task]:
    """
    Keep the tasks that started before curr_time and clamp running ones.

    Tasks without a start time, or starting at or after curr_time, are
    dropped together with their sub-tasks. Kept tasks whose finish time is
    absent get finish_time = curr_time. The same filter applies recursively
    to sub-tasks.

    Args:
        tasks: Forest to filter
        curr_time: The "now" the forest is observed at

    Returns:
        A deep-cloned forest; the input is never aliased or mutated
    """
    filtered: List[Task] = []
    for task in tasks:
        if task.start_time is None or task.start_time >= curr_time:
            continue
        filtered.append(Task(
            id=task.id,
            name=task.name,
            status=task.status,
            dependents=list(task.dependents),
            sub_tasks=patch_and_filter_tasks(task.sub_tasks, curr_time),
            start_time=task.start_time,
            finish_time=task.finish_time if task.finish_time is not None else curr_time,
        ))
    return filtered
