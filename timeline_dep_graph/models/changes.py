"""
Change-set module - the add/remove/update triple produced by the diff engine
"""

from dataclasses import dataclass, field
from typing import Callable, List, Set

from .task import Task, TaskId


@dataclass
class DependencyChanges:
    """
    Changes to apply to the rendered dependency graph.

    Attributes:
        add: Tasks to add to the graph (current snapshot references)
        remove: Tasks to remove from the graph (previous snapshot references)
        update: Tasks whose details changed (current snapshot references)
    """
    add: List[Task] = field(default_factory=list)
    remove: List[Task] = field(default_factory=list)
    update: List[Task] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.add or self.remove or self.update)

    def extend(self, other: "DependencyChanges") -> None:
        self.add.extend(other.add)
        self.remove.extend(other.remove)
        self.update.extend(other.update)

    def filter(self, predicate: Callable[[Task], bool]) -> "DependencyChanges":
        """Return a new change-set keeping only the tasks matching predicate."""
        return DependencyChanges(
            add=[t for t in self.add if predicate(t)],
            remove=[t for t in self.remove if predicate(t)],
            update=[t for t in self.update if predicate(t)],
        )

    def all_ids(self) -> Set[TaskId]:
        return {t.id for t in self.add + self.remove + self.update}

    def summary(self) -> dict:
        return {
            "add": [t.id for t in self.add],
            "remove": [t.id for t in self.remove],
            "update": [t.id for t in self.update],
        }
