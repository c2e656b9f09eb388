"""
Diff Engine - change-sets between two forest snapshots
"""

from typing import Dict, List, Optional

from timeline_dep_graph.models.changes import DependencyChanges
from timeline_dep_graph.models.task import Task, TaskId, equals_task


class _ChangeHolder:
    __slots__ = ("prev", "curr")

    def __init__(self, prev: Optional[Task] = None, curr: Optional[Task] = None):
        self.prev = prev
        self.curr = curr


def get_dependency_changes(prev: List[Task], curr: List[Task]) -> DependencyChanges:
    """
    Compute the changes that bring a rendering of prev in line with curr.

    Tasks only in prev are removed, tasks only in curr are added. A task in
    both that is not equal by value is updated, and its sub-tasks are diffed
    recursively with the results merged into the same change-set. Tasks
    that compare equal are skipped together with their whole sub-forest.

    Args:
        prev: The previous state of the forest
        curr: The current state of the forest

    Returns:
        DependencyChanges whose add/update entries are references from curr
        and whose remove entries are references from prev
    """
    holders: Dict[TaskId, _ChangeHolder] = {}
    for task in prev:
        holders[task.id] = _ChangeHolder(prev=task)
    for task in curr:
        holder = holders.get(task.id)
        if holder is None:
            holders[task.id] = _ChangeHolder(curr=task)
        else:
            holder.curr = task

    changes = DependencyChanges()
    for holder in holders.values():
        if holder.curr is None:
            changes.remove.append(holder.prev)
        elif holder.prev is None:
            changes.add.append(holder.curr)
        elif not equals_task(holder.prev, holder.curr):
            changes.update.append(holder.curr)
            changes.extend(get_dependency_changes(holder.prev.sub_tasks, holder.curr.sub_tasks))
    return changes
