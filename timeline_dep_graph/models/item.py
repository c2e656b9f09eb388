"""
Item module - flat rendered representation of a visible task
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Dict, Optional, Set

from .enums import Status
from .task import Task

UNGROUPED_LANE = "unGrouped"
HIGHLIGHT_CLASS = "highlighted"


@dataclass
class ItemData:
    """The data of one timeline item, as handed to the view."""
    id: str
    name: str
    status: Status
    content: str
    start: Optional[datetime]
    end: Optional[datetime]
    class_name: str
    expandable: bool
    group: str

    def copy(self) -> "ItemData":
        return replace(self)

    @property
    def highlighted(self) -> bool:
        return HIGHLIGHT_CLASS in self.class_name.split()


def map_to_item(task: Task, is_grouped: bool, ungrouped_lane: str = UNGROUPED_LANE) -> ItemData:
    """
    Args:
        task: The task to be mapped into an item
        is_grouped: Whether the items are grouped by status
        ungrouped_lane: Lane id used when not grouped

    Returns:
        The item data corresponding to the task fields
    """
    class_name = "transparent"
    if task.sub_tasks:
        class_name += " tdg-pointer"
    return ItemData(
        id=task.id,
        name=task.name,
        status=task.status,
        content=task.name,
        start=task.start_time,
        end=task.finish_time,
        class_name=class_name,
        expandable=task.is_expandable,
        group=task.status.value if is_grouped else ungrouped_lane,
    )


def set_items_groups(
    items: Dict[str, ItemData], is_grouped: bool, ungrouped_lane: str = UNGROUPED_LANE
) -> None:
    """Reassign every item's lane in place."""
    for item in items.values():
        item.group = item.status.value if is_grouped else ungrouped_lane


def get_used_status_set(items: Dict[str, ItemData]) -> Set[Status]:
    return {item.status for item in items.values()}


def add_highlight(item: ItemData) -> ItemData:
    if not item.highlighted:
        item.class_name = f"{item.class_name} {HIGHLIGHT_CLASS}"
    return item


def remove_highlight(item: ItemData) -> ItemData:
    item.class_name = " ".join(c for c in item.class_name.split() if c != HIGHLIGHT_CLASS)
    return item


@dataclass
class Group:
    """A lane of the timeline, as handed to the view."""
    id: str
    content: str
    style: str
