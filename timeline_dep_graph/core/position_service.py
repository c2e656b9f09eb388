"""
Position Service - absolute geometry of tasks on the timeline canvas

The view reports item layout relative to the item's lane. Arrows and
hierarchy containers are drawn on a canvas that spans the whole timeline,
so every position is converted into that shared frame first. A task that
has no rendered item of its own (it is expanded) is represented by the
bounding box of its sub-tasks' positions.
"""

from typing import List, Optional

from timeline_dep_graph.config.timeline_config import TimelineConfig
from timeline_dep_graph.models.forest import TaskForest
from timeline_dep_graph.models.geometry import AbsolutePosition, RelativePosition
from timeline_dep_graph.models.task import Task, TaskId
from timeline_dep_graph.utils.exceptions import ViewNotAttachedError
from timeline_dep_graph.utils.logger import get_logger
from timeline_dep_graph.view.base import TimelineView

logger = get_logger(__name__)


# ============================================================================
# GEOMETRY FUNCTIONS
# ============================================================================

def get_absolute_position(
    relative: RelativePosition,
    parent_height: float,
    container_height: float
) -> AbsolutePosition:
    """
    Convert a view-reported position into the canvas frame.

    The vertical axis is flipped inside the lane and shifted by the space
    the canvas reserves outside the item area.

    Args:
        relative: The relative position to be converted
        parent_height: Height of the item area
        container_height: Height of the canvas

    Returns:
        The absolute position; horizontal fields are None when relative.left is
    """
    offset = container_height - parent_height
    top = (
        relative.parent.top + relative.parent.height
        - relative.top - relative.height + offset
    )
    left = relative.left
    return AbsolutePosition(
        left=left,
        top=top,
        right=left + relative.width if left is not None else None,
        bottom=top + relative.height,
        mid_x=left + relative.width / 2 if left is not None else None,
        mid_y=top + relative.height / 2,
        width=relative.width,
        height=relative.height,
    )


def get_bounding_box(positions: List[AbsolutePosition]) -> Optional[AbsolutePosition]:
    """
    Compute the minimum bounding box containing all the provided positions.

    Horizontal extremes are taken over the positions that are resolved
    horizontally; if none is, the box's horizontal fields are None.

    Returns:
        The bounding box, or None for an empty list
    """
    if not positions:
        return None

    top = min(p.top for p in positions)
    bottom = max(p.bottom for p in positions)

    resolved = [p for p in positions if p.horizontally_resolved]
    if resolved:
        left = min(p.left for p in resolved)
        right = max(p.right for p in resolved)
        mid_x = left + (right - left) / 2
        width = right - left
    else:
        left = right = mid_x = None
        width = max(p.width for p in positions)

    return AbsolutePosition(
        left=left,
        top=top,
        right=right,
        bottom=bottom,
        mid_x=mid_x,
        mid_y=top + (bottom - top) / 2,
        width=width,
        height=bottom - top,
    )


def add_top_padding(bbox: AbsolutePosition, amount: float) -> None:
    """Grow the box upwards by amount pixels, in place."""
    bbox.top -= amount
    bbox.height += amount


def add_bottom_padding(bbox: AbsolutePosition, amount: float) -> None:
    """Grow the box downwards by amount pixels, in place."""
    bbox.bottom += amount
    bbox.height += amount


def add_padding(bbox: AbsolutePosition, amount: float) -> None:
    add_top_padding(bbox, amount)
    add_bottom_padding(bbox, amount)


def is_valid_absolute_position(position: Optional[AbsolutePosition]) -> bool:
    """
    Check that every field of the position holds a usable value.

    Zero counts as unusable: a degenerate box is never drawn.
    """
    if position is None:
        return False
    values = (
        position.left, position.top, position.right, position.bottom,
        position.mid_x, position.mid_y, position.width, position.height,
    )
    return all(v is not None and v == v and v != 0 for v in values)


# ============================================================================
# POSITION SERVICE
# ============================================================================

class PositionService:
    """Resolves task positions against the current forest and view layout."""

    def __init__(self, view: Optional[TimelineView] = None, config: Optional[TimelineConfig] = None):
        self._view = view
        self.config = config or TimelineConfig()
        self._forest = TaskForest()

    def set_view(self, view: TimelineView) -> None:
        self._view = view

    def set_tasks(self, tasks: List[Task]) -> None:
        self._forest = TaskForest(tasks)

    @property
    def forest(self) -> TaskForest:
        return self._forest

    def get_task_position(self, task: Task) -> Optional[AbsolutePosition]:
        """
        Absolute position of a task.

        A task with a rendered item uses the item's layout; any other task
        falls back to the bounding box of its sub-tasks.
        """
        view = self._require_view()
        relative = view.get_item_position(task.id)
        if relative is not None:
            return get_absolute_position(relative, view.center_height(), view.container_height())
        return self._get_tasks_bounding_box(task.sub_tasks)

    def get_task_position_by_id(self, task_id: TaskId) -> Optional[AbsolutePosition]:
        task = self._forest.get(task_id)
        if task is None:
            return None
        return self.get_task_position(task)

    def has_rendered_item(self, task_id: TaskId) -> bool:
        return self._require_view().get_item_position(task_id) is not None

    def _get_tasks_bounding_box(self, tasks: List[Task]) -> Optional[AbsolutePosition]:
        boxes = []
        for task in tasks:
            position = self.get_task_position(task)
            if position is None:
                continue
            if not self.has_rendered_item(task.id):
                # Room for the nested task's label
                add_top_padding(position, self.config.nested_label_padding)
            boxes.append(position)
        return get_bounding_box(boxes)

    def _require_view(self) -> TimelineView:
        if self._view is None:
            raise ViewNotAttachedError("PositionService")
        return self._view
