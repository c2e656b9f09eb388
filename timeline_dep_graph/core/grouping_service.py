"""
Grouping Service - status lanes of the timeline
"""

from typing import Iterable, List, Optional, Set

from timeline_dep_graph.config.timeline_config import TimelineConfig
from timeline_dep_graph.models.enums import Status
from timeline_dep_graph.models.item import Group, get_used_status_set
from timeline_dep_graph.models.task import Task
from timeline_dep_graph.utils.exceptions import ViewNotAttachedError
from timeline_dep_graph.utils.logger import get_logger
from timeline_dep_graph.view.base import TimelineView

logger = get_logger(__name__)

PADDING_PREFIX = "tdg-group-padding-"


def grouped_lanes(statuses: Set[Status]) -> List[Group]:
    """
    A padding lane followed by a labelled lane for each used status.

    Lanes follow Status priority order; unused statuses get no lanes.
    """
    groups: List[Group] = []
    for status in Status.ordered():
        if status not in statuses:
            continue
        groups.append(Group(
            id=f"{PADDING_PREFIX}{status.value}",
            content="<br>",
            style="border: 1px solid transparent;",
        ))
        groups.append(Group(
            id=status.value,
            content=status.value,
            style="text-transform: capitalize;",
        ))
    return groups


def ungrouped_lanes(lane_id: str) -> List[Group]:
    return [
        Group(
            id=f"{PADDING_PREFIX}{lane_id}",
            content="<br>",
            style="border: 1px solid transparent;width: 0px;",
        ),
        Group(id=lane_id, content="<br>", style="width: 0px;"),
    ]


class GroupingService:
    """Tracks the statuses in use and pushes the matching lanes to the view."""

    def __init__(self, view: Optional[TimelineView] = None, config: Optional[TimelineConfig] = None):
        self.config = config or TimelineConfig()
        self._view: Optional[TimelineView] = None
        self.is_grouped = False
        self.status_set: Set[Status] = set()
        if view is not None:
            self.set_view(view)

    def set_view(self, view: TimelineView) -> None:
        self._view = view
        self.ungroup_tasks()
        view.on("changed", self._on_changed)

    def destroy(self) -> None:
        if self._view is not None:
            self._view.off("changed", self._on_changed)

    def _on_changed(self, _props) -> None:
        self.on_visible_set_changed(get_used_status_set(self._require_view().items()))

    def group_tasks(self) -> List[Group]:
        self.is_grouped = True
        groups = grouped_lanes(self.status_set)
        self._require_view().set_groups(groups)
        logger.debug(f"Grouped lanes set: {[g.id for g in groups]}")
        return groups

    def ungroup_tasks(self) -> List[Group]:
        self.is_grouped = False
        groups = ungrouped_lanes(self.config.ungrouped_lane)
        self._require_view().set_groups(groups)
        return groups

    def on_visible_set_changed(self, statuses: Set[Status]) -> None:
        if statuses == self.status_set:
            return
        self.status_set = set(statuses)
        if self.is_grouped:
            self.group_tasks()

    def add_groups(self, tasks: Iterable[Task]) -> None:
        """Register the statuses of new or updated tasks; relayout only on a new one."""
        new_group = False
        for task in tasks:
            if task.status not in self.status_set:
                self.status_set.add(task.status)
                new_group = True
        if self.is_grouped and new_group:
            self.group_tasks()

    def _require_view(self) -> TimelineView:
        if self._view is None:
            raise ViewNotAttachedError("GroupingService")
        return self._view
