"""
Hierarchy Service - containers drawn around expanded tasks

An expanded task has no item of its own. It is drawn as a rounded container
around the bounding box of its sub-tasks, with the task name as a bold label
on top. Interaction with the container is reported on the event bus:

    container click      -> compress_requested
    container mouseover  -> task_over
    container mouseout   -> task_out
    label click          -> task_selected
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from timeline_dep_graph.config.timeline_config import TimelineConfig
from timeline_dep_graph.core.event_bus import EventBus
from timeline_dep_graph.core.position_service import (
    PositionService,
    add_padding,
    add_top_padding,
    is_valid_absolute_position,
)
from timeline_dep_graph.models.geometry import AbsolutePosition
from timeline_dep_graph.models.messages import (
    COMPRESS_REQUESTED,
    TASK_OUT,
    TASK_OVER,
    TASK_SELECTED,
    create_timeline_event,
)
from timeline_dep_graph.models.task import Task, TaskId
from timeline_dep_graph.utils.exceptions import ViewNotAttachedError
from timeline_dep_graph.utils.logger import get_logger
from timeline_dep_graph.view.base import HIERARCHY_LAYER, Shape, TimelineView

logger = get_logger(__name__)

CONTAINER_PREFIX = "tdg-expanded-"
LABEL_PREFIX = "tdg-expanded-task-name-"


@dataclass
class HierarchyElement:
    task_id: TaskId
    container: Shape
    task_name: Shape


class HierarchyService:
    """Owns the container and label shapes of every expanded task."""

    def __init__(
        self,
        position_service: PositionService,
        event_bus: EventBus,
        view: Optional[TimelineView] = None,
        config: Optional[TimelineConfig] = None
    ):
        self.position_service = position_service
        self.event_bus = event_bus
        self.config = config or TimelineConfig()
        self._view: Optional[TimelineView] = None
        self._elements: Dict[TaskId, HierarchyElement] = {}
        self._pending: Dict[TaskId, Task] = {}
        if view is not None:
            self.set_view(view)

    def set_view(self, view: TimelineView) -> None:
        self._view = view
        view.on("changed", self._on_changed)

    def destroy(self) -> None:
        if self._view is None:
            return
        self._view.off("changed", self._on_changed)
        for task_id in list(self._elements):
            self.remove_element(task_id)
        self._pending.clear()

    def _on_changed(self, _props) -> None:
        self.update_positions()

    # ========================================================================
    # ELEMENTS
    # ========================================================================

    def add_element(self, task: Task) -> None:
        """
        Draw the container of an expanded task.

        When the sub-tasks are not laid out yet the task is parked and the
        container is created on a later layout change.
        """
        if not task.sub_tasks or task.id in self._elements:
            return
        bbox = self.position_service.get_task_position(task)
        if bbox is None:
            logger.debug(f"Hierarchy element for {task.id} deferred: no layout yet")
            self._pending[task.id] = task
            return
        self._pending.pop(task.id, None)

        view = self._require_view()
        container = view.create_shape(HIERARCHY_LAYER, "rect", f"{CONTAINER_PREFIX}{task.id}")
        container.set_attribute("rx", 5)
        container.set_attribute("ry", 5)
        _set_container_status(container, task)
        container.add_listener("click", self._publisher(COMPRESS_REQUESTED, CONTAINER_PREFIX))
        container.add_listener("mouseover", self._publisher(TASK_OVER, CONTAINER_PREFIX))
        container.add_listener("mouseout", self._publisher(TASK_OUT, CONTAINER_PREFIX))

        task_name = view.create_shape(HIERARCHY_LAYER, "text", f"{LABEL_PREFIX}{task.id}")
        task_name.text = task.name
        task_name.set_attribute("font-weight", "bold")
        task_name.add_listener("click", self._publisher(TASK_SELECTED, LABEL_PREFIX))

        self._set_coordinates(container, task_name, bbox)
        self._elements[task.id] = HierarchyElement(task.id, container, task_name)
        logger.debug(f"Hierarchy element added for {task.id}")

    def remove_element(self, task_id: TaskId) -> None:
        self._pending.pop(task_id, None)
        element = self._elements.pop(task_id, None)
        if element is None:
            return
        view = self._require_view()
        view.remove_shape(element.container)
        view.remove_shape(element.task_name)
        logger.debug(f"Hierarchy element removed for {task_id}")

    def update_element(self, task: Task) -> None:
        """Refresh position, status styling and label of an existing container."""
        if task.id in self._pending:
            self._pending[task.id] = task
            return
        element = self._elements.get(task.id)
        if element is None:
            return
        self._update_position(element)
        _set_container_status(element.container, task)
        element.task_name.text = task.name

    def has_element(self, task_id: TaskId) -> bool:
        return task_id in self._elements

    def is_expanded(self, task_id: TaskId) -> bool:
        """Whether a container exists or is waiting for layout."""
        return task_id in self._elements or task_id in self._pending

    def element_ids(self) -> List[TaskId]:
        return list(self._elements)

    def get_element(self, task_id: TaskId) -> Optional[HierarchyElement]:
        return self._elements.get(task_id)

    # ========================================================================
    # POSITIONS
    # ========================================================================

    def update_positions(self) -> None:
        for task in list(self._pending.values()):
            self.add_element(task)
        for element in self._elements.values():
            self._update_position(element)

    def _update_position(self, element: HierarchyElement) -> None:
        bbox = self.position_service.get_task_position_by_id(element.task_id)
        if bbox is None:
            return
        self._set_coordinates(element.container, element.task_name, bbox)

    def _set_coordinates(self, container: Shape, task_name: Shape, bbox: AbsolutePosition) -> None:
        if not is_valid_absolute_position(bbox):
            return
        add_padding(bbox, self.config.hierarchy_padding)
        container.set_attribute("x", bbox.left)
        container.set_attribute("y", bbox.top)
        container.set_attribute("width", bbox.width)
        container.set_attribute("height", bbox.height)
        add_top_padding(bbox, self.config.hierarchy_padding)
        task_name.set_attribute("x", bbox.left + self.config.label_offset)
        task_name.set_attribute("y", bbox.top)

    # ========================================================================
    # INTERACTION
    # ========================================================================

    def _publisher(self, event_type: str, prefix: str):
        def publish(shape: Shape) -> None:
            task_id = shape.id[len(prefix):]
            self.event_bus.publish(create_timeline_event(
                event_type, source="hierarchy_service", task_id=task_id
            ))
        return publish

    def _require_view(self) -> TimelineView:
        if self._view is None:
            raise ViewNotAttachedError("HierarchyService")
        return self._view


def _set_container_status(container: Shape, task: Task) -> None:
    container.set_classes([f"tdg-{task.status.value}", "tdg-hierarchy", "tdg-pointer"])
