"""
Timeline Orchestrator - top-level controller of a dependency timeline

Every task of the current snapshot is in one of three display states:

    Hidden          not started yet, or some ancestor is not expanded
    RenderedAsItem  drawn as a single item on the timeline
    Expanded        replaced by its sub-tasks and a hierarchy container

The orchestrator owns the expansion state and the item collection. It feeds
change-sets computed by the Diff Engine to the Arrow, Hierarchy and
Grouping engines, restricted to the tasks that are actually visible, and
re-derives the visible forest on every clock tick.

All work happens synchronously inside one external event (a view event, a
bus event or a direct call); the view is redrawn once at the end of each
public operation.
"""

import time
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Union

from timeline_dep_graph.config.timeline_config import TimelineConfig
from timeline_dep_graph.core.arrow_service import ArrowService
from timeline_dep_graph.core.diff import get_dependency_changes
from timeline_dep_graph.core.event_bus import EventBus
from timeline_dep_graph.core.grouping_service import GroupingService
from timeline_dep_graph.core.hierarchy_service import HierarchyService
from timeline_dep_graph.core.position_service import PositionService
from timeline_dep_graph.core.time_tooltip import TimeTooltipService
from timeline_dep_graph.models.changes import DependencyChanges
from timeline_dep_graph.models.forest import TaskForest
from timeline_dep_graph.models.item import (
    ItemData,
    add_highlight,
    map_to_item,
    remove_highlight,
    set_items_groups,
)
from timeline_dep_graph.models.messages import (
    COMPRESS_REQUESTED,
    FOCUS_CHANGED,
    GROUPING_CHANGED,
    TASK_OUT,
    TASK_OVER,
    TASK_SELECTED,
    TimelineEvent,
    create_timeline_event,
)
from timeline_dep_graph.models.task import Task, TaskId, patch_and_filter_tasks
from timeline_dep_graph.utils.logger import get_logger
from timeline_dep_graph.utils.validation import validate_forest
from timeline_dep_graph.view.base import TimelineView

logger = get_logger(__name__)

TaskRef = Union[Task, TaskId]

SOURCE = "timeline_orchestrator"


class TimelineOrchestrator:
    """
    Drives one timeline instance.

    Usage:
        view = MemoryTimelineView()
        timeline = TimelineOrchestrator(view, tasks=forest)
        timeline.mount()

        timeline.event_bus.subscribe(TASK_SELECTED, on_selected)
        timeline.expand_task("3")
        timeline.set_focus_task("3B")
    """

    def __init__(
        self,
        view: TimelineView,
        tasks: Optional[List[Task]] = None,
        config: Optional[TimelineConfig] = None,
        event_bus: Optional[EventBus] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        """
        Args:
            view: The visualization collaborator to render into
            tasks: Initial forest snapshot
            config: Geometry and navigation settings
            event_bus: Bus for interaction and output events (a private one by default)
            clock: Source of "now" for temporal filtering
        """
        self.view = view
        self.config = config or TimelineConfig()
        self.event_bus = event_bus or EventBus()
        self._clock = clock

        self.tasks: List[Task] = list(tasks or [])
        self._filtered: List[Task] = []
        self._forest = TaskForest()
        self._expanded: Dict[TaskId, Task] = {}
        self.is_grouped = False
        self.focus_task_id: Optional[TaskId] = None
        self._mounted = False
        self._subscriptions: List[str] = []

        self.position_service = PositionService(config=self.config)
        self.arrow_service = ArrowService(self.position_service, config=self.config)
        self.hierarchy_service = HierarchyService(
            self.position_service, self.event_bus, config=self.config
        )
        self.grouping_service = GroupingService(config=self.config)
        self.time_tooltip_service = TimeTooltipService()

    # ========================================================================
    # LIFECYCLE
    # ========================================================================

    def mount(self) -> None:
        """Attach the engines to the view and render the initial snapshot."""
        if self._mounted:
            return

        self._filtered = patch_and_filter_tasks(self.tasks, self._clock())
        self._set_forest(self._filtered)

        self.arrow_service.set_view(self.view)
        self.time_tooltip_service.set_view(self.view)
        self.hierarchy_service.set_view(self.view)
        self.position_service.set_view(self.view)
        self.grouping_service.set_view(self.view)

        self._update_dep_graph(DependencyChanges(add=list(self._filtered)))
        if self.is_grouped:
            self.grouping_service.group_tasks()
        self.view.fit()

        self.view.on("click", self._on_click)
        self.view.on("item_over", self._on_item_over)
        self.view.on("item_out", self._on_item_out)
        self.view.on("current_time_tick", self._on_time_tick)
        self._subscriptions.append(self.event_bus.subscribe(
            COMPRESS_REQUESTED, self._on_compress_requested, subscriber_name=SOURCE
        ))
        self._mounted = True

        logger.info(
            f"Timeline mounted with {len(self._filtered)} visible root task(s)",
            extra={"tasks": len(self._forest)}
        )

        if self.focus_task_id is not None:
            focus, self.focus_task_id = self.focus_task_id, None
            self.set_focus_task(focus)

    def destroy(self) -> None:
        if not self._mounted:
            return
        self.view.off("click", self._on_click)
        self.view.off("item_over", self._on_item_over)
        self.view.off("item_out", self._on_item_out)
        self.view.off("current_time_tick", self._on_time_tick)
        for subscription_id in self._subscriptions:
            self.event_bus.unsubscribe(subscription_id)
        self._subscriptions.clear()

        self.time_tooltip_service.destroy()
        self.hierarchy_service.destroy()
        self.arrow_service.destroy()
        self.grouping_service.destroy()
        self._mounted = False
        logger.info("Timeline destroyed")

    @property
    def mounted(self) -> bool:
        return self._mounted

    # ========================================================================
    # SNAPSHOTS AND CLOCK
    # ========================================================================

    def set_tasks(self, tasks: List[Task], validate: bool = False) -> None:
        """
        Replace the forest snapshot and apply only what changed.

        Args:
            tasks: The new forest
            validate: Reject invalid forests (duplicate ids, cycles...) with a
                ValidationError instead of rendering them
        """
        if validate:
            validate_forest(tasks, strict=True)

        was_empty = len(self.tasks) == 0
        self.tasks = list(tasks)
        if not self._mounted:
            return

        started = time.perf_counter()
        changes = self._refilter(self._clock())
        if was_empty and self.tasks:
            self.view.fit()
        else:
            self.view.redraw()

        logger.info("Snapshot applied", extra=changes.summary())
        logger.log_performance("set_tasks", time.perf_counter() - started)

    def on_time_tick(self, now: Optional[datetime] = None) -> DependencyChanges:
        """
        Re-derive the visible forest as of now and apply the difference.

        Returns:
            The visible change-set that was applied
        """
        if not self._mounted:
            return DependencyChanges()
        changes = self._refilter(now or self._clock())
        self.view.redraw()
        return changes

    def _refilter(self, now: datetime) -> DependencyChanges:
        previous_forest = self._forest
        filtered = patch_and_filter_tasks(self.tasks, now)
        changes = get_dependency_changes(self._filtered, filtered)
        self._filtered = filtered
        self._set_forest(filtered)

        visible = DependencyChanges(
            add=[t for t in changes.add if self._is_visible(t.id, self._forest)],
            remove=[t for t in changes.remove if self._is_visible(t.id, previous_forest)],
            update=[t for t in changes.update if self._is_visible(t.id, self._forest)],
        )
        if not visible.is_empty():
            logger.debug("Visible changes", extra=visible.summary())
        self._update_dep_graph(visible)
        return visible

    def _set_forest(self, tasks: List[Task]) -> None:
        self._forest = TaskForest(tasks)
        self.position_service.set_tasks(tasks)

    def _is_visible(self, task_id: TaskId, forest: TaskForest) -> bool:
        parent = forest.parent_of(task_id)
        return parent is None or parent.id in self._expanded

    # ========================================================================
    # EXPAND / COMPRESS
    # ========================================================================

    def expand_task(self, task: TaskRef) -> None:
        """Show a task as its sub-tasks, expanding collapsed ancestors first."""
        resolved = self._resolve(task)
        if resolved is None:
            return
        self._expand(resolved)
        self.view.redraw()

    def compress_task(self, task: TaskRef) -> None:
        """Collapse a task back into one item, compressing expanded descendants first."""
        resolved = self._resolve(task)
        if resolved is None:
            resolved = self._expanded.get(task if isinstance(task, str) else task.id)
        if resolved is None:
            return
        self._compress(resolved)
        self.view.redraw()

    def is_expanded(self, task_id: TaskId) -> bool:
        return task_id in self._expanded

    def expanded_ids(self) -> List[TaskId]:
        return list(self._expanded)

    def _expand(self, task: Task) -> None:
        if task.id in self._expanded:
            return
        parent = self._forest.parent_of(task.id)
        if parent is not None and parent.id not in self._expanded:
            self._expand(parent)

        if not task.sub_tasks:
            return

        self._update_dep_graph(DependencyChanges(add=list(task.sub_tasks)))
        self.arrow_service.set_expanded_task_dependencies(task)
        self._update_items(DependencyChanges(remove=[task]))
        self.hierarchy_service.add_element(task)
        self._expanded[task.id] = task
        logger.info(f"Task expanded: {task.id}", extra={"sub_tasks": [t.id for t in task.sub_tasks]})

    def _compress(self, task: Task) -> None:
        stored = self._expanded.get(task.id)
        if stored is None:
            return
        for sub in stored.sub_tasks:
            self._compress(sub)

        self.arrow_service.set_compressed_task_dependencies(stored)
        self._update_dep_graph(DependencyChanges(remove=list(stored.sub_tasks)))
        self._update_items(DependencyChanges(add=[self._forest.get(task.id) or stored]))
        self.hierarchy_service.remove_element(task.id)
        del self._expanded[task.id]
        logger.info(f"Task compressed: {task.id}")

    # ========================================================================
    # GROUPING AND FOCUS
    # ========================================================================

    def set_is_grouped(self, grouped: bool) -> None:
        self.is_grouped = grouped
        if not self._mounted:
            return
        items = self.view.items()
        set_items_groups(items, grouped, self.config.ungrouped_lane)
        for item in list(items.values()):
            self.view.update_item(item)

        if grouped:
            self.grouping_service.group_tasks()
        else:
            self.grouping_service.ungroup_tasks()

        self.event_bus.publish(create_timeline_event(
            GROUPING_CHANGED, source=SOURCE, payload={"grouped": grouped}
        ))
        self.view.redraw()

    def set_focus_task(self, task_id: Optional[TaskId]) -> None:
        """
        Make a task the rendered unit, center the window on it and highlight it.

        The previous focus only loses its highlight; its expansion state is
        left as it is.
        """
        previous = self.focus_task_id
        self.focus_task_id = task_id
        if not self._mounted:
            return

        if previous is not None:
            item = self.view.get_item(previous)
            if item is not None:
                self.view.update_item(remove_highlight(item.copy()))

        if task_id is not None:
            self._focus_on(task_id)

        self.event_bus.publish(create_timeline_event(
            FOCUS_CHANGED, source=SOURCE, task_id=task_id, payload={"previous": previous}
        ))
        self.view.redraw()

    def _focus_on(self, task_id: TaskId) -> None:
        task = self._forest.get(task_id)
        if task is None or task.start_time is None or task.finish_time is None:
            logger.debug(f"Focus target {task_id} is not visible")
            return

        self._compress(task)
        parent = self._forest.parent_of(task.id)
        if parent is not None:
            self._expand(parent)

        margin = timedelta(seconds=self.config.focus_margin_seconds)
        self.view.set_window(task.start_time - margin, task.finish_time + margin)

        item = self.view.get_item(task_id)
        if item is not None:
            self.view.update_item(add_highlight(item.copy()))
        logger.info(f"Focused on task {task_id}")

    # ========================================================================
    # ITEMS
    # ========================================================================

    @property
    def items(self) -> Dict[str, ItemData]:
        return self.view.items()

    def _update_dep_graph(self, changes: DependencyChanges) -> None:
        self._update_items(changes)
        self.arrow_service.update_dependencies(changes)

    def _update_items(self, changes: DependencyChanges) -> None:
        self.grouping_service.add_groups(changes.add + changes.update)

        for task in changes.add:
            self.view.add_item(self._map_to_item(task))

        for task in changes.update:
            if task.id in self._expanded:
                if not task.sub_tasks:
                    self._compress(task)
                else:
                    self._expanded[task.id] = task
                    self.hierarchy_service.update_element(task)
            else:
                self.view.update_item(self._map_to_item(task))

        for task in changes.remove:
            if task.id in self._expanded:
                self._compress(task)
            self.view.remove_item(task.id)

    def _map_to_item(self, task: Task) -> ItemData:
        item = map_to_item(task, self.is_grouped, self.config.ungrouped_lane)
        if task.id == self.focus_task_id:
            add_highlight(item)
        return item

    def _resolve(self, task: TaskRef) -> Optional[Task]:
        task_id = task if isinstance(task, str) else task.id
        return self._forest.get(task_id)

    # ========================================================================
    # EVENT HANDLERS
    # ========================================================================

    def _on_click(self, props) -> None:
        item_id = props.get("item")
        if not item_id:
            return
        if props.get("region", "bar") == "name":
            self.event_bus.publish(create_timeline_event(TASK_SELECTED, source=SOURCE, task_id=item_id))
            return
        task = self._forest.get(item_id)
        if task is not None:
            self.expand_task(task)

    def _on_item_over(self, props) -> None:
        item_id = props.get("item")
        if item_id:
            self.event_bus.publish(create_timeline_event(TASK_OVER, source=SOURCE, task_id=item_id))

    def _on_item_out(self, props) -> None:
        item_id = props.get("item")
        if item_id:
            self.event_bus.publish(create_timeline_event(TASK_OUT, source=SOURCE, task_id=item_id))

    def _on_time_tick(self, props) -> None:
        self.on_time_tick(props.get("time"))

    def _on_compress_requested(self, event: TimelineEvent) -> None:
        task_id = event.get("task_id")
        if task_id:
            self.compress_task(task_id)
