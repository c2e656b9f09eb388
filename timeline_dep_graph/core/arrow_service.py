"""
Arrow Service - the rendered dependency arrows and their endpoints

Two layers of state are kept:

- logical edges: (task, dependent) pairs taken from Task.dependents for every
  task that has been added to the graph
- rendered arrows: (source, target) pairs between the tasks that currently
  anchor those edges, indexed both by source and by target

An edge is anchored on its own endpoints unless one of them is expanded. An
expanded source hands its outgoing edges to the leaves of its sub-forest and
an expanded target hands its incoming edges to the roots of its sub-forest,
recursively. Several edges may share one arrow; each arrow records the edges
it draws and disappears with the last of them.

Only tasks present in the graph (added and not removed since) anchor
arrows. An edge whose endpoint is absent stays a logical edge with no
arrow until that endpoint is added.

Both arrow indices are only mutated by _index_arrow() and remove_arrow().
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from timeline_dep_graph.config.timeline_config import TimelineConfig
from timeline_dep_graph.core.position_service import PositionService, is_valid_absolute_position
from timeline_dep_graph.models.changes import DependencyChanges
from timeline_dep_graph.models.geometry import AbsolutePosition
from timeline_dep_graph.models.task import Task, TaskId, internal_leaf_tasks, root_tasks
from timeline_dep_graph.utils.exceptions import ViewNotAttachedError
from timeline_dep_graph.utils.logger import get_logger
from timeline_dep_graph.view.base import ARROW_LAYER, Shape, TimelineView, format_number

logger = get_logger(__name__)

Edge = Tuple[TaskId, TaskId]

ARROWHEAD_ID = "arrowhead"


@dataclass
class Arrow:
    """A rendered arrow and the dependency edges it stands for."""
    source_id: TaskId
    target_id: TaskId
    shape: Shape
    edges: Set[Edge] = field(default_factory=set)
    drawn: bool = False


class ArrowService:
    """Maintains the arrow indices and keeps their geometry in sync with the view."""

    def __init__(
        self,
        position_service: PositionService,
        view: Optional[TimelineView] = None,
        config: Optional[TimelineConfig] = None
    ):
        self.position_service = position_service
        self.config = config or TimelineConfig()
        self._view: Optional[TimelineView] = None
        self._marker: Optional[Shape] = None

        self._outgoing: Dict[TaskId, Dict[TaskId, Arrow]] = {}
        self._incoming: Dict[TaskId, Dict[TaskId, Arrow]] = {}

        self._edges: Dict[Edge, Set[Edge]] = {}
        self._edges_by_task: Dict[TaskId, Set[Edge]] = {}

        self._expanded: Dict[TaskId, Task] = {}
        self._present: Set[TaskId] = set()

        if view is not None:
            self.set_view(view)

    # ========================================================================
    # LIFECYCLE
    # ========================================================================

    def set_view(self, view: TimelineView) -> None:
        self._view = view
        self._render_arrowhead()
        view.on("changed", self._on_changed)

    def destroy(self) -> None:
        if self._view is None:
            return
        self._view.off("changed", self._on_changed)
        for source_id, targets in list(self._outgoing.items()):
            for target_id in list(targets):
                self.remove_arrow(source_id, target_id)
        if self._marker is not None:
            self._view.remove_shape(self._marker)
            self._marker = None
        self._edges.clear()
        self._edges_by_task.clear()
        self._expanded.clear()
        self._present.clear()

    def _on_changed(self, _props) -> None:
        self.update_arrows_coordinates()

    # ========================================================================
    # CHANGE-SETS
    # ========================================================================

    def update_dependencies(self, changes: DependencyChanges) -> None:
        """
        Apply a change-set: removals, then additions, then updates.

        Updated tasks get their outgoing edges reconciled with their current
        dependents. Updated tasks that are expanded are re-anchored on their
        new sub-forest.
        """
        for task in changes.remove:
            self.remove_task_arrows(task.id)

        for task in changes.add:
            self._present.add(task.id)
            for dependent_id in task.dependents:
                self._link((task.id, dependent_id))
            self._relink_touching({task.id} | self._expanded_ancestors(task.id))

        refreshed: List[Task] = []
        for task in changes.update:
            if task.id in self._expanded:
                refreshed.append(self._expanded[task.id])
                self._expanded[task.id] = task

        for task in changes.update:
            self._present.add(task.id)
            current = {v for (u, v) in self._edges_by_task.get(task.id, set()) if u == task.id}
            desired = set(task.dependents)
            for dependent_id in current - desired:
                self._unlink((task.id, dependent_id))
            for dependent_id in task.dependents:
                if dependent_id not in current:
                    self._link((task.id, dependent_id))

        if refreshed:
            affected: Set[TaskId] = set()
            for old in refreshed:
                affected |= self._affected_by(old)
                affected |= self._affected_by(self._expanded[old.id])
            self._relink_touching(affected)

        logger.debug(
            "Dependencies updated",
            extra={**changes.summary(), "arrows": self.arrow_count}
        )

    def remove_task_arrows(self, task_id: TaskId) -> None:
        """
        Drop the task's own edges and every arrow touching it, both directions.

        Edges from sources still in the graph stay as logical edges without an
        arrow: the source keeps listing the task as a dependent, so the arrow
        is attached again once the task is added back.
        """
        self._present.discard(task_id)
        for edge in list(self._edges_by_task.get(task_id, set())):
            if edge[0] == task_id:
                self._unlink(edge)

        edges = set(self._edges_by_task.get(task_id, set()))
        pairs = [(task_id, target_id) for target_id in self._outgoing.get(task_id, {})]
        pairs += [(source_id, task_id) for source_id in self._incoming.get(task_id, {})]
        for pair in pairs:
            arrow = self.get_arrow(*pair)
            if arrow is not None:
                edges |= arrow.edges
        for edge in sorted(edges):
            self._relink(edge)

        for pair in pairs:
            self.remove_arrow(*pair)

    # ========================================================================
    # EXPANSION
    # ========================================================================

    def set_expanded_task_dependencies(self, task: Task) -> None:
        """Re-anchor the arrows of a task that is now shown as its sub-forest."""
        self._expanded[task.id] = task
        self._relink_touching(self._affected_by(task))
        logger.debug(f"Arrows re-anchored on sub-tasks of {task.id}")

    def set_compressed_task_dependencies(self, task: Task) -> None:
        """Re-anchor the arrows of a task collapsed back into a single item."""
        stored = self._expanded.pop(task.id, None)
        if stored is None:
            return
        self._relink_touching(self._affected_by(stored))
        logger.debug(f"Arrows re-anchored on compressed task {task.id}")

    def is_expanded(self, task_id: TaskId) -> bool:
        return task_id in self._expanded

    def _affected_by(self, task: Task) -> Set[TaskId]:
        """Ids whose edges may change anchors when task changes expansion."""
        affected = {t.id for t in task.walk()}
        affected |= self._expanded_ancestors(task.id)
        return affected

    def _expanded_ancestors(self, task_id: TaskId) -> Set[TaskId]:
        ancestors = set()
        for expanded_id, expanded in self._expanded.items():
            if expanded_id == task_id:
                continue
            if any(sub.id == task_id for sub in expanded.walk() if sub is not expanded):
                ancestors.add(expanded_id)
        return ancestors

    def _source_anchors(self, task_id: TaskId) -> List[TaskId]:
        task = self._expanded.get(task_id)
        if task is None or not task.sub_tasks:
            return [task_id]
        anchors: List[TaskId] = []
        for leaf in internal_leaf_tasks(task.sub_tasks):
            anchors.extend(self._source_anchors(leaf.id))
        return anchors

    def _target_anchors(self, task_id: TaskId) -> List[TaskId]:
        task = self._expanded.get(task_id)
        if task is None or not task.sub_tasks:
            return [task_id]
        anchors: List[TaskId] = []
        for root in root_tasks(task.sub_tasks):
            anchors.extend(self._target_anchors(root.id))
        return anchors

    # ========================================================================
    # LOGICAL EDGES
    # ========================================================================

    def _anchor_pairs(self, edge: Edge) -> Set[Edge]:
        return {
            (source_id, target_id)
            for source_id in self._source_anchors(edge[0])
            for target_id in self._target_anchors(edge[1])
            if source_id != target_id
            and source_id in self._present and target_id in self._present
        }

    def _link(self, edge: Edge) -> None:
        if edge in self._edges:
            return
        self._edges[edge] = set()
        self._edges_by_task.setdefault(edge[0], set()).add(edge)
        self._edges_by_task.setdefault(edge[1], set()).add(edge)
        for pair in self._anchor_pairs(edge):
            self._attach(pair, edge)

    def _unlink(self, edge: Edge) -> None:
        pairs = self._edges.pop(edge, None)
        if pairs is None:
            return
        for task_id in edge:
            edges = self._edges_by_task.get(task_id)
            if edges is not None:
                edges.discard(edge)
                if not edges:
                    del self._edges_by_task[task_id]
        for pair in list(pairs):
            self._detach(pair, edge)

    def _relink(self, edge: Edge) -> None:
        current = self._edges.get(edge)
        if current is None:
            return
        desired = self._anchor_pairs(edge)
        for pair in current - desired:
            self._detach(pair, edge)
        for pair in desired - current:
            self._attach(pair, edge)

    def _relink_touching(self, task_ids: Set[TaskId]) -> None:
        edges: Set[Edge] = set()
        for task_id in task_ids:
            edges |= self._edges_by_task.get(task_id, set())
        for edge in sorted(edges):
            self._relink(edge)

    def _attach(self, pair: Edge, edge: Edge) -> None:
        arrow = self.add_arrow(*pair)
        arrow.edges.add(edge)
        self._edges[edge].add(pair)

    def _detach(self, pair: Edge, edge: Edge) -> None:
        self._edges.get(edge, set()).discard(pair)
        arrow = self.get_arrow(*pair)
        if arrow is None:
            return
        arrow.edges.discard(edge)
        if not arrow.edges:
            self.remove_arrow(*pair)

    # ========================================================================
    # ARROW INDEX
    # ========================================================================

    def add_arrow(self, source_id: TaskId, target_id: TaskId) -> Arrow:
        """
        Create the arrow between two tasks, or return the existing one.

        The arrow is indexed even when its endpoints cannot be resolved yet;
        its geometry is written on the next layout change.
        """
        existing = self.get_arrow(source_id, target_id)
        if existing is not None:
            return existing

        arrow = Arrow(source_id, target_id, self._create_path(source_id, target_id))
        self._index_arrow(arrow)
        self._draw(arrow)
        logger.debug(f"Arrow added: {source_id} -> {target_id}")
        return arrow

    def remove_arrow(self, source_id: TaskId, target_id: TaskId) -> None:
        outgoing = self._outgoing.get(source_id, {})
        arrow = outgoing.pop(target_id, None)
        if arrow is None:
            return
        if not outgoing:
            del self._outgoing[source_id]
        incoming = self._incoming.get(target_id, {})
        incoming.pop(source_id, None)
        if not incoming:
            self._incoming.pop(target_id, None)

        for edge in arrow.edges:
            self._edges.get(edge, set()).discard((source_id, target_id))
        self._require_view().remove_shape(arrow.shape)
        logger.debug(f"Arrow removed: {source_id} -> {target_id}")

    def _index_arrow(self, arrow: Arrow) -> None:
        self._outgoing.setdefault(arrow.source_id, {})[arrow.target_id] = arrow
        self._incoming.setdefault(arrow.target_id, {})[arrow.source_id] = arrow

    def get_arrow(self, source_id: TaskId, target_id: TaskId) -> Optional[Arrow]:
        return self._outgoing.get(source_id, {}).get(target_id)

    def outgoing(self, task_id: TaskId) -> List[TaskId]:
        return list(self._outgoing.get(task_id, {}))

    def incoming(self, task_id: TaskId) -> List[TaskId]:
        return list(self._incoming.get(task_id, {}))

    def arrow_pairs(self) -> Set[Edge]:
        return {(s, t) for s, targets in self._outgoing.items() for t in targets}

    def logical_edges(self) -> Set[Edge]:
        return set(self._edges)

    @property
    def arrow_count(self) -> int:
        return sum(len(targets) for targets in self._outgoing.values())

    # ========================================================================
    # GEOMETRY
    # ========================================================================

    def update_arrows_coordinates(self) -> None:
        """Rewrite the path of every indexed arrow."""
        for targets in self._outgoing.values():
            for arrow in targets.values():
                self._draw(arrow)

    def get_arrow_coordinates(
        self, source_id: TaskId, target_id: TaskId
    ) -> Optional[Tuple[AbsolutePosition, AbsolutePosition]]:
        """
        Resolve both endpoints of an arrow.

        An endpoint that cannot be placed horizontally is replaced by a
        synthetic one at the same height as the other endpoint, on the left
        edge of the canvas for a source and on the right edge for a target.

        Only tasks of the current forest are clamped; an id with no task has no
        endpoint at all.

        Returns:
            (start, end), or None when an endpoint has no task or neither
            endpoint can be placed
        """
        forest = self.position_service.forest
        if forest.get(source_id) is None or forest.get(target_id) is None:
            return None

        start = self.position_service.get_task_position_by_id(source_id)
        end = self.position_service.get_task_position_by_id(target_id)

        start_placed = start is not None and start.horizontally_resolved
        end_placed = end is not None and end.horizontally_resolved
        if not start_placed and not end_placed:
            return None
        if start_placed and not is_valid_absolute_position(start):
            return None
        if end_placed and not is_valid_absolute_position(end):
            return None

        if not start_placed:
            start = _clamped(end, 0.0)
        if not end_placed:
            edge = self.config.offscreen_edge
            if edge is None:
                edge = self._require_view().viewport_width()
            end = _clamped(start, float(edge))
        return start, end

    def _draw(self, arrow: Arrow) -> None:
        coordinates = self.get_arrow_coordinates(arrow.source_id, arrow.target_id)
        if coordinates is None:
            arrow.drawn = False
            return
        start, end = coordinates
        arrow.shape.set_attribute("marker-end", f"url(#{ARROWHEAD_ID})")
        arrow.shape.set_attribute("d", arrow_path(start, end, self.config.bezier_pull))
        arrow.drawn = True

    def _create_path(self, source_id: TaskId, target_id: TaskId) -> Shape:
        path = self._require_view().create_shape(
            ARROW_LAYER, "path", f"tdg-arrow-{source_id}-{target_id}"
        )
        path.set_attribute("d", "M 0 0")
        path.style.update({"stroke": "black", "stroke-width": "1px", "fill": "none"})
        return path

    def _render_arrowhead(self) -> None:
        view = self._require_view()
        if self._marker is not None:
            return
        head = view.create_shape(ARROW_LAYER, "marker", ARROWHEAD_ID)
        for name, value in (
            ("viewBox", "0 0 10 10"),
            ("refX", "5"),
            ("refY", "5"),
            ("orient", "auto"),
            ("markerWidth", "6"),
            ("markerHeight", "6"),
        ):
            head.set_attribute(name, value)
        head_path = Shape("path", ARROW_LAYER)
        head_path.set_attribute("d", "M 0 0 L 10 5 L 0 10 z")
        head_path.style["fill"] = "black"
        head.children.append(head_path)
        self._marker = head

    def _require_view(self) -> TimelineView:
        if self._view is None:
            raise ViewNotAttachedError("ArrowService")
        return self._view


def _clamped(other: AbsolutePosition, x: float) -> AbsolutePosition:
    return AbsolutePosition(
        left=x,
        top=other.top,
        right=x,
        bottom=other.bottom,
        mid_x=x,
        mid_y=other.mid_y,
        width=0.0,
        height=other.height,
    )


def arrow_path(start: AbsolutePosition, end: AbsolutePosition, pull: float = 1.0) -> str:
    """
    Cubic curve from the right middle of start to the left middle of end.

    Control points sit pull * min(heights) pixels outside each endpoint.
    """
    bend = pull * min(start.height, end.height)
    return (
        f"M {format_number(start.right)} {format_number(start.mid_y)} "
        f"C {format_number(start.right + bend)} {format_number(start.mid_y)} "
        f"{format_number(end.left - bend)} {format_number(end.mid_y)} "
        f"{format_number(end.left)} {format_number(end.mid_y)}"
    )
