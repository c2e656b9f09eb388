"""
In-memory timeline view

A deterministic stand-in for a real timeline widget, used by the console
demo and the test-suite. Layout rules:

- lanes are stacked top to bottom in set_groups() order; with no groups set
  every item shares one implicit lane
- inside a lane each item gets its own row, ordered by id
- horizontal offsets scale the visible window onto viewport_width pixels;
  items entirely outside the window report left=None

Nothing is laid out until redraw() runs, mirroring a widget that repaints
after the current event has been handled.
"""

from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

from timeline_dep_graph.models.geometry import ParentFrame, RelativePosition
from timeline_dep_graph.models.item import Group, ItemData
from timeline_dep_graph.utils.logger import get_logger
from timeline_dep_graph.view.base import TimelineView

logger = get_logger(__name__)

ROW_HEIGHT = 30
ITEM_HEIGHT = 20
ITEM_MARGIN = 5
AXIS_HEIGHT = 40
DEFAULT_VIEWPORT_WIDTH = 1000
FIT_MARGIN_RATIO = 0.05


class MemoryTimelineView(TimelineView):
    """Timeline widget whose state lives in plain dicts."""

    def __init__(
        self,
        viewport_width: float = DEFAULT_VIEWPORT_WIDTH,
        window: Optional[Tuple[datetime, datetime]] = None
    ):
        super().__init__()
        self._viewport_width = viewport_width
        self._window = window
        self._items: Dict[str, ItemData] = {}
        self.groups: List[Group] = []
        self.custom_times: Dict[str, datetime] = {}
        self._positions: Dict[str, RelativePosition] = {}
        self._center_height = float(ROW_HEIGHT)
        self.redraw_count = 0

    # ========================================================================
    # ITEMS AND LANES
    # ========================================================================

    def add_item(self, item: ItemData) -> None:
        if item.id in self._items:
            logger.debug(f"Replacing existing item {item.id}")
        self._items[item.id] = item.copy()

    def update_item(self, item: ItemData) -> None:
        self._items[item.id] = item.copy()

    def remove_item(self, item_id: str) -> None:
        self._items.pop(item_id, None)
        self._positions.pop(item_id, None)

    def get_item(self, item_id: str) -> Optional[ItemData]:
        return self._items.get(item_id)

    def items(self) -> Dict[str, ItemData]:
        return self._items

    def set_groups(self, groups: List[Group]) -> None:
        self.groups = list(groups)

    # ========================================================================
    # LAYOUT
    # ========================================================================

    def get_item_position(self, item_id: str) -> Optional[RelativePosition]:
        return self._positions.get(item_id)

    def center_height(self) -> float:
        return self._center_height

    def container_height(self) -> float:
        return self._center_height + AXIS_HEIGHT

    def viewport_width(self) -> float:
        return self._viewport_width

    def time_to_x(self, time: datetime) -> Optional[float]:
        if self._window is None:
            return None
        start, end = self._window
        span = (end - start).total_seconds()
        if span <= 0:
            return None
        return (time - start).total_seconds() / span * self._viewport_width

    def redraw(self) -> None:
        self._layout()
        self.redraw_count += 1
        self.emit("changed")

    def _lanes(self) -> List[Tuple[str, List[ItemData]]]:
        if not self.groups:
            return [("", sorted(self._items.values(), key=lambda i: i.id))]
        members: Dict[str, List[ItemData]] = {g.id: [] for g in self.groups}
        for item in self._items.values():
            if item.group in members:
                members[item.group].append(item)
        return [(g.id, sorted(members[g.id], key=lambda i: i.id)) for g in self.groups]

    def _layout(self) -> None:
        self._positions = {}
        lane_top = 0.0
        for _, lane_items in self._lanes():
            lane_height = float(max(1, len(lane_items)) * ROW_HEIGHT)
            parent = ParentFrame(top=lane_top, height=lane_height)
            for row, item in enumerate(lane_items):
                if item.start is None:
                    continue
                left, width = self._horizontal(item)
                self._positions[item.id] = RelativePosition(
                    top=ITEM_MARGIN + row * ROW_HEIGHT,
                    left=left,
                    width=width,
                    height=ITEM_HEIGHT,
                    parent=parent,
                )
            lane_top += lane_height
        self._center_height = max(lane_top, float(ROW_HEIGHT))

    def _horizontal(self, item: ItemData) -> Tuple[Optional[float], float]:
        end = item.end or item.start
        if self._window is None:
            return None, 0.0
        window_start, window_end = self._window
        x_start = self.time_to_x(item.start)
        x_end = self.time_to_x(end)
        if x_start is None or x_end is None:
            return None, 0.0
        width = max(x_end - x_start, 1.0)
        if end < window_start or item.start > window_end:
            return None, width
        return x_start, width

    # ========================================================================
    # WINDOW
    # ========================================================================

    def set_window(self, start: datetime, end: datetime) -> None:
        if end <= start:
            raise ValueError("Window end must be after its start")
        self._window = (start, end)
        self.redraw()

    def get_window(self) -> Optional[Tuple[datetime, datetime]]:
        return self._window

    def focus(self, item_id: str) -> None:
        item = self._items.get(item_id)
        if item is None or item.start is None:
            return
        end = item.end or item.start
        margin = max((end - item.start) * FIT_MARGIN_RATIO, timedelta(seconds=1))
        self.set_window(item.start - margin, end + margin)

    def fit(self) -> None:
        starts = [i.start for i in self._items.values() if i.start is not None]
        if not starts:
            self.redraw()
            return
        ends = [i.end or i.start for i in self._items.values() if i.start is not None]
        start, end = min(starts), max(ends)
        margin = max((end - start) * FIT_MARGIN_RATIO, timedelta(seconds=1))
        self.set_window(start - margin, end + margin)

    def zoom_in(self, ratio: float) -> None:
        self._zoom(1 - ratio)

    def zoom_out(self, ratio: float) -> None:
        self._zoom(1 + ratio)

    def _zoom(self, scale: float) -> None:
        if self._window is None:
            return
        start, end = self._window
        center = start + (end - start) / 2
        half = (end - start) * scale / 2
        self.set_window(center - half, center + half)

    def add_custom_time(self, time: datetime, bar_id: str) -> None:
        self.custom_times[bar_id] = time

    def remove_custom_time(self, bar_id: str) -> None:
        self.custom_times.pop(bar_id, None)

    # ========================================================================
    # USER INTERACTION
    # ========================================================================

    def click(self, item_id: str, region: str = "bar") -> None:
        self.emit("click", {"item": item_id, "region": region})

    def hover(self, item_id: str, time: Optional[datetime] = None) -> None:
        self.emit("item_over", {"item": item_id})
        if time is not None:
            self.emit("mouse_over", {"what": "item", "item": item_id, "time": time})

    def leave(self, item_id: str) -> None:
        self.emit("item_out", {"item": item_id})

    def tick(self, now: datetime) -> None:
        self.emit("current_time_tick", {"time": now})
