"""
Time tooltip - shows the exact start or finish time of a hovered item

Hovering an item marks its nearer edge with a custom time bar and shows the
ISO timestamp of that edge next to it. The tooltip follows the item on
layout changes and is cleared when the cursor leaves the item or the item
disappears.
"""

from dataclasses import dataclass
from typing import Optional

from timeline_dep_graph.core.position_service import get_absolute_position
from timeline_dep_graph.utils.exceptions import ViewNotAttachedError
from timeline_dep_graph.utils.logger import get_logger
from timeline_dep_graph.view.base import OVERLAY_LAYER, Shape, TimelineView

logger = get_logger(__name__)

CUSTOM_TIME_BAR_ID = "customTimeBar"


@dataclass
class Tooltip:
    shape: Shape
    item_id: str
    hover_on_start: bool


class TimeTooltipService:

    def __init__(self, view: Optional[TimelineView] = None):
        self._view: Optional[TimelineView] = None
        self.tooltip: Optional[Tooltip] = None
        if view is not None:
            self.set_view(view)

    def set_view(self, view: TimelineView) -> None:
        self._view = view
        view.on("changed", self._on_changed)
        view.on("mouse_over", self._on_mouse_over)
        view.on("item_out", self._on_item_out)

    def destroy(self) -> None:
        if self._view is None:
            return
        self.clear_tooltip()
        self._view.off("changed", self._on_changed)
        self._view.off("mouse_over", self._on_mouse_over)
        self._view.off("item_out", self._on_item_out)

    def _on_changed(self, _props) -> None:
        self.set_tooltip_coordinates()

    def _on_item_out(self, _props) -> None:
        self.clear_tooltip()

    def _on_mouse_over(self, props) -> None:
        if props.get("what") != "item":
            return
        self.clear_tooltip()

        view = self._require_view()
        item_id = props.get("item")
        item = view.get_item(item_id) if item_id is not None else None
        hovered = props.get("time")
        if item is None or hovered is None or item.start is None or item.end is None:
            return

        hover_on_start = (hovered - item.start) < (item.end - hovered)
        edge = item.start if hover_on_start else item.end

        shape = view.create_shape(OVERLAY_LAYER, "tooltip", "tdg-time-tooltip")
        shape.style.update({
            "position": "absolute",
            "background": "#6E94FF",
            "padding": "0px",
            "margin": "0px",
            "z-index": "1",
        })
        shape.text = edge.isoformat()
        view.add_custom_time(edge, CUSTOM_TIME_BAR_ID)

        self.tooltip = Tooltip(shape=shape, item_id=item_id, hover_on_start=hover_on_start)
        self.set_tooltip_coordinates()

    def clear_tooltip(self) -> None:
        if self.tooltip is None:
            return
        view = self._require_view()
        view.remove_shape(self.tooltip.shape)
        view.remove_custom_time(CUSTOM_TIME_BAR_ID)
        self.tooltip = None

    def set_tooltip_coordinates(self) -> None:
        if self.tooltip is None:
            return
        view = self._require_view()
        relative = view.get_item_position(self.tooltip.item_id)
        if relative is None:
            self.clear_tooltip()
            return

        position = get_absolute_position(relative, view.center_height(), view.container_height())
        x = position.left if self.tooltip.hover_on_start else position.right
        if x is None:
            return
        half_width = view.measure_text(self.tooltip.shape.text) / 2
        self.tooltip.shape.style["left"] = f"{x - half_width}px"
        self.tooltip.shape.style["top"] = f"{position.top - position.height / 2}px"

    def _require_view(self) -> TimelineView:
        if self._view is None:
            raise ViewNotAttachedError("TimeTooltipService")
        return self._view
