"""
Visualization collaborator contract

The engines never draw anything themselves. They talk to a TimelineView,
which owns the timeline widget: the flat item set, the lanes, the visible
time window, the per-item layout and a set of canvas layers holding the
shapes (arrows, hierarchy containers, tooltips) the engines create.

Events emitted by a view (handlers receive one props dict):

    changed            layout changed (pan, zoom, resize, redraw)
    click              {"item": id, "region": "bar" | "name"}
    item_over          {"item": id}
    item_out           {"item": id}
    mouse_over         {"what": "item", "item": id, "time": datetime}
    current_time_tick  {"time": datetime}
"""

from abc import ABC, abstractmethod
from collections import defaultdict
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from timeline_dep_graph.models.geometry import RelativePosition
from timeline_dep_graph.models.item import Group, ItemData
from timeline_dep_graph.utils.logger import get_logger

logger = get_logger(__name__)

EventHandler = Callable[[Dict[str, Any]], None]
ShapeListener = Callable[["Shape"], None]

# Canvas layers, bottom to top
ARROW_LAYER = "arrows"
HIERARCHY_LAYER = "hierarchy"
OVERLAY_LAYER = "overlay"


def format_number(value: float) -> str:
    """Render whole floats without a trailing .0 (12.0 -> "12")."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


class Shape:
    """
    A drawable element on one of the view's canvas layers.

    Attributes mirror SVG attributes (x, y, d, rx...), style holds inline
    style properties and classes the CSS class list.
    """

    def __init__(self, kind: str, layer: str, shape_id: Optional[str] = None):
        self.kind = kind
        self.layer = layer
        self.id = shape_id
        self.attributes: Dict[str, str] = {}
        self.style: Dict[str, str] = {}
        self.classes: List[str] = []
        self.text = ""
        self.children: List["Shape"] = []
        self._listeners: Dict[str, List[ShapeListener]] = defaultdict(list)

    def set_attribute(self, name: str, value: Any) -> None:
        if isinstance(value, float):
            value = format_number(value)
        self.attributes[name] = str(value)

    def get_attribute(self, name: str) -> Optional[str]:
        return self.attributes.get(name)

    def set_classes(self, classes: List[str]) -> None:
        self.classes = list(classes)

    def add_listener(self, event: str, listener: ShapeListener) -> None:
        self._listeners[event].append(listener)

    def fire(self, event: str) -> None:
        """Dispatch a user interaction (click, mouseover, mouseout) on this shape."""
        for listener in list(self._listeners.get(event, [])):
            listener(self)

    def __repr__(self) -> str:
        return f"Shape(kind={self.kind!r}, id={self.id!r}, layer={self.layer!r})"


class TimelineView(ABC):
    """
    Base class for visualization collaborators.

    Event wiring and the canvas layers are implemented here; item storage,
    layout and window control are left to the concrete widget.
    """

    def __init__(self):
        self._handlers: Dict[str, List[EventHandler]] = defaultdict(list)
        self.layers: Dict[str, List[Shape]] = {
            ARROW_LAYER: [],
            HIERARCHY_LAYER: [],
            OVERLAY_LAYER: [],
        }

    # ========================================================================
    # EVENTS
    # ========================================================================

    def on(self, event: str, handler: EventHandler) -> None:
        self._handlers[event].append(handler)

    def off(self, event: str, handler: EventHandler) -> None:
        handlers = self._handlers.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: str, props: Optional[Dict[str, Any]] = None) -> None:
        props = props or {}
        logger.debug(f"View event: {event}", extra=props if props else None)
        for handler in list(self._handlers.get(event, [])):
            handler(props)

    # ========================================================================
    # CANVAS
    # ========================================================================

    def create_shape(self, layer: str, kind: str, shape_id: Optional[str] = None) -> Shape:
        """Create a shape and append it to the given layer."""
        shape = Shape(kind, layer, shape_id)
        self.layers.setdefault(layer, []).append(shape)
        return shape

    def remove_shape(self, shape: Shape) -> None:
        shapes = self.layers.get(shape.layer, [])
        if shape in shapes:
            shapes.remove(shape)

    def find_shape(self, shape_id: str) -> Optional[Shape]:
        for shapes in self.layers.values():
            for shape in shapes:
                if shape.id == shape_id:
                    return shape
        return None

    def measure_text(self, text: str) -> float:
        """Rendered width of a text label in pixels."""
        return 7.0 * len(text)

    # ========================================================================
    # ITEMS AND LANES
    # ========================================================================

    @abstractmethod
    def add_item(self, item: ItemData) -> None:
        """Add an item; an existing item with the same id is replaced."""

    @abstractmethod
    def update_item(self, item: ItemData) -> None:
        """Replace the data of an existing item, keyed by id."""

    @abstractmethod
    def remove_item(self, item_id: str) -> None:
        """Remove an item; unknown ids are ignored."""

    @abstractmethod
    def get_item(self, item_id: str) -> Optional[ItemData]:
        pass

    @abstractmethod
    def items(self) -> Dict[str, ItemData]:
        """The rendered items keyed by id (live objects, not copies)."""

    @abstractmethod
    def set_groups(self, groups: List[Group]) -> None:
        pass

    # ========================================================================
    # LAYOUT
    # ========================================================================

    @abstractmethod
    def get_item_position(self, item_id: str) -> Optional[RelativePosition]:
        """
        Layout of an item, None when the item is not laid out.

        left is None when the item lies outside the visible window.
        """

    @abstractmethod
    def center_height(self) -> float:
        """Height of the item area."""

    @abstractmethod
    def container_height(self) -> float:
        """Height of the canvas holding the item area and the axes."""

    @abstractmethod
    def viewport_width(self) -> float:
        pass

    @abstractmethod
    def time_to_x(self, time: datetime) -> Optional[float]:
        """Horizontal pixel offset of an instant, None with no window set."""

    @abstractmethod
    def redraw(self) -> None:
        """Lay the items out again and emit 'changed'."""

    # ========================================================================
    # WINDOW
    # ========================================================================

    @abstractmethod
    def set_window(self, start: datetime, end: datetime) -> None:
        pass

    @abstractmethod
    def get_window(self) -> Optional[Tuple[datetime, datetime]]:
        pass

    @abstractmethod
    def focus(self, item_id: str) -> None:
        pass

    @abstractmethod
    def fit(self) -> None:
        """Adjust the window so that every item is visible."""

    @abstractmethod
    def zoom_in(self, ratio: float) -> None:
        pass

    @abstractmethod
    def zoom_out(self, ratio: float) -> None:
        pass

    @abstractmethod
    def add_custom_time(self, time: datetime, bar_id: str) -> None:
        pass

    @abstractmethod
    def remove_custom_time(self, bar_id: str) -> None:
        pass
