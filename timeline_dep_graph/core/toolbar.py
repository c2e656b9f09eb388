"""
Toolbar - navigation and grouping controls for a timeline
"""

from typing import Callable, Optional

from timeline_dep_graph.config.timeline_config import TimelineConfig
from timeline_dep_graph.view.base import TimelineView


class TimelineToolbar:
    """
    Zoom, pan and fit the visible window; toggle grouping by status.

    on_grouping receives the new grouping flag, typically
    TimelineOrchestrator.set_is_grouped.
    """

    def __init__(
        self,
        view: TimelineView,
        on_grouping: Optional[Callable[[bool], None]] = None,
        config: Optional[TimelineConfig] = None
    ):
        self.view = view
        self.on_grouping = on_grouping
        self.config = config or TimelineConfig()
        self.grouped = False

    def zoom_in(self) -> None:
        self.view.zoom_in(self.config.zoom_ratio)

    def zoom_out(self) -> None:
        self.view.zoom_out(self.config.zoom_ratio)

    def move_left(self) -> None:
        self._move(self.config.motion_ratio)

    def move_right(self) -> None:
        self._move(-self.config.motion_ratio)

    def fit(self) -> None:
        self.view.fit()

    def toggle_grouping(self) -> bool:
        self.grouped = not self.grouped
        if self.on_grouping is not None:
            self.on_grouping(self.grouped)
        return self.grouped

    def _move(self, percentage: float) -> None:
        window = self.view.get_window()
        if window is None:
            return
        start, end = window
        shift = (end - start) * percentage
        self.view.set_window(start - shift, end - shift)
