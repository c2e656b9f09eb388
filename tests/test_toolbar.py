"""
Tests for the TimelineToolbar
"""

import unittest
from datetime import datetime, timedelta

from timeline_dep_graph.config import TimelineConfig
from timeline_dep_graph.core import TimelineToolbar
from timeline_dep_graph.view import MemoryTimelineView

START = datetime(2026, 10, 17, 12, 0, 0)
END = START + timedelta(seconds=100)


class TestTimelineToolbar(unittest.TestCase):
    """Tests for zoom, pan, fit and the grouping toggle."""

    def setUp(self):
        self.view = MemoryTimelineView(window=(START, END))
        self.toggles = []
        self.toolbar = TimelineToolbar(self.view, on_grouping=self.toggles.append)

    def test_move_left(self):
        self.toolbar.move_left()
        self.assertEqual(
            self.view.get_window(),
            (START - timedelta(seconds=20), END - timedelta(seconds=20)),
        )

    def test_move_right(self):
        self.toolbar.move_right()
        self.assertEqual(
            self.view.get_window(),
            (START + timedelta(seconds=20), END + timedelta(seconds=20)),
        )

    def test_zoom_in(self):
        self.toolbar.zoom_in()
        self.assertEqual(
            self.view.get_window(),
            (START + timedelta(seconds=10), END - timedelta(seconds=10)),
        )

    def test_zoom_out(self):
        self.toolbar.zoom_out()
        self.assertEqual(
            self.view.get_window(),
            (START - timedelta(seconds=10), END + timedelta(seconds=10)),
        )

    def test_custom_ratios(self):
        toolbar = TimelineToolbar(self.view, config=TimelineConfig(motion_ratio=0.5))
        toolbar.move_left()
        self.assertEqual(self.view.get_window()[0], START - timedelta(seconds=50))

    def test_toggle_grouping(self):
        self.assertTrue(self.toolbar.toggle_grouping())
        self.assertFalse(self.toolbar.toggle_grouping())
        self.assertEqual(self.toggles, [True, False])

    def test_fit_without_items_keeps_window(self):
        self.toolbar.fit()
        self.assertEqual(self.view.get_window(), (START, END))

    def test_move_without_window_is_noop(self):
        toolbar = TimelineToolbar(MemoryTimelineView())
        toolbar.move_left()
        self.assertIsNone(toolbar.view.get_window())

    def test_navigation_redraws(self):
        before = self.view.redraw_count
        self.toolbar.zoom_in()
        self.toolbar.move_right()
        self.assertEqual(self.view.redraw_count, before + 2)


if __name__ == "__main__":
    unittest.main()
