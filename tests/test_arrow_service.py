"""
Tests for the ArrowService

Covers the arrow indices, re-anchoring on expand/compress, update
reconciliation and the endpoint geometry (including off-screen clamping).
"""

import unittest
from datetime import datetime, timedelta

from timeline_dep_graph.config import TimelineConfig
from timeline_dep_graph.core import ArrowService, PositionService, arrow_path
from timeline_dep_graph.demo import demo_tasks
from timeline_dep_graph.models import (
    AbsolutePosition,
    DependencyChanges,
    Task,
    get_task_by_id,
    map_to_item,
)
from timeline_dep_graph.utils.exceptions import ViewNotAttachedError
from timeline_dep_graph.view import ARROW_LAYER, MemoryTimelineView

NOW = datetime(2026, 10, 17, 12, 0, 0)


def box(left, top, width, height):
    return AbsolutePosition(
        left=left, top=top, right=left + width, bottom=top + height,
        mid_x=left + width / 2, mid_y=top + height / 2, width=width, height=height,
    )


class TestArrowIndex(unittest.TestCase):
    """Tests for add_arrow / remove_arrow."""

    def setUp(self):
        self.view = MemoryTimelineView()
        self.service = ArrowService(PositionService(self.view), self.view)

    def test_requires_view(self):
        service = ArrowService(PositionService())
        with self.assertRaises(ViewNotAttachedError):
            service.add_arrow("a", "b")

    def test_arrowhead_marker_rendered_once(self):
        markers = [s for s in self.view.layers[ARROW_LAYER] if s.kind == "marker"]
        self.assertEqual(len(markers), 1)
        self.assertEqual(markers[0].id, "arrowhead")

    def test_add_is_idempotent(self):
        first = self.service.add_arrow("a", "b")
        second = self.service.add_arrow("a", "b")

        self.assertIs(first, second)
        self.assertEqual(self.service.arrow_count, 1)
        self.assertEqual(self.service.outgoing("a"), ["b"])
        self.assertEqual(self.service.incoming("b"), ["a"])

    def test_path_shape(self):
        arrow = self.service.add_arrow("a", "b")
        self.assertEqual(arrow.shape.id, "tdg-arrow-a-b")
        self.assertEqual(arrow.shape.get_attribute("d"), "M 0 0")
        self.assertEqual(arrow.shape.style["stroke"], "black")
        self.assertEqual(arrow.shape.style["fill"], "none")
        self.assertIn(arrow.shape, self.view.layers[ARROW_LAYER])

    def test_remove_updates_both_indices(self):
        arrow = self.service.add_arrow("a", "b")
        self.service.add_arrow("a", "c")

        self.service.remove_arrow("a", "b")

        self.assertIsNone(self.service.get_arrow("a", "b"))
        self.assertEqual(self.service.outgoing("a"), ["c"])
        self.assertEqual(self.service.incoming("b"), [])
        self.assertNotIn(arrow.shape, self.view.layers[ARROW_LAYER])

    def test_remove_unknown_arrow_is_noop(self):
        self.service.remove_arrow("x", "y")
        self.assertEqual(self.service.arrow_count, 0)

    def test_destroy_clears_shapes(self):
        self.service.add_arrow("a", "b")
        self.service.destroy()
        self.assertEqual(self.view.layers[ARROW_LAYER], [])
        self.assertEqual(self.service.arrow_count, 0)


class TestDependencyUpdates:
    """Tests for update_dependencies and expansion re-anchoring."""

    def setup_method(self):
        self.tasks = demo_tasks(NOW)
        self.view = MemoryTimelineView()
        positions = PositionService(self.view)
        positions.set_tasks(self.tasks)
        self.service = ArrowService(positions, self.view)
        self.service.update_dependencies(DependencyChanges(add=list(self.tasks)))

    def expand(self, task_id):
        task = get_task_by_id(self.tasks, task_id)
        self.service.update_dependencies(DependencyChanges(add=list(task.sub_tasks)))
        self.service.set_expanded_task_dependencies(task)

    def compress(self, task_id):
        task = get_task_by_id(self.tasks, task_id)
        self.service.set_compressed_task_dependencies(task)
        self.service.update_dependencies(DependencyChanges(remove=list(task.sub_tasks)))

    def test_initial_arrows(self):
        assert self.service.arrow_pairs() == {("0", "1"), ("0", "4"), ("1", "2"), ("1", "3")}

    def test_expand_target_anchors_on_sub_roots(self):
        self.expand("3")
        assert self.service.arrow_pairs() == {
            ("0", "1"), ("0", "4"), ("1", "2"),
            ("1", "3A"), ("3A", "3B"), ("3A", "3C"), ("3B", "3D"), ("3C", "3D"),
        }
        assert self.service.is_expanded("3")

    def test_expand_source_anchors_on_sub_leaves(self):
        tasks = [
            Task(id="p", name="P", dependents=["q"], sub_tasks=[
                Task(id="p1", name="P1", dependents=["p2"]),
                Task(id="p2", name="P2"),
            ]),
            Task(id="q", name="Q"),
        ]
        view = MemoryTimelineView()
        positions = PositionService(view)
        positions.set_tasks(tasks)
        service = ArrowService(positions, view)
        service.update_dependencies(DependencyChanges(add=list(tasks)))

        service.update_dependencies(DependencyChanges(add=list(tasks[0].sub_tasks)))
        service.set_expanded_task_dependencies(tasks[0])

        assert service.arrow_pairs() == {("p1", "p2"), ("p2", "q")}

    def test_compress_restores_pairs(self):
        before = self.service.arrow_pairs()
        self.expand("3")
        self.compress("3")
        assert self.service.arrow_pairs() == before

    def test_nested_expand_compress_restores_pairs(self):
        before = self.service.arrow_pairs()
        self.expand("2")
        self.expand("3")
        assert ("1", "2A") in self.service.arrow_pairs()
        self.compress("2")
        self.compress("3")
        assert self.service.arrow_pairs() == before

    def test_remove_task_arrows_keeps_other_edges(self):
        service = self.service
        service.update_dependencies(DependencyChanges(add=[
            Task(id="x", name="X", dependents=["4"]),
        ]))
        assert service.get_arrow("x", "4").edges == {("x", "4")}
        service.remove_task_arrows("x")
        assert service.get_arrow("x", "4") is None
        assert service.get_arrow("0", "4") is not None

    def test_removing_target_drops_incoming_arrow(self):
        a = Task(id="a", name="A", dependents=["b"])
        b = Task(id="b", name="B")
        view = MemoryTimelineView()
        positions = PositionService(view)
        positions.set_tasks([a, b])
        service = ArrowService(positions, view)
        service.update_dependencies(DependencyChanges(add=[a, b]))
        assert service.arrow_count == 1

        service.update_dependencies(DependencyChanges(remove=[b]))

        assert service.arrow_count == 0
        assert service.incoming("b") == []
        assert view.find_shape("tdg-arrow-a-b") is None
        assert service.logical_edges() == {("a", "b")}

        service.update_dependencies(DependencyChanges(add=[b]))
        assert service.arrow_pairs() == {("a", "b")}

    def test_absent_dependent_has_no_arrow(self):
        self.service.update_dependencies(DependencyChanges(add=[
            Task(id="x", name="X", dependents=["ghost"]),
        ]))
        assert ("x", "ghost") in self.service.logical_edges()
        assert self.service.get_arrow("x", "ghost") is None
        assert self.service.get_arrow_coordinates("x", "ghost") is None

    def test_removed_sub_task_drops_anchored_arrows(self):
        self.expand("3")
        self.service.update_dependencies(DependencyChanges(
            remove=[get_task_by_id(self.tasks, "3B")]
        ))
        pairs = self.service.arrow_pairs()
        assert ("3A", "3B") not in pairs
        assert ("3B", "3D") not in pairs
        assert self.service.incoming("3B") == []
        assert self.service.outgoing("3B") == []

    def test_shared_arrow_survives_until_last_edge(self):
        p1 = Task(id="p1", name="P1", dependents=["q"])
        parent = Task(id="p", name="P", dependents=["q"], sub_tasks=[p1])
        q = Task(id="q", name="Q")
        view = MemoryTimelineView()
        positions = PositionService(view)
        positions.set_tasks([parent, q])
        service = ArrowService(positions, view)
        service.update_dependencies(DependencyChanges(add=[parent, q]))

        service.update_dependencies(DependencyChanges(add=[p1]))
        service.set_expanded_task_dependencies(parent)
        assert service.get_arrow("p1", "q").edges == {("p", "q"), ("p1", "q")}

        service.set_compressed_task_dependencies(parent)
        assert service.get_arrow("p1", "q").edges == {("p1", "q")}
        assert service.get_arrow("p", "q") is not None

        service.update_dependencies(DependencyChanges(remove=[p1]))
        assert service.arrow_pairs() == {("p", "q")}

    def test_update_reconciles_dependents(self):
        updated = self.tasks[0].clone()
        updated.dependents = ["1", "2"]
        self.service.update_dependencies(DependencyChanges(update=[updated]))

        assert set(self.service.outgoing("0")) == {"1", "2"}
        assert self.service.get_arrow("0", "4") is None

    def test_update_of_expanded_task_reanchors(self):
        self.expand("3")
        updated = get_task_by_id(self.tasks, "3").clone()
        updated.sub_tasks = [s for s in updated.sub_tasks if s.id != "3A"]
        self.service.update_dependencies(DependencyChanges(
            update=[updated],
            remove=[get_task_by_id(self.tasks, "3A")],
        ))

        pairs = self.service.arrow_pairs()
        assert ("1", "3A") not in pairs
        assert {("1", "3B"), ("1", "3C")} <= pairs

    def test_unresolvable_arrows_stay_indexed(self):
        arrow = self.service.get_arrow("0", "1")
        assert arrow is not None
        assert arrow.drawn is False


class TestArrowGeometry(unittest.TestCase):
    """Tests for endpoint resolution and path drawing."""

    def setUp(self):
        self.window = (NOW - timedelta(minutes=10), NOW + timedelta(minutes=10))
        self.view = MemoryTimelineView(window=self.window)

    def build(self, tasks, config=None):
        positions = PositionService(self.view)
        positions.set_tasks(tasks)
        service = ArrowService(positions, self.view, config)
        for task in tasks:
            self.view.add_item(map_to_item(task, False))
        service.update_dependencies(DependencyChanges(add=list(tasks)))
        self.view.redraw()
        return service

    def test_arrow_path_string(self):
        start = box(0, 0, 10, 10)
        end = box(50, 15, 20, 20)
        self.assertEqual(arrow_path(start, end), "M 10 5 C 20 5 40 25 50 25")

    def test_arrow_path_pull(self):
        start = box(0, 0, 10, 10)
        end = box(50, 15, 20, 20)
        self.assertEqual(arrow_path(start, end, pull=2), "M 10 5 C 30 5 30 25 50 25")

    def test_both_endpoints_on_screen(self):
        a = Task(id="a", name="A", dependents=["b"],
                 start_time=NOW - timedelta(minutes=5), finish_time=NOW)
        b = Task(id="b", name="B",
                 start_time=NOW, finish_time=NOW + timedelta(minutes=5))
        service = self.build([a, b])

        arrow = service.get_arrow("a", "b")
        self.assertTrue(arrow.drawn)
        # a: x 250..500, top 75; b: x 500..750, top 45
        self.assertEqual(arrow.shape.get_attribute("d"), "M 500 85 C 520 85 480 55 500 55")
        self.assertEqual(arrow.shape.get_attribute("marker-end"), "url(#arrowhead)")

    def test_offscreen_source_is_clamped_left(self):
        a = Task(id="a", name="A", dependents=["b"],
                 start_time=NOW - timedelta(minutes=60), finish_time=NOW - timedelta(minutes=30))
        b = Task(id="b", name="B",
                 start_time=NOW - timedelta(minutes=5), finish_time=NOW)
        service = self.build([a, b])

        start, end = service.get_arrow_coordinates("a", "b")
        self.assertEqual((start.left, start.width), (0, 0))
        self.assertEqual(start.mid_y, end.mid_y)
        self.assertEqual(
            service.get_arrow("a", "b").shape.get_attribute("d"),
            "M 0 55 C 20 55 230 55 250 55",
        )

    def test_offscreen_target_is_clamped_right(self):
        a = Task(id="a", name="A", dependents=["b"],
                 start_time=NOW - timedelta(minutes=5), finish_time=NOW)
        b = Task(id="b", name="B",
                 start_time=NOW + timedelta(minutes=30), finish_time=NOW + timedelta(minutes=40))
        service = self.build([a, b])

        start, end = service.get_arrow_coordinates("a", "b")
        self.assertEqual(end.left, self.view.viewport_width())
        self.assertEqual(end.mid_y, start.mid_y)

    def test_offscreen_edge_is_configurable(self):
        a = Task(id="a", name="A", dependents=["b"],
                 start_time=NOW - timedelta(minutes=5), finish_time=NOW)
        b = Task(id="b", name="B",
                 start_time=NOW + timedelta(minutes=30), finish_time=NOW + timedelta(minutes=40))
        service = self.build([a, b], TimelineConfig(offscreen_edge=640))

        _, end = service.get_arrow_coordinates("a", "b")
        self.assertEqual(end.left, 640)

    def test_both_offscreen_is_not_drawn(self):
        a = Task(id="a", name="A", dependents=["b"],
                 start_time=NOW - timedelta(minutes=60), finish_time=NOW - timedelta(minutes=50))
        b = Task(id="b", name="B",
                 start_time=NOW - timedelta(minutes=40), finish_time=NOW - timedelta(minutes=30))
        service = self.build([a, b])

        self.assertIsNone(service.get_arrow_coordinates("a", "b"))
        arrow = service.get_arrow("a", "b")
        self.assertIsNotNone(arrow)
        self.assertFalse(arrow.drawn)

    def test_redrawn_on_layout_change(self):
        a = Task(id="a", name="A", dependents=["b"],
                 start_time=NOW - timedelta(minutes=5), finish_time=NOW)
        b = Task(id="b", name="B",
                 start_time=NOW, finish_time=NOW + timedelta(minutes=5))
        service = self.build([a, b])
        before = service.get_arrow("a", "b").shape.get_attribute("d")

        self.view.set_window(NOW - timedelta(minutes=20), NOW + timedelta(minutes=10))

        after = service.get_arrow("a", "b").shape.get_attribute("d")
        self.assertNotEqual(before, after)
        self.assertTrue(service.get_arrow("a", "b").drawn)


if __name__ == "__main__":
    unittest.main()
