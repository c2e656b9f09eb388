"""
Tests for the HierarchyService
"""

import unittest
from datetime import datetime, timedelta

from timeline_dep_graph.core import EventBus, HierarchyService, PositionService
from timeline_dep_graph.models import (
    COMPRESS_REQUESTED,
    TASK_OUT,
    TASK_OVER,
    TASK_SELECTED,
    Status,
    Task,
    map_to_item,
)
from timeline_dep_graph.view import HIERARCHY_LAYER, MemoryTimelineView

NOW = datetime(2026, 10, 17, 12, 0, 0)


class TestHierarchyService(unittest.TestCase):
    """Tests for container creation, deferral and interaction events."""

    def setUp(self):
        self.view = MemoryTimelineView(
            window=(NOW - timedelta(minutes=10), NOW + timedelta(minutes=10))
        )
        self.s1 = Task(id="s1", name="S1", start_time=NOW - timedelta(minutes=5), finish_time=NOW)
        self.s2 = Task(id="s2", name="S2", start_time=NOW, finish_time=NOW + timedelta(minutes=5))
        self.parent = Task(id="p", name="Parent", status=Status.FAILED, sub_tasks=[self.s1, self.s2])

        positions = PositionService(self.view)
        positions.set_tasks([self.parent])
        self.bus = EventBus()
        self.service = HierarchyService(positions, self.bus, self.view)

        for task in (self.s1, self.s2):
            self.view.add_item(map_to_item(task, False))

        self.received = []
        self.bus.subscribe("*", self.received.append, subscriber_name="test")

    def test_deferred_until_layout(self):
        self.service.add_element(self.parent)

        self.assertFalse(self.service.has_element("p"))
        self.assertTrue(self.service.is_expanded("p"))
        self.assertEqual(self.view.layers[HIERARCHY_LAYER], [])

        self.view.redraw()

        self.assertTrue(self.service.has_element("p"))
        self.assertEqual(len(self.view.layers[HIERARCHY_LAYER]), 2)

    def test_container_shape(self):
        self.view.redraw()
        self.service.add_element(self.parent)

        element = self.service.get_element("p")
        container = element.container
        self.assertEqual(container.id, "tdg-expanded-p")
        self.assertEqual(container.kind, "rect")
        self.assertEqual(container.get_attribute("rx"), "5")
        self.assertEqual(container.classes, ["tdg-failed", "tdg-hierarchy", "tdg-pointer"])

        self.assertEqual(element.task_name.id, "tdg-expanded-task-name-p")
        self.assertEqual(element.task_name.text, "Parent")
        self.assertEqual(element.task_name.get_attribute("font-weight"), "bold")

    def test_container_coordinates(self):
        self.view.redraw()
        self.service.add_element(self.parent)
        element = self.service.get_element("p")

        # sub-task box 250..750 x 45..95, padded by 5 on both sides
        self.assertEqual(element.container.get_attribute("x"), "250")
        self.assertEqual(element.container.get_attribute("y"), "40")
        self.assertEqual(element.container.get_attribute("width"), "500")
        self.assertEqual(element.container.get_attribute("height"), "60")
        self.assertEqual(element.task_name.get_attribute("x"), "260")
        self.assertEqual(element.task_name.get_attribute("y"), "35")

    def test_task_without_sub_tasks_is_ignored(self):
        self.service.add_element(self.s1)
        self.assertFalse(self.service.is_expanded("s1"))

    def test_remove_element(self):
        self.view.redraw()
        self.service.add_element(self.parent)
        self.service.remove_element("p")

        self.assertFalse(self.service.has_element("p"))
        self.assertEqual(self.view.layers[HIERARCHY_LAYER], [])
        self.assertIsNone(self.view.find_shape("tdg-expanded-p"))

    def test_remove_pending_element(self):
        self.service.add_element(self.parent)
        self.service.remove_element("p")
        self.view.redraw()
        self.assertFalse(self.service.is_expanded("p"))

    def test_update_element(self):
        self.view.redraw()
        self.service.add_element(self.parent)

        updated = self.parent.clone()
        updated.status = Status.SUCCESS
        updated.name = "Parent v2"
        self.service.update_element(updated)

        element = self.service.get_element("p")
        self.assertEqual(element.container.classes[0], "tdg-success")
        self.assertEqual(element.task_name.text, "Parent v2")

    def test_follows_layout_changes(self):
        self.view.redraw()
        self.service.add_element(self.parent)
        self.view.set_window(NOW - timedelta(minutes=20), NOW + timedelta(minutes=20))

        container = self.service.get_element("p").container
        self.assertEqual(container.get_attribute("x"), "375")
        self.assertEqual(container.get_attribute("width"), "250")

    def test_interaction_events(self):
        self.view.redraw()
        self.service.add_element(self.parent)
        element = self.service.get_element("p")

        element.container.fire("mouseover")
        element.container.fire("mouseout")
        element.container.fire("click")
        element.task_name.fire("click")

        self.assertEqual(
            [(e["event_type"], e["task_id"]) for e in self.received],
            [(TASK_OVER, "p"), (TASK_OUT, "p"), (COMPRESS_REQUESTED, "p"), (TASK_SELECTED, "p")],
        )
        self.assertEqual(self.received[0]["source"], "hierarchy_service")

    def test_destroy(self):
        self.view.redraw()
        self.service.add_element(self.parent)
        self.service.destroy()
        self.assertEqual(self.view.layers[HIERARCHY_LAYER], [])
        self.assertEqual(self.service.element_ids(), [])


if __name__ == "__main__":
    unittest.main()
