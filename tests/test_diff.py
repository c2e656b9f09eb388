"""
Tests for the diff engine
"""

import unittest
from datetime import datetime

from timeline_dep_graph.core import ArrowService, PositionService, get_dependency_changes
from timeline_dep_graph.demo import demo_tasks
from timeline_dep_graph.models import DependencyChanges, Status, Task, get_task_by_id
from timeline_dep_graph.view import MemoryTimelineView

NOW = datetime(2026, 10, 17, 12, 0, 0)


def ids(tasks):
    return [t.id for t in tasks]


class TestDependencyChanges(unittest.TestCase):
    """Tests for get_dependency_changes()."""

    def test_identical_forests_yield_nothing(self):
        changes = get_dependency_changes(demo_tasks(NOW), demo_tasks(NOW))
        self.assertTrue(changes.is_empty())

    def test_symmetric_difference(self):
        a = Task(id="a", name="A")
        b = Task(id="b", name="B")
        c = Task(id="c", name="C")
        changes = get_dependency_changes([a, b], [b.clone(), c])

        self.assertEqual(ids(changes.add), ["c"])
        self.assertEqual(ids(changes.remove), ["a"])
        self.assertEqual(changes.update, [])

    def test_references_come_from_the_right_snapshot(self):
        prev = [Task(id="a", name="A"), Task(id="b", name="B")]
        curr = [Task(id="b", name="B2"), Task(id="c", name="C")]
        changes = get_dependency_changes(prev, curr)

        self.assertIs(changes.remove[0], prev[0])
        self.assertIs(changes.update[0], curr[0])
        self.assertIs(changes.add[0], curr[1])

    def test_nested_change_propagates(self):
        prev = demo_tasks(NOW)
        curr = demo_tasks(NOW)
        get_task_by_id(curr, "3B").name = "Task 3B (retry)"

        changes = get_dependency_changes(prev, curr)

        self.assertEqual(ids(changes.update), ["3", "3B"])
        self.assertEqual(changes.add, [])
        self.assertEqual(changes.remove, [])

    def test_nested_add_and_remove_are_merged(self):
        prev = demo_tasks(NOW)
        curr = demo_tasks(NOW)
        task2 = get_task_by_id(curr, "2")
        task2.sub_tasks = [task2.sub_tasks[0], Task(id="2C", name="Task 2C")]

        changes = get_dependency_changes(prev, curr)

        self.assertEqual(ids(changes.update), ["2"])
        self.assertEqual(ids(changes.add), ["2C"])
        self.assertEqual(ids(changes.remove), ["2B"])

    def test_dependents_change_is_an_update(self):
        prev = demo_tasks(NOW)
        curr = demo_tasks(NOW)
        curr[0].dependents = ["1"]
        changes = get_dependency_changes(prev, curr)
        self.assertEqual(ids(changes.update), ["0"])

    def test_status_change_is_an_update(self):
        prev = demo_tasks(NOW)
        curr = demo_tasks(NOW)
        curr[4].status = Status.FAILED
        changes = get_dependency_changes(prev, curr)
        self.assertEqual(ids(changes.update), ["4"])


class TestChainRemoval:
    """Removing the head of a chain leaves no arrow behind."""

    def setup_method(self):
        self.task1 = Task(id="task1", name="Task 1", dependents=["task2"], start_time=NOW)
        self.task2 = Task(id="task2", name="Task 2", dependents=["task3", "task4"], start_time=NOW)
        self.task3 = Task(id="task3", name="Task 3", start_time=NOW)
        self.task4 = Task(id="task4", name="Task 4", start_time=NOW)
        self.all_tasks = [self.task1, self.task2, self.task3, self.task4]

    def test_change_set(self):
        changes = get_dependency_changes(self.all_tasks, [self.task3, self.task4])
        assert ids(changes.remove) == ["task1", "task2"]
        assert changes.add == []
        assert changes.update == []

    def test_arrow_engine_is_emptied(self):
        view = MemoryTimelineView()
        positions = PositionService(view)
        positions.set_tasks(self.all_tasks)
        arrows = ArrowService(positions, view)

        arrows.update_dependencies(DependencyChanges(add=list(self.all_tasks)))
        assert arrows.arrow_pairs() == {
            ("task1", "task2"), ("task2", "task3"), ("task2", "task4")
        }

        arrows.update_dependencies(
            get_dependency_changes(self.all_tasks, [self.task3, self.task4])
        )
        assert arrows.arrow_count == 0
        assert arrows.logical_edges() == set()
        assert arrows.incoming("task3") == []


class TestChangeSetHelpers(unittest.TestCase):
    """Tests for DependencyChanges helpers."""

    def test_filter_and_summary(self):
        changes = DependencyChanges(
            add=[Task(id="a", name="A")],
            remove=[Task(id="b", name="B")],
            update=[Task(id="c", name="C")],
        )
        kept = changes.filter(lambda t: t.id != "b")
        self.assertEqual(kept.summary(), {"add": ["a"], "remove": [], "update": ["c"]})
        self.assertEqual(changes.all_ids(), {"a", "b", "c"})
        self.assertFalse(changes.is_empty())


if __name__ == "__main__":
    unittest.main()
