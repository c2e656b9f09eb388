"""
Tests for forest validation and the exception hierarchy
"""

import unittest
from datetime import datetime, timedelta

import pytest

from timeline_dep_graph.demo import demo_tasks
from timeline_dep_graph.models import Task
from timeline_dep_graph.utils import (
    CyclicDependencyError,
    DuplicateTaskIdError,
    InvalidTaskError,
    TimelineError,
    ValidationError,
    find_dependency_cycles,
    validate_forest,
)

NOW = datetime(2026, 10, 17, 12, 0, 0)


class TestValidateForest(unittest.TestCase):
    """Tests for validate_forest()."""

    def test_demo_forest_is_valid(self):
        result = validate_forest(demo_tasks(NOW))
        self.assertTrue(result)
        self.assertEqual(result.errors, [])
        self.assertEqual(str(result), "Validation passed")

    def test_cycle_detected(self):
        tasks = [
            Task(id="a", name="A", dependents=["b"]),
            Task(id="b", name="B", dependents=["a"]),
        ]
        result = validate_forest(tasks)

        self.assertFalse(result.valid)
        self.assertEqual(result.cycles, [["a", "b", "a"]])

    def test_cycle_through_sub_tasks(self):
        tasks = [
            Task(id="p", name="P", sub_tasks=[
                Task(id="c1", name="C1", dependents=["c2"]),
                Task(id="c2", name="C2", dependents=["c1"]),
            ]),
        ]
        result = validate_forest(tasks)
        self.assertEqual(len(result.cycles), 1)

    def test_self_dependency(self):
        result = validate_forest([Task(id="a", name="A", dependents=["a"])])
        self.assertEqual(result.cycles, [["a", "a"]])

    def test_duplicate_ids(self):
        tasks = [
            Task(id="a", name="A", sub_tasks=[Task(id="b", name="B")]),
            Task(id="b", name="B again"),
        ]
        result = validate_forest(tasks)
        self.assertEqual(result.duplicate_ids, ["b"])
        self.assertFalse(result.valid)

    def test_finish_before_start(self):
        task = Task(id="a", name="A", start_time=NOW, finish_time=NOW - timedelta(minutes=1))
        result = validate_forest([task])
        self.assertIn("a", result.invalid_tasks)

    def test_dangling_dependents_are_warnings(self):
        result = validate_forest([Task(id="a", name="A", dependents=["ghost"])])
        self.assertTrue(result.valid)
        self.assertEqual(result.dangling_dependents, {"a": ["ghost"]})
        self.assertEqual(len(result.warnings), 1)


class TestStrictValidation:
    """Strict mode raises the matching ValidationError subclass."""

    def test_cycle_raises(self):
        tasks = [
            Task(id="a", name="A", dependents=["b"]),
            Task(id="b", name="B", dependents=["a"]),
        ]
        with pytest.raises(CyclicDependencyError) as exc_info:
            validate_forest(tasks, strict=True)
        assert exc_info.value.cycle == ["a", "b", "a"]
        assert exc_info.value.to_dict()["error_code"] == "CYCLIC_DEPENDENCY"

    def test_duplicate_raises(self):
        with pytest.raises(DuplicateTaskIdError):
            validate_forest([Task(id="a", name="A"), Task(id="a", name="A")], strict=True)

    def test_invalid_task_raises(self):
        task = Task(id="a", name="A", start_time=NOW, finish_time=NOW - timedelta(seconds=1))
        with pytest.raises(InvalidTaskError):
            validate_forest([task], strict=True)

    def test_hierarchy(self):
        assert issubclass(CyclicDependencyError, ValidationError)
        assert issubclass(ValidationError, TimelineError)


class TestFindDependencyCycles:
    """Tests for the cycle finder on its own."""

    def test_acyclic(self):
        by_id = {t.id: t for root in demo_tasks(NOW) for t in root.walk()}
        assert find_dependency_cycles(by_id) == []

    def test_unknown_dependents_are_skipped(self):
        by_id = {"a": Task(id="a", name="A", dependents=["zz"])}
        assert find_dependency_cycles(by_id) == []


if __name__ == "__main__":
    unittest.main()
