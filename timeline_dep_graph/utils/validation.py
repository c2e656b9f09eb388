"""
Validation Utilities for task forests

The engines assume an acyclic dependents graph and unique task ids but never
check either on the hot path. Call validate_forest() on untrusted snapshots
before handing them to the orchestrator.
"""

from typing import Dict, List, Optional, Set

from timeline_dep_graph.models.task import Task, TaskId
from timeline_dep_graph.utils.exceptions import (
    CyclicDependencyError,
    DuplicateTaskIdError,
    InvalidTaskError,
)
from timeline_dep_graph.utils.logger import get_logger

logger = get_logger(__name__)


# ============================================================================
# VALIDATION RESULTS
# ============================================================================

class ValidationResult:
    """Result of a validation check."""

    def __init__(
        self,
        valid: bool,
        errors: Optional[List[str]] = None,
        warnings: Optional[List[str]] = None
    ):
        self.valid = valid
        self.errors = errors or []
        self.warnings = warnings or []
        self.duplicate_ids: List[TaskId] = []
        self.dangling_dependents: Dict[TaskId, List[TaskId]] = {}
        self.cycles: List[List[TaskId]] = []
        self.invalid_tasks: Dict[TaskId, str] = {}

    def __bool__(self) -> bool:
        return self.valid

    def __str__(self) -> str:
        if self.valid:
            return "Validation passed"
        return f"Validation failed: {'; '.join(self.errors)}"


# ============================================================================
# FOREST VALIDATION
# ============================================================================

def validate_forest(tasks: List[Task], strict: bool = False) -> ValidationResult:
    """
    Validate a task forest.

    Errors: duplicate ids, finish time before start time, dependency cycles.
    Warnings: dependents naming ids that exist nowhere in the forest (those
    edges are simply never drawn).

    Args:
        tasks: Forest to validate
        strict: Raise the first error as a ValidationError subclass

    Returns:
        ValidationResult with any errors and warnings

    Raises:
        DuplicateTaskIdError, InvalidTaskError, CyclicDependencyError: strict mode only
    """
    errors: List[str] = []
    warnings: List[str] = []

    by_id: Dict[TaskId, Task] = {}
    duplicates: List[TaskId] = []
    invalid: Dict[TaskId, str] = {}
    for root in tasks:
        for task in root.walk():
            if task.id in by_id:
                if task.id not in duplicates:
                    duplicates.append(task.id)
                continue
            by_id[task.id] = task
            if (
                task.start_time is not None
                and task.finish_time is not None
                and task.finish_time < task.start_time
            ):
                invalid[task.id] = "finish time is before start time"

    for task_id in duplicates:
        errors.append(f"Duplicate task id: {task_id}")
        if strict:
            raise DuplicateTaskIdError(task_id)

    for task_id, reason in invalid.items():
        errors.append(f"Task {task_id}: {reason}")
        if strict:
            raise InvalidTaskError(task_id, reason)

    dangling: Dict[TaskId, List[TaskId]] = {}
    for task in by_id.values():
        missing = [dep for dep in task.dependents if dep not in by_id]
        if missing:
            dangling[task.id] = missing
            warnings.append(f"Task {task.id} depends on unknown ids: {', '.join(missing)}")

    cycles = find_dependency_cycles(by_id)
    for cycle in cycles:
        errors.append(f"Dependency cycle: {' -> '.join(cycle)}")
        if strict:
            raise CyclicDependencyError(cycle)

    result = ValidationResult(valid=len(errors) == 0, errors=errors, warnings=warnings)
    result.duplicate_ids = duplicates
    result.dangling_dependents = dangling
    result.cycles = cycles
    result.invalid_tasks = invalid

    if not result.valid:
        logger.warning(f"Forest validation failed: {len(errors)} error(s)", extra={"errors": errors})
    elif warnings:
        logger.debug(f"Forest validation passed with {len(warnings)} warning(s)")
    return result


def find_dependency_cycles(by_id: Dict[TaskId, Task]) -> List[List[TaskId]]:
    """
    Find the cycles of the dependents graph with an iterative colouring DFS.

    Each cycle is reported once, as the id path closing back on its first id
    (e.g. ["a", "b", "a"]).
    """
    white, grey, black = 0, 1, 2
    colour: Dict[TaskId, int] = {task_id: white for task_id in by_id}
    cycles: List[List[TaskId]] = []
    reported: Set[frozenset] = set()

    for start in by_id:
        if colour[start] != white:
            continue
        path: List[TaskId] = [start]
        iterators = [iter(by_id[start].dependents)]
        colour[start] = grey
        while iterators:
            dep = next(iterators[-1], None)
            if dep is None:
                colour[path.pop()] = black
                iterators.pop()
                continue
            if dep not in colour:
                continue
            if colour[dep] == grey:
                cycle = path[path.index(dep):] + [dep]
                key = frozenset(cycle)
                if key not in reported:
                    reported.add(key)
                    cycles.append(cycle)
            elif colour[dep] == white:
                colour[dep] = grey
                path.append(dep)
                iterators.append(iter(by_id[dep].dependents))
    return cycles
