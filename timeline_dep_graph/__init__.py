"""
timeline-dep-graph - Hierarchical task dependency graphs on a timeline

Renders a forest of tasks as a timeline: tasks are positioned by their
start and finish times, grouped by status on demand, connected by dependency
arrows, and can be expanded into their sub-tasks or compressed back into
their parent. Snapshot changes and clock ticks are reconciled incrementally.

The rendering widget itself is pluggable (see timeline_dep_graph.view);
MemoryTimelineView is a deterministic implementation used by the demo and
the tests.

Installation:
pip install timeline-dep-graph

Configuration:
    Optional .env file (all keys have defaults):

    TDG_LOG_LEVEL=INFO
    TDG_ENABLE_FILE_LOGGING=false
    TDG_BEZIER_PULL=1.0
    TDG_FOCUS_MARGIN_SECONDS=5

Example:
    >>> from timeline_dep_graph import TimelineOrchestrator, MemoryTimelineView, tasks_from_json
    >>>
    >>> view = MemoryTimelineView()
    >>> timeline = TimelineOrchestrator(view, tasks=tasks_from_json(snapshot_json))
    >>> timeline.mount()
    >>> timeline.expand_task("3")
    >>> timeline.set_focus_task("3B")
"""

__version__ = "1.0.0"
__author__ = "Your Name"
__all__ = [
    'TimelineOrchestrator',
    'TimelineToolbar',
    'TimelineConfig',
    'EnvConfig',
    'Status',
    'Task',
    'TaskForest',
    'DependencyChanges',
    'get_dependency_changes',
    'tasks_from_json',
    'tasks_to_json',
    'TimelineView',
    'MemoryTimelineView',
    'validate_forest',
]

from timeline_dep_graph.config import TimelineConfig, EnvConfig
from timeline_dep_graph.models import Status, Task, TaskForest, DependencyChanges, tasks_from_json, tasks_to_json
from timeline_dep_graph.core import TimelineOrchestrator, TimelineToolbar, get_dependency_changes
from timeline_dep_graph.view import TimelineView, MemoryTimelineView
from timeline_dep_graph.utils.validation import validate_forest
