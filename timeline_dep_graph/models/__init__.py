"""
Models module - Data structures and enums for timeline-dep-graph
"""

from .enums import Status
from .task import (
    Task,
    TaskId,
    equal_task_fields,
    equals_task,
    equals_task_array,
    root_tasks,
    leaf_tasks,
    internal_leaf_tasks,
    get_task_by_id,
    get_super_task,
    patch_and_filter_tasks,
    tasks_from_json,
    tasks_to_json,
)
from .forest import TaskForest
from .item import Group, ItemData, map_to_item, set_items_groups, get_used_status_set
from .changes import DependencyChanges
from .geometry import ParentFrame, RelativePosition, AbsolutePosition

# Event formats
from .messages import (
    TimelineEvent,
    EVENT_TYPE_REGISTRY,
    COMPRESS_REQUESTED,
    TASK_OVER,
    TASK_OUT,
    TASK_SELECTED,
    GROUPING_CHANGED,
    FOCUS_CHANGED,
    create_timeline_event,
)

__all__ = [
    'Status',
    'Task',
    'TaskId',
    'equal_task_fields',
    'equals_task',
    'equals_task_array',
    'root_tasks',
    'leaf_tasks',
    'internal_leaf_tasks',
    'get_task_by_id',
    'get_super_task',
    'patch_and_filter_tasks',
    'tasks_from_json',
    'tasks_to_json',
    'TaskForest',
    'Group',
    'ItemData',
    'map_to_item',
    'set_items_groups',
    'get_used_status_set',
    'DependencyChanges',
    'ParentFrame',
    'RelativePosition',
    'AbsolutePosition',

    # Event formats
    'TimelineEvent',
    'EVENT_TYPE_REGISTRY',
    'COMPRESS_REQUESTED',
    'TASK_OVER',
    'TASK_OUT',
    'TASK_SELECTED',
    'GROUPING_CHANGED',
    'FOCUS_CHANGED',
    'create_timeline_event',
]
