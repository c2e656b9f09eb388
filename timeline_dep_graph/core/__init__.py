"""
Core module - Reconciliation engines and the timeline orchestrator
"""

from .diff import get_dependency_changes
from .position_service import (
    PositionService,
    get_absolute_position,
    get_bounding_box,
    add_top_padding,
    add_bottom_padding,
    add_padding,
    is_valid_absolute_position,
)
from .event_bus import EventBus, EventSubscription, EventRecord
from .arrow_service import Arrow, ArrowService, arrow_path
from .hierarchy_service import HierarchyService, HierarchyElement
from .grouping_service import GroupingService, grouped_lanes, ungrouped_lanes
from .time_tooltip import TimeTooltipService
from .toolbar import TimelineToolbar
from .timeline import TimelineOrchestrator

__all__ = [
    'get_dependency_changes',
    'PositionService',
    'get_absolute_position',
    'get_bounding_box',
    'add_top_padding',
    'add_bottom_padding',
    'add_padding',
    'is_valid_absolute_position',
    'EventBus',
    'EventSubscription',
    'EventRecord',
    'Arrow',
    'ArrowService',
    'arrow_path',
    'HierarchyService',
    'HierarchyElement',
    'GroupingService',
    'grouped_lanes',
    'ungrouped_lanes',
    'TimeTooltipService',
    'TimelineToolbar',
    'TimelineOrchestrator',
]
