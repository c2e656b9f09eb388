"""
View module - Visualization collaborator contract and in-memory implementation
"""

from .base import Shape, TimelineView, ARROW_LAYER, HIERARCHY_LAYER, OVERLAY_LAYER
from .memory import MemoryTimelineView

__all__ = [
    'Shape',
    'TimelineView',
    'ARROW_LAYER',
    'HIERARCHY_LAYER',
    'OVERLAY_LAYER',
    'MemoryTimelineView',
]
