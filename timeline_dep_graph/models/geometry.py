"""
Geometry module - relative (view-reported) and absolute (shared frame) positions
"""

from dataclasses import dataclass, replace
from typing import Optional


@dataclass
class ParentFrame:
    """Vertical extent of the lane an item is laid out in."""
    top: float
    height: float


@dataclass
class RelativePosition:
    """
    Position of an item as reported by the view.

    left is None when the view laid the item out beyond the horizontal window.
    """
    top: float
    left: Optional[float]
    width: float
    height: float
    parent: ParentFrame


@dataclass
class AbsolutePosition:
    """
    Position in the coordinate frame shared by arrows and hierarchy containers.

    Horizontal fields are None when the item is off-screen horizontally.
    """
    left: Optional[float]
    top: float
    right: Optional[float]
    bottom: float
    mid_x: Optional[float]
    mid_y: float
    width: float
    height: float

    def copy(self) -> "AbsolutePosition":
        return replace(self)

    @property
    def horizontally_resolved(self) -> bool:
        return self.left is not None and self.right is not None
