"""
Enums module - Task status enumeration
"""

from enum import Enum
from typing import List


class Status(str, Enum):
    """
    Statuses a task can have, declared in display priority order.

    FAILED has the highest priority and SUCCESS the lowest, so when items are
    grouped by status the FAILED lane is the top-most one.
    """
    FAILED = "failed"
    BLOCKED = "blocked"
    UNKNOWN = "unknown"
    RUNNING = "running"
    SUCCESS = "success"

    @property
    def priority(self) -> int:
        """0 for the highest priority status."""
        return list(Status).index(self)

    @classmethod
    def ordered(cls) -> List["Status"]:
        return list(cls)
