"""
Demo forest - a small pipeline used by the console demo and the tests

    0 -> 1 -> 2 (2A -> 2B)
      |    -> 3 (3A -> 3B, 3C -> 3D)
      -> 4
"""

from datetime import datetime, timedelta
from typing import List, Optional

from timeline_dep_graph.models.enums import Status
from timeline_dep_graph.models.task import Task


def _minutes_before(now: datetime, minutes: int) -> datetime:
    return now - timedelta(minutes=minutes)


def demo_tasks(now: Optional[datetime] = None) -> List[Task]:
    """
    Build the demo forest relative to now.

    Tasks 2, 2B and 4 are still running (no finish time).
    """
    now = now or datetime.now()

    task2 = Task(
        id="2", name="Task 2", status=Status.RUNNING,
        start_time=_minutes_before(now, 25),
        sub_tasks=[
            Task(id="2A", name="Task 2A", status=Status.SUCCESS, dependents=["2B"],
                 start_time=_minutes_before(now, 25), finish_time=_minutes_before(now, 5)),
            Task(id="2B", name="Task 2B", status=Status.RUNNING,
                 start_time=_minutes_before(now, 4)),
        ],
    )
    task3 = Task(
        id="3", name="Task 3", status=Status.FAILED,
        start_time=_minutes_before(now, 27), finish_time=now,
        sub_tasks=[
            Task(id="3A", name="Task 3A", status=Status.SUCCESS, dependents=["3B", "3C"],
                 start_time=_minutes_before(now, 27), finish_time=_minutes_before(now, 15)),
            Task(id="3B", name="Task 3B", status=Status.SUCCESS, dependents=["3D"],
                 start_time=_minutes_before(now, 14), finish_time=_minutes_before(now, 7)),
            Task(id="3C", name="Task 3C", status=Status.SUCCESS, dependents=["3D"],
                 start_time=_minutes_before(now, 14), finish_time=_minutes_before(now, 8)),
            Task(id="3D", name="Task 3D", status=Status.FAILED,
                 start_time=_minutes_before(now, 5), finish_time=now),
        ],
    )
    return [
        Task(id="0", name="Task 0", status=Status.SUCCESS, dependents=["1", "4"],
             start_time=_minutes_before(now, 120), finish_time=_minutes_before(now, 80)),
        Task(id="1", name="Task 1", status=Status.SUCCESS, dependents=["2", "3"],
             start_time=_minutes_before(now, 76), finish_time=_minutes_before(now, 30)),
        task2,
        task3,
        Task(id="4", name="Task 4", status=Status.RUNNING,
             start_time=_minutes_before(now, 76)),
    ]
