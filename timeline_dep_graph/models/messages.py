"""
Standardized event formats for the timeline engines

Engines never call each other's side effects directly for user interaction:
the Hierarchy Engine, the view event handlers and the orchestrator exchange
TimelineEvent dicts over the EventBus.

Key Principles:
- Type safety via TypedDict
- One event type per interaction, registered in EVENT_TYPE_REGISTRY
- Payloads carry task ids, never task references
"""

from typing import TypedDict, Optional, Any, Literal, NotRequired
from datetime import datetime
import uuid


# ============================================================================
# EVENT TYPES
# ============================================================================

COMPRESS_REQUESTED = "compress_requested"
TASK_OVER = "task_over"
TASK_OUT = "task_out"
TASK_SELECTED = "task_selected"
GROUPING_CHANGED = "grouping_changed"
FOCUS_CHANGED = "focus_changed"

EventCategory = Literal["interaction", "output", "lifecycle"]


class TimelineEvent(TypedDict):
    """
    Standard event format on the timeline bus.

    Published by: HierarchyService, TimelineOrchestrator
    Consumed by: TimelineOrchestrator, the embedding application
    """
    # Event Identity
    event_id: str                # UUID
    event_type: str              # e.g., "compress_requested", "task_selected"
    event_category: EventCategory

    # Event Source
    source: str
    task_id: NotRequired[Optional[str]]

    # Event Payload
    payload: dict[str, Any]

    # Event Metadata
    timestamp: str


# Registry of event types and their usual consumers
EVENT_TYPE_REGISTRY: dict[str, list[str]] = {
    # Hierarchy interaction
    COMPRESS_REQUESTED: ["timeline_orchestrator"],
    TASK_OVER: ["embedding_application"],
    TASK_OUT: ["embedding_application"],
    TASK_SELECTED: ["embedding_application"],

    # Orchestrator output
    GROUPING_CHANGED: ["embedding_application", "toolbar"],
    FOCUS_CHANGED: ["embedding_application"],
}

EVENT_CATEGORIES: dict[str, EventCategory] = {
    COMPRESS_REQUESTED: "interaction",
    TASK_OVER: "interaction",
    TASK_OUT: "interaction",
    TASK_SELECTED: "output",
    GROUPING_CHANGED: "output",
    FOCUS_CHANGED: "lifecycle",
}


def create_timeline_event(
    event_type: str,
    source: str,
    task_id: Optional[str] = None,
    payload: Optional[dict[str, Any]] = None,
    event_category: Optional[EventCategory] = None
) -> TimelineEvent:
    """
    Helper function to create timeline events.

    Args:
        event_type: Type of event (e.g., "compress_requested")
        source: Component that generated the event
        task_id: Id of the task the event is about, if any
        payload: Event data
        event_category: Category; looked up from the event type when omitted

    Returns:
        TimelineEvent instance
    """
    if event_category is None:
        event_category = EVENT_CATEGORIES.get(event_type, "interaction")

    return TimelineEvent(
        event_id=str(uuid.uuid4()),
        event_type=event_type,
        event_category=event_category,
        source=source,
        task_id=task_id,
        payload=payload or {},
        timestamp=datetime.now().isoformat(),
    )
