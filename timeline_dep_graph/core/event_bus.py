"""
Event Bus - typed channel between the timeline engines

The Hierarchy Engine reports user interaction (compress request, hover,
selection) here instead of calling into the orchestrator, and the
orchestrator publishes its output events here for the embedding
application.

Delivery is run-to-completion: publish() enqueues the event and, unless a
dispatch is already in progress, drains the queue in FIFO order. An event
published from inside a handler is therefore delivered after the current
event has reached every subscriber, never in the middle of it.

Features:
- Priority-ordered subscribers, per event type or wildcard ("*")
- Optional per-subscription filter
- Event history and replay
- Dead letter queue for events whose handlers failed
"""

from collections import defaultdict, deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Deque, Dict, List, Optional, Tuple
import traceback
import uuid

from timeline_dep_graph.models.messages import TimelineEvent
from timeline_dep_graph.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class EventSubscription:
    """Represents a subscription to an event type."""
    subscription_id: str
    event_type: str
    handler: Callable[[TimelineEvent], Any]
    filter_func: Optional[Callable[[TimelineEvent], bool]] = None
    priority: int = 5  # 1=highest, 10=lowest
    active: bool = True
    subscriber_name: str = "unknown"
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())


@dataclass
class EventRecord:
    """Record of an event that was delivered."""
    event: TimelineEvent
    published_at: str
    handlers_notified: List[str]
    handlers_succeeded: List[str]
    handlers_failed: List[str]
    processing_time_ms: int


class EventBus:
    """
    Run-to-completion pub-sub bus.

    Usage:
        event_bus = EventBus()

        def on_compress(event: TimelineEvent):
            orchestrator.compress_task(event['task_id'])

        event_bus.subscribe(
            event_type=COMPRESS_REQUESTED,
            handler=on_compress,
            subscriber_name="timeline_orchestrator"
        )

        event_bus.publish(create_timeline_event(
            COMPRESS_REQUESTED, source="hierarchy_service", task_id="3"
        ))
    """

    def __init__(self, enable_history: bool = True, history_max_size: int = 1000):
        """
        Initialize the event bus.

        Args:
            enable_history: Whether to keep event history
            history_max_size: Maximum number of events to keep in history
        """
        self.subscriptions: Dict[str, List[EventSubscription]] = defaultdict(list)
        self.wildcard_subscriptions: List[EventSubscription] = []

        self._queue: Deque[TimelineEvent] = deque()
        self._dispatching = False

        # Event history
        self.enable_history = enable_history
        self.history_max_size = history_max_size
        self.event_history: List[EventRecord] = []

        # Dead letter queue for failed events
        self.dead_letter_queue: List[Tuple[TimelineEvent, str]] = []

        # Statistics
        self.stats = {
            "events_published": 0,
            "events_delivered": 0,
            "events_failed": 0,
            "handlers_executed": 0,
            "handlers_failed": 0
        }

        logger.debug("Event Bus initialized")

    def subscribe(
        self,
        event_type: str,
        handler: Callable[[TimelineEvent], Any],
        subscriber_name: str = "unknown",
        filter_func: Optional[Callable[[TimelineEvent], bool]] = None,
        priority: int = 5
    ) -> str:
        """
        Subscribe to an event type.

        Args:
            event_type: Type of event to subscribe to (or "*" for all events)
            handler: Function to call when event occurs
            subscriber_name: Name of the subscriber (for logging)
            filter_func: Optional filter function (return True to receive event)
            priority: Handler priority (1=highest, 10=lowest)

        Returns:
            subscription_id: Unique subscription ID (for unsubscribing)
        """
        subscription = EventSubscription(
            subscription_id=str(uuid.uuid4()),
            event_type=event_type,
            handler=handler,
            filter_func=filter_func,
            priority=priority,
            subscriber_name=subscriber_name
        )

        if event_type == "*":
            self.wildcard_subscriptions.append(subscription)
            self.wildcard_subscriptions.sort(key=lambda s: s.priority)
            logger.debug(f"Wildcard subscription added: {subscriber_name}")
        else:
            self.subscriptions[event_type].append(subscription)
            self.subscriptions[event_type].sort(key=lambda s: s.priority)
            logger.debug(f"Subscription added: {subscriber_name} -> {event_type}")

        return subscription.subscription_id

    def unsubscribe(self, subscription_id: str) -> bool:
        """
        Unsubscribe from events.

        Returns:
            True if subscription was found and removed
        """
        for i, sub in enumerate(self.wildcard_subscriptions):
            if sub.subscription_id == subscription_id:
                self.wildcard_subscriptions.pop(i)
                logger.debug(f"Wildcard subscription removed: {sub.subscriber_name}")
                return True

        for event_type, subs in self.subscriptions.items():
            for i, sub in enumerate(subs):
                if sub.subscription_id == subscription_id:
                    subs.pop(i)
                    logger.debug(f"Subscription removed: {sub.subscriber_name} -> {event_type}")
                    return True

        return False

    def publish(self, event: TimelineEvent) -> None:
        """
        Queue an event and deliver the queue unless a delivery is running.

        Args:
            event: Event to publish
        """
        self.stats["events_published"] += 1
        self._queue.append(event)
        if self._dispatching:
            logger.debug(f"Event {event['event_type']} queued behind the current dispatch")
            return

        self._dispatching = True
        try:
            while self._queue:
                self._deliver(self._queue.popleft())
        finally:
            self._dispatching = False

    @property
    def pending(self) -> int:
        return len(self._queue)

    def _deliver(self, event: TimelineEvent) -> None:
        start_time = datetime.now()
        event_type = event['event_type']

        logger.debug(
            f"Event delivered: {event_type} from {event['source']}",
            extra={"task_id": event.get('task_id'), "payload": event['payload']}
        )

        typed_subs = self.subscriptions.get(event_type, [])
        all_subs = typed_subs + self.wildcard_subscriptions

        handlers_notified = []
        handlers_succeeded = []
        handlers_failed = []

        for subscription in all_subs:
            if not subscription.active:
                continue

            if subscription.filter_func and not subscription.filter_func(event):
                logger.debug(f"Event filtered out for {subscription.subscriber_name}")
                continue

            handlers_notified.append(subscription.subscriber_name)

            try:
                subscription.handler(event)
                handlers_succeeded.append(subscription.subscriber_name)
                self.stats["handlers_executed"] += 1
            except Exception as e:
                handlers_failed.append(subscription.subscriber_name)
                self.stats["handlers_failed"] += 1
                logger.error(
                    f"Handler {subscription.subscriber_name} failed for event {event_type}: {e}"
                )
                logger.debug(traceback.format_exc())
                self.dead_letter_queue.append((event, str(e)))

        if handlers_succeeded:
            self.stats["events_delivered"] += 1
        if handlers_failed:
            self.stats["events_failed"] += 1

        if self.enable_history:
            processing_time_ms = int((datetime.now() - start_time).total_seconds() * 1000)
            record = EventRecord(
                event=event,
                published_at=start_time.isoformat(),
                handlers_notified=handlers_notified,
                handlers_succeeded=handlers_succeeded,
                handlers_failed=handlers_failed,
                processing_time_ms=processing_time_ms
            )
            self.event_history.append(record)

            if len(self.event_history) > self.history_max_size:
                self.event_history = self.event_history[-self.history_max_size:]

    def get_subscriptions(self, event_type: Optional[str] = None) -> List[EventSubscription]:
        """
        Get all subscriptions, optionally filtered by event type.
        """
        if event_type:
            return list(self.subscriptions.get(event_type, []))
        all_subs = []
        for subs in self.subscriptions.values():
            all_subs.extend(subs)
        all_subs.extend(self.wildcard_subscriptions)
        return all_subs

    def get_event_history(
        self,
        event_type: Optional[str] = None,
        limit: int = 100
    ) -> List[EventRecord]:
        """
        Get event history, optionally filtered.

        Returns:
            List of event records (most recent first)
        """
        if not self.enable_history:
            return []

        history = self.event_history[::-1]

        if event_type:
            history = [r for r in history if r.event['event_type'] == event_type]

        return history[:limit]

    def get_statistics(self) -> Dict[str, Any]:
        """Get event bus statistics."""
        return {
            **self.stats,
            "active_subscriptions": sum(len(subs) for subs in self.subscriptions.values()),
            "wildcard_subscriptions": len(self.wildcard_subscriptions),
            "event_types_registered": len(self.subscriptions),
            "dead_letter_queue_size": len(self.dead_letter_queue),
            "history_size": len(self.event_history)
        }

    def clear_dead_letter_queue(self) -> None:
        cleared = len(self.dead_letter_queue)
        self.dead_letter_queue.clear()
        logger.info(f"Dead letter queue cleared ({cleared} events)")

    def replay_event(self, event_id: str) -> bool:
        """
        Replay a specific event from history.

        Returns:
            True if the event was found and published again
        """
        for record in self.event_history:
            if record.event['event_id'] == event_id:
                logger.info(f"Replaying event: {event_id}")
                self.publish(record.event)
                return True

        logger.warning(f"Event {event_id} not found in history")
        return False

    def clear(self) -> None:
        """Drop every subscription and any queued event."""
        self.subscriptions.clear()
        self.wildcard_subscriptions.clear()
        self._queue.clear()
