#!/usr/bin/env python
"""
timeline-dep-graph - Demo Execution

Renders the demo pipeline into an in-memory timeline and walks through the
interactions a user would perform: expanding a task, focusing a sub-task,
grouping by status and letting the clock advance.
"""

from datetime import datetime, timedelta

from timeline_dep_graph import TimelineOrchestrator, TimelineToolbar, MemoryTimelineView
from timeline_dep_graph.config import EnvConfig, TimelineConfig
from timeline_dep_graph.demo import demo_tasks
from timeline_dep_graph.models.messages import FOCUS_CHANGED, GROUPING_CHANGED, TASK_SELECTED


def print_state(timeline: TimelineOrchestrator) -> None:
    """Print the items, arrows and containers currently on the timeline."""
    view = timeline.view
    print(f"        Items:      {sorted(timeline.items)}")
    arrows = sorted(timeline.arrow_service.arrow_pairs())
    print(f"        Arrows:     {', '.join(f'{s}->{t}' for s, t in arrows) or '-'}")
    print(f"        Containers: {sorted(timeline.hierarchy_service.element_ids()) or '-'}")
    lanes = [g.id for g in view.groups if not g.id.startswith("tdg-group-padding-")]
    print(f"        Lanes:      {lanes}")
    print()


def main():
    """Main entry point for the demo."""
    print("=" * 70)
    print("timeline-dep-graph - Demo Execution")
    print("=" * 70)
    print()

    print("Step 1: Loading configuration from .env...")
    EnvConfig.load_env_file()
    config = TimelineConfig.from_env(prefix="TDG_")
    print("        Configuration:")
    print(f"          - Bezier pull: {config.bezier_pull}")
    print(f"          - Focus margin: {config.focus_margin_seconds}s")
    print(f"          - Log Level: {config.log_level}")
    print()

    now = datetime.now()
    view = MemoryTimelineView()
    timeline = TimelineOrchestrator(view, tasks=demo_tasks(now), config=config, clock=lambda: now)
    toolbar = TimelineToolbar(view, on_grouping=timeline.set_is_grouped, config=config)

    def on_event(event):
        print(f"        [event] {event['event_type']} task={event.get('task_id')} {event['payload']}")

    for event_type in (TASK_SELECTED, FOCUS_CHANGED, GROUPING_CHANGED):
        timeline.event_bus.subscribe(event_type, on_event, subscriber_name="demo")

    try:
        print("Step 2: Mounting the timeline...")
        timeline.mount()
        print_state(timeline)

        print("Step 3: Expanding task 3...")
        view.click("3")
        print_state(timeline)

        print("Step 4: Focusing task 2B...")
        timeline.set_focus_task("2B")
        print_state(timeline)

        print("Step 5: Grouping by status...")
        toolbar.toggle_grouping()
        print_state(timeline)

        print("Step 6: Compressing task 3 through its container...")
        container = view.find_shape("tdg-expanded-3")
        if container is not None:
            container.fire("click")
        print_state(timeline)

        print("Step 7: Advancing the clock by one minute...")
        changes = timeline.on_time_tick(now + timedelta(minutes=1))
        print(f"        Visible changes: {changes.summary()}")
        print_state(timeline)

        print("=" * 70)
        print("Demo execution completed successfully!")
        print("=" * 70)

    except KeyboardInterrupt:
        print()
        print("Demo interrupted by user.")
    finally:
        timeline.destroy()


if __name__ == "__main__":
    main()
