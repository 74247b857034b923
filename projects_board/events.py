"""
Change notifications: lets a front end redraw when the board or session changes.

Emitted events:
    session_started   user=Identity
    session_ended
    tasks_loaded      counts={status: n}
    task_created      task=Task
    task_updated      task=Task
    task_deleted      task_id=str
    task_moved        task=Task, from_status=TaskStatus, to_status=TaskStatus
    tasks_cleared
"""
import logging
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)

ALL_EVENTS = "*"


class EventBus:
    """Routes named events to subscriber callbacks."""

    def __init__(self):
        self.subscribers: Dict[str, List[Callable]] = {}  # event_type -> callbacks

    def subscribe(self, event_type: str, callback: Callable) -> None:
        """Register a callback for an event type ("*" for every event)."""
        self.subscribers.setdefault(event_type, []).append(callback)

    def unsubscribe(self, event_type: str, callback: Callable) -> None:
        callbacks = self.subscribers.get(event_type, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def emit(self, event_type: str, **kwargs) -> None:
        """Call every subscriber. Wildcard subscribers also get the event name."""
        for callback in list(self.subscribers.get(event_type, [])):
            try:
                callback(**kwargs)
            except Exception:
                logger.exception(f"Error in {event_type} callback")
        for callback in list(self.subscribers.get(ALL_EVENTS, [])):
            try:
                callback(event_type, **kwargs)
            except Exception:
                logger.exception(f"Error in wildcard callback for {event_type}")
