"""
Event bus: lets views and integrations react to board and comment changes.

The board controller emits column_added, column_deleted, task_added,
task_deleted and task_moved. The comment engine emits comment_added,
reply_added, comment_approved and comment_rejected.
"""
import logging
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)


class EventBus:
    """Synchronous fan-out of named events to subscriber callbacks."""

    def __init__(self):
        self.subscribers: Dict[str, List[Callable]] = {}  # event_type -> callbacks
        self.history: List[Dict] = []

    def subscribe(self, event_type: str, callback: Callable) -> None:
        """Register a callback for an event type."""
        if event_type not in self.subscribers:
            self.subscribers[event_type] = []
        self.subscribers[event_type].append(callback)

    def unsubscribe(self, event_type: str, callback: Callable) -> bool:
        callbacks = self.subscribers.get(event_type, [])
        if callback in callbacks:
            callbacks.remove(callback)
            return True
        return False

    def emit(self, event_type: str, **kwargs) -> None:
        """Emit an event to all subscribers. A failing callback is logged and skipped."""
        self.history.append({"event_type": event_type, **kwargs})
        for callback in list(self.subscribers.get(event_type, [])):
            try:
                callback(**kwargs)
            except Exception as e:
                logger.error(f"Error in {event_type} callback: {e}")

    def recent(self, event_type: str = None, limit: int = 50) -> List[Dict]:
        """Most recent events first, optionally filtered by type."""
        events = [e for e in self.history if event_type is None or e["event_type"] == event_type]
        return list(reversed(events))[:limit]
