"""
Publish/subscribe event bus between the pipeline and its collaborators.

The pipeline never calls the action executor or the UI directly; it emits
events and whoever cares subscribes.

Usage:
    bus = EventBus()
    bus.subscribe(Events.ACTION_REQUESTED, executor.on_action)
    bus.emit(Events.ACTION_REQUESTED, event=action_event, session="foreground")
"""

import time
import logging
import threading
from collections import defaultdict, deque
from typing import Callable

logger = logging.getLogger(__name__)


class EventBus:
    """Thread-safe publish/subscribe event bus.

    Listeners run synchronously, highest priority first. A failing
    listener is logged and skipped; it never breaks the frame loop.
    """

    _instance = None

    def __new__(cls):
        """Singleton pattern: one bus per application."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self._listeners = defaultdict(list)  # event_name -> [(priority, callback)]
        self._lock = threading.Lock()
        self._history = deque(maxlen=100)
        self._initialized = True

    def subscribe(self, event_name: str, callback: Callable, priority: int = 0):
        """Register a listener for an event.

        Args:
            event_name: Event to listen for
            callback: Function to call. Receives **kwargs from emit().
            priority: Higher priority callbacks run first (default 0)
        """
        with self._lock:
            self._listeners[event_name].append((priority, callback))
            self._listeners[event_name].sort(key=lambda x: -x[0])
        logger.debug("Subscribed to '%s': %s (priority=%d)",
                     event_name, getattr(callback, "__name__", callback), priority)

    def unsubscribe(self, event_name: str, callback: Callable):
        """Remove a listener for an event."""
        with self._lock:
            self._listeners[event_name] = [
                (p, cb) for p, cb in self._listeners[event_name] if cb is not callback
            ]

    def emit(self, event_name: str, **kwargs) -> int:
        """Emit an event to all registered listeners.

        Returns:
            Number of listeners that handled the event without error
        """
        with self._lock:
            listeners = list(self._listeners.get(event_name, []))
            self._history.append({
                "event": event_name,
                "time": time.time(),
                "session": kwargs.get("session"),
            })

        delivered = 0
        for _, callback in listeners:
            try:
                callback(**kwargs)
                delivered += 1
            except Exception:
                logger.exception("Event handler error [%s -> %s]",
                                 event_name, getattr(callback, "__name__", callback))
        return delivered

    def listener_count(self, event_name: str = None) -> int:
        """Registered listeners, for one event or in total."""
        with self._lock:
            if event_name is not None:
                return len(self._listeners.get(event_name, []))
            return sum(len(cbs) for cbs in self._listeners.values())

    def get_history(self, last_n: int = 10) -> list:
        """Get recent event history."""
        with self._lock:
            return list(self._history)[-last_n:]

    def reset(self):
        """Drop all listeners and history (for testing)."""
        with self._lock:
            self._listeners.clear()
            self._history.clear()


# =============================================================================
# Standard Event Names (constants to avoid typos)
# =============================================================================

class Events:
    """Standard event names used throughout the system."""

    # Pipeline events
    HAND_DETECTED = "hand_detected"
    HAND_LOST = "hand_lost"
    GESTURE_STABLE = "gesture_stable"

    # Action events
    ACTION_REQUESTED = "action_requested"

    # Lifecycle
    CLASSIFIER_READY = "classifier_ready"
    CLASSIFIER_FAILED = "classifier_failed"
    SESSION_RESET = "session_reset"
