"""
Logging setup plus a dedicated logger for fired gesture events.
"""

import os
import time
import logging
import logging.handlers
from collections import deque
from functools import wraps


def setup_logging(level="INFO", log_file=None, max_size_mb=10, backup_count=3):
    """Configure console (and optional rotating file) logging."""
    console_format = "%(asctime)s  %(levelname)-5s  %(message)s"
    file_format = "%(asctime)s [%(levelname)-7s] %(name)-25s | %(message)s"
    date_format = "%H:%M:%S"

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    root_logger.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(logging.INFO)
    console.setFormatter(logging.Formatter(console_format, datefmt=date_format))
    root_logger.addHandler(console)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(file_format, datefmt=date_format))
        root_logger.addHandler(file_handler)

    return root_logger


class GestureLogger:
    """Records every dispatched ActionEvent, for logs and quick stats."""

    def __init__(self, max_history=500):
        self.logger = logging.getLogger("gesture_events")
        self._history = deque(maxlen=max_history)

    def log_event(self, event, session=None, **_):
        """Event-bus compatible handler for Events.ACTION_REQUESTED."""
        self._history.append({
            "timestamp_ms": event.timestamp_ms,
            "gesture": event.label,
            "confidence": event.confidence,
            "action": event.action.name,
            "session": session,
        })
        self.logger.info(
            "Gesture: %-10s | Confidence: %.2f | Action: %-16s | Session: %s",
            event.label, event.confidence, event.action.name, session or "-",
        )

    def get_history(self, last_n=None):
        """Get recent gesture history."""
        history = list(self._history)
        if last_n:
            return history[-last_n:]
        return history

    def counts(self) -> dict:
        """Fired events per gesture label."""
        totals = {}
        for entry in self._history:
            totals[entry["gesture"]] = totals.get(entry["gesture"], 0) + 1
        return totals

    @property
    def total_events(self):
        return len(self._history)


def log_timing(func):
    """Decorator to log function execution time at DEBUG."""
    logger = logging.getLogger(func.__module__)

    @wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        result = func(*args, **kwargs)
        elapsed = (time.perf_counter() - start) * 1000
        logger.debug("%s took %.2fms", func.__name__, elapsed)
        return result

    return wrapper
