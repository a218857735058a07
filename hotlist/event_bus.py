"""Event bus delivering detection records to downstream consumers."""

import logging
import threading
from collections.abc import Callable
from typing import Any


class EventBus:
    """Event bus for pub/sub."""

    def __init__(self) -> None:
        """Initialize event bus."""
        self.subscribers: dict[str, list[Callable[..., None]]] = {}
        self._lock = threading.Lock()

    def subscribe(self, event: str, callback: Callable[..., None]) -> None:
        """Subscribe to event."""
        with self._lock:
            self.subscribers.setdefault(event, []).append(callback)
        logging.debug(f"Subscribed to event: {event}")

    def unsubscribe(self, event: str, callback: Callable[..., None]) -> bool:
        """Unsubscribe from event.

        Args:
            event: Event name
            callback: Callback to remove

        Returns:
            True if unsubscribed, False if not found
        """
        with self._lock:
            if event not in self.subscribers:
                return False

            try:
                self.subscribers[event].remove(callback)
            except ValueError:
                return False
        logging.debug(f"Unsubscribed from event: {event}")
        return True

    def clear_all_subscribers(self) -> None:
        """Clear all subscribers from all events."""
        with self._lock:
            self.subscribers.clear()
        logging.debug("Cleared all event subscribers")

    def emit(self, event: str, **data: Any) -> None:
        """Emit event.

        Note: Triggers may run on a worker thread, so the subscriber list is
        copied under the lock and callbacks run outside it. A failing
        callback is logged and does not affect the others.
        """
        with self._lock:
            callbacks = list(self.subscribers.get(event, ()))
        if not callbacks:
            return

        logging.debug(f"Emitting event: {event}")
        for callback in callbacks:
            try:
                callback(**data)
            except Exception as e:
                logging.error(f"Error in event handler for {event}: {e}")


class Events:
    """Standard event names.

    HOTLIST: A trigger produced a detection (possibly empty)
        kwargs: record (dict) - {"type": "hotlist", "data": {...}}
                result (DetectionResult) - The detection itself
    HOTLIST_ERROR: A trigger failed to look up its batch
        kwargs: error (LookupFailure) - The failure raised to the caller
    """

    HOTLIST = "hotlist"  # kwargs: record (dict), result (DetectionResult)
    HOTLIST_ERROR = "hotlist_error"  # kwargs: error (LookupFailure)
