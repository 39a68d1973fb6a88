"""
In-process event bus.

The engine announces what happened (e.g. a snapshot was ingested) and
whoever cares subscribes. The engine never knows who is listening.
"""

from collections import defaultdict
from typing import Any, Awaitable, Callable, Union
import inspect
import structlog

logger = structlog.get_logger(__name__)

SNAPSHOT_INGESTED = "snapshot_ingested"
DATA_CLEARED = "data_cleared"

Listener = Callable[[Any], Union[None, Awaitable[None]]]


class EventBus:
    """Named events with sync or async listeners."""

    def __init__(self):
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    def subscribe(self, event: str, listener: Listener) -> Callable[[], None]:
        """
        Register a listener.

        Returns:
            A function that unsubscribes the listener
        """
        self._listeners[event].append(listener)
        return lambda: self.unsubscribe(event, listener)

    def unsubscribe(self, event: str, listener: Listener) -> None:
        if listener in self._listeners.get(event, []):
            self._listeners[event].remove(listener)

    async def emit(self, event: str, payload: Any = None) -> None:
        """
        Call every listener of an event in subscription order.

        A failing listener is logged and skipped; it never fails the
        operation that emitted the event.
        """
        for listener in list(self._listeners.get(event, [])):
            try:
                result = listener(payload)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.warning(
                    "event_listener_failed",
                    event_name=event,
                    listener=getattr(listener, "__name__", repr(listener)),
                    error=str(e),
                    error_type=type(e).__name__
                )
