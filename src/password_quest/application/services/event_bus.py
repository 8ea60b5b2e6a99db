from collections import defaultdict
import logging
from typing import Callable, DefaultDict, List, Optional, Type


Handler = Callable[[object], None]


class EventBus:
    """Synchronous publish/subscribe channel between the fight and its observers.

    Handlers run in (priority, registration) order. A failing handler is logged and
    isolated so presentation bugs never stall the combat timeline.
    """

    def __init__(self) -> None:
        self._subscribers: DefaultDict[Optional[Type[object]], List[tuple[int, int, Handler]]] = defaultdict(list)
        self._next_order = 0
        self._last_publish_errors: List[Exception] = []
        self._logger = logging.getLogger(__name__)

    def subscribe(self, event_type: Type[object], handler: Handler, *, priority: int = 100) -> None:
        self._register(event_type, handler, priority)

    def subscribe_all(self, handler: Handler, *, priority: int = 100) -> None:
        """Receive every published event regardless of its type."""
        self._register(None, handler, priority)

    def unsubscribe(self, event_type: Optional[Type[object]], handler: Handler) -> bool:
        rows = self._subscribers.get(event_type, [])
        for row in rows:
            if row[2] is handler:
                rows.remove(row)
                return True
        return False

    def _register(self, key: Optional[Type[object]], handler: Handler, priority: int) -> None:
        self._subscribers[key].append((int(priority), self._next_order, handler))
        self._next_order += 1
        self._subscribers[key].sort(key=lambda row: (row[0], row[1]))

    def publish(self, event: object) -> None:
        self._last_publish_errors = []
        event_type = type(event)
        rows = sorted(
            self._subscribers.get(event_type, []) + self._subscribers.get(None, []),
            key=lambda row: (row[0], row[1]),
        )
        for priority, _, handler in rows:
            try:
                handler(event)
            except Exception as exc:
                self._last_publish_errors.append(exc)
                handler_name = getattr(handler, "__qualname__", getattr(handler, "__name__", repr(handler)))
                self._logger.exception(
                    "Event handler failed and was isolated",
                    extra={
                        "event_type": event_type.__name__,
                        "handler": handler_name,
                        "priority": priority,
                    },
                )

    def last_publish_errors(self) -> List[Exception]:
        return list(self._last_publish_errors)


class EventRecorder:
    """Collects published events in order; used by replays and tests."""

    def __init__(self, event_bus: EventBus | None = None) -> None:
        self.events: List[object] = []
        if event_bus is not None:
            event_bus.subscribe_all(self.record, priority=0)

    def record(self, event: object) -> None:
        self.events.append(event)

    def of_type(self, event_type: Type[object]) -> List[object]:
        return [event for event in self.events if isinstance(event, event_type)]

    def clear(self) -> None:
        self.events.clear()
