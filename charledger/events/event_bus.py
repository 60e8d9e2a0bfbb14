"""
A small synchronous publish/subscribe bus.

The ledger only needs a fire-and-forget emit callable; EventBus.emit is the
usual one. Handlers run in registration order on the caller's stack.
"""

from typing import Any, Callable

from charledger.core.logging import log_debug, log_error

from .event_system import EventType

Handler = Callable[..., Any]


class EventBus:
    """
    Dispatches ledger notifications to registered handlers.

    Attributes:
        listeners (dict[EventType, list[Handler]]):
            Persistent handlers per event type.
        once_listeners (dict[EventType, list[Handler]]):
            Handlers that are dropped after their first call.

    """

    def __init__(self) -> None:
        self.listeners: dict[EventType, list[Handler]] = {}
        self.once_listeners: dict[EventType, list[Handler]] = {}

    def on(self, event_type: EventType, handler: Handler) -> bool:
        """
        Registers a handler for every future emission of an event.

        Args:
            event_type (EventType): The event to listen to.
            handler (Handler): Called with the emitted arguments.

        Returns:
            bool: False when the handler is not callable.

        """
        if not callable(handler):
            log_error("Handler must be callable", {"event": event_type})
            return False
        self.listeners.setdefault(event_type, []).append(handler)
        log_debug(
            "Listener registered",
            {"event": event_type.value, "total": len(self.listeners[event_type])},
        )
        return True

    def once(self, event_type: EventType, handler: Handler) -> bool:
        """Registers a handler for the next emission of an event only."""
        if not callable(handler):
            log_error("Handler must be callable", {"event": event_type})
            return False
        self.once_listeners.setdefault(event_type, []).append(handler)
        return True

    def off(self, event_type: EventType, handler: Handler) -> bool:
        """
        Removes a persistent handler.

        Returns:
            bool: True when the handler was registered.

        """
        handlers = self.listeners.get(event_type)
        if not handlers or handler not in handlers:
            return False
        handlers.remove(handler)
        if not handlers:
            del self.listeners[event_type]
        return True

    def emit(self, event_type: EventType, *args: Any) -> None:
        """
        Calls every handler of an event with the given arguments.

        A handler that raises is logged and does not stop the others.

        Args:
            event_type (EventType): The event to dispatch.
            *args (Any): Passed through to each handler.

        """
        log_debug("Event emitted", {"event": event_type.value})

        for handler in list(self.listeners.get(event_type, [])):
            self._call(event_type, handler, args)

        once_handlers = self.once_listeners.pop(event_type, [])
        for handler in once_handlers:
            self._call(event_type, handler, args)

    def _call(self, event_type: EventType, handler: Handler, args: tuple) -> None:
        try:
            handler(*args)
        except Exception:
            log_error(
                "Error in event handler",
                {"event": event_type.value, "handler": getattr(handler, "__name__", handler)},
                exc_info=True,
            )

    def clear_event(self, event_type: EventType) -> None:
        """Removes every handler of one event."""
        self.listeners.pop(event_type, None)
        self.once_listeners.pop(event_type, None)

    def clear_all(self) -> None:
        """Removes every handler of every event."""
        self.listeners.clear()
        self.once_listeners.clear()

    def listener_count(self, event_type: EventType) -> int:
        """Number of persistent and one-time handlers of an event."""
        return len(self.listeners.get(event_type, [])) + len(
            self.once_listeners.get(event_type, [])
        )

    def event_names(self) -> list[EventType]:
        """Every event with at least one handler."""
        return list(dict.fromkeys([*self.listeners, *self.once_listeners]))
