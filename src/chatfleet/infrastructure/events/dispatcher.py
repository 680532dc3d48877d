"""Transport event dispatcher."""

import inspect
import logging
from collections.abc import Awaitable, Callable

from chatfleet.domain.entities import TransportEvent, TransportEventType

logger = logging.getLogger(__name__)

EventHandler = Callable[[TransportEvent], Awaitable[None]]


def event_handler(
    event_type: TransportEventType,
) -> Callable[[EventHandler], EventHandler]:
    """Decorator marking a coroutine as the handler of one event type.

    Usage:
        class ChannelActor:
            @event_handler(TransportEventType.MESSAGES)
            async def _on_messages(self, event: TransportEvent) -> None:
                ...

        dispatcher.register_object(actor)

    Args:
        event_type: The event type this handler processes.

    Returns:
        Decorator function.
    """

    def decorator(func: EventHandler) -> EventHandler:
        func._event_type = event_type  # type: ignore[attr-defined]
        return func

    return decorator


def _handler_name(handler: EventHandler) -> str:
    return getattr(handler, "__qualname__", None) or getattr(
        handler, "__name__", str(handler)
    )


class EventDispatcher:
    """Dispatches transport events to registered handlers.

    Handlers run in registration order. A failing handler is logged and
    does not prevent the remaining handlers from running.
    """

    def __init__(self) -> None:
        self._handlers: dict[TransportEventType, list[EventHandler]] = {}

    def register(self, event_type: TransportEventType, handler: EventHandler) -> None:
        """Register a handler for an event type.

        Args:
            event_type: The event type to handle.
            handler: The handler coroutine function.
        """
        self._handlers.setdefault(event_type, []).append(handler)
        logger.debug(
            "Registered handler for %s: %s", event_type.value, _handler_name(handler)
        )

    def register_handler(self, handler: EventHandler) -> None:
        """Register a handler that was decorated with @event_handler.

        Raises:
            ValueError: If the handler doesn't have an _event_type attribute.
        """
        event_type = getattr(handler, "_event_type", None)
        if event_type is None:
            raise ValueError(
                f"Handler {_handler_name(handler)} has no _event_type attribute. "
                "Use the @event_handler decorator."
            )
        self.register(event_type, handler)

    def register_object(self, target: object) -> int:
        """Register every @event_handler method of an object.

        Args:
            target: Instance whose decorated methods are bound and registered.

        Returns:
            Number of handlers registered.
        """
        count = 0
        for _, member in inspect.getmembers(target, inspect.ismethod):
            if getattr(member, "_event_type", None) is not None:
                self.register_handler(member)
                count += 1
        return count

    def has_handler(self, event_type: TransportEventType) -> bool:
        return bool(self._handlers.get(event_type))

    def clear(self) -> None:
        self._handlers.clear()

    async def dispatch(self, event: TransportEvent) -> None:
        """Dispatch an event to all registered handlers.

        Args:
            event: The event to dispatch.
        """
        handlers = self._handlers.get(event.type, [])
        if not handlers:
            logger.debug("No handler registered for event type: %s", event.type.value)
            return

        for handler in handlers:
            try:
                await handler(event)
            except Exception:
                logger.exception(
                    "Error in event handler %s for event %s",
                    _handler_name(handler),
                    event.type.value,
                )
