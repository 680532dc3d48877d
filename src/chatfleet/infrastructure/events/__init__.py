"""Channel event processing infrastructure."""

from chatfleet.infrastructure.events.dispatcher import EventDispatcher, event_handler
from chatfleet.infrastructure.events.loop import EventLoop
from chatfleet.infrastructure.events.queue import EventQueue

__all__ = [
    "EventDispatcher",
    "EventLoop",
    "EventQueue",
    "event_handler",
]
