"""Event loop draining a channel's event queue."""

import asyncio
import logging

from chatfleet.infrastructure.events.dispatcher import EventDispatcher
from chatfleet.infrastructure.events.queue import EventQueue

logger = logging.getLogger(__name__)


class EventLoop:
    """Event processing loop.

    Continuously dequeues events and dispatches them to handlers.
    Events are processed sequentially (one at a time).
    """

    def __init__(
        self,
        queue: EventQueue,
        dispatcher: EventDispatcher,
        name: str = "",
        poll_interval: float = 1.0,
    ) -> None:
        """Initialize the event loop.

        Args:
            queue: The event queue to read from.
            dispatcher: The dispatcher to send events to.
            name: Label used in log messages (channel number).
            poll_interval: How often the stop flag is checked while idle.
        """
        self._queue = queue
        self._dispatcher = dispatcher
        self._name = name
        self._poll_interval = poll_interval
        self._stop_event = asyncio.Event()
        self._stop_event.set()  # Initially stopped

    async def start(self) -> None:
        """Start the event loop.

        This method runs until stop() is called.
        """
        if not self._stop_event.is_set():
            logger.warning("EventLoop %s already running", self._name)
            return

        self._stop_event.clear()
        logger.info("EventLoop %s started", self._name)

        while not self._stop_event.is_set():
            try:
                # Use a timeout to periodically check stop_event
                try:
                    event = await asyncio.wait_for(
                        self._queue.dequeue(),
                        timeout=self._poll_interval,
                    )
                except asyncio.TimeoutError:
                    continue

                logger.debug("Processing event: %s", event.type.value)

                self._queue.mark_processing(event)
                try:
                    await self._dispatcher.dispatch(event)
                finally:
                    self._queue.mark_done(event)

            except asyncio.CancelledError:
                break
            except Exception:
                logger.exception("Error in event loop %s", self._name)

        logger.info("EventLoop %s stopped", self._name)

    async def stop(self) -> None:
        """Stop the event loop."""
        logger.info("Stopping EventLoop %s", self._name)
        self._stop_event.set()
        self._queue.clear()

    @property
    def is_running(self) -> bool:
        """Check if the event loop is running."""
        return not self._stop_event.is_set()
