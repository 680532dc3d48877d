"""Bounded event queue for a channel actor."""

import asyncio
import logging

from chatfleet.domain.entities import TransportEvent

logger = logging.getLogger(__name__)


class EventQueue:
    """Bounded in-memory FIFO of transport events.

    Features:
    - Backpressure: enqueue waits while the queue is full, so a transport
      that produces faster than the channel consumes is slowed down.
    - Processing state tracking: the event being handled is kept aside
      until it is marked done.
    """

    def __init__(self, maxsize: int = 100) -> None:
        """Initialize the event queue.

        Args:
            maxsize: Maximum number of waiting events (must be positive).
        """
        if maxsize <= 0:
            raise ValueError("EventQueue maxsize must be positive")
        self._queue: asyncio.Queue[TransportEvent] = asyncio.Queue(maxsize=maxsize)
        self._processing: TransportEvent | None = None

    async def enqueue(self, event: TransportEvent) -> None:
        """Add an event to the queue, waiting while it is full.

        Args:
            event: The event to enqueue.
        """
        if self._queue.full():
            logger.debug("EventQueue full, waiting to enqueue %s", event.type.value)
        await self._queue.put(event)

    async def dequeue(self) -> TransportEvent:
        """Get the next event from the queue.

        This method blocks until an event is available.

        Returns:
            The next event to process.
        """
        return await self._queue.get()

    def mark_processing(self, event: TransportEvent) -> None:
        """Mark an event as being processed.

        Args:
            event: The event being processed.
        """
        self._processing = event
        logger.debug("Event marked as processing: %s", event.type.value)

    def mark_done(self, event: TransportEvent) -> None:
        """Mark an event as done processing.

        Args:
            event: The event that finished processing.
        """
        if self._processing is event:
            self._processing = None
        self._queue.task_done()
        logger.debug("Event marked as done: %s", event.type.value)

    @property
    def processing(self) -> TransportEvent | None:
        return self._processing

    def qsize(self) -> int:
        return self._queue.qsize()

    async def join(self) -> None:
        """Wait until every enqueued event has been marked done."""
        await self._queue.join()

    def clear(self) -> None:
        """Drop all waiting events."""
        dropped = 0
        while True:
            try:
                self._queue.get_nowait()
            except asyncio.QueueEmpty:
                break
            self._queue.task_done()
            dropped += 1
        self._processing = None
        logger.debug("EventQueue cleared (%d events dropped)", dropped)
