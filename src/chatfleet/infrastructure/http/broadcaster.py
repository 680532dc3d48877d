"""Websocket status broadcaster."""

import asyncio
import logging
import weakref

from aiohttp import WSMsgType, web

from chatfleet.domain.entities import StatusNotification

logger = logging.getLogger(__name__)


class WebSocketBroadcaster:
    """Fans status notifications out to websocket subscribers.

    Each subscriber owns a bounded queue. ``publish`` never waits: when a
    subscriber's queue is full its oldest notification is dropped.
    """

    def __init__(self, queue_size: int = 100) -> None:
        """Initialize the broadcaster.

        Args:
            queue_size: Per-subscriber queue bound (must be positive).
        """
        if queue_size <= 0:
            raise ValueError("queue_size must be positive")
        self._queue_size = queue_size
        self._subscribers: set[asyncio.Queue[StatusNotification]] = set()
        self._sockets: weakref.WeakSet[web.WebSocketResponse] = weakref.WeakSet()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> asyncio.Queue[StatusNotification]:
        """Register a subscriber.

        Returns:
            Queue receiving every notification published from now on.
        """
        queue: asyncio.Queue[StatusNotification] = asyncio.Queue(
            maxsize=self._queue_size
        )
        self._subscribers.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[StatusNotification]) -> None:
        self._subscribers.discard(queue)

    def publish(self, notification: StatusNotification) -> None:
        """Deliver a notification to every subscriber without blocking.

        Args:
            notification: Notification to deliver.
        """
        for queue in list(self._subscribers):
            if queue.full():
                try:
                    queue.get_nowait()
                except asyncio.QueueEmpty:
                    pass
                logger.debug("Subscriber queue full, dropped oldest notification")
            queue.put_nowait(notification)

    async def handle_websocket(self, request: web.Request) -> web.WebSocketResponse:
        """Stream notifications as JSON ``{"number": ..., "message": ...}``."""
        ws = web.WebSocketResponse(heartbeat=30.0)
        await ws.prepare(request)

        queue = self.subscribe()
        self._sockets.add(ws)
        sender = asyncio.create_task(self._pump(ws, queue))
        logger.info("Status subscriber connected (%d total)", self.subscriber_count)

        try:
            async for msg in ws:
                if msg.type == WSMsgType.ERROR:
                    logger.warning("Status websocket error: %s", ws.exception())
                    break
        finally:
            sender.cancel()
            self.unsubscribe(queue)
            logger.info(
                "Status subscriber disconnected (%d total)", self.subscriber_count
            )
        return ws

    async def _pump(
        self,
        ws: web.WebSocketResponse,
        queue: asyncio.Queue[StatusNotification],
    ) -> None:
        while not ws.closed:
            notification = await queue.get()
            try:
                await ws.send_json(notification.to_dict())
            except ConnectionResetError:
                logger.debug("Status subscriber went away while sending")
                return

    async def close(self) -> None:
        """Close every open subscriber connection."""
        for ws in list(self._sockets):
            await ws.close()
        self._subscribers.clear()
