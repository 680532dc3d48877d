"""Per-channel connection lifecycle actor."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from chatfleet.domain.entities import (
    Channel,
    CloseCause,
    ConnectionStatus,
    ConnectionUpdate,
    InboundMessage,
    MediaType,
    ProvisioningResult,
    Session,
    SessionState,
    StatusNotification,
    TransportEvent,
    TransportEventType,
)
from chatfleet.domain.exceptions import ChannelNotConnectedError
from chatfleet.domain.services import (
    EventSink,
    ExponentialBackoff,
    StatusBroadcaster,
    TransportConnection,
    TransportProvider,
)
from chatfleet.infrastructure.events import (
    EventDispatcher,
    EventLoop,
    EventQueue,
    event_handler,
)
from chatfleet.infrastructure.transport import CredentialStore, QRCodeRenderer

if TYPE_CHECKING:
    from chatfleet.application.use_cases.process_message import MessagePipeline

logger = logging.getLogger(__name__)

NOT_CONNECTED_MESSAGE = (
    "WhatsBoot no está conectado. Por favor, genere un nuevo código QR."
)
CONNECTED_MESSAGE = "Conexión exitosa"
TERMINAL_CLOSE_MESSAGE = "Connection closed. Unable to generate QR code."
TRANSPORT_ERROR_MESSAGE = "Connection error. Unable to generate QR code."
SHUTDOWN_MESSAGE = "Session shut down before it was ready."

NOTIFY_KIND = "notify"

ProvisioningCallback = Callable[[ProvisioningResult], None]
TerminationHook = Callable[["SessionManager"], None]
Sleep = Callable[[float], Awaitable[None]]


class SessionManager:
    """Owns the transport connection of one channel.

    Transport events are queued and handled one at a time by a dedicated
    event loop, so a credential update is persisted before the next event
    is looked at. Every (re)connect runs under a new Session; events
    stamped with an older session id are ignored.

    The manager is also the channel's Messenger: the message pipeline
    sends replies through it.
    """

    def __init__(
        self,
        channel: Channel,
        transport: TransportProvider,
        pipeline: MessagePipeline,
        credential_store: CredentialStore,
        qr_renderer: QRCodeRenderer,
        broadcaster: StatusBroadcaster,
        backoff: ExponentialBackoff,
        *,
        queue_size: int = 100,
        max_in_flight: int = 20,
        on_terminated: TerminationHook | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """Initialize the manager.

        Args:
            channel: Channel this manager serves.
            transport: Transport provider used to open connections.
            pipeline: Message pipeline inbound messages are handed to.
            credential_store: Persistent credential material.
            qr_renderer: Renders credential challenges.
            broadcaster: Status notification fan-out.
            backoff: Delay policy between reconnect attempts.
            queue_size: Bound of the inbound event queue.
            max_in_flight: Bound of messages processed concurrently.
            on_terminated: Called once the channel is terminally signed out.
            sleep: Awaitable sleep used for reconnect delays.
        """
        self._channel = channel
        self._transport = transport
        self._pipeline = pipeline
        self._credential_store = credential_store
        self._qr_renderer = qr_renderer
        self._broadcaster = broadcaster
        self._backoff = backoff
        self._on_terminated = on_terminated
        self._sleep = sleep

        self._session = Session()
        self._connection: TransportConnection | None = None
        self._callback: ProvisioningCallback | None = None
        self._stopping = False

        self._queue = EventQueue(maxsize=queue_size)
        self._dispatcher = EventDispatcher()
        self._dispatcher.register_object(self)
        self._event_loop = EventLoop(
            self._queue, self._dispatcher, name=channel.number
        )
        self._loop_task: asyncio.Task[None] | None = None
        self._reconnect_task: asyncio.Task[None] | None = None
        self._message_tasks: set[asyncio.Task[None]] = set()
        self._in_flight = asyncio.Semaphore(max_in_flight)

    @property
    def channel(self) -> Channel:
        return self._channel

    @property
    def session(self) -> Session:
        return self._session

    @property
    def state(self) -> SessionState:
        return self._session.state

    @property
    def is_connected(self) -> bool:
        return self._session.connected

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self, provisioning_callback: ProvisioningCallback | None = None) -> None:
        """Open a connection for the channel.

        Args:
            provisioning_callback: Receives the single provisioning answer
                (QR challenge, success or failure).
        """
        self._stopping = False
        if provisioning_callback is not None:
            self._callback = provisioning_callback
        self._ensure_event_loop()
        logger.info("Starting session manager for channel %s", self._channel.number)
        await self._open_session()

    async def shutdown(self) -> None:
        """Close the connection and stop processing events.

        Credential material is kept so the channel can be resumed later.
        """
        if self._session.state == SessionState.TERMINATED and self._loop_task is None:
            return

        logger.info("Shutting down channel %s", self._channel.number)
        self._stopping = True
        self._set_state(SessionState.CLOSING)
        self._session.connected = False

        if self._reconnect_task is not None and not self._reconnect_task.done():
            self._reconnect_task.cancel()
            await asyncio.gather(self._reconnect_task, return_exceptions=True)
        self._reconnect_task = None

        await self._close_connection()
        await self._stop_event_loop()

        for task in list(self._message_tasks):
            task.cancel()
        if self._message_tasks:
            await asyncio.gather(*self._message_tasks, return_exceptions=True)

        self._answer(ProvisioningResult.failed(SHUTDOWN_MESSAGE))
        self._set_state(SessionState.TERMINATED)

    async def wait_idle(self) -> None:
        """Wait until queued events, reconnects and message tasks settle."""
        while True:
            await self._queue.join()
            pending = [task for task in self._message_tasks if not task.done()]
            if self._reconnect_task is not None and not self._reconnect_task.done():
                pending.append(self._reconnect_task)
            if not pending and self._queue.qsize() == 0:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    def _ensure_event_loop(self) -> None:
        if self._loop_task is not None and not self._loop_task.done():
            return
        self._loop_task = asyncio.create_task(
            self._event_loop.start(), name=f"channel-{self._channel.number}"
        )

    async def _stop_event_loop(self) -> None:
        await self._event_loop.stop()
        task, self._loop_task = self._loop_task, None
        if task is not None and task is not asyncio.current_task():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)

    async def _open_session(self) -> None:
        session = Session()
        self._session = session
        self._connection = None

        credentials = self._credential_store.load_or_create(self._channel.number)
        try:
            connection = await self._transport.connect(
                self._channel.number, credentials, self._emitter_for(session)
            )
        except Exception:
            logger.exception("Failed to connect channel %s", self._channel.number)
            self._fail_waiting_caller(TRANSPORT_ERROR_MESSAGE)
            if not self._stopping:
                self._set_state(SessionState.RECONNECTING)
                self._schedule_reconnect()
            return

        if self._session is session and not self._stopping:
            self._connection = connection
        else:
            await connection.close()

    def _emitter_for(self, session: Session) -> EventSink:
        async def emit(event: TransportEvent) -> None:
            if self._stopping or self._session is not session:
                logger.debug(
                    "Ignoring %s from superseded session %s",
                    event.type.value,
                    session.id,
                )
                return
            await self._queue.enqueue(dataclasses.replace(event, session_id=session.id))

        return emit

    def _schedule_reconnect(self) -> None:
        delay = self._backoff.next_delay()
        logger.info(
            "Reconnecting channel %s in %.1fs (attempt %d)",
            self._channel.number,
            delay,
            self._backoff.attempts,
        )
        self._reconnect_task = asyncio.create_task(self._reconnect_after(delay))

    async def _reconnect_after(self, delay: float) -> None:
        await self._sleep(delay)
        if self._stopping:
            return
        await self._open_session()

    async def _close_connection(self) -> None:
        connection, self._connection = self._connection, None
        if connection is None:
            return
        try:
            await connection.close()
        except Exception:
            logger.warning(
                "Error closing connection for %s", self._channel.number, exc_info=True
            )

    def _set_state(self, state: SessionState) -> None:
        if self._session.state != state:
            logger.info(
                "Channel %s: %s -> %s",
                self._channel.number,
                self._session.state.value,
                state.value,
            )
            self._session.state = state

    def _answer(self, result: ProvisioningResult) -> None:
        """Deliver the provisioning answer once per session."""
        if self._session.reply_sent:
            return
        self._session.mark_reply_sent()
        callback, self._callback = self._callback, None
        if callback is None:
            return
        try:
            callback(result)
        except Exception:
            logger.exception("Provisioning callback failed for %s", self._channel.number)

    def _fail_waiting_caller(self, message: str) -> None:
        """Answer a waiting caller with a failure.

        Without a caller the session stays unanswered, so a later challenge
        is still announced to the status subscribers.
        """
        if self._callback is not None:
            self._answer(ProvisioningResult.failed(message))

    def _publish(self, message: str) -> None:
        self._broadcaster.publish(
            StatusNotification(channel=self._channel.number, message=message)
        )

    def _is_current(self, event: TransportEvent) -> bool:
        if event.session_id is not None and event.session_id != self._session.id:
            logger.debug("Dropping stale %s event", event.type.value)
            return False
        return not self._stopping

    # ------------------------------------------------------------------
    # Transport event handlers
    # ------------------------------------------------------------------

    @event_handler(TransportEventType.CONNECTION_UPDATE)
    async def _on_connection_update(self, event: TransportEvent) -> None:
        if not self._is_current(event):
            return
        update: ConnectionUpdate = event.payload["update"]

        if update.status == ConnectionStatus.CLOSE:
            await self._on_close(update.close_cause or CloseCause.UNKNOWN)
            return
        if update.qr:
            self._on_challenge(update.qr)
        if update.status == ConnectionStatus.OPEN:
            self._on_open()

    def _on_challenge(self, payload: str) -> None:
        url = self._qr_renderer.render(self._channel.number, payload)
        self._set_state(SessionState.AWAITING_CREDENTIAL)
        if self._session.reply_sent:
            logger.debug("Challenge for %s re-rendered", self._channel.number)
            return

        logger.info("Credential challenge issued for %s", self._channel.number)
        self._answer(ProvisioningResult.qr(url))
        self._publish(NOT_CONNECTED_MESSAGE)

    def _on_open(self) -> None:
        self._session.connected = True
        self._set_state(SessionState.CONNECTED)
        self._backoff.reset()
        self._answer(ProvisioningResult.connected(CONNECTED_MESSAGE))
        self._publish(CONNECTED_MESSAGE)

    async def _on_close(self, cause: CloseCause) -> None:
        self._session.connected = False
        await self._close_connection()
        self._publish(NOT_CONNECTED_MESSAGE)

        if not cause.is_terminal:
            logger.warning(
                "Channel %s disconnected (%s)", self._channel.number, cause.value
            )
            self._set_state(SessionState.RECONNECTING)
            self._schedule_reconnect()
            return

        logger.warning("Channel %s was signed out", self._channel.number)
        self._stopping = True
        self._answer(ProvisioningResult.failed(TERMINAL_CLOSE_MESSAGE))
        self._credential_store.purge(self._channel.number)
        self._set_state(SessionState.TERMINATED)
        await self._stop_event_loop()
        if self._on_terminated is not None:
            self._on_terminated(self)

    @event_handler(TransportEventType.CREDENTIALS_UPDATE)
    async def _on_credentials_update(self, event: TransportEvent) -> None:
        if not self._is_current(event):
            return
        self._credential_store.save(self._channel.number, event.payload["credentials"])

    @event_handler(TransportEventType.MESSAGES)
    async def _on_messages(self, event: TransportEvent) -> None:
        if not self._is_current(event):
            return
        if event.payload.get("kind", NOTIFY_KIND) != NOTIFY_KIND:
            logger.debug("Ignoring %s message batch", event.payload.get("kind"))
            return

        # Blocks the event loop while the bound is reached, so a busy channel
        # pushes back on its transport through the event queue.
        for message in event.payload.get("messages", []):
            await self._in_flight.acquire()
            task = asyncio.create_task(
                self._pipeline.process(self._channel, self, message)
            )
            self._message_tasks.add(task)
            task.add_done_callback(self._on_message_done)

    def _on_message_done(self, task: asyncio.Task[None]) -> None:
        self._message_tasks.discard(task)
        self._in_flight.release()

    @event_handler(TransportEventType.ERROR)
    async def _on_error(self, event: TransportEvent) -> None:
        if not self._is_current(event):
            return
        logger.error(
            "Transport error on %s: %s", self._channel.number, event.payload.get("error")
        )
        self._fail_waiting_caller(TRANSPORT_ERROR_MESSAGE)

    # ------------------------------------------------------------------
    # Messenger
    # ------------------------------------------------------------------

    def _require_connection(self) -> TransportConnection:
        if self._connection is None:
            raise ChannelNotConnectedError(self._channel.number)
        return self._connection

    async def send_text(self, chat_id: str, text: str) -> None:
        await self._require_connection().send_text(chat_id, text)

    async def send_media(
        self,
        chat_id: str,
        media_type: MediaType,
        url: str,
        caption: str,
    ) -> None:
        await self._require_connection().send_media(chat_id, media_type, url, caption)

    async def set_presence(self, chat_id: str, presence: str) -> None:
        await self._require_connection().set_presence(chat_id, presence)

    async def download_media(self, message: InboundMessage) -> bytes:
        return await self._require_connection().download_media(message)
