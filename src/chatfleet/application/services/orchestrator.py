"""Process-wide owner of the live channel sessions."""

import asyncio
import logging
from collections.abc import Callable

from chatfleet.application.services.session_manager import (
    CONNECTED_MESSAGE,
    ProvisioningCallback,
    SessionManager,
    TerminationHook,
)
from chatfleet.domain.entities import Channel, MediaType, ProvisioningResult
from chatfleet.domain.exceptions import ChannelNotFoundError
from chatfleet.domain.repositories import ChannelRepository
from chatfleet.infrastructure.transport import CredentialStore

logger = logging.getLogger(__name__)

PROVISIONING_TIMEOUT_MESSAGE = "Timed out waiting for the connection."

SessionManagerFactory = Callable[[Channel, TerminationHook], SessionManager]


class Orchestrator:
    """Starts, tracks and stops one SessionManager per channel.

    The map of live managers is guarded by an asyncio lock so concurrent
    provisioning requests for the same channel never start two sessions.
    """

    def __init__(
        self,
        manager_factory: SessionManagerFactory,
        channel_repository: ChannelRepository,
        credential_store: CredentialStore,
        provisioning_timeout: float = 60.0,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            manager_factory: Builds a SessionManager for a channel; the
                second argument is the hook the manager calls once it is
                terminally signed out.
            channel_repository: Channel to tenant bindings.
            credential_store: Persistent credential material.
            provisioning_timeout: Default wait for a provisioning answer.
        """
        self._manager_factory = manager_factory
        self._channel_repository = channel_repository
        self._credential_store = credential_store
        self._provisioning_timeout = provisioning_timeout
        self._managers: dict[str, SessionManager] = {}
        self._lock = asyncio.Lock()
        self._running = True

    @property
    def is_running(self) -> bool:
        return self._running

    def get(self, number: str) -> SessionManager:
        """Get the live manager of a channel.

        Raises:
            ChannelNotFoundError: No live session for the channel.
        """
        manager = self._managers.get(number)
        if manager is None:
            raise ChannelNotFoundError(number)
        return manager

    def live_channels(self) -> dict[str, SessionManager]:
        return dict(self._managers)

    async def start(
        self,
        number: str,
        tenant_id: str,
        callback: ProvisioningCallback | None = None,
    ) -> SessionManager:
        """Start (or restart) the session of a channel.

        A channel that is already connected is left alone and the caller is
        answered with success right away. A live but unconnected channel is
        restarted so the caller receives a fresh challenge.

        Args:
            number: Channel number.
            tenant_id: Owning tenant.
            callback: Receives the provisioning answer.

        Returns:
            The channel's manager.
        """
        async with self._lock:
            manager = self._managers.get(number)
            if manager is not None and manager.is_connected:
                logger.info("Channel %s is already connected", number)
                if callback is not None:
                    callback(ProvisioningResult.connected(CONNECTED_MESSAGE))
                return manager

            if manager is not None:
                logger.info("Restarting unconnected channel %s", number)
                self._managers.pop(number, None)
                await manager.shutdown()

            manager = self._manager_factory(
                Channel(number=number, tenant_id=tenant_id), self._deregister
            )
            self._managers[number] = manager

        await manager.start(callback)
        return manager

    async def provision(
        self,
        number: str,
        tenant_id: str,
        timeout: float | None = None,
    ) -> ProvisioningResult:
        """Start a channel and wait for its provisioning answer.

        Args:
            number: Channel number.
            tenant_id: Owning tenant.
            timeout: Seconds to wait (defaults to the configured timeout).

        Returns:
            QR challenge URL, success, or failure.
        """
        future: asyncio.Future[ProvisioningResult] = (
            asyncio.get_running_loop().create_future()
        )

        def deliver(result: ProvisioningResult) -> None:
            if not future.done():
                future.set_result(result)

        await self.start(number, tenant_id, deliver)
        try:
            return await asyncio.wait_for(
                future, timeout=timeout or self._provisioning_timeout
            )
        except asyncio.TimeoutError:
            logger.warning("Provisioning of channel %s timed out", number)
            return ProvisioningResult.failed(PROVISIONING_TIMEOUT_MESSAGE)

    async def regenerate(self, number: str) -> ProvisioningResult:
        """Discard a channel's credentials and provision it again.

        Raises:
            ChannelNotFoundError: The channel is not bound to a tenant.
        """
        channel = await self._channel_repository.find_by_number(number)
        if channel is None:
            raise ChannelNotFoundError(number)

        await self.shutdown(number)
        self._credential_store.purge(number)
        logger.info("Regenerating credentials for channel %s", number)
        return await self.provision(channel.number, channel.tenant_id)

    async def boot(self) -> int:
        """Start every channel with persisted credentials and a tenant binding.

        Returns:
            Number of channels started.
        """
        started = 0
        for number in self._credential_store.list_channels():
            try:
                channel = await self._channel_repository.find_by_number(number)
                if channel is None:
                    logger.warning(
                        "Skipping channel %s: no tenant binding", number
                    )
                    continue
                await self.start(channel.number, channel.tenant_id)
                started += 1
            except Exception:
                logger.exception("Failed to boot channel %s", number)
        logger.info("Booted %d channel(s)", started)
        return started

    async def send_text(self, number: str, chat_id: str, text: str) -> None:
        await self.get(number).send_text(chat_id, text)

    async def send_media(
        self,
        number: str,
        chat_id: str,
        media_type: MediaType,
        url: str,
        caption: str,
    ) -> None:
        await self.get(number).send_media(chat_id, media_type, url, caption)

    async def shutdown(self, number: str) -> None:
        """Stop a channel's session, keeping its credentials."""
        async with self._lock:
            manager = self._managers.pop(number, None)
        if manager is not None:
            await manager.shutdown()

    async def shutdown_all(self) -> None:
        """Stop every live session."""
        self._running = False
        async with self._lock:
            managers = list(self._managers.values())
            self._managers.clear()

        results = await asyncio.gather(
            *(manager.shutdown() for manager in managers), return_exceptions=True
        )
        for manager, result in zip(managers, results):
            if isinstance(result, Exception):
                logger.error(
                    "Error shutting down channel %s: %s",
                    manager.channel.number,
                    result,
                )
        logger.info("All channel sessions stopped")

    def _deregister(self, manager: SessionManager) -> None:
        number = manager.channel.number
        if self._managers.get(number) is manager:
            del self._managers[number]
            logger.info("Channel %s deregistered", number)
