"""Common fixtures for session manager and orchestrator tests."""

from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, Mock

import pytest

from chatfleet.application.services import SessionManager
from chatfleet.domain.entities import Channel, TransportEvent
from chatfleet.domain.services import EventSink, ExponentialBackoff
from chatfleet.infrastructure.transport import CredentialStore, QRCodeRenderer

QR_BASE_URL = "http://localhost:3000/qr"


class FakeConnection:
    """Transport connection recording outbound calls."""

    def __init__(self) -> None:
        self.send_text = AsyncMock()
        self.send_media = AsyncMock()
        self.set_presence = AsyncMock()
        self.download_media = AsyncMock(return_value=b"media")
        self.close = AsyncMock()


class FakeTransport:
    """Transport provider replaying a scripted list of events on connect.

    Attributes:
        script: Events emitted during every connect.
        failures: Number of upcoming connects that raise.
        connects: (channel, credentials, emit) of every connect call.
        connections: Connections handed out, in order.
    """

    def __init__(self) -> None:
        self.script: list[TransportEvent] = []
        self.failures = 0
        self.connects: list[tuple[str, dict[str, Any], EventSink]] = []
        self.connections: list[FakeConnection] = []

    async def connect(
        self, channel: str, credentials: dict[str, Any], emit: EventSink
    ) -> FakeConnection:
        self.connects.append((channel, dict(credentials), emit))
        if self.failures:
            self.failures -= 1
            raise ConnectionError("handshake failed")
        connection = FakeConnection()
        self.connections.append(connection)
        for event in self.script:
            await emit(event)
        return connection

    @property
    def emit(self) -> EventSink:
        """Emitter of the latest connect."""
        return self.connects[-1][2]


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def credential_store(tmp_path) -> CredentialStore:
    return CredentialStore(tmp_path / "auth")


@pytest.fixture
def qr_renderer(tmp_path) -> QRCodeRenderer:
    return QRCodeRenderer(tmp_path / "qr", QR_BASE_URL)


@pytest.fixture
def broadcaster() -> Mock:
    return Mock()


@pytest.fixture
def pipeline() -> Mock:
    mock = Mock()
    mock.process = AsyncMock()
    return mock


@pytest.fixture
def sleep() -> AsyncMock:
    """Reconnect sleep that returns immediately and records delays."""
    return AsyncMock()


@pytest.fixture
def channel() -> Channel:
    return Channel(number="5215550001", tenant_id="42")


@pytest.fixture
async def make_manager(
    transport, pipeline, credential_store, qr_renderer, broadcaster, sleep
):
    """Factory for session managers, shut down after the test."""
    managers: list[SessionManager] = []

    def factory(
        channel: Channel,
        on_terminated: Callable[[SessionManager], None] | None = None,
        max_in_flight: int = 20,
    ) -> SessionManager:
        manager = SessionManager(
            channel,
            transport,
            pipeline,
            credential_store,
            qr_renderer,
            broadcaster,
            ExponentialBackoff(initial=1.0, maximum=4.0, multiplier=2.0),
            queue_size=10,
            max_in_flight=max_in_flight,
            on_terminated=on_terminated,
            sleep=sleep,
        )
        managers.append(manager)
        return manager

    yield factory

    for manager in managers:
        await manager.shutdown()
