"""Tests for Orchestrator."""

from unittest.mock import AsyncMock, Mock

import pytest

from chatfleet.application.services import Orchestrator
from chatfleet.application.services.orchestrator import PROVISIONING_TIMEOUT_MESSAGE
from chatfleet.application.services.session_manager import CONNECTED_MESSAGE
from chatfleet.domain.entities import (
    Channel,
    CloseCause,
    ConnectionStatus,
    ConnectionUpdate,
    ProvisioningResult,
    SessionState,
    TransportEvent,
)
from chatfleet.domain.exceptions import ChannelNotFoundError

NUMBER = "5215550001"
QR_URL = f"http://localhost:3000/qr/{NUMBER}.png"


@pytest.fixture
def bindings() -> dict[str, Channel]:
    return {NUMBER: Channel(number=NUMBER, tenant_id="42")}


@pytest.fixture
def channel_repository(bindings) -> Mock:
    mock = Mock()
    mock.find_by_number = AsyncMock(side_effect=lambda number: bindings.get(number))
    return mock


@pytest.fixture
def orchestrator(make_manager, channel_repository, credential_store) -> Orchestrator:
    return Orchestrator(
        make_manager, channel_repository, credential_store, provisioning_timeout=1.0
    )


@pytest.fixture
def qr_script(transport) -> None:
    transport.script = [TransportEvent.connection(ConnectionUpdate(qr="2@challenge"))]


@pytest.fixture
def open_script(transport) -> None:
    transport.script = [
        TransportEvent.connection(ConnectionUpdate(status=ConnectionStatus.OPEN))
    ]


class TestProvision:
    """provision()"""

    @pytest.mark.usefixtures("qr_script")
    async def test_returns_qr_challenge(self, orchestrator) -> None:
        result = await orchestrator.provision(NUMBER, "42")

        assert result == ProvisioningResult.qr(QR_URL)
        assert list(orchestrator.live_channels()) == [NUMBER]
        assert orchestrator.get(NUMBER).channel == Channel(NUMBER, "42")

    @pytest.mark.usefixtures("open_script")
    async def test_connected_channel_answers_immediately(
        self, orchestrator, transport
    ) -> None:
        first = await orchestrator.provision(NUMBER, "42")
        second = await orchestrator.provision(NUMBER, "42")

        assert first == ProvisioningResult.connected(CONNECTED_MESSAGE)
        assert second == ProvisioningResult.connected(CONNECTED_MESSAGE)
        assert len(transport.connects) == 1

    @pytest.mark.usefixtures("qr_script")
    async def test_unconnected_channel_is_restarted(
        self, orchestrator, transport
    ) -> None:
        await orchestrator.provision(NUMBER, "42")
        first_manager = orchestrator.get(NUMBER)

        result = await orchestrator.provision(NUMBER, "42")

        assert result == ProvisioningResult.qr(QR_URL)
        assert len(transport.connects) == 2
        transport.connections[0].close.assert_awaited_once()
        assert first_manager.state == SessionState.TERMINATED
        assert orchestrator.get(NUMBER) is not first_manager

    async def test_times_out_without_answer(self, orchestrator) -> None:
        result = await orchestrator.provision(NUMBER, "42", timeout=0.05)

        assert result == ProvisioningResult.failed(PROVISIONING_TIMEOUT_MESSAGE)

    @pytest.mark.usefixtures("qr_script")
    async def test_restart_after_sign_out_uses_fresh_credentials(
        self, orchestrator, transport
    ) -> None:
        await orchestrator.provision(NUMBER, "42")
        manager = orchestrator.get(NUMBER)
        first_identity = transport.connects[0][1]["identity"]

        await transport.emit(
            TransportEvent.connection(
                ConnectionUpdate(
                    status=ConnectionStatus.CLOSE, close_cause=CloseCause.LOGGED_OUT
                )
            )
        )
        await manager.wait_idle()
        assert NUMBER not in orchestrator.live_channels()

        result = await orchestrator.provision(NUMBER, "42")

        assert result == ProvisioningResult.qr(QR_URL)
        assert transport.connects[1][1]["identity"] != first_identity
        assert orchestrator.get(NUMBER).state == SessionState.AWAITING_CREDENTIAL


class TestRegenerate:
    """regenerate()"""

    async def test_unknown_channel_raises(self, orchestrator) -> None:
        with pytest.raises(ChannelNotFoundError):
            await orchestrator.regenerate("5215559999")

    @pytest.mark.usefixtures("qr_script")
    async def test_purges_credentials_and_issues_new_challenge(
        self, orchestrator, transport
    ) -> None:
        await orchestrator.provision(NUMBER, "42")

        result = await orchestrator.regenerate(NUMBER)

        assert result == ProvisioningResult.qr(QR_URL)
        assert len(transport.connects) == 2
        assert transport.connects[1][1]["identity"] != transport.connects[0][1]["identity"]


class TestBoot:
    """boot()"""

    async def test_starts_only_bound_channels(
        self, orchestrator, credential_store, transport
    ) -> None:
        credential_store.save(NUMBER, {"identity": "saved", "registered": True})
        credential_store.save("5215550009", {"identity": "orphan", "registered": True})

        started = await orchestrator.boot()

        assert started == 1
        assert list(orchestrator.live_channels()) == [NUMBER]
        assert transport.connects[0][1] == {"identity": "saved", "registered": True}

    async def test_continues_after_a_failing_channel(
        self, orchestrator, credential_store, channel_repository, bindings
    ) -> None:
        def find(number):
            if number == "5215550000":
                raise RuntimeError("database is locked")
            return bindings.get(number)

        channel_repository.find_by_number.side_effect = find
        credential_store.save("5215550000", {"identity": "a", "registered": True})
        credential_store.save(NUMBER, {"identity": "b", "registered": True})

        started = await orchestrator.boot()

        assert started == 1
        assert NUMBER in orchestrator.live_channels()


class TestSendAndShutdown:
    """Outbound sends and shutdown."""

    async def test_get_unknown_channel_raises(self, orchestrator) -> None:
        with pytest.raises(ChannelNotFoundError):
            orchestrator.get(NUMBER)

    async def test_send_text_goes_through_channel_connection(
        self, orchestrator, transport
    ) -> None:
        await orchestrator.start(NUMBER, "42")

        await orchestrator.send_text(NUMBER, "5215550002@s.whatsapp.net", "hola")

        transport.connections[0].send_text.assert_awaited_once_with(
            "5215550002@s.whatsapp.net", "hola"
        )

    async def test_send_to_unknown_channel_raises(self, orchestrator) -> None:
        with pytest.raises(ChannelNotFoundError):
            await orchestrator.send_text(NUMBER, "5215550002@s.whatsapp.net", "hola")

    async def test_shutdown_keeps_credentials(
        self, orchestrator, credential_store
    ) -> None:
        await orchestrator.start(NUMBER, "42")

        await orchestrator.shutdown(NUMBER)

        assert NUMBER not in orchestrator.live_channels()
        assert credential_store.exists(NUMBER)

    async def test_shutdown_all_stops_every_channel(self, orchestrator) -> None:
        await orchestrator.start(NUMBER, "42")
        await orchestrator.start("5215550002", "43")
        managers = list(orchestrator.live_channels().values())

        await orchestrator.shutdown_all()

        assert orchestrator.is_running is False
        assert orchestrator.live_channels() == {}
        assert all(m.state == SessionState.TERMINATED for m in managers)
