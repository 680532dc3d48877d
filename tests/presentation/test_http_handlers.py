"""Tests for the provisioning HTTP handlers."""

import functools
from collections.abc import AsyncGenerator
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import aiohttp
import pytest

from chatfleet.domain.entities import Channel, ProvisioningResult, Tenant
from chatfleet.domain.exceptions import ChannelNotFoundError
from chatfleet.infrastructure.http import HttpServer, WebSocketBroadcaster
from chatfleet.presentation import register_handlers
from chatfleet.presentation.http_handlers import (
    INVALID_NUMBER_MESSAGE,
    UNKNOWN_TENANT_MESSAGE,
)


@pytest.fixture
def orchestrator() -> Mock:
    mock = Mock()
    mock.is_running = True
    mock.live_channels.return_value = {}
    mock.provision = AsyncMock(
        return_value=ProvisioningResult.qr("http://localhost:3000/qr/5215550001.png")
    )
    mock.regenerate = AsyncMock(
        return_value=ProvisioningResult.qr("http://localhost:3000/qr/5215550001.png")
    )
    return mock


@pytest.fixture
def tenant_repository() -> Mock:
    mock = Mock()
    mock.find_by_id = AsyncMock(
        return_value=Tenant(
            id="42",
            plan_id="1",
            message_count=0,
            billing_start=None,
            billing_end=None,
        )
    )
    return mock


@pytest.fixture
def channel_repository() -> Mock:
    mock = Mock()
    mock.save = AsyncMock()
    return mock


@pytest.fixture
async def base_url(
    orchestrator: Mock,
    tenant_repository: Mock,
    channel_repository: Mock,
    tmp_path: Path,
) -> AsyncGenerator[str, None]:
    db_manager = AsyncMock()
    db_manager.is_healthy = AsyncMock(return_value=True)
    server = HttpServer(
        orchestrator=orchestrator,
        broadcaster=WebSocketBroadcaster(),
        register_routes=functools.partial(
            register_handlers,
            orchestrator=orchestrator,
            tenant_repository=tenant_repository,
            channel_repository=channel_repository,
            provisioning_timeout=5.0,
        ),
        db_manager=db_manager,
        qr_dir=tmp_path / "uploads",
        host="127.0.0.1",
        port=0,
    )
    await server.start()
    yield f"http://127.0.0.1:{server.port}"
    await server.stop()


async def post(base_url: str, path: str, **kwargs) -> tuple[int, dict]:
    async with aiohttp.ClientSession() as session:
        async with session.post(base_url + path, **kwargs) as response:
            return response.status, await response.json()


class TestCreateBot:
    """POST /create-bot"""

    async def test_returns_qr_code_url(
        self, base_url, orchestrator, channel_repository
    ) -> None:
        status, body = await post(
            base_url, "/create-bot", json={"user_id": 42, "number": "5215550001"}
        )

        assert status == 200
        assert body == {"qr_code_url": "http://localhost:3000/qr/5215550001.png"}
        channel_repository.save.assert_awaited_once_with(
            Channel(number="5215550001", tenant_id="42")
        )
        orchestrator.provision.assert_awaited_once_with(
            "5215550001", "42", timeout=5.0
        )

    async def test_already_connected_returns_message(
        self, base_url, orchestrator
    ) -> None:
        orchestrator.provision.return_value = ProvisioningResult.connected(
            "Conexión exitosa"
        )

        status, body = await post(
            base_url, "/create-bot", json={"user_id": "42", "number": "5215550001"}
        )

        assert status == 200
        assert body == {"message": "Conexión exitosa"}

    async def test_failed_provisioning_returns_500(
        self, base_url, orchestrator
    ) -> None:
        orchestrator.provision.return_value = ProvisioningResult.failed(
            "Connection closed. Unable to generate QR code."
        )

        status, body = await post(
            base_url, "/create-bot", json={"user_id": "42", "number": "5215550001"}
        )

        assert status == 500
        assert body == {"error": "Connection closed. Unable to generate QR code."}

    async def test_unknown_tenant_is_rejected(
        self, base_url, tenant_repository, channel_repository, orchestrator
    ) -> None:
        tenant_repository.find_by_id.return_value = None

        status, body = await post(
            base_url, "/create-bot", json={"user_id": "999", "number": "5215550001"}
        )

        assert status == 400
        assert body == {"error": UNKNOWN_TENANT_MESSAGE}
        channel_repository.save.assert_not_awaited()
        orchestrator.provision.assert_not_awaited()

    @pytest.mark.parametrize(
        "payload",
        [{"number": "5215550001"}, {"user_id": "42"}, {"user_id": "", "number": ""}],
    )
    async def test_missing_fields_are_rejected(
        self, base_url, orchestrator, payload
    ) -> None:
        status, body = await post(base_url, "/create-bot", json=payload)

        assert status == 400
        assert "error" in body
        orchestrator.provision.assert_not_awaited()

    @pytest.mark.parametrize("number", ["../../etc", "52155/50001", "+5215550001"])
    async def test_non_digit_number_is_rejected(
        self, base_url, tenant_repository, channel_repository, orchestrator, number
    ) -> None:
        status, body = await post(
            base_url, "/create-bot", json={"user_id": "42", "number": number}
        )

        assert status == 400
        assert body == {"error": INVALID_NUMBER_MESSAGE}
        tenant_repository.find_by_id.assert_not_awaited()
        channel_repository.save.assert_not_awaited()
        orchestrator.provision.assert_not_awaited()

    async def test_invalid_json_is_rejected(self, base_url) -> None:
        status, body = await post(
            base_url,
            "/create-bot",
            data="not json",
            headers={"Content-Type": "application/json"},
        )

        assert status == 400
        assert "error" in body


class TestRegenerateQR:
    """POST /regenerate_qr"""

    async def test_returns_new_qr_code_url(self, base_url, orchestrator) -> None:
        status, body = await post(
            base_url, "/regenerate_qr", json={"number": "5215550001"}
        )

        assert status == 200
        assert body == {"qr_code_url": "http://localhost:3000/qr/5215550001.png"}
        orchestrator.regenerate.assert_awaited_once_with("5215550001")

    async def test_missing_number_is_rejected(self, base_url, orchestrator) -> None:
        status, body = await post(base_url, "/regenerate_qr", json={})

        assert status == 400
        assert body == {"error": "Number is required"}
        orchestrator.regenerate.assert_not_awaited()

    async def test_non_digit_number_is_rejected(self, base_url, orchestrator) -> None:
        status, body = await post(base_url, "/regenerate_qr", json={"number": ".."})

        assert status == 400
        assert body == {"error": INVALID_NUMBER_MESSAGE}
        orchestrator.regenerate.assert_not_awaited()

    async def test_unknown_channel_returns_404(self, base_url, orchestrator) -> None:
        orchestrator.regenerate.side_effect = ChannelNotFoundError("5215550009")

        status, body = await post(
            base_url, "/regenerate_qr", json={"number": "5215550009"}
        )

        assert status == 404
        assert "error" in body

    async def test_unexpected_error_returns_500(self, base_url, orchestrator) -> None:
        orchestrator.regenerate.side_effect = RuntimeError("transport unavailable")

        status, body = await post(
            base_url, "/regenerate_qr", json={"number": "5215550001"}
        )

        assert status == 500
        assert body == {"error": "transport unavailable"}
