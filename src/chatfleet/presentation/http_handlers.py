"""HTTP provisioning handlers."""

import json
import logging
import re
from typing import Any

from aiohttp import web

from chatfleet.application.services import Orchestrator
from chatfleet.domain.entities import Channel, ProvisioningResult, ProvisioningStatus
from chatfleet.domain.exceptions import ChannelNotFoundError
from chatfleet.domain.repositories import ChannelRepository, TenantRepository

logger = logging.getLogger(__name__)

UNKNOWN_TENANT_MESSAGE = "El user_id proporcionado no existe en la tabla users."
MISSING_FIELDS_MESSAGE = "user_id and number are required"
NUMBER_REQUIRED_MESSAGE = "Number is required"
INVALID_BODY_MESSAGE = "Request body must be a JSON object"
UNKNOWN_CHANNEL_MESSAGE = "Channel is not registered"
INVALID_NUMBER_MESSAGE = "Number must contain only digits"

_NUMBER_PATTERN = re.compile(r"[0-9]+")


async def _read_json(request: web.Request) -> dict[str, Any] | None:
    """Read a JSON object body, returning None when it is not one."""
    try:
        body = await request.json()
    except json.JSONDecodeError:
        return None
    return body if isinstance(body, dict) else None


def _error(message: str, status: int) -> web.Response:
    return web.json_response({"error": message}, status=status)


def _provisioning_response(result: ProvisioningResult) -> web.Response:
    """Translate a provisioning answer into the HTTP reply."""
    if result.status == ProvisioningStatus.QR:
        return web.json_response({"qr_code_url": result.qr_url})
    if result.status == ProvisioningStatus.CONNECTED:
        return web.json_response({"message": result.message})
    return _error(result.message, 500)


def register_handlers(
    app: web.Application,
    orchestrator: Orchestrator,
    tenant_repository: TenantRepository,
    channel_repository: ChannelRepository,
    provisioning_timeout: float | None = None,
) -> None:
    """Register provisioning routes.

    Args:
        app: aiohttp application.
        orchestrator: Orchestrator owning the live sessions.
        tenant_repository: Tenant lookup for binding validation.
        channel_repository: Channel to tenant bindings.
        provisioning_timeout: Seconds to wait for a provisioning answer.
    """

    async def handle_create_bot(request: web.Request) -> web.Response:
        """Bind a channel to a tenant and start provisioning it.

        Body: {"user_id": <tenant id>, "number": <channel number>}
        """
        body = await _read_json(request)
        if body is None:
            return _error(INVALID_BODY_MESSAGE, 400)

        tenant_id = str(body.get("user_id") or "").strip()
        number = str(body.get("number") or "").strip()
        if not tenant_id or not number:
            return _error(MISSING_FIELDS_MESSAGE, 400)
        if not _NUMBER_PATTERN.fullmatch(number):
            return _error(INVALID_NUMBER_MESSAGE, 400)

        tenant = await tenant_repository.find_by_id(tenant_id)
        if tenant is None:
            logger.info("Rejected create-bot for unknown tenant %s", tenant_id)
            return _error(UNKNOWN_TENANT_MESSAGE, 400)

        await channel_repository.save(Channel(number=number, tenant_id=tenant_id))
        logger.info("Provisioning channel %s for tenant %s", number, tenant_id)

        try:
            result = await orchestrator.provision(
                number, tenant_id, timeout=provisioning_timeout
            )
        except Exception as e:
            logger.exception("Provisioning failed for channel %s", number)
            return _error(str(e), 500)
        return _provisioning_response(result)

    async def handle_regenerate_qr(request: web.Request) -> web.Response:
        """Discard a channel's credentials and issue a new challenge.

        Body: {"number": <channel number>}
        """
        body = await _read_json(request)
        if body is None:
            return _error(INVALID_BODY_MESSAGE, 400)

        number = str(body.get("number") or "").strip()
        if not number:
            return _error(NUMBER_REQUIRED_MESSAGE, 400)
        if not _NUMBER_PATTERN.fullmatch(number):
            return _error(INVALID_NUMBER_MESSAGE, 400)

        try:
            result = await orchestrator.regenerate(number)
        except ChannelNotFoundError:
            return _error(UNKNOWN_CHANNEL_MESSAGE, 404)
        except Exception as e:
            logger.exception("Regenerating channel %s failed", number)
            return _error(str(e), 500)
        return _provisioning_response(result)

    app.router.add_post("/create-bot", handle_create_bot)
    app.router.add_post("/regenerate_qr", handle_regenerate_qr)
