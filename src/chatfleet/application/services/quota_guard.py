"""Tenant quota policy."""

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from chatfleet.domain.entities import QuotaDenialReason, QuotaStatus
from chatfleet.domain.repositories import PlanRepository, TenantRepository

logger = logging.getLogger(__name__)

QUOTA_EXCEEDED_MESSAGE = "Has superado el número de mensajes permitidos."
BILLING_WINDOW_EXPIRED_MESSAGE = (
    "Tu período de facturación ha vencido. Debes renovar tu plan."
)
LOOKUP_FAILED_MESSAGE = (
    "Error verificando el límite de mensajes o el período de facturación."
)


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class QuotaGuard:
    """Decides whether a tenant may receive another reply.

    Checks, in order: tenant and plan exist, usage is below the plan cap,
    and the current time lies inside the billing window. Any lookup
    failure denies (fail closed).
    """

    def __init__(
        self,
        tenant_repository: TenantRepository,
        plan_repository: PlanRepository,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the guard.

        Args:
            tenant_repository: Tenant lookups.
            plan_repository: Plan lookups.
            clock: Returns the current time (defaults to UTC now).
        """
        self._tenant_repository = tenant_repository
        self._plan_repository = plan_repository
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def check(self, tenant_id: str) -> QuotaStatus:
        """Check the tenant's quota.

        Args:
            tenant_id: Tenant to check.

        Returns:
            Allowed, or denied with the user-facing message.
        """
        try:
            tenant = await self._tenant_repository.find_by_id(tenant_id)
            plan = None
            if tenant is not None and tenant.plan_id is not None:
                plan = await self._plan_repository.find_by_id(tenant.plan_id)
        except Exception:
            logger.exception("Quota lookup failed for tenant %s", tenant_id)
            return QuotaStatus.deny(
                QuotaDenialReason.LOOKUP_FAILED, LOOKUP_FAILED_MESSAGE
            )

        if tenant is None or plan is None:
            logger.warning("Tenant %s or its plan not found", tenant_id)
            return QuotaStatus.deny(
                QuotaDenialReason.LOOKUP_FAILED, LOOKUP_FAILED_MESSAGE
            )

        if tenant.message_count >= plan.message_limit:
            logger.info(
                "Tenant %s reached its message cap (%d/%d)",
                tenant_id,
                tenant.message_count,
                plan.message_limit,
            )
            return QuotaStatus.deny(
                QuotaDenialReason.QUOTA_EXCEEDED, QUOTA_EXCEEDED_MESSAGE
            )

        now = _utc(self._clock())
        # A missing bound counts as an expired window
        if (
            tenant.billing_start is None
            or tenant.billing_end is None
            or now < _utc(tenant.billing_start)
            or now > _utc(tenant.billing_end)
        ):
            logger.info("Tenant %s is outside its billing window", tenant_id)
            return QuotaStatus.deny(
                QuotaDenialReason.BILLING_WINDOW_EXPIRED,
                BILLING_WINDOW_EXPIRED_MESSAGE,
            )

        return QuotaStatus.allow()
