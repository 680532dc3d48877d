"""Tenant, plan and quota entities."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


@dataclass(frozen=True)
class Tenant:
    """Tenant (account owning one or more channels).

    Attributes:
        id: Tenant ID.
        plan_id: Subscribed plan.
        message_count: Messages used in the current billing window.
        billing_start: Start of the billing window.
        billing_end: End of the billing window.
    """

    id: str
    plan_id: str | None
    message_count: int
    billing_start: datetime | None
    billing_end: datetime | None


@dataclass(frozen=True)
class Plan:
    """Subscription plan.

    Attributes:
        id: Plan ID.
        message_limit: Maximum messages per billing window.
    """

    id: str
    message_limit: int


class QuotaDenialReason(Enum):
    QUOTA_EXCEEDED = "quota_exceeded"
    BILLING_WINDOW_EXPIRED = "billing_window_expired"
    LOOKUP_FAILED = "lookup_failed"


@dataclass(frozen=True)
class QuotaStatus:
    """Result of a quota check.

    Attributes:
        allowed: Whether the tenant may receive another reply.
        message: User-facing denial message (empty when allowed).
        reason: Why the request was denied.
    """

    allowed: bool
    message: str = ""
    reason: QuotaDenialReason | None = None

    @classmethod
    def allow(cls) -> "QuotaStatus":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: QuotaDenialReason, message: str) -> "QuotaStatus":
        return cls(allowed=False, message=message, reason=reason)
