"""Audit record entity."""

from dataclasses import dataclass, field
from datetime import datetime, timezone

RESPONSE_TYPE = "response"


@dataclass(frozen=True)
class AuditRecord:
    """One persisted exchange.

    Attributes:
        tenant_id: Owning tenant.
        channel: Channel number.
        participant: Cleaned participant id.
        prompt_id: Prompt scope id.
        question: User text.
        reply: Reply text (or a description of the media sent).
        conversation_id: Conversation grouping id.
        type: Row type marker.
        received_at: When the exchange happened.
    """

    tenant_id: str
    channel: str
    participant: str
    prompt_id: str
    question: str
    reply: str
    conversation_id: str
    type: str = RESPONSE_TYPE
    received_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
