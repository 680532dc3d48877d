"""Domain entities."""

from chatfleet.domain.entities.audit import AuditRecord
from chatfleet.domain.entities.channel import Channel, Session, SessionState
from chatfleet.domain.entities.conversation import (
    ConversationState,
    ConversationStatus,
    Turn,
)
from chatfleet.domain.entities.event import (
    CloseCause,
    ConnectionStatus,
    ConnectionUpdate,
    TransportEvent,
    TransportEventType,
)
from chatfleet.domain.entities.message import AudioAttachment, InboundMessage
from chatfleet.domain.entities.prompt import MediaAsset, MediaType, PromptConfig
from chatfleet.domain.entities.provisioning import (
    ProvisioningResult,
    ProvisioningStatus,
    StatusNotification,
)
from chatfleet.domain.entities.quota import (
    Plan,
    QuotaDenialReason,
    QuotaStatus,
    Tenant,
)

__all__ = [
    "AudioAttachment",
    "AuditRecord",
    "Channel",
    "CloseCause",
    "ConnectionStatus",
    "ConnectionUpdate",
    "ConversationState",
    "ConversationStatus",
    "InboundMessage",
    "MediaAsset",
    "MediaType",
    "Plan",
    "PromptConfig",
    "ProvisioningResult",
    "ProvisioningStatus",
    "QuotaDenialReason",
    "QuotaStatus",
    "Session",
    "SessionState",
    "StatusNotification",
    "Tenant",
    "TransportEvent",
    "TransportEventType",
    "Turn",
]
