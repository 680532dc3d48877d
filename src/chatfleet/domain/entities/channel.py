"""Channel and session entities."""

import uuid
from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class Channel:
    """Channel entity.

    Attributes:
        number: Messaging identity the bot operates as (phone number).
        tenant_id: Owning tenant.
    """

    number: str
    tenant_id: str


class SessionState(Enum):
    """Lifecycle states of a channel connection."""

    INITIALIZING = "initializing"
    AWAITING_CREDENTIAL = "awaiting_credential"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    CLOSING = "closing"
    TERMINATED = "terminated"


@dataclass
class Session:
    """One connection attempt for a channel.

    A new Session is created for every (re)connect. ``reply_sent`` tracks
    whether the provisioning caller has been answered and never goes back
    to False.

    Attributes:
        id: Unique session identifier.
        state: Current lifecycle state.
        connected: Whether the transport reported the connection open.
    """

    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    state: SessionState = SessionState.INITIALIZING
    connected: bool = False
    _reply_sent: bool = field(default=False, repr=False)

    @property
    def reply_sent(self) -> bool:
        """Check if a provisioning reply was already sent for this session."""
        return self._reply_sent

    def mark_reply_sent(self) -> None:
        """Record that the provisioning reply was sent."""
        self._reply_sent = True
