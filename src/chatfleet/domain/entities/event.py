"""Transport event entities."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class TransportEventType(Enum):
    """Event types emitted by a transport connection."""

    CONNECTION_UPDATE = "connection_update"
    CREDENTIALS_UPDATE = "credentials_update"
    MESSAGES = "messages"
    ERROR = "error"


class ConnectionStatus(Enum):
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSE = "close"


class CloseCause(Enum):
    """Why a transport connection closed.

    Only LOGGED_OUT is terminal; every other cause triggers a reconnect.
    """

    LOGGED_OUT = "logged_out"
    CONNECTION_LOST = "connection_lost"
    CONNECTION_REPLACED = "connection_replaced"
    TIMED_OUT = "timed_out"
    RESTART_REQUIRED = "restart_required"
    UNKNOWN = "unknown"

    @property
    def is_terminal(self) -> bool:
        return self is CloseCause.LOGGED_OUT


@dataclass(frozen=True)
class ConnectionUpdate:
    """Connection lifecycle update.

    Attributes:
        status: New connection status, if it changed.
        qr: Credential challenge payload to render as a QR code.
        close_cause: Cause reported with a close.
    """

    status: ConnectionStatus | None = None
    qr: str | None = None
    close_cause: CloseCause | None = None


@dataclass(frozen=True)
class TransportEvent:
    """Event emitted by a transport connection.

    Payload keys by type:
        CONNECTION_UPDATE: "update" (ConnectionUpdate)
        CREDENTIALS_UPDATE: "credentials" (dict)
        MESSAGES: "messages" (list[InboundMessage]), "kind" (str)
        ERROR: "error" (str)

    Attributes:
        type: Event type.
        payload: Event-specific data.
        session_id: Session that produced the event (set by the session manager).
        created_at: Event creation time.
    """

    type: TransportEventType
    payload: dict[str, Any] = field(default_factory=dict)
    session_id: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def connection(cls, update: ConnectionUpdate) -> "TransportEvent":
        return cls(type=TransportEventType.CONNECTION_UPDATE, payload={"update": update})

    @classmethod
    def credentials(cls, credentials: dict[str, Any]) -> "TransportEvent":
        return cls(
            type=TransportEventType.CREDENTIALS_UPDATE,
            payload={"credentials": credentials},
        )

    @classmethod
    def messages(cls, messages: list[Any], kind: str = "notify") -> "TransportEvent":
        return cls(
            type=TransportEventType.MESSAGES,
            payload={"messages": list(messages), "kind": kind},
        )

    @classmethod
    def error(cls, error: str) -> "TransportEvent":
        return cls(type=TransportEventType.ERROR, payload={"error": error})
