"""Inbound message entity."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class AudioAttachment:
    """Voice note attached to an inbound message.

    Attributes:
        mimetype: Audio MIME type.
        seconds: Duration reported by the transport.
        file_length: Size in bytes reported by the transport.
        reference: Transport-specific handle used to download the content.
    """

    mimetype: str = "audio/ogg"
    seconds: int | None = None
    file_length: int | None = None
    reference: Any = None


@dataclass(frozen=True)
class InboundMessage:
    """Message received from a transport.

    Attributes:
        id: Transport message ID.
        chat_id: Remote chat identity replies are sent to.
        participant: Sender inside the chat, when the transport reports one.
        from_me: Whether the channel itself sent the message.
        text: Text content, if any.
        audio: Voice note, if any.
        timestamp: When the message was received.
    """

    id: str
    chat_id: str
    participant: str | None = None
    from_me: bool = False
    text: str | None = None
    audio: AudioAttachment | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def has_content(self) -> bool:
        return bool(self.text) or self.audio is not None

    @property
    def sender(self) -> str:
        """Sender identity (participant when present, chat otherwise)."""
        return self.participant or self.chat_id
