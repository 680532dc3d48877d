"""Domain service protocols."""

from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from chatfleet.domain.entities import (
    InboundMessage,
    MediaType,
    StatusNotification,
    TransportEvent,
    Turn,
)

# Callback a transport connection uses to hand events to its session manager
EventSink = Callable[[TransportEvent], Awaitable[None]]


class TransportConnection(Protocol):
    """A live connection to the messaging network for one channel."""

    async def send_text(self, chat_id: str, text: str) -> None:
        """Send a text message.

        Args:
            chat_id: Remote chat identity.
            text: Message content.
        """
        ...

    async def send_media(
        self,
        chat_id: str,
        media_type: MediaType,
        url: str,
        caption: str,
    ) -> None:
        """Send an image or video by URL with a caption."""
        ...

    async def set_presence(self, chat_id: str, presence: str) -> None:
        """Update the typing/recording indicator shown to the chat."""
        ...

    async def download_media(self, message: InboundMessage) -> bytes:
        """Download the media content attached to a message."""
        ...

    async def close(self) -> None:
        """Close the connection without logging out."""
        ...


class TransportProvider(Protocol):
    """Factory of transport connections (messaging protocol implementation).

    The provider authenticates with the given credential state and reports
    everything that happens on the connection through ``emit``:
    connection updates (QR challenges, open, close with cause), credential
    changes, inbound message batches and transport errors.
    """

    async def connect(
        self,
        channel: str,
        credentials: dict[str, Any],
        emit: EventSink,
    ) -> TransportConnection:
        """Open a connection for a channel.

        Args:
            channel: Channel number.
            credentials: Persisted credential state.
            emit: Callback receiving transport events in order.

        Returns:
            The connection handle.
        """
        ...


class Messenger(Protocol):
    """Outbound surface of one channel, used by the message pipeline."""

    async def send_text(self, chat_id: str, text: str) -> None:
        ...

    async def send_media(
        self,
        chat_id: str,
        media_type: MediaType,
        url: str,
        caption: str,
    ) -> None:
        ...

    async def set_presence(self, chat_id: str, presence: str) -> None:
        ...

    async def download_media(self, message: InboundMessage) -> bytes:
        ...


class CompletionProvider(Protocol):
    """Language completion abstraction.

    Implementations return a fallback string instead of raising.
    """

    async def complete(
        self,
        system_prompt: str,
        recent_turns: list[Turn],
        user_text: str,
    ) -> str:
        """Generate a reply.

        Args:
            system_prompt: Channel system prompt.
            recent_turns: Most recent conversation turns (oldest first).
            user_text: Text to answer.

        Returns:
            Generated reply text.
        """
        ...


class TranscriptionProvider(Protocol):
    """Speech-to-text abstraction.

    Raises TranscriptionError subclasses on failure.
    """

    async def transcribe(
        self,
        audio: bytes,
        mimetype: str,
        language: str | None = None,
    ) -> str:
        ...


class StatusBroadcaster(Protocol):
    """Fan-out of status notifications to external observers.

    ``publish`` must never block the caller.
    """

    def publish(self, notification: StatusNotification) -> None:
        ...
