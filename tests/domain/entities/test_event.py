"""Tests for transport event entities."""

from datetime import timezone

import pytest

from chatfleet.domain.entities import (
    CloseCause,
    ConnectionStatus,
    ConnectionUpdate,
    InboundMessage,
    TransportEvent,
    TransportEventType,
)


class TestCloseCause:
    """CloseCause tests."""

    def test_logged_out_is_terminal(self) -> None:
        assert CloseCause.LOGGED_OUT.is_terminal is True

    @pytest.mark.parametrize(
        "cause", [c for c in CloseCause if c is not CloseCause.LOGGED_OUT]
    )
    def test_other_causes_are_recoverable(self, cause: CloseCause) -> None:
        assert cause.is_terminal is False


class TestTransportEvent:
    """TransportEvent factory tests."""

    def test_connection(self) -> None:
        update = ConnectionUpdate(status=ConnectionStatus.OPEN)

        event = TransportEvent.connection(update)

        assert event.type == TransportEventType.CONNECTION_UPDATE
        assert event.payload["update"] is update
        assert event.session_id is None
        assert event.created_at.tzinfo == timezone.utc

    def test_credentials(self) -> None:
        event = TransportEvent.credentials({"identity": "abc"})

        assert event.type == TransportEventType.CREDENTIALS_UPDATE
        assert event.payload == {"credentials": {"identity": "abc"}}

    def test_messages_default_kind(self) -> None:
        message = InboundMessage(id="m1", chat_id="5215550002@s.whatsapp.net", text="hola")

        event = TransportEvent.messages([message])

        assert event.type == TransportEventType.MESSAGES
        assert event.payload == {"messages": [message], "kind": "notify"}

    def test_error(self) -> None:
        event = TransportEvent.error("stream errored")

        assert event.type == TransportEventType.ERROR
        assert event.payload["error"] == "stream errored"
