"""Tests for InboundMessage."""

from chatfleet.domain.entities import AudioAttachment, InboundMessage


class TestInboundMessage:
    """InboundMessage tests."""

    def test_sender_prefers_participant(self) -> None:
        message = InboundMessage(
            id="m1", chat_id="5215550002@s.whatsapp.net", participant="5215550003@lid"
        )

        assert message.sender == "5215550003@lid"

    def test_sender_falls_back_to_chat(self) -> None:
        message = InboundMessage(id="m1", chat_id="5215550002@s.whatsapp.net")

        assert message.sender == "5215550002@s.whatsapp.net"

    def test_has_content(self) -> None:
        assert InboundMessage(id="m1", chat_id="c", text="hola").has_content is True
        assert InboundMessage(id="m2", chat_id="c", audio=AudioAttachment()).has_content
        assert InboundMessage(id="m3", chat_id="c").has_content is False
        assert InboundMessage(id="m4", chat_id="c", text="").has_content is False
