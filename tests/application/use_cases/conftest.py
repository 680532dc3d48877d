"""Common fixtures for message pipeline tests."""

from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, Mock

import pytest

from chatfleet.application.services import ConversationRegistry
from chatfleet.application.use_cases import MessagePipeline
from chatfleet.domain.entities import (
    AudioAttachment,
    Channel,
    InboundMessage,
    PromptConfig,
    QuotaStatus,
)


@pytest.fixture
def channel() -> Channel:
    return Channel(number="5215550001", tenant_id="42")


@pytest.fixture
def prompt() -> PromptConfig:
    return PromptConfig(
        prompt_id="7",
        channel="5215550001",
        tenant_id="42",
        system_prompt="Eres un asistente de ventas.",
        image_urls=("https://cdn.example/1.png", None),
        video_urls=("https://cdn.example/v1.mp4",),
    )


@pytest.fixture
def make_message() -> Callable[..., InboundMessage]:
    """Factory for inbound messages from a private chat."""
    counter = 0

    def factory(
        text: str | None = "hola",
        chat_id: str = "5215550002@s.whatsapp.net",
        **kwargs,
    ) -> InboundMessage:
        nonlocal counter
        counter += 1
        return InboundMessage(id=f"m{counter}", chat_id=chat_id, text=text, **kwargs)

    return factory


@pytest.fixture
def voice_note() -> AudioAttachment:
    return AudioAttachment(mimetype="audio/ogg; codecs=opus", seconds=4)


@pytest.fixture
def messenger() -> Mock:
    """Create a mock Messenger recording every outbound call."""
    mock = Mock()
    mock.send_text = AsyncMock()
    mock.send_media = AsyncMock()
    mock.set_presence = AsyncMock()
    mock.download_media = AsyncMock(return_value=b"OggS-voice")
    return mock


@pytest.fixture
def quota_guard() -> Mock:
    mock = Mock()
    mock.check = AsyncMock(return_value=QuotaStatus.allow())
    return mock


@pytest.fixture
def prompt_repository(prompt: PromptConfig) -> Mock:
    mock = Mock()
    mock.find_by_channel = AsyncMock(return_value=prompt)
    return mock


@pytest.fixture
def completion_provider() -> Mock:
    mock = Mock()
    mock.complete = AsyncMock(return_value="Claro, te ayudo con eso.")
    return mock


@pytest.fixture
def transcription_provider() -> Mock:
    mock = Mock()
    mock.transcribe = AsyncMock(return_value="quiero ver precios")
    return mock


@pytest.fixture
def uow() -> Mock:
    """Create a mock unit of work."""
    mock = Mock()
    mock.messages.save = AsyncMock()
    mock.tenants.increment_message_count = AsyncMock()
    return mock


@pytest.fixture
def unit_of_work(uow: Mock):
    """Create a unit of work factory yielding the mock."""

    @asynccontextmanager
    async def factory() -> AsyncIterator[Mock]:
        yield uow

    return factory


@pytest.fixture
def broadcaster() -> Mock:
    return Mock()


@pytest.fixture
def followup_prompt() -> Mock:
    return Mock(return_value="META PROMPT")


@pytest.fixture
def registry() -> ConversationRegistry:
    return ConversationRegistry()


@pytest.fixture
def make_pipeline(
    registry: ConversationRegistry,
    quota_guard: Mock,
    prompt_repository: Mock,
    completion_provider: Mock,
    transcription_provider: Mock,
    unit_of_work,
    broadcaster: Mock,
    followup_prompt: Mock,
) -> Callable[..., MessagePipeline]:
    """Factory for pipelines wired to the mocks above."""

    def factory(**overrides) -> MessagePipeline:
        kwargs = {
            "registry": registry,
            "quota_guard": quota_guard,
            "prompt_repository": prompt_repository,
            "completion_provider": completion_provider,
            "transcription_provider": transcription_provider,
            "unit_of_work": unit_of_work,
            "broadcaster": broadcaster,
            "followup_prompt": followup_prompt,
            "completion_timeout": 1.0,
        }
        kwargs.update(overrides)
        return MessagePipeline(**kwargs)

    return factory


@pytest.fixture
def pipeline(make_pipeline) -> MessagePipeline:
    return make_pipeline()
