"""Tests for LiteLLMCompletionProvider."""

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from chatfleet.domain.entities import Turn
from chatfleet.infrastructure.llm import (
    LiteLLMCompletionProvider,
    LLMRateLimitError,
    LLMTimeoutError,
)
from chatfleet.infrastructure.llm.completion import (
    EMPTY_RESPONSE_MESSAGE,
    FAILURE_MESSAGE,
    INVALID_REQUEST_MESSAGE,
)


@pytest.fixture
def mock_client() -> MagicMock:
    client = MagicMock()
    client.complete = AsyncMock(return_value="  Claro, te ayudo.  ")
    return client


@pytest.fixture
def provider(mock_client: MagicMock) -> LiteLLMCompletionProvider:
    return LiteLLMCompletionProvider(mock_client)


class TestComplete:
    """complete method tests."""

    async def test_returns_trimmed_reply(
        self, provider: LiteLLMCompletionProvider, turns: list[Turn]
    ) -> None:
        result = await provider.complete("Eres un asistente.", turns, "hola")

        assert result == "Claro, te ayudo."

    async def test_builds_system_recent_turns_user(
        self,
        provider: LiteLLMCompletionProvider,
        mock_client: MagicMock,
        turns: list[Turn],
    ) -> None:
        """Test that only the last five turns are sent between system and user."""
        await provider.complete("Eres un asistente.", turns, "¿precio?")

        messages = mock_client.complete.call_args.args[0]
        assert messages[0] == {"role": "system", "content": "Eres un asistente."}
        assert [m["content"] for m in messages[1:-1]] == [
            "turn-1",
            "turn-2",
            "turn-3",
            "turn-4",
            "turn-5",
        ]
        assert messages[-1] == {"role": "user", "content": "¿precio?"}

    async def test_without_turns(
        self, provider: LiteLLMCompletionProvider, mock_client: MagicMock
    ) -> None:
        await provider.complete("Eres un asistente.", [], "hola")

        assert len(mock_client.complete.call_args.args[0]) == 2

    @pytest.mark.parametrize(("system", "text"), [("", "hola"), ("Eres.", "")])
    async def test_invalid_request(
        self,
        provider: LiteLLMCompletionProvider,
        mock_client: MagicMock,
        system: str,
        text: str,
    ) -> None:
        assert await provider.complete(system, [], text) == INVALID_REQUEST_MESSAGE
        mock_client.complete.assert_not_awaited()

    async def test_empty_response(
        self, provider: LiteLLMCompletionProvider, mock_client: MagicMock
    ) -> None:
        mock_client.complete.return_value = "   "

        assert await provider.complete("Eres.", [], "hola") == EMPTY_RESPONSE_MESSAGE

    @pytest.mark.parametrize(
        "error", [LLMRateLimitError("slow down"), LLMTimeoutError("timeout")]
    )
    async def test_llm_error_becomes_fallback(
        self,
        provider: LiteLLMCompletionProvider,
        mock_client: MagicMock,
        error: Exception,
    ) -> None:
        mock_client.complete.side_effect = error

        assert await provider.complete("Eres.", [], "hola") == FAILURE_MESSAGE


class TestDebugLogging:
    """debug_llm_messages tests."""

    async def test_logs_messages_at_info(
        self, mock_client: MagicMock, caplog: pytest.LogCaptureFixture
    ) -> None:
        provider = LiteLLMCompletionProvider(mock_client, debug_llm_messages=True)

        with caplog.at_level(logging.INFO, logger="chatfleet.infrastructure.llm.completion"):
            await provider.complete("Eres un asistente.", [], "hola")

        assert "=== LLM Request Messages ===" in caplog.text
        assert "Claro, te ayudo." in caplog.text

    async def test_silent_by_default(
        self,
        provider: LiteLLMCompletionProvider,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level(logging.INFO, logger="chatfleet.infrastructure.llm.completion"):
            await provider.complete("Eres un asistente.", [], "hola")

        assert "=== LLM Request Messages ===" not in caplog.text
