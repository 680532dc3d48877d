"""Common fixtures for LLM infrastructure tests."""

from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from chatfleet.config import LLMConfig, TranscriptionConfig
from chatfleet.domain.entities import Turn


@pytest.fixture
def llm_config() -> LLMConfig:
    """Create test LLM config."""
    return LLMConfig(model="gpt-4o-mini", temperature=0.7, max_tokens=200)


@pytest.fixture
def transcription_config(tmp_path: Path) -> TranscriptionConfig:
    """Create test transcription config writing scratch files to tmp_path."""
    return TranscriptionConfig(
        model="whisper-1",
        language="es",
        timeout_seconds=5.0,
        scratch_dir=str(tmp_path),
    )


@pytest.fixture
def turns() -> list[Turn]:
    """Create six alternating conversation turns (oldest first)."""
    return [
        Turn(role="user" if i % 2 == 0 else "assistant", content=f"turn-{i}")
        for i in range(6)
    ]


@pytest.fixture
def make_completion_response() -> Callable[[str | None], MagicMock]:
    """Create a factory of mock LiteLLM completion responses."""

    def factory(content: str | None) -> MagicMock:
        response = MagicMock()
        response.choices = [MagicMock()]
        response.choices[0].message.content = content
        return response

    return factory
