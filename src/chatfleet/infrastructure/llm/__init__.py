"""LLM integration."""

from chatfleet.infrastructure.llm.client import LLMClient
from chatfleet.infrastructure.llm.completion import LiteLLMCompletionProvider
from chatfleet.infrastructure.llm.exceptions import (
    LLMAuthenticationError,
    LLMError,
    LLMRateLimitError,
    LLMTimeoutError,
)
from chatfleet.infrastructure.llm.templates import render_followup_prompt
from chatfleet.infrastructure.llm.transcriber import LiteLLMTranscriber

__all__ = [
    "LLMAuthenticationError",
    "LLMClient",
    "LLMError",
    "LLMRateLimitError",
    "LLMTimeoutError",
    "LiteLLMCompletionProvider",
    "LiteLLMTranscriber",
    "render_followup_prompt",
]
