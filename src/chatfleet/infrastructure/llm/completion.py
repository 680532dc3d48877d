"""LiteLLM completion provider."""

import logging

from chatfleet.domain.entities import Turn
from chatfleet.domain.entities.conversation import RECENT_TURNS_LIMIT
from chatfleet.infrastructure.llm.client import LLMClient
from chatfleet.infrastructure.llm.exceptions import LLMError

logger = logging.getLogger(__name__)

INVALID_REQUEST_MESSAGE = "Lo siento, hubo un error en el procesamiento del mensaje."
EMPTY_RESPONSE_MESSAGE = "Lo siento, no pude generar una respuesta apropiada."
FAILURE_MESSAGE = (
    "Lo siento, hubo un problema al procesar tu mensaje. Por favor, intenta de nuevo."
)


class LiteLLMCompletionProvider:
    """LiteLLM-based CompletionProvider implementation.

    Builds ``[system, *recent_turns, user]`` and never raises: every failure
    becomes one of the fallback messages.
    """

    def __init__(
        self,
        client: LLMClient,
        *,
        debug_llm_messages: bool = False,
    ) -> None:
        """Initialize the provider.

        Args:
            client: LLMClient instance.
            debug_llm_messages: If True, log LLM messages at INFO level.
        """
        self._client = client
        self._debug_llm_messages = debug_llm_messages

    async def complete(
        self,
        system_prompt: str,
        recent_turns: list[Turn],
        user_text: str,
    ) -> str:
        """Generate a reply.

        Args:
            system_prompt: Channel system prompt.
            recent_turns: Conversation turns, oldest first. Only the last
                five are sent.
            user_text: Text to answer.

        Returns:
            Trimmed reply text, or a fallback message.
        """
        if not system_prompt or not user_text:
            logger.warning("Completion requested without prompt or text")
            return INVALID_REQUEST_MESSAGE

        messages = self._build_messages(system_prompt, recent_turns, user_text)

        if self._should_log():
            self._log_messages(messages)

        try:
            response = await self._client.complete(messages)
        except LLMError:
            logger.warning("Completion failed, using fallback reply", exc_info=True)
            return FAILURE_MESSAGE

        reply = response.strip()
        if self._should_log():
            self._log_response(reply)

        if not reply:
            return EMPTY_RESPONSE_MESSAGE
        return reply

    def _build_messages(
        self,
        system_prompt: str,
        recent_turns: list[Turn],
        user_text: str,
    ) -> list[dict[str, str]]:
        messages = [{"role": "system", "content": system_prompt}]
        messages.extend(turn.to_message() for turn in recent_turns[-RECENT_TURNS_LIMIT:])
        messages.append({"role": "user", "content": user_text})
        return messages

    def _should_log(self) -> bool:
        """Check if logging should occur."""
        return self._debug_llm_messages or logger.isEnabledFor(logging.DEBUG)

    def _log_messages(self, messages: list[dict[str, str]]) -> None:
        """Log LLM request messages."""
        log_func = logger.info if self._debug_llm_messages else logger.debug
        log_func("=== LLM Request Messages ===")
        for i, msg in enumerate(messages):
            log_func("[%d] role=%s", i, msg.get("role", "unknown"))
            log_func("    content: %s", msg.get("content", ""))
        log_func("=== End of Messages ===")

    def _log_response(self, response: str) -> None:
        """Log LLM response."""
        log_func = logger.info if self._debug_llm_messages else logger.debug
        log_func("=== LLM Response ===")
        log_func("response: %s", response)
        log_func("=== End of Response ===")
