"""Inbound message pipeline."""

import asyncio
import logging
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass

from chatfleet.application.services.conversation_registry import ConversationRegistry
from chatfleet.application.services.quota_guard import QuotaGuard
from chatfleet.domain.entities import (
    AuditRecord,
    Channel,
    ConversationState,
    InboundMessage,
    PromptConfig,
    StatusNotification,
)
from chatfleet.domain.exceptions import TranscriptionError
from chatfleet.domain.repositories import PromptRepository, UnitOfWork
from chatfleet.domain.services import (
    CompletionProvider,
    Messenger,
    StatusBroadcaster,
    TranscriptionProvider,
    first_media_tag,
    resolve_media,
)
from chatfleet.domain.services.reply_formatter import (
    clean_participant_id,
    contains_question,
    format_reply,
    is_affirmative,
    is_group_chat,
    is_negative,
)

logger = logging.getLogger(__name__)

AGENT_COMMAND = "/agente"
BOOT_COMMAND = "/boot"

HANDOFF_MESSAGE = "Cambiando de Operador! Un agente humano atenderá tu consulta pronto."
RESUME_MESSAGE = "Chatbot reanudado. ¿En qué puedo ayudarte?"
MEDIA_FOLLOWUP_CAPTION = "¡Aquí tienes! ¿Hay algo más en lo que pueda ayudarte?"
MEDIA_FAILURE_MESSAGE = (
    "Lo siento, hubo un problema al mostrar el contenido que solicitaste."
)
COMPLETION_FALLBACK_MESSAGE = (
    "Lo siento, hubo un problema al procesar tu mensaje. Por favor, intenta de nuevo."
)
EMPTY_REPLY_MESSAGE = "Lo siento, no pude generar una respuesta apropiada."

PRESENCE_RECORDING = "recording"
PRESENCE_COMPOSING = "composing"

UnitOfWorkFactory = Callable[[], AbstractAsyncContextManager[UnitOfWork]]
FollowupPromptRenderer = Callable[[bool, str], str]


@dataclass
class _Exchange:
    """Everything one pipeline run needs about the message being handled."""

    channel: Channel
    messenger: Messenger
    message: InboundMessage
    participant: str
    state: ConversationState

    @property
    def chat_id(self) -> str:
        return self.message.chat_id


class MessagePipeline:
    """Turns one inbound message into at most one reply plus one audit row.

    Messages from the same participant are handled one at a time under the
    registry lock. Provider and store failures never escape ``process``.
    """

    def __init__(
        self,
        registry: ConversationRegistry,
        quota_guard: QuotaGuard,
        prompt_repository: PromptRepository,
        completion_provider: CompletionProvider,
        transcription_provider: TranscriptionProvider,
        unit_of_work: UnitOfWorkFactory,
        broadcaster: StatusBroadcaster,
        followup_prompt: FollowupPromptRenderer,
        *,
        skip_participant_messages: bool = False,
        completion_timeout: float = 60.0,
    ) -> None:
        """Initialize the pipeline.

        Args:
            registry: Conversation state registry.
            quota_guard: Tenant quota policy.
            prompt_repository: Per-channel prompt lookups.
            completion_provider: Reply generation.
            transcription_provider: Voice note transcription.
            unit_of_work: Opens the transaction used to persist an exchange.
            broadcaster: Status notification fan-out.
            followup_prompt: Renders the meta prompt for yes/no answers.
            skip_participant_messages: Drop messages carrying a participant id.
            completion_timeout: Upper bound for one completion call (seconds).
        """
        self._registry = registry
        self._quota_guard = quota_guard
        self._prompt_repository = prompt_repository
        self._completion_provider = completion_provider
        self._transcription_provider = transcription_provider
        self._unit_of_work = unit_of_work
        self._broadcaster = broadcaster
        self._followup_prompt = followup_prompt
        self._skip_participant_messages = skip_participant_messages
        self._completion_timeout = completion_timeout

    async def process(
        self,
        channel: Channel,
        messenger: Messenger,
        message: InboundMessage,
    ) -> None:
        """Handle one inbound message.

        Processing flow:
        1. Filter out empty, own, group (and optionally participant) messages
        2. Lock the participant's conversation state
        3. Handle /agente and /boot
        4. Suppress everything while paused
        5. Check the tenant quota
        6. Transcribe voice notes
        7. Answer a pending yes/no question
        8. Otherwise generate a completion
        9-11. Format, send, remember and persist the reply

        Args:
            channel: Channel the message arrived on.
            messenger: Outbound surface of that channel.
            message: The inbound message.
        """
        # 1. Filter
        if not self._accepts(message):
            return

        participant = clean_participant_id(message.sender)
        if not participant:
            logger.debug("Dropping message %s without sender digits", message.id)
            return

        # 2. Lock (must be the first await to keep per-participant order)
        async with self._registry.acquire(channel.number, participant) as state:
            exchange = _Exchange(
                channel=channel,
                messenger=messenger,
                message=message,
                participant=participant,
                state=state,
            )
            try:
                await self._handle(exchange)
            except Exception:
                logger.exception(
                    "Unexpected error handling message %s from %s on %s",
                    message.id,
                    participant,
                    channel.number,
                )

    def _accepts(self, message: InboundMessage) -> bool:
        if not message.has_content:
            logger.debug("Dropping message %s without content", message.id)
            return False
        if message.from_me:
            logger.debug("Dropping own message %s", message.id)
            return False
        if is_group_chat(message.chat_id):
            logger.debug("Dropping group message %s", message.id)
            return False
        if self._skip_participant_messages and message.participant:
            logger.debug("Dropping participant message %s", message.id)
            return False
        return True

    async def _handle(self, exchange: _Exchange) -> None:
        state = exchange.state
        text = (exchange.message.text or "").strip()

        # 3. Commands
        if text == AGENT_COMMAND:
            state.pause()
            logger.info(
                "Conversation with %s on %s handed to an agent",
                exchange.participant,
                exchange.channel.number,
            )
            await self._send_text(exchange, HANDOFF_MESSAGE)
            return
        if text == BOOT_COMMAND:
            state.resume()
            logger.info(
                "Conversation with %s on %s resumed",
                exchange.participant,
                exchange.channel.number,
            )
            await self._send_text(exchange, RESUME_MESSAGE)
            return

        # 4. Paused
        if state.is_paused:
            logger.debug(
                "Conversation with %s on %s is paused",
                exchange.participant,
                exchange.channel.number,
            )
            return

        # 5. Quota
        quota = await self._quota_guard.check(exchange.channel.tenant_id)
        if not quota.allowed:
            await self._send_text(exchange, quota.message)
            return

        # 6. Voice notes
        if not text and exchange.message.audio is not None:
            transcript = await self._transcribe(exchange)
            if transcript is None:
                return
            text = transcript
        if not text:
            return

        # 7. Pending yes/no question
        if state.awaiting_response and state.last_question:
            if is_affirmative(text) or is_negative(text):
                await self._answer_pending_question(exchange, text)
                return

        # 8. General completion
        prompt = await self._load_prompt(exchange.channel)
        if prompt is None:
            return
        await self._set_presence(exchange, PRESENCE_COMPOSING)
        completion = await self._complete(prompt, state, text)
        await self._deliver(exchange, prompt, text, completion)

    async def _transcribe(self, exchange: _Exchange) -> str | None:
        audio = exchange.message.audio
        assert audio is not None
        await self._set_presence(exchange, PRESENCE_RECORDING)

        try:
            content = await exchange.messenger.download_media(exchange.message)
            transcript = await self._transcription_provider.transcribe(
                content, audio.mimetype
            )
        except TranscriptionError as e:
            logger.warning(
                "Transcription failed for %s (%s): %s",
                exchange.participant,
                type(e).__name__,
                e,
            )
            await self._send_text(exchange, e.user_message)
            return None
        except Exception:
            logger.exception("Could not download voice note %s", exchange.message.id)
            await self._send_text(exchange, TranscriptionError.user_message)
            return None

        logger.info("Transcribed voice note from %s", exchange.participant)
        return transcript

    async def _answer_pending_question(self, exchange: _Exchange, text: str) -> None:
        state = exchange.state
        affirmative = is_affirmative(text)
        question = state.last_question or ""
        media_tag = state.last_media_prompt

        try:
            prompt = await self._load_prompt(exchange.channel)
            if prompt is None:
                return

            await self._set_presence(exchange, PRESENCE_COMPOSING)

            if affirmative and media_tag:
                asset = prompt.asset_for_tag(media_tag)
                if asset is not None:
                    await self._send_offered_media(exchange, prompt, text, media_tag)
                    return
                logger.info(
                    "Offered media %s is no longer configured on %s",
                    media_tag,
                    exchange.channel.number,
                )

            meta_prompt = self._followup_prompt(affirmative, question)
            completion = await self._complete(prompt, state, meta_prompt)
            await self._deliver(exchange, prompt, text, completion)
        finally:
            state.clear_pending_question()

    async def _send_offered_media(
        self,
        exchange: _Exchange,
        prompt: PromptConfig,
        text: str,
        media_tag: str,
    ) -> None:
        asset = prompt.asset_for_tag(media_tag)
        assert asset is not None
        try:
            await exchange.messenger.send_media(
                exchange.chat_id, asset.type, asset.url, MEDIA_FOLLOWUP_CAPTION
            )
        except Exception:
            logger.exception(
                "Failed to send offered %s to %s", media_tag, exchange.participant
            )
            await self._send_text(exchange, MEDIA_FAILURE_MESSAGE)
            return

        media_type = asset.type.value
        exchange.state.last_media_prompt = None
        exchange.state.append_exchange(text, f"Mostró {media_type}: {media_tag}")
        await self._record(
            exchange,
            prompt,
            question=text,
            reply=f"Envió {media_type} en respuesta a una afirmación",
        )

    async def _load_prompt(self, channel: Channel) -> PromptConfig | None:
        try:
            prompt = await self._prompt_repository.find_by_channel(channel.number)
        except Exception:
            logger.exception("Failed to load prompt for channel %s", channel.number)
            return None
        if prompt is None:
            logger.error("No prompt configured for channel %s", channel.number)
        return prompt

    async def _complete(
        self,
        prompt: PromptConfig,
        state: ConversationState,
        user_text: str,
    ) -> str:
        try:
            return await asyncio.wait_for(
                self._completion_provider.complete(
                    prompt.system_prompt, state.recent_turns(), user_text
                ),
                timeout=self._completion_timeout,
            )
        except Exception:
            logger.warning(
                "Completion failed on %s, using fallback", prompt.channel, exc_info=True
            )
            return COMPLETION_FALLBACK_MESSAGE

    async def _deliver(
        self,
        exchange: _Exchange,
        prompt: PromptConfig,
        user_text: str,
        completion: str,
    ) -> None:
        state = exchange.state

        # 9. Post-process and remember questions
        reply = format_reply(completion) or EMPTY_REPLY_MESSAGE
        if contains_question(reply):
            state.remember_question(reply, first_media_tag(reply))
        else:
            state.forget_question()

        # 10. Send
        if not await self._send_reply(exchange, prompt, reply):
            return

        # 11. Remember and persist
        state.append_exchange(user_text, reply)
        await self._record(exchange, prompt, question=user_text, reply=reply)

    async def _send_reply(
        self,
        exchange: _Exchange,
        prompt: PromptConfig,
        reply: str,
    ) -> bool:
        for dispatch in resolve_media(reply, prompt):
            try:
                await exchange.messenger.send_media(
                    exchange.chat_id,
                    dispatch.asset.type,
                    dispatch.asset.url,
                    dispatch.caption,
                )
            except Exception:
                logger.warning(
                    "Failed to send %s to %s, trying next candidate",
                    dispatch.tag,
                    exchange.participant,
                    exc_info=True,
                )
                continue
            logger.info("Sent %s to %s", dispatch.asset.type.value, exchange.participant)
            return True

        return await self._send_text(exchange, reply)

    async def _send_text(self, exchange: _Exchange, text: str) -> bool:
        try:
            await exchange.messenger.send_text(exchange.chat_id, text)
        except Exception:
            logger.exception(
                "Failed to send message to %s on %s",
                exchange.participant,
                exchange.channel.number,
            )
            return False
        return True

    async def _set_presence(self, exchange: _Exchange, presence: str) -> None:
        try:
            await exchange.messenger.set_presence(exchange.chat_id, presence)
        except Exception:
            logger.debug("Failed to set presence %s", presence, exc_info=True)

    async def _record(
        self,
        exchange: _Exchange,
        prompt: PromptConfig,
        question: str,
        reply: str,
    ) -> None:
        record = AuditRecord(
            tenant_id=exchange.channel.tenant_id,
            channel=exchange.channel.number,
            participant=exchange.participant,
            prompt_id=prompt.prompt_id,
            question=question,
            reply=reply,
            conversation_id=exchange.state.conversation_id,
        )
        try:
            async with self._unit_of_work() as uow:
                await uow.messages.save(record)
                await uow.tenants.increment_message_count(record.tenant_id)
        except Exception:
            logger.exception(
                "Failed to persist exchange with %s on %s",
                exchange.participant,
                exchange.channel.number,
            )

        self._broadcaster.publish(
            StatusNotification(
                channel=exchange.channel.number,
                message=f"Respuesta enviada a {exchange.participant}",
            )
        )
