"""Conversation state entities."""

import uuid
from dataclasses import dataclass, field
from enum import Enum

RECENT_TURNS_LIMIT = 5


class ConversationStatus(Enum):
    """Whether the bot answers in a conversation."""

    ACTIVE = "active"
    PAUSED = "paused"


@dataclass(frozen=True)
class Turn:
    """One message in the conversation context.

    Attributes:
        role: "user" or "assistant".
        content: Message text.
    """

    role: str
    content: str

    def to_message(self) -> dict[str, str]:
        """Convert to an OpenAI-format message."""
        return {"role": self.role, "content": self.content}


@dataclass
class ConversationState:
    """Per-participant conversation state for one channel.

    Mutated only while holding the registry lock for its key.

    Attributes:
        channel: Channel number.
        participant: Cleaned participant id.
        status: Active or paused.
        context: Turns in arrival order (unbounded).
        last_question: Last assistant reply that asked something.
        last_media_prompt: Media tag offered with that question.
        awaiting_response: Whether a yes/no answer is expected.
        conversation_id: Stable id grouping the persisted rows.
    """

    channel: str
    participant: str
    status: ConversationStatus = ConversationStatus.ACTIVE
    context: list[Turn] = field(default_factory=list)
    last_question: str | None = None
    last_media_prompt: str | None = None
    awaiting_response: bool = False
    conversation_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def is_paused(self) -> bool:
        return self.status == ConversationStatus.PAUSED

    def pause(self) -> None:
        self.status = ConversationStatus.PAUSED

    def resume(self) -> None:
        self.status = ConversationStatus.ACTIVE

    def recent_turns(self, limit: int = RECENT_TURNS_LIMIT) -> list[Turn]:
        """Get the most recent turns used for prompt building."""
        if limit <= 0:
            return []
        return list(self.context[-limit:])

    def remember_question(self, reply: str, media_tag: str | None) -> None:
        """Remember an assistant question awaiting a yes/no answer."""
        self.last_question = reply
        self.awaiting_response = True
        self.last_media_prompt = media_tag

    def clear_pending_question(self) -> None:
        self.last_question = None
        self.awaiting_response = False

    def forget_question(self) -> None:
        """Clear the pending question and the offered media."""
        self.clear_pending_question()
        self.last_media_prompt = None

    def append_turn(self, role: str, content: str) -> None:
        self.context.append(Turn(role=role, content=content))

    def append_exchange(self, user_text: str, reply: str) -> None:
        """Append a user turn followed by the assistant turn."""
        self.append_turn("user", user_text)
        self.append_turn("assistant", reply)
