"""In-memory registry of per-participant conversation state."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from chatfleet.domain.entities import ConversationState

logger = logging.getLogger(__name__)

ConversationKey = tuple[str, str]


class ConversationRegistry:
    """Owns one ConversationState and one lock per (channel, participant).

    States are created lazily and live for the process lifetime. All
    mutations of a state happen inside ``acquire`` so messages from the same
    participant are handled one at a time, in arrival order.
    """

    def __init__(self) -> None:
        self._states: dict[ConversationKey, ConversationState] = {}
        self._locks: dict[ConversationKey, asyncio.Lock] = {}

    def __len__(self) -> int:
        return len(self._states)

    def get(self, channel: str, participant: str) -> ConversationState | None:
        return self._states.get((channel, participant))

    def get_or_create(self, channel: str, participant: str) -> ConversationState:
        """Get the state for a participant, creating it on first use.

        Creation never awaits, so two callers on the same event loop always
        observe the same instance.

        Args:
            channel: Channel number.
            participant: Cleaned participant id.

        Returns:
            The conversation state.
        """
        key = (channel, participant)
        state = self._states.get(key)
        if state is None:
            state = ConversationState(channel=channel, participant=participant)
            self._states[key] = state
            self._locks[key] = asyncio.Lock()
            logger.debug(
                "Created conversation %s for %s on %s",
                state.conversation_id,
                participant,
                channel,
            )
        return state

    @asynccontextmanager
    async def acquire(
        self, channel: str, participant: str
    ) -> AsyncIterator[ConversationState]:
        """Hold the participant's lock and yield its state.

        Waiters are served first come, first served, so callers must enter
        this context before awaiting anything else to keep arrival order.

        Args:
            channel: Channel number.
            participant: Cleaned participant id.

        Yields:
            The conversation state, exclusively owned until the block exits.
        """
        state = self.get_or_create(channel, participant)
        async with self._locks[(channel, participant)]:
            yield state
