"""Domain repositories."""

from chatfleet.domain.repositories.channel_repository import ChannelRepository
from chatfleet.domain.repositories.message_repository import MessageRepository
from chatfleet.domain.repositories.prompt_repository import PromptRepository
from chatfleet.domain.repositories.tenant_repository import (
    PlanRepository,
    TenantRepository,
)
from chatfleet.domain.repositories.unit_of_work import UnitOfWork

__all__ = [
    "ChannelRepository",
    "MessageRepository",
    "PlanRepository",
    "PromptRepository",
    "TenantRepository",
    "UnitOfWork",
]
