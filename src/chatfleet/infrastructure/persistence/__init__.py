"""Persistence infrastructure."""

from chatfleet.infrastructure.persistence.channel_repository import (
    SQLiteChannelRepository,
)
from chatfleet.infrastructure.persistence.database import (
    DatabaseManager,
    SQLiteUnitOfWork,
)
from chatfleet.infrastructure.persistence.exceptions import (
    DatabaseError,
    PersistenceError,
)
from chatfleet.infrastructure.persistence.message_repository import (
    SQLiteMessageRepository,
)
from chatfleet.infrastructure.persistence.models import (
    ChannelModel,
    MessageModel,
    PlanModel,
    PromptModel,
    TenantModel,
)
from chatfleet.infrastructure.persistence.prompt_repository import (
    SQLitePromptRepository,
)
from chatfleet.infrastructure.persistence.tenant_repository import (
    SQLitePlanRepository,
    SQLiteTenantRepository,
)

__all__ = [
    "ChannelModel",
    "DatabaseError",
    "DatabaseManager",
    "MessageModel",
    "PersistenceError",
    "PlanModel",
    "PromptModel",
    "SQLiteChannelRepository",
    "SQLiteMessageRepository",
    "SQLitePlanRepository",
    "SQLitePromptRepository",
    "SQLiteTenantRepository",
    "SQLiteUnitOfWork",
    "TenantModel",
]
