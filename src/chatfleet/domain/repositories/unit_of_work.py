"""UnitOfWork protocol."""

from typing import Protocol

from chatfleet.domain.repositories.channel_repository import ChannelRepository
from chatfleet.domain.repositories.message_repository import MessageRepository
from chatfleet.domain.repositories.prompt_repository import PromptRepository
from chatfleet.domain.repositories.tenant_repository import (
    PlanRepository,
    TenantRepository,
)


class UnitOfWork(Protocol):
    """複数リポジトリの操作を 1 トランザクションにまとめるインターフェース

    コンテキストを正常に抜けた時点でコミットされ、例外時はロールバックされる。
    """

    tenants: TenantRepository
    plans: PlanRepository
    channels: ChannelRepository
    prompts: PromptRepository
    messages: MessageRepository
