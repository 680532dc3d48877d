"""Tenant and plan repository protocols."""

from typing import Protocol

from chatfleet.domain.entities import Plan, Tenant


class TenantRepository(Protocol):
    """テナント（利用者アカウント）リポジトリの抽象インターフェース"""

    async def find_by_id(self, tenant_id: str) -> Tenant | None:
        """ID でテナントを検索する

        Args:
            tenant_id: テナント ID

        Returns:
            テナント（存在しない場合は None）
        """
        ...

    async def save(self, tenant: Tenant) -> None:
        """テナントを保存する（upsert）

        Args:
            tenant: 保存するテナント
        """
        ...

    async def increment_message_count(self, tenant_id: str) -> None:
        """利用メッセージ数を 1 増やす

        Args:
            tenant_id: テナント ID
        """
        ...


class PlanRepository(Protocol):
    """プランリポジトリの抽象インターフェース"""

    async def find_by_id(self, plan_id: str) -> Plan | None:
        """ID でプランを検索する

        Args:
            plan_id: プラン ID

        Returns:
            プラン（存在しない場合は None）
        """
        ...

    async def save(self, plan: Plan) -> None:
        ...
