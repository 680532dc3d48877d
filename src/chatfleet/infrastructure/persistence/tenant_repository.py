"""SQLite implementation of TenantRepository and PlanRepository."""

from datetime import datetime, timezone

from sqlalchemy import update
from sqlmodel import select

from chatfleet.domain.entities import Plan, Tenant
from chatfleet.infrastructure.persistence.base import SQLiteRepository
from chatfleet.infrastructure.persistence.datetime_utils import normalize_optional
from chatfleet.infrastructure.persistence.models import PlanModel, TenantModel


class SQLiteTenantRepository(SQLiteRepository):
    """SQLite 版 TenantRepository 実装

    テナントの取得・保存と利用メッセージ数の加算を行う。
    """

    async def find_by_id(self, tenant_id: str) -> Tenant | None:
        """ID でテナントを検索する

        Args:
            tenant_id: テナント ID

        Returns:
            テナント（存在しない場合は None）
        """
        async with self._session_factory() as session:
            result = await session.exec(
                select(TenantModel).where(TenantModel.tenant_id == tenant_id)
            )
            model = result.first()
            if model is None:
                return None
            return self._to_entity(model)

    async def save(self, tenant: Tenant) -> None:
        """テナントを保存する（upsert）

        Args:
            tenant: 保存するテナント
        """
        async with self._session_factory() as session:
            result = await session.exec(
                select(TenantModel).where(TenantModel.tenant_id == tenant.id)
            )
            existing = result.first()

            if existing:
                existing.plan_id = tenant.plan_id
                existing.message_count = tenant.message_count
                existing.billing_start = tenant.billing_start
                existing.billing_end = tenant.billing_end
                existing.updated_at = datetime.now(timezone.utc)
                session.add(existing)
            else:
                session.add(
                    TenantModel(
                        tenant_id=tenant.id,
                        plan_id=tenant.plan_id,
                        message_count=tenant.message_count,
                        billing_start=tenant.billing_start,
                        billing_end=tenant.billing_end,
                    )
                )

            await self._commit(session)

    async def increment_message_count(self, tenant_id: str) -> None:
        """利用メッセージ数を 1 増やす

        読み出しを挟まず UPDATE 文で加算するため、同時実行でも取りこぼさない。

        Args:
            tenant_id: テナント ID
        """
        async with self._session_factory() as session:
            statement = (
                update(TenantModel)
                .where(TenantModel.tenant_id == tenant_id)  # type: ignore[arg-type]
                .values(
                    message_count=TenantModel.message_count + 1,
                    updated_at=datetime.now(timezone.utc),
                )
            )
            await session.exec(statement)  # type: ignore[call-overload]
            await self._commit(session)

    def _to_entity(self, model: TenantModel) -> Tenant:
        return Tenant(
            id=model.tenant_id,
            plan_id=model.plan_id,
            message_count=model.message_count,
            billing_start=normalize_optional(model.billing_start),
            billing_end=normalize_optional(model.billing_end),
        )


class SQLitePlanRepository(SQLiteRepository):
    """SQLite 版 PlanRepository 実装"""

    async def find_by_id(self, plan_id: str) -> Plan | None:
        """ID でプランを検索する

        Args:
            plan_id: プラン ID

        Returns:
            プラン（存在しない場合は None）
        """
        async with self._session_factory() as session:
            result = await session.exec(
                select(PlanModel).where(PlanModel.plan_id == plan_id)
            )
            model = result.first()
            if model is None:
                return None
            return Plan(id=model.plan_id, message_limit=model.message_limit)

    async def save(self, plan: Plan) -> None:
        async with self._session_factory() as session:
            result = await session.exec(
                select(PlanModel).where(PlanModel.plan_id == plan.id)
            )
            existing = result.first()
            if existing:
                existing.message_limit = plan.message_limit
                session.add(existing)
            else:
                session.add(PlanModel(plan_id=plan.id, message_limit=plan.message_limit))
            await self._commit(session)
