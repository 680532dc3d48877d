"""SQLite implementation of ChannelRepository."""

from sqlmodel import select

from chatfleet.domain.entities import Channel
from chatfleet.infrastructure.persistence.base import SQLiteRepository
from chatfleet.infrastructure.persistence.models import ChannelModel


class SQLiteChannelRepository(SQLiteRepository):
    """SQLite 版 ChannelRepository 実装

    チャンネル番号とテナントの紐付けを SQLite データベースに対して管理する。
    """

    async def save(self, channel: Channel) -> None:
        """チャンネルを保存する（upsert）

        既存のチャンネルが存在する場合はテナントを更新する。

        Args:
            channel: 保存するチャンネル
        """
        async with self._session_factory() as session:
            result = await session.exec(
                select(ChannelModel).where(ChannelModel.number == channel.number)
            )
            existing = result.first()

            if existing:
                existing.tenant_id = channel.tenant_id
                session.add(existing)
            else:
                session.add(
                    ChannelModel(number=channel.number, tenant_id=channel.tenant_id)
                )

            await self._commit(session)

    async def find_by_number(self, number: str) -> Channel | None:
        """番号でチャンネルを検索する

        Args:
            number: チャンネル番号

        Returns:
            チャンネル（存在しない場合は None）
        """
        async with self._session_factory() as session:
            result = await session.exec(
                select(ChannelModel).where(ChannelModel.number == number)
            )
            model = result.first()
            if model is None:
                return None
            return Channel(number=model.number, tenant_id=model.tenant_id)

    async def find_all(self) -> list[Channel]:
        """全チャンネルを取得する

        Returns:
            チャンネルリスト（番号順）
        """
        async with self._session_factory() as session:
            result = await session.exec(
                select(ChannelModel).order_by(ChannelModel.number)
            )
            return [
                Channel(number=model.number, tenant_id=model.tenant_id)
                for model in result.all()
            ]
