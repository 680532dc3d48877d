"""SQLite implementation of PromptRepository."""

from datetime import datetime, timezone

from sqlmodel import select

from chatfleet.domain.entities import PromptConfig
from chatfleet.domain.entities.prompt import MAX_IMAGES, MAX_VIDEOS
from chatfleet.infrastructure.persistence.base import SQLiteRepository
from chatfleet.infrastructure.persistence.models import ChannelModel, PromptModel

_IMAGE_COLUMNS = tuple(f"image_url_{i}" for i in range(1, MAX_IMAGES + 1))
_VIDEO_COLUMNS = tuple(f"video_url_{i}" for i in range(1, MAX_VIDEOS + 1))


class SQLitePromptRepository(SQLiteRepository):
    """SQLite 版 PromptRepository 実装

    プロンプト設定はチャンネル（chatbots）と結合して取得する。
    """

    async def find_by_channel(self, channel: str) -> PromptConfig | None:
        """チャンネルのプロンプト設定を取得する

        Args:
            channel: チャンネル番号

        Returns:
            プロンプト設定（プロンプトまたはチャンネルの紐付けがない場合は None）
        """
        async with self._session_factory() as session:
            statement = select(PromptModel, ChannelModel).where(
                PromptModel.channel == ChannelModel.number,
                ChannelModel.number == channel,
            )
            result = await session.exec(statement)
            row = result.first()
            if row is None:
                return None
            prompt_model, channel_model = row
            return self._to_entity(prompt_model, channel_model.tenant_id)

    async def save(self, prompt: PromptConfig) -> None:
        """プロンプト設定を保存する（チャンネル単位の upsert）

        prompt_id と tenant_id は保存時には無視される。
        prompt_id は採番され、tenant_id はチャンネルの紐付けから決まる。

        Args:
            prompt: 保存するプロンプト設定
        """
        async with self._session_factory() as session:
            result = await session.exec(
                select(PromptModel).where(PromptModel.channel == prompt.channel)
            )
            model = result.first()
            if model is None:
                model = PromptModel(channel=prompt.channel, system_prompt="")

            model.system_prompt = prompt.system_prompt
            for i, column in enumerate(_IMAGE_COLUMNS):
                url = prompt.image_urls[i] if i < len(prompt.image_urls) else None
                setattr(model, column, url)
            for i, column in enumerate(_VIDEO_COLUMNS):
                url = prompt.video_urls[i] if i < len(prompt.video_urls) else None
                setattr(model, column, url)
            model.updated_at = datetime.now(timezone.utc)

            session.add(model)
            await self._commit(session)

    def _to_entity(self, model: PromptModel, tenant_id: str) -> PromptConfig:
        return PromptConfig(
            prompt_id=str(model.id),
            channel=model.channel,
            tenant_id=tenant_id,
            system_prompt=model.system_prompt,
            image_urls=tuple(getattr(model, column) for column in _IMAGE_COLUMNS),
            video_urls=tuple(getattr(model, column) for column in _VIDEO_COLUMNS),
        )
