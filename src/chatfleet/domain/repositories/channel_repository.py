"""Channel binding repository protocol."""

from typing import Protocol

from chatfleet.domain.entities import Channel


class ChannelRepository(Protocol):
    """チャンネル番号とテナントの紐付けを扱うリポジトリの抽象インターフェース"""

    async def save(self, channel: Channel) -> None:
        """チャンネルを保存する（upsert）

        Args:
            channel: 保存するチャンネル
        """
        ...

    async def find_by_number(self, number: str) -> Channel | None:
        """番号でチャンネルを検索する

        Args:
            number: チャンネル番号

        Returns:
            チャンネル（存在しない場合は None）
        """
        ...

    async def find_all(self) -> list[Channel]:
        """全チャンネルを取得する

        Returns:
            チャンネルリスト（番号順）
        """
        ...
