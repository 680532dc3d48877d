"""Prompt repository protocol."""

from typing import Protocol

from chatfleet.domain.entities import PromptConfig


class PromptRepository(Protocol):
    """プロンプト設定リポジトリの抽象インターフェース"""

    async def find_by_channel(self, channel: str) -> PromptConfig | None:
        """チャンネルのプロンプト設定を取得する

        チャンネルがテナントに紐付いている場合のみ返す。

        Args:
            channel: チャンネル番号

        Returns:
            プロンプト設定（存在しない場合は None）
        """
        ...

    async def save(self, prompt: PromptConfig) -> None:
        ...
