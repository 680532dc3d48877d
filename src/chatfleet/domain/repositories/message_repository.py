"""Audit message repository protocol."""

from typing import Protocol

from chatfleet.domain.entities import AuditRecord


class MessageRepository(Protocol):
    """会話の監査ログリポジトリの抽象インターフェース

    送信済みの応答を記録する。
    """

    async def save(self, record: AuditRecord) -> None:
        """監査レコードを保存する

        Args:
            record: 保存するレコード
        """
        ...

    async def find_by_conversation(
        self,
        conversation_id: str,
        limit: int = 20,
    ) -> list[AuditRecord]:
        """会話 ID でレコードを取得する

        Args:
            conversation_id: 会話 ID
            limit: 取得する最大件数

        Returns:
            レコードリスト（古い順）
        """
        ...
