"""SQLite implementation of MessageRepository."""

from sqlmodel import select

from chatfleet.domain.entities import AuditRecord
from chatfleet.infrastructure.persistence.base import SQLiteRepository
from chatfleet.infrastructure.persistence.datetime_utils import normalize_to_utc
from chatfleet.infrastructure.persistence.models import MessageModel


class SQLiteMessageRepository(SQLiteRepository):
    """SQLite 版 MessageRepository 実装

    送信済み応答の監査レコードを SQLite データベースに記録する。
    """

    async def save(self, record: AuditRecord) -> None:
        """監査レコードを保存する

        Args:
            record: 保存するレコード
        """
        async with self._session_factory() as session:
            session.add(self._to_model(record))
            await self._commit(session)

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
        async with self._session_factory() as session:
            statement = (
                select(MessageModel)
                .where(MessageModel.conversation_id == conversation_id)
                .order_by(MessageModel.received_at.desc(), MessageModel.id.desc())  # type: ignore[union-attr]
                .limit(limit)
            )
            result = await session.exec(statement)
            models = list(result.all())
            models.reverse()
            return [self._to_entity(m) for m in models]

    def _to_entity(self, model: MessageModel) -> AuditRecord:
        return AuditRecord(
            tenant_id=model.tenant_id,
            channel=model.channel,
            participant=model.participant,
            prompt_id=model.prompt_id,
            question=model.question,
            reply=model.reply,
            conversation_id=model.conversation_id,
            type=model.type,
            received_at=normalize_to_utc(model.received_at),
        )

    def _to_model(self, entity: AuditRecord) -> MessageModel:
        return MessageModel(
            tenant_id=entity.tenant_id,
            channel=entity.channel,
            participant=entity.participant,
            prompt_id=entity.prompt_id,
            question=entity.question,
            reply=entity.reply,
            type=entity.type,
            conversation_id=entity.conversation_id,
            received_at=entity.received_at,
        )
