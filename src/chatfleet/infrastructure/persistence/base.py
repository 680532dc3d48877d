"""Shared base for SQLite repositories."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

from sqlmodel.ext.asyncio.session import AsyncSession

SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


class SQLiteRepository:
    """SQLite リポジトリの基底クラス

    autocommit が False の場合は flush のみ行い、コミットは呼び出し側
    （UnitOfWork）に任せる。
    """

    def __init__(self, session_factory: SessionFactory, autocommit: bool = True) -> None:
        """初期化

        Args:
            session_factory: 非同期セッション生成関数
            autocommit: 各操作の最後にコミットするか
        """
        self._session_factory = session_factory
        self._autocommit = autocommit

    async def _commit(self, session: AsyncSession) -> None:
        if self._autocommit:
            await session.commit()
        else:
            await session.flush()
