"""Database management."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

# Import models to register them with SQLModel metadata
from chatfleet.infrastructure.persistence import models as _models  # noqa: F401
from chatfleet.infrastructure.persistence.channel_repository import (
    SQLiteChannelRepository,
)
from chatfleet.infrastructure.persistence.exceptions import DatabaseError
from chatfleet.infrastructure.persistence.message_repository import (
    SQLiteMessageRepository,
)
from chatfleet.infrastructure.persistence.prompt_repository import (
    SQLitePromptRepository,
)
from chatfleet.infrastructure.persistence.tenant_repository import (
    SQLitePlanRepository,
    SQLiteTenantRepository,
)

logger = logging.getLogger(__name__)


class SQLiteUnitOfWork:
    """1 つの AsyncSession を共有するリポジトリの集合

    リポジトリはコミットせず flush のみ行う。コミットは DatabaseManager が
    コンテキスト終了時に行う。
    """

    def __init__(self, session: AsyncSession) -> None:
        """初期化

        Args:
            session: 共有するセッション
        """
        self._session = session

        @asynccontextmanager
        async def shared_session() -> AsyncGenerator[AsyncSession, None]:
            yield session

        self.tenants = SQLiteTenantRepository(shared_session, autocommit=False)
        self.plans = SQLitePlanRepository(shared_session, autocommit=False)
        self.channels = SQLiteChannelRepository(shared_session, autocommit=False)
        self.prompts = SQLitePromptRepository(shared_session, autocommit=False)
        self.messages = SQLiteMessageRepository(shared_session, autocommit=False)


class DatabaseManager:
    """データベース管理

    SQLite データベースの初期化、エンジン生成、セッション管理を行う。
    aiosqlite を使用した非同期アクセスをサポート。
    """

    def __init__(self, database_path: str, timeout_seconds: float = 30.0) -> None:
        """初期化

        Args:
            database_path: SQLite データベースファイルのパス
                          ":memory:" を指定するとインメモリDBを使用
            timeout_seconds: ロック待ちのタイムアウト（秒）
        """
        self._database_path = database_path
        self._timeout_seconds = timeout_seconds
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    def get_engine(self) -> AsyncEngine:
        """SQLAlchemy 非同期エンジンを取得する

        エンジンは遅延初期化され、キャッシュされる。
        データベースファイルの親ディレクトリが存在しない場合は自動作成する。

        Returns:
            AsyncEngine インスタンス
        """
        if self._engine is not None:
            return self._engine

        # Create parent directory for non-memory databases
        if self._database_path != ":memory:":
            db_path = Path(self._database_path)
            db_path.parent.mkdir(parents=True, exist_ok=True)
            url = f"sqlite+aiosqlite:///{self._database_path}"
        else:
            url = "sqlite+aiosqlite:///:memory:"

        self._engine = create_async_engine(
            url, connect_args={"timeout": self._timeout_seconds}
        )
        self._session_factory = async_sessionmaker(
            self._engine, class_=AsyncSession, expire_on_commit=False
        )
        return self._engine

    async def create_tables(self) -> None:
        """テーブルを作成する

        既存のテーブルがある場合は何もしない。
        """
        engine = self.get_engine()
        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """セッションを取得する（async context manager）

        Yields:
            AsyncSession インスタンス
        """
        self.get_engine()  # Ensures _session_factory is initialized
        assert self._session_factory is not None
        async with self._session_factory() as session:
            yield session

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncGenerator[SQLiteUnitOfWork, None]:
        """1 トランザクションで複数リポジトリを操作する

        Yields:
            SQLiteUnitOfWork インスタンス

        Raises:
            DatabaseError: コミットに失敗した場合
        """
        async with self.get_session() as session:
            try:
                yield SQLiteUnitOfWork(session)
            except BaseException:
                await session.rollback()
                raise

            try:
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise DatabaseError(str(e)) from e

    async def is_healthy(self) -> bool:
        """データベースに接続できるか確認する"""
        try:
            async with self.get_session() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception:
            logger.warning("Database health check failed", exc_info=True)
            return False

    async def close(self) -> None:
        """エンジンを破棄する"""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
