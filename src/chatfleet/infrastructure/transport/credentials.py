"""File-based credential store."""

import json
import logging
import os
import secrets
import shutil
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

CREDENTIALS_FILENAME = "creds.json"


class CredentialStore:
    """チャンネルごとの認証情報をファイルに保存する

    認証情報は ``<auth_dir>/<channel>/creds.json`` に JSON で保存される。
    内容はトランスポートが扱う不透明なデータで、ここでは解釈しない。
    """

    def __init__(self, auth_dir: str | Path) -> None:
        """初期化

        Args:
            auth_dir: 認証情報を保存するルートディレクトリ
        """
        self._auth_dir = Path(auth_dir)

    def _channel_dir(self, channel: str) -> Path:
        """チャンネルのディレクトリを取得する

        Raises:
            ValueError: チャンネル名が auth_dir の直下を指さない場合
        """
        channel_dir = self._auth_dir / channel
        if channel_dir.resolve().parent != self._auth_dir.resolve():
            raise ValueError(f"Invalid channel name: {channel!r}")
        return channel_dir

    def _credentials_path(self, channel: str) -> Path:
        return self._channel_dir(channel) / CREDENTIALS_FILENAME

    def exists(self, channel: str) -> bool:
        """保存済みの認証情報があるか確認する"""
        return self._credentials_path(channel).is_file()

    def load_or_create(self, channel: str) -> dict[str, Any]:
        """認証情報を読み込む（存在しない場合は新規作成する）

        新規作成時は新しいランダムな ID を持つ未登録の認証情報を保存する。

        Args:
            channel: チャンネル番号

        Returns:
            認証情報
        """
        path = self._credentials_path(channel)
        if path.is_file():
            with open(path, encoding="utf-8") as f:
                return json.load(f)

        credentials: dict[str, Any] = {
            "identity": secrets.token_hex(16),
            "registered": False,
        }
        self.save(channel, credentials)
        logger.info("Created fresh credentials for channel %s", channel)
        return credentials

    def save(self, channel: str, credentials: dict[str, Any]) -> None:
        """認証情報を保存する

        一時ファイルに書き込んでから置き換えるため、途中で失敗しても
        既存のファイルは壊れない。

        Args:
            channel: チャンネル番号
            credentials: 認証情報
        """
        path = self._credentials_path(channel)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".json.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(credentials, f, ensure_ascii=False)
        os.replace(tmp_path, path)
        logger.debug("Saved credentials for channel %s", channel)

    def purge(self, channel: str) -> None:
        """チャンネルの認証情報をディレクトリごと削除する"""
        channel_dir = self._channel_dir(channel)
        if channel_dir.exists():
            shutil.rmtree(channel_dir)
            logger.info("Purged credentials for channel %s", channel)

    def list_channels(self) -> list[str]:
        """認証情報が保存されているチャンネルの一覧を取得する

        Returns:
            チャンネル番号リスト（名前順）
        """
        if not self._auth_dir.is_dir():
            return []
        return sorted(
            entry.name
            for entry in self._auth_dir.iterdir()
            if entry.is_dir() and (entry / CREDENTIALS_FILENAME).is_file()
        )
