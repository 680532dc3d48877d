"""設定データクラス"""

import tempfile
from dataclasses import dataclass, field


@dataclass
class LLMConfig:
    """LLM設定（LiteLLMのcompletionに渡すdict）"""

    model: str
    temperature: float = 0.7
    max_tokens: int = 200
    timeout_seconds: float = 60.0


@dataclass
class TranscriptionConfig:
    """音声文字起こし設定"""

    model: str = "whisper-1"
    language: str = "es"
    response_format: str = "json"
    timeout_seconds: float = 30.0
    scratch_dir: str = field(default_factory=tempfile.gettempdir)


@dataclass
class DatabaseConfig:
    """データベース設定"""

    database_path: str
    timeout_seconds: float = 30.0


@dataclass
class SessionConfig:
    """チャンネル接続セッション設定

    Attributes:
        auth_dir: 認証情報を保存するディレクトリ
        qr_dir: QR コード画像の保存先
        qr_base_url: QR コード画像を配信するベース URL
        reconnect_initial_seconds: 再接続待ちの初期値
        reconnect_max_seconds: 再接続待ちの上限
        reconnect_multiplier: 再接続待ちの倍率
        inbound_queue_size: チャンネルごとの受信イベントキューの上限
        max_in_flight_messages: チャンネルごとに同時処理するメッセージ数の上限
        skip_participant_messages: participant 付きメッセージを無視するか
        provisioning_timeout_seconds: プロビジョニング応答の待ち時間
    """

    auth_dir: str = "auth_info"
    qr_dir: str = "uploads"
    qr_base_url: str = "http://localhost:3000/uploads"
    reconnect_initial_seconds: float = 1.0
    reconnect_max_seconds: float = 60.0
    reconnect_multiplier: float = 2.0
    inbound_queue_size: int = 100
    max_in_flight_messages: int = 20
    skip_participant_messages: bool = False
    provisioning_timeout_seconds: float = 60.0


@dataclass
class TransportConfig:
    """トランスポート設定

    factory は "package.module:callable" 形式で Transport Provider を返す。
    """

    factory: str
    options: dict[str, str] = field(default_factory=dict)


@dataclass
class ServerConfig:
    """HTTP サーバー設定"""

    host: str = "0.0.0.0"
    port: int = 3000
    subscriber_queue_size: int = 100


@dataclass
class LoggingConfig:
    """ログ設定"""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    loggers: dict[str, str] | None = None
    debug_llm_messages: bool = False


@dataclass
class Config:
    """アプリケーション設定"""

    llm: dict[str, LLMConfig]
    database: DatabaseConfig
    transport: TransportConfig
    transcription: TranscriptionConfig = field(default_factory=TranscriptionConfig)
    sessions: SessionConfig = field(default_factory=SessionConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig | None = None
