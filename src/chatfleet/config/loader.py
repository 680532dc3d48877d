"""YAML設定ファイルの読み込みと環境変数展開"""

import os
import re
from pathlib import Path
from typing import Any

import yaml

from chatfleet.config.models import (
    Config,
    DatabaseConfig,
    LLMConfig,
    LoggingConfig,
    ServerConfig,
    SessionConfig,
    TranscriptionConfig,
    TransportConfig,
)


class ConfigError(Exception):
    """設定関連の基底例外"""


class ConfigValidationError(ConfigError):
    """設定値のバリデーションエラー"""


class EnvironmentVariableError(ConfigError):
    """環境変数が見つからないエラー"""


# 環境変数パターン: ${VAR_NAME}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


def expand_env_vars(value: str) -> str:
    """文字列中の ${VAR_NAME} を環境変数の値に置換する

    Args:
        value: 置換対象の文字列

    Returns:
        環境変数が展開された文字列

    Raises:
        EnvironmentVariableError: 環境変数が未設定
    """
    if not value:
        return value

    def replace_var(match: re.Match[str]) -> str:
        var_name = match.group(1)
        env_value = os.environ.get(var_name)
        if env_value is None:
            raise EnvironmentVariableError(
                f"Environment variable '{var_name}' is not set"
            )
        return env_value

    return ENV_VAR_PATTERN.sub(replace_var, value)


def _expand_recursive(data: Any) -> Any:
    """データ構造を再帰的に走査し、文字列中の環境変数を展開する

    Args:
        data: 展開対象のデータ（dict, list, str, その他）

    Returns:
        環境変数が展開されたデータ
    """
    if isinstance(data, dict):
        return {key: _expand_recursive(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_expand_recursive(item) for item in data]
    elif isinstance(data, str):
        return expand_env_vars(data)
    else:
        return data


def _validate_required_field(data: dict[str, Any], field: str, parent: str = "") -> Any:
    """必須フィールドの存在を検証する

    Args:
        data: 検証対象のdict
        field: フィールド名
        parent: 親フィールド名（エラーメッセージ用）

    Returns:
        フィールドの値

    Raises:
        ConfigValidationError: フィールドが存在しない
    """
    if field not in data or data[field] is None:
        full_path = f"{parent}.{field}" if parent else field
        raise ConfigValidationError(f"Required field '{full_path}' is missing")
    return data[field]


def _load_sessions(data: dict[str, Any] | None) -> SessionConfig:
    """sessions セクションを読み込む（省略時はデフォルト値）"""
    defaults = SessionConfig()
    if not data:
        return defaults
    return SessionConfig(
        auth_dir=data.get("auth_dir", defaults.auth_dir),
        qr_dir=data.get("qr_dir", defaults.qr_dir),
        qr_base_url=data.get("qr_base_url", defaults.qr_base_url).rstrip("/"),
        reconnect_initial_seconds=float(
            data.get("reconnect_initial_seconds", defaults.reconnect_initial_seconds)
        ),
        reconnect_max_seconds=float(
            data.get("reconnect_max_seconds", defaults.reconnect_max_seconds)
        ),
        reconnect_multiplier=float(
            data.get("reconnect_multiplier", defaults.reconnect_multiplier)
        ),
        inbound_queue_size=int(
            data.get("inbound_queue_size", defaults.inbound_queue_size)
        ),
        max_in_flight_messages=int(
            data.get("max_in_flight_messages", defaults.max_in_flight_messages)
        ),
        skip_participant_messages=bool(
            data.get("skip_participant_messages", defaults.skip_participant_messages)
        ),
        provisioning_timeout_seconds=float(
            data.get(
                "provisioning_timeout_seconds", defaults.provisioning_timeout_seconds
            )
        ),
    )


def _load_transcription(data: dict[str, Any] | None) -> TranscriptionConfig:
    """transcription セクションを読み込む（省略時はデフォルト値）"""
    defaults = TranscriptionConfig()
    if not data:
        return defaults
    return TranscriptionConfig(
        model=data.get("model", defaults.model),
        language=data.get("language", defaults.language),
        response_format=data.get("response_format", defaults.response_format),
        timeout_seconds=float(data.get("timeout_seconds", defaults.timeout_seconds)),
        scratch_dir=data.get("scratch_dir", defaults.scratch_dir),
    )


def load_config(path: str | Path) -> Config:
    """設定ファイルを読み込む

    Args:
        path: config.yaml のパス

    Returns:
        Config オブジェクト

    Raises:
        FileNotFoundError: ファイルが存在しない
        ConfigValidationError: 必須項目が欠落
        EnvironmentVariableError: 環境変数が未設定
        yaml.YAMLError: YAML構文エラー
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        raw_data = yaml.safe_load(f)

    if not isinstance(raw_data, dict):
        raise ConfigValidationError("Config root must be a mapping")

    # 環境変数を展開
    data = _expand_recursive(raw_data)

    # 必須セクションの検証
    llm_data = _validate_required_field(data, "llm")
    database_data = _validate_required_field(data, "database")
    transport_data = _validate_required_field(data, "transport")

    # LLMConfig (defaultは必須)
    _validate_required_field(llm_data, "default", "llm")
    llm: dict[str, LLMConfig] = {}
    for key, llm_item in llm_data.items():
        model = _validate_required_field(llm_item, "model", f"llm.{key}")
        llm[key] = LLMConfig(
            model=model,
            temperature=llm_item.get("temperature", 0.7),
            max_tokens=llm_item.get("max_tokens", 200),
            timeout_seconds=float(llm_item.get("timeout_seconds", 60.0)),
        )

    # DatabaseConfig
    database = DatabaseConfig(
        database_path=_validate_required_field(
            database_data, "database_path", "database"
        ),
        timeout_seconds=float(database_data.get("timeout_seconds", 30.0)),
    )

    # TransportConfig
    transport = TransportConfig(
        factory=_validate_required_field(transport_data, "factory", "transport"),
        options=transport_data.get("options") or {},
    )

    # ServerConfig (optional)
    server_data = data.get("server") or {}
    server = ServerConfig(
        host=server_data.get("host", "0.0.0.0"),
        port=int(server_data.get("port", 3000)),
        subscriber_queue_size=int(server_data.get("subscriber_queue_size", 100)),
    )

    # LoggingConfig (optional)
    logging_config: LoggingConfig | None = None
    logging_data = data.get("logging")
    if logging_data:
        logging_config = LoggingConfig(
            level=logging_data.get("level", "INFO"),
            format=logging_data.get(
                "format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            ),
            loggers=logging_data.get("loggers"),
            debug_llm_messages=bool(logging_data.get("debug_llm_messages", False)),
        )

    return Config(
        llm=llm,
        database=database,
        transport=transport,
        transcription=_load_transcription(data.get("transcription")),
        sessions=_load_sessions(data.get("sessions")),
        server=server,
        logging=logging_config,
    )
