"""設定管理モジュール"""

from chatfleet.config.loader import (
    ConfigError,
    ConfigValidationError,
    EnvironmentVariableError,
    expand_env_vars,
    load_config,
)
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

__all__ = [
    "Config",
    "ConfigError",
    "ConfigValidationError",
    "DatabaseConfig",
    "EnvironmentVariableError",
    "LLMConfig",
    "LoggingConfig",
    "ServerConfig",
    "SessionConfig",
    "TranscriptionConfig",
    "TransportConfig",
    "expand_env_vars",
    "load_config",
]
