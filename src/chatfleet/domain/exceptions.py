"""Domain exceptions."""


class TranscriptionError(Exception):
    """音声の文字起こしに失敗した場合の基底例外

    user_message はエンドユーザーにそのまま返すメッセージ。
    """

    user_message = "Hubo un problema al procesar el audio. Por favor, intenta de nuevo."


class TranscriptionUnconfiguredError(TranscriptionError):
    """文字起こしサービスの API キーが未設定"""

    user_message = (
        "Error de configuración del servicio. Por favor, contacta al administrador."
    )


class TranscriptionAuthError(TranscriptionError):
    """文字起こしサービスの認証エラー"""

    user_message = (
        "Error de autenticación del servicio. Por favor, contacta al administrador."
    )


class TranscriptionEmptyError(TranscriptionError):
    """文字起こし結果が空"""

    user_message = (
        "No se pudo extraer texto del audio. Por favor, intenta con un audio más claro."
    )


class TranscriptionTooLargeError(TranscriptionError):
    """音声ファイルが大きすぎる"""

    user_message = (
        "El audio es demasiado largo. Por favor, envía un mensaje más corto."
    )


class TranscriptionRateLimitedError(TranscriptionError):
    """文字起こしサービスのレート制限"""

    user_message = (
        "Hemos alcanzado el límite de solicitudes. Por favor, intenta más tarde."
    )


class TranscriptionSourceMissingError(TranscriptionError):
    """一時音声ファイルが存在しない"""

    user_message = (
        "Hubo un problema al procesar el archivo de audio. Por favor, intenta de nuevo."
    )


class TranscriptionFailedError(TranscriptionError):
    """その他の文字起こしエラー"""


class ChannelNotConnectedError(Exception):
    """チャンネルが接続されていない状態で送信しようとした場合に発生する例外"""

    def __init__(self, channel: str, message: str = "") -> None:
        """初期化

        Args:
            channel: 接続されていないチャンネル番号
            message: エラーメッセージ（オプション）
        """
        self.channel = channel
        super().__init__(message or f"Channel {channel} is not connected")


class ChannelNotFoundError(Exception):
    """稼働中のセッションが存在しないチャンネルを参照した場合に発生する例外"""

    def __init__(self, channel: str) -> None:
        self.channel = channel
        super().__init__(f"Channel {channel} has no live session")
