"""LiteLLM speech-to-text provider."""

import asyncio
import logging
import mimetypes
import os
import tempfile
from pathlib import Path

import litellm
from litellm.exceptions import AuthenticationError, RateLimitError

from chatfleet.config import TranscriptionConfig
from chatfleet.domain.exceptions import (
    TranscriptionAuthError,
    TranscriptionEmptyError,
    TranscriptionError,
    TranscriptionFailedError,
    TranscriptionRateLimitedError,
    TranscriptionSourceMissingError,
    TranscriptionTooLargeError,
    TranscriptionUnconfiguredError,
)

logger = logging.getLogger(__name__)

# Extensions accepted by whisper-style endpoints for common voice note types
_EXTENSIONS = {
    "audio/ogg": ".ogg",
    "audio/mpeg": ".mp3",
    "audio/mp4": ".m4a",
    "audio/wav": ".wav",
    "audio/webm": ".webm",
}


class LiteLLMTranscriber:
    """LiteLLM-based TranscriptionProvider implementation.

    The audio is written to a scratch file, submitted with
    ``litellm.atranscription`` and the scratch file is always removed.
    Provider failures are classified into TranscriptionError subclasses.
    """

    def __init__(self, config: TranscriptionConfig) -> None:
        """Initialize the transcriber.

        Args:
            config: Transcription configuration.
        """
        self._config = config

    async def transcribe(
        self,
        audio: bytes,
        mimetype: str,
        language: str | None = None,
    ) -> str:
        """Transcribe a voice note.

        Args:
            audio: Raw audio bytes.
            mimetype: Audio MIME type (used for the scratch file extension).
            language: Language hint (defaults to the configured language).

        Returns:
            Trimmed transcript.

        Raises:
            TranscriptionError: Classified failure carrying a user message.
        """
        self._ensure_configured()

        path = self._write_scratch(audio, mimetype)
        try:
            if not path.exists():
                raise TranscriptionSourceMissingError(f"Scratch file missing: {path}")
            text = await self._submit(path, language or self._config.language)
        finally:
            path.unlink(missing_ok=True)

        if not text:
            raise TranscriptionEmptyError("Transcription returned no text")
        logger.debug("Transcribed %d bytes of %s", len(audio), mimetype)
        return text

    def _ensure_configured(self) -> None:
        environment = litellm.validate_environment(model=self._config.model)
        if not environment.get("keys_in_environment", False):
            logger.error(
                "Transcription provider is not configured: missing %s",
                environment.get("missing_keys"),
            )
            raise TranscriptionUnconfiguredError("Missing transcription API key")

    def _write_scratch(self, audio: bytes, mimetype: str) -> Path:
        base_type = mimetype.split(";")[0].strip().lower()
        suffix = _EXTENSIONS.get(base_type) or mimetypes.guess_extension(base_type) or ".ogg"
        os.makedirs(self._config.scratch_dir, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            dir=self._config.scratch_dir,
            prefix="voice-",
            suffix=suffix,
            delete=False,
        ) as f:
            f.write(audio)
            return Path(f.name)

    async def _submit(self, path: Path, language: str) -> str:
        try:
            with open(path, "rb") as f:
                response = await asyncio.wait_for(
                    litellm.atranscription(
                        model=self._config.model,
                        file=f,
                        language=language,
                        response_format=self._config.response_format,
                        timeout=self._config.timeout_seconds,
                    ),
                    timeout=self._config.timeout_seconds,
                )
        except TranscriptionError:
            raise
        except AuthenticationError as e:
            logger.error("Transcription authentication error: %s", e)
            raise TranscriptionAuthError(str(e)) from e
        except RateLimitError as e:
            logger.warning("Transcription rate limit exceeded: %s", e)
            raise TranscriptionRateLimitedError(str(e)) from e
        except Exception as e:
            if _is_too_large(e):
                logger.warning("Audio rejected as too large: %s", e)
                raise TranscriptionTooLargeError(str(e)) from e
            logger.error("Transcription error: %s", e)
            raise TranscriptionFailedError(str(e)) from e

        return (getattr(response, "text", None) or "").strip()


def _is_too_large(error: Exception) -> bool:
    return getattr(error, "status_code", None) == 413 or "too large" in str(error).lower()
