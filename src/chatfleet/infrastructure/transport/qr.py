"""QR code rendering for credential challenges."""

import logging
from pathlib import Path

import segno

logger = logging.getLogger(__name__)


class QRCodeRenderer:
    """Renders credential challenges to PNG files served over HTTP.

    The image for a channel is always written to ``<qr_dir>/<channel>.png``,
    so a newer challenge replaces the previous image at the same URL.
    """

    def __init__(self, qr_dir: str | Path, base_url: str, scale: int = 8) -> None:
        """Initialize the renderer.

        Args:
            qr_dir: Directory the images are written to.
            base_url: Public URL the directory is served under.
            scale: Pixel size of one QR module.
        """
        self._qr_dir = Path(qr_dir)
        self._base_url = base_url.rstrip("/")
        self._scale = scale

    def path_for(self, channel: str) -> Path:
        path = self._qr_dir / f"{channel}.png"
        if path.resolve().parent != self._qr_dir.resolve():
            raise ValueError(f"Invalid channel name: {channel!r}")
        return path

    def url_for(self, channel: str) -> str:
        return f"{self._base_url}/{channel}.png"

    def render(self, channel: str, payload: str) -> str:
        """Render a challenge payload.

        Args:
            channel: Channel number.
            payload: Challenge string reported by the transport.

        Returns:
            Public URL of the rendered image.
        """
        self._qr_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(channel)
        segno.make(payload, error="m").save(str(path), kind="png", scale=self._scale)
        logger.debug("Rendered QR code for channel %s to %s", channel, path)
        return self.url_for(channel)
