"""Provisioning and status notification entities."""

from dataclasses import dataclass
from enum import Enum


class ProvisioningStatus(Enum):
    QR = "qr"
    CONNECTED = "connected"
    FAILED = "failed"


@dataclass(frozen=True)
class ProvisioningResult:
    """Answer delivered to a provisioning caller.

    Attributes:
        status: QR challenge issued, connected, or failed.
        qr_url: URL of the rendered QR image (QR only).
        message: Human-readable message.
    """

    status: ProvisioningStatus
    qr_url: str | None = None
    message: str = ""

    @classmethod
    def qr(cls, url: str) -> "ProvisioningResult":
        return cls(status=ProvisioningStatus.QR, qr_url=url)

    @classmethod
    def connected(cls, message: str) -> "ProvisioningResult":
        return cls(status=ProvisioningStatus.CONNECTED, message=message)

    @classmethod
    def failed(cls, message: str) -> "ProvisioningResult":
        return cls(status=ProvisioningStatus.FAILED, message=message)


@dataclass(frozen=True)
class StatusNotification:
    """Notification fanned out to status subscribers.

    Attributes:
        channel: Channel number.
        message: Notification text.
    """

    channel: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"number": self.channel, "message": self.message}
