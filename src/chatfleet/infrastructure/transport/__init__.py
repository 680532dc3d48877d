"""Transport support: credentials, QR rendering and provider loading."""

from chatfleet.infrastructure.transport.credentials import CredentialStore
from chatfleet.infrastructure.transport.loader import load_transport_provider
from chatfleet.infrastructure.transport.qr import QRCodeRenderer

__all__ = [
    "CredentialStore",
    "QRCodeRenderer",
    "load_transport_provider",
]
