"""HTTP infrastructure."""

from chatfleet.infrastructure.http.broadcaster import WebSocketBroadcaster
from chatfleet.infrastructure.http.server import HttpServer

__all__ = [
    "HttpServer",
    "WebSocketBroadcaster",
]
