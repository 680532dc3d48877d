"""Domain services."""

from chatfleet.domain.services.backoff import ExponentialBackoff
from chatfleet.domain.services.media_resolver import (
    MediaDispatch,
    extract_media_tags,
    first_media_tag,
    resolve_media,
)
from chatfleet.domain.services.protocols import (
    CompletionProvider,
    EventSink,
    Messenger,
    StatusBroadcaster,
    TranscriptionProvider,
    TransportConnection,
    TransportProvider,
)

__all__ = [
    "CompletionProvider",
    "EventSink",
    "ExponentialBackoff",
    "MediaDispatch",
    "Messenger",
    "StatusBroadcaster",
    "TranscriptionProvider",
    "TransportConnection",
    "TransportProvider",
    "extract_media_tags",
    "first_media_tag",
    "resolve_media",
]
