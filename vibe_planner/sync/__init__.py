"""Glue between the externally rendered surfaces (chat, map) and the trip store."""

from .buffer import StreamingResultBuffer
from .map_adapter import MapChatSyncAdapter, MapMarker, MapPopup
from .scheduler import ReconciliationScheduler
from .transcript import Transcript, TranscriptDeduplicator, TranscriptNode, deduplicate_messages

__all__ = [
    "StreamingResultBuffer",
    "ReconciliationScheduler",
    "Transcript",
    "TranscriptNode",
    "TranscriptDeduplicator",
    "deduplicate_messages",
    "MapChatSyncAdapter",
    "MapMarker",
    "MapPopup",
]
