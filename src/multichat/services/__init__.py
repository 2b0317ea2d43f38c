"""Services package - aggregation, multiplexing and framing."""

from multichat.services.aggregator import BatchAggregator
from multichat.services.framing import (
    DONE,
    DecodedRecord,
    StreamDecoder,
    encode_event,
    frame_events,
)
from multichat.services.multiplexer import StreamMultiplexer
from multichat.services.orchestrator import ChatOrchestrator

__all__ = [
    "BatchAggregator",
    "ChatOrchestrator",
    "DONE",
    "DecodedRecord",
    "StreamDecoder",
    "StreamMultiplexer",
    "encode_event",
    "frame_events",
]
