"""Event-stream framing for the streaming endpoint.

Wire format: one ``data: <json>\\n\\n`` record per StreamEvent, terminated by
``data: [DONE]\\n\\n``. The encoder side is used by the server; the decoder
side by clients reading the body in arbitrary chunks.
"""

import codecs
import json
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import aclosing
from dataclasses import dataclass
from typing import Any

from multichat.observability.constants import LogEvents
from multichat.observability.logger import get_logger
from multichat.schemas.responses import StreamEvent

logger = get_logger(__name__)

DATA_PREFIX = "data: "
DONE_MARKER = "[DONE]"
DONE = f"{DATA_PREFIX}{DONE_MARKER}\n\n"

DisconnectProbe = Callable[[], Awaitable[bool]]


def encode_event(event: StreamEvent) -> str:
    """Frame one event as a ``data:`` record."""
    return f"{DATA_PREFIX}{json.dumps(event.to_wire(), ensure_ascii=False)}\n\n"


async def frame_events(
    events: AsyncGenerator[StreamEvent, None],
    is_disconnected: DisconnectProbe | None = None,
) -> AsyncGenerator[str, None]:
    """Frame a stream of events, ending with the ``[DONE]`` record.

    The disconnect probe is checked before each write. If the client has
    gone away, framing stops without the terminator and the event source is
    closed, which cancels all upstream work.
    """
    count = 0
    async with aclosing(events) as source:
        async for event in source:
            if is_disconnected is not None and await is_disconnected():
                logger.info(LogEvents.SSE_STREAM_DISCONNECTED, events_sent=count)
                return
            yield encode_event(event)
            count += 1

    yield DONE
    logger.info(LogEvents.SSE_STREAM_COMPLETED, events_sent=count)


@dataclass(frozen=True)
class DecodedRecord:
    """One record read back from the stream.

    Exactly one of the following holds: ``done`` is set (the terminator),
    ``event`` is set (a well-formed event), or ``error`` is set (a record
    that could not be parsed; ``raw`` keeps its payload).
    """

    event: StreamEvent | None = None
    done: bool = False
    error: str | None = None
    raw: str | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None


class StreamDecoder:
    """Incremental decoder for the framed stream.

    Feed it bytes or text exactly as they arrive. Multi-byte UTF-8 sequences
    and records split across reads are buffered until complete.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""

    def feed(self, chunk: bytes | str) -> list[DecodedRecord]:
        """Consume a chunk and return every record it completed."""
        if isinstance(chunk, bytes):
            chunk = self._decoder.decode(chunk)
        self._buffer += chunk

        *lines, self._buffer = self._buffer.split("\n")
        records = []
        for line in lines:
            record = self._parse_line(line.rstrip("\r"))
            if record is not None:
                records.append(record)
        return records

    def flush(self) -> list[DecodedRecord]:
        """Decode whatever is left once the body has ended."""
        tail = self._buffer + self._decoder.decode(b"", final=True)
        self._buffer = ""
        record = self._parse_line(tail.rstrip("\r"))
        return [record] if record is not None else []

    @staticmethod
    def _parse_line(line: str) -> DecodedRecord | None:
        if not line.strip():
            return None
        if not line.startswith(DATA_PREFIX):
            return DecodedRecord(error="record is missing the data prefix", raw=line)

        payload = line[len(DATA_PREFIX) :]
        if payload == DONE_MARKER:
            return DecodedRecord(done=True)

        try:
            data: Any = json.loads(payload)
            return DecodedRecord(event=StreamEvent.model_validate(data))
        except ValueError as e:
            # pydantic's ValidationError is a ValueError too
            return DecodedRecord(error=f"malformed record: {e}", raw=payload)
