"""Incremental server-sent events decoder.

SSE format: "event: name\\ndata: {...}\\n\\n"

Bytes are fed in as they arrive from the network. Lines are only interpreted
once their terminating newline has been seen, so frames and multi-byte UTF-8
sequences split across chunks are reassembled before decoding.
"""

from dataclasses import dataclass

DONE_MARKER = "[DONE]"

FIELD_NAMES = frozenset({"data", "event", "id", "retry"})


@dataclass(frozen=True)
class ServerSentEvent:
    data: str
    event: str | None = None
    id: str | None = None

    def is_done(self) -> bool:
        """Whether this is the end-of-stream sentinel."""
        return self.data.strip().upper() == DONE_MARKER


class SSEDecoder:
    """Stateful decoder turning byte chunks into complete events."""

    def __init__(self) -> None:
        self._buffer = b""
        self._data: list[str] = []
        self._event: str | None = None
        self._id: str | None = None
        self._unparsed: list[str] = []

    @property
    def unparsed_text(self) -> str | None:
        """Lines that were neither SSE fields nor comments, e.g. a plain JSON body."""
        return "\n".join(self._unparsed) if self._unparsed else None

    def feed(self, chunk: bytes) -> list[ServerSentEvent]:
        """Consume a chunk and return the events it completed."""
        self._buffer += chunk
        events: list[ServerSentEvent] = []

        while b"\n" in self._buffer:
            raw_line, self._buffer = self._buffer.split(b"\n", 1)
            event = self._process_line(raw_line)
            if event is not None:
                events.append(event)

        return events

    def flush(self) -> list[ServerSentEvent]:
        """Finish decoding at end of stream, dispatching any pending event."""
        events: list[ServerSentEvent] = []
        if self._buffer:
            raw_line, self._buffer = self._buffer, b""
            event = self._process_line(raw_line)
            if event is not None:
                events.append(event)

        event = self._dispatch()
        if event is not None:
            events.append(event)
        return events

    def _process_line(self, raw_line: bytes) -> ServerSentEvent | None:
        line = raw_line.rstrip(b"\r").decode("utf-8", errors="replace")

        # Blank line terminates the current event
        if not line:
            return self._dispatch()

        # Comment
        if line.startswith(":"):
            return None

        name, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]

        if name not in FIELD_NAMES:
            self._unparsed.append(line)
        elif name == "data":
            self._data.append(value)
        elif name == "event":
            self._event = value
        elif name == "id":
            self._id = value
        return None

    def _dispatch(self) -> ServerSentEvent | None:
        if not self._data:
            self._event = None
            return None

        event = ServerSentEvent(data="\n".join(self._data), event=self._event, id=self._id)
        self._data = []
        self._event = None
        return event
