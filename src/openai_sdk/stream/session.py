"""Streaming session: one open streamed response and its incremental decoding."""

import itertools
import logging
import threading
from collections.abc import Callable
from enum import Enum
from typing import Generic, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from ..errors import DecodeError, OpenAIError, TransportError
from ..transport import HTTPSession
from ..types import APIErrorResponse
from .sse import ServerSentEvent, SSEDecoder

log: logging.Logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

_session_ids = itertools.count(1)


class SessionState(Enum):
    CREATED = "created"
    RUNNING = "running"
    COMPLETED = "completed"


def transport_error(error: Exception) -> OpenAIError:
    """Map an httpx failure to the error reported to callers.

    A failed HTTP status whose body is a structured error payload becomes an
    ``APIError``; anything else becomes a ``TransportError``.
    """
    if isinstance(error, OpenAIError):
        return error
    if isinstance(error, httpx.HTTPStatusError):
        response = error.response
        try:
            return APIErrorResponse.model_validate_json(response.content).to_error(
                response.status_code
            )
        except ValidationError:
            return TransportError(
                f"HTTP {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )
    if isinstance(error, httpx.TimeoutException):
        return TransportError(f"Request timed out: {error}")
    return TransportError(str(error) or type(error).__name__)


class StreamingSession(Generic[T]):
    """Single-use session decoding a server-sent event stream into ``T`` values.

    Lifecycle is ``CREATED -> RUNNING -> COMPLETED``. Content and processing
    error callbacks fire in frame arrival order, one at a time, on the thread
    delivering network data. ``on_complete`` fires exactly once, after which no
    other callback fires.

    Attributes:
        session_id: Unique identifier, used as the registry key
        on_receive_content: Called with each decoded frame
        on_processing_error: Called for each frame that fails to decode
        on_complete: Called once with ``None`` or the terminal error
    """

    def __init__(
        self,
        request: httpx.Request,
        result_type: type[T],
        http_session: HTTPSession,
    ):
        self.session_id: int = next(_session_ids)
        self.request = request
        self.result_type = result_type
        self.on_receive_content: Callable[["StreamingSession[T]", T], None] | None = None
        self.on_processing_error: (
            Callable[["StreamingSession[T]", OpenAIError], None] | None
        ) = None
        self.on_complete: (
            Callable[["StreamingSession[T]", OpenAIError | None], None] | None
        ) = None

        self._http_session = http_session
        self._decoder = SSEDecoder()
        self._state = SessionState.CREATED
        self._lock = threading.Lock()
        self._finished = threading.Event()
        self._closing = False

    def __repr__(self) -> str:
        return f"StreamingSession(id={self.session_id}, state={self._state.value})"

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def completed(self) -> bool:
        return self._state is SessionState.COMPLETED

    def perform(self) -> None:
        """Start the stream. Returns immediately.

        Raises:
            RuntimeError: If the session was already started
        """
        with self._lock:
            if self._state is not SessionState.CREATED:
                raise RuntimeError(f"{self!r} cannot be performed twice")
            self._state = SessionState.RUNNING

        log.debug("Starting streaming session %d", self.session_id)
        try:
            self._http_session.stream(self.request, self._handle_chunk, self._handle_complete)
        except Exception as e:
            log.warning("Could not start streaming session %d: %s", self.session_id, e)
            self._handle_complete(e)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the session completes. Returns False on timeout."""
        return self._finished.wait(timeout)

    def _handle_chunk(self, chunk: bytes) -> None:
        if self._closing:
            log.warning("Dropping chunk for completed session %d", self.session_id)
            return
        for event in self._decoder.feed(chunk):
            self._process_event(event)

    def _handle_complete(self, error: Exception | None) -> None:
        with self._lock:
            if self._closing:
                log.warning("Ignoring duplicate completion of session %d", self.session_id)
                return
            self._closing = True

        terminal = transport_error(error) if error is not None else None
        if terminal is None:
            for event in self._decoder.flush():
                self._process_event(event)
            terminal = self._malformed_stream_error()

        with self._lock:
            self._state = SessionState.COMPLETED

        log.debug(
            "Streaming session %d completed%s",
            self.session_id,
            f" with {terminal!r}" if terminal else "",
        )
        try:
            if self.on_complete is not None:
                self._invoke(self.on_complete, terminal)
        finally:
            self._finished.set()

    def _malformed_stream_error(self) -> OpenAIError | None:
        # A body that is not an event stream at all, e.g. a JSON error or a proxy page
        text = self._decoder.unparsed_text
        if text is None:
            return None
        try:
            return APIErrorResponse.model_validate_json(text).to_error()
        except ValidationError:
            return DecodeError("Response is not a server-sent event stream", raw_text=text)

    def _process_event(self, event: ServerSentEvent) -> None:
        if event.is_done():
            return

        try:
            value = self.result_type.model_validate_json(event.data)
        except ValidationError as e:
            self._report_processing_error(event.data, e)
            return

        if self.on_receive_content is not None:
            self._invoke(self.on_receive_content, value)

    def _report_processing_error(self, data: str, cause: ValidationError) -> None:
        error: OpenAIError
        try:
            error = APIErrorResponse.model_validate_json(data).to_error()
        except ValidationError:
            error = DecodeError(
                f"Failed to decode stream frame as {self.result_type.__name__}: {cause}",
                raw_text=data,
            )
        log.debug("Frame processing error in session %d: %r", self.session_id, error)
        if self.on_processing_error is not None:
            self._invoke(self.on_processing_error, error)

    def _invoke(self, callback: Callable, argument: object) -> None:
        try:
            callback(self, argument)
        except Exception:
            log.exception("Callback raised in streaming session %d", self.session_id)
