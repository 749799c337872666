"""Dispatch of request descriptors for single-shot and streaming calls."""

import logging
from collections.abc import Callable
from concurrent.futures import Future
from typing import TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from .errors import DecodeError, EmptyDataError, OpenAIError, TransportError
from .requests import RequestDescriptor, build_request
from .stream.registry import StreamingSessionRegistry
from .stream.session import StreamingSession, transport_error
from .transport import HTTPSession
from .types import APIErrorResponse, BinaryResult, Configuration

log: logging.Logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


def _build(descriptor: RequestDescriptor, configuration: Configuration) -> httpx.Request:
    # The token is fetched for every request so providers can rotate it
    return build_request(
        descriptor,
        token=configuration.token_provider.get_token(),
        organization_identifier=configuration.organization_identifier,
        timeout=configuration.timeout,
    )


def decode_response(response: httpx.Response, result_type: type[T]) -> T:
    """Decode a fully read response into ``result_type``.

    A body that does not match ``result_type`` is retried as a structured API
    error before the first decoding failure is reported.

    Raises:
        EmptyDataError: If the body is empty
        APIError: If the body is a structured error payload
        DecodeError: If the body matches neither schema
        TransportError: If a binary result came back with a failed status
    """
    data = response.content
    if not data:
        raise EmptyDataError()

    if issubclass(result_type, BinaryResult):
        if response.is_success:
            return result_type.from_bytes(data)
        try:
            error = APIErrorResponse.model_validate_json(data)
        except ValidationError:
            raise TransportError(
                f"HTTP {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            ) from None
        raise error.to_error(response.status_code)

    try:
        return result_type.model_validate_json(data)
    except ValidationError as e:
        try:
            error = APIErrorResponse.model_validate_json(data)
        except ValidationError:
            raise DecodeError(
                f"Invalid {result_type.__name__} response: {e}",
                raw_text=response.text,
            ) from e
        raise error.to_error(response.status_code) from None


def perform_request(
    http_session: HTTPSession,
    configuration: Configuration,
    descriptor: RequestDescriptor,
    result_type: type[T],
) -> "Future[T]":
    """Dispatch one request and decode its response.

    Returns immediately. The returned future resolves exactly once, with the
    decoded result or an ``OpenAIError``.
    """
    future: Future[T] = Future()
    future.set_running_or_notify_cancel()

    try:
        request = _build(descriptor, configuration)
    except OpenAIError as e:
        future.set_exception(e)
        return future

    def on_response(response: httpx.Response | None, error: Exception | None) -> None:
        if error is not None:
            future.set_exception(transport_error(error))
            return
        if response is None:
            future.set_exception(TransportError(f"No response received from {request.url}"))
            return
        try:
            result = decode_response(response, result_type)
        except OpenAIError as e:
            log.debug("Request to %s failed: %r", request.url, e)
            future.set_exception(e)
        else:
            future.set_result(result)

    try:
        http_session.send(request, on_response)
    except Exception as e:
        log.warning("Could not schedule request to %s: %s", request.url, e)
        future.set_exception(transport_error(e))
    return future


def perform_streaming_request(
    http_session: HTTPSession,
    configuration: Configuration,
    registry: StreamingSessionRegistry,
    descriptor: RequestDescriptor,
    result_type: type[T],
    on_result: Callable[[T], None],
    on_error: Callable[[OpenAIError], None] | None = None,
    on_complete: Callable[[OpenAIError | None], None] | None = None,
) -> StreamingSession[T] | None:
    """Open a streaming session and deliver decoded frames to callbacks.

    The session is held by ``registry`` until it completes, then released
    before ``on_complete`` is called. A stream that cannot be scheduled
    completes through the same path. Returns the session, or None when the
    request could not be built (``on_complete`` receives the error).
    """
    try:
        request = _build(descriptor, configuration)
    except OpenAIError as e:
        if on_complete is not None:
            on_complete(e)
        return None

    session = StreamingSession(request, result_type, http_session)
    session.on_receive_content = lambda _session, value: on_result(value)
    if on_error is not None:
        session.on_processing_error = lambda _session, error: on_error(error)

    def complete(finished: StreamingSession[T], error: OpenAIError | None) -> None:
        registry.remove(finished.session_id)
        if on_complete is not None:
            on_complete(error)

    session.on_complete = complete

    # Registered before starting so completion can never precede registration
    registry.append(session)
    session.perform()
    return session
