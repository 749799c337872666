"""HTTP session: executes requests on worker threads and reports via callbacks.

Every public call returns immediately. Results arrive on a worker thread owned
by the session, which may differ from the caller's thread. The chunks of one
stream are read and delivered sequentially by a single worker.
"""

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Protocol

import httpx

log: logging.Logger = logging.getLogger(__name__)

ResponseCallback = Callable[[httpx.Response | None, Exception | None], None]
ChunkCallback = Callable[[bytes], None]
CompletionCallback = Callable[[Exception | None], None]


class HTTPSession(Protocol):
    """Transport collaborator used by the dispatchers."""

    def send(self, request: httpx.Request, callback: ResponseCallback) -> None:
        """Execute a request and report the fully read response or an error."""
        ...

    def stream(
        self,
        request: httpx.Request,
        on_chunk: ChunkCallback,
        on_complete: CompletionCallback,
    ) -> None:
        """Execute a request, reporting body chunks then one terminal signal."""
        ...

    def close(self) -> None: ...


class ThreadedHTTPSession:
    """Default ``HTTPSession`` running an ``httpx.Client`` on a thread pool.

    Args:
        transport: Optional httpx transport, e.g. ``httpx.MockTransport`` in tests
        max_workers: Upper bound on concurrently executing requests and streams
    """

    def __init__(
        self,
        *,
        transport: httpx.BaseTransport | None = None,
        max_workers: int = 8,
    ):
        self._client = httpx.Client(transport=transport)
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="openai-sdk"
        )

    def send(self, request: httpx.Request, callback: ResponseCallback) -> None:
        self._executor.submit(self._send, request, callback)

    def stream(
        self,
        request: httpx.Request,
        on_chunk: ChunkCallback,
        on_complete: CompletionCallback,
    ) -> None:
        self._executor.submit(self._stream, request, on_chunk, on_complete)

    def close(self) -> None:
        self._executor.shutdown(wait=True)
        self._client.close()

    def _send(self, request: httpx.Request, callback: ResponseCallback) -> None:
        log.debug("Sending HTTP Request: %s %s", request.method, request.url)
        try:
            response = self._client.send(request)
        except Exception as e:
            log.debug("Request to %s failed", request.url, exc_info=True)
            callback(None, e)
            return
        log.debug(
            'HTTP Response: %s %s "%i %s"',
            request.method,
            request.url,
            response.status_code,
            response.reason_phrase,
        )
        callback(response, None)

    def _stream(
        self,
        request: httpx.Request,
        on_chunk: ChunkCallback,
        on_complete: CompletionCallback,
    ) -> None:
        log.debug("Opening HTTP stream: %s %s", request.method, request.url)
        try:
            response = self._client.send(request, stream=True)
        except Exception as e:
            log.debug("Stream to %s failed to open", request.url, exc_info=True)
            on_complete(e)
            return

        error: Exception | None = None
        try:
            if not response.is_success:
                response.read()
                response.raise_for_status()
            for chunk in response.iter_bytes():
                on_chunk(chunk)
        except Exception as e:
            log.debug("Stream from %s ended with an error", request.url, exc_info=True)
            error = e
        finally:
            response.close()

        log.debug("HTTP stream closed: %s %s", request.method, request.url)
        on_complete(error)
