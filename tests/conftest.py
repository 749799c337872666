"""Shared fixtures and fakes for the OpenAI SDK tests."""

import json
import threading
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

import httpx
import pytest

from openai_sdk import Configuration
from openai_sdk.transport import ChunkCallback, CompletionCallback, ResponseCallback

BASE_URL = "http://localhost:3100/v1"


def make_config(**overrides: Any) -> Configuration:
    options: dict[str, Any] = {
        "host": "localhost",
        "port": 3100,
        "scheme": "http",
        "base_path": "/v1",
        "timeout": 30.0,
    }
    options.update(overrides)
    return Configuration.from_token("test-key", **options)


@pytest.fixture
def config() -> Configuration:
    return make_config()


def chat_chunk(content: str, chunk_id: str = "chatcmpl-1") -> dict[str, Any]:
    return {
        "id": chunk_id,
        "object": "chat.completion.chunk",
        "created": 1700000000,
        "model": "gpt-4o-mini",
        "choices": [{"index": 0, "delta": {"content": content}, "finish_reason": None}],
    }


def sse_body(payloads: list[Any], done: str | None = "[DONE]") -> bytes:
    """Helper to create an SSE formatted body, JSON-encoding dict payloads."""
    lines = []
    for payload in payloads:
        data = payload if isinstance(payload, str) else json.dumps(payload)
        lines.append(f"data: {data}\n\n")
    if done is not None:
        lines.append(f"data: {done}\n\n")
    return "".join(lines).encode()


def chunked(data: bytes, size: int) -> Iterator[bytes]:
    for start in range(0, len(data), size):
        yield data[start : start + size]


@dataclass
class PendingStream:
    request: httpx.Request
    on_chunk: ChunkCallback
    on_complete: CompletionCallback


class ManualHTTPSession:
    """HTTP session whose streams are driven by the test itself."""

    def __init__(self) -> None:
        self.streams: list[PendingStream] = []
        self.sent: list[tuple[httpx.Request, ResponseCallback]] = []
        self._lock = threading.Lock()

    def send(self, request: httpx.Request, callback: ResponseCallback) -> None:
        with self._lock:
            self.sent.append((request, callback))

    def stream(
        self,
        request: httpx.Request,
        on_chunk: ChunkCallback,
        on_complete: CompletionCallback,
    ) -> None:
        with self._lock:
            self.streams.append(PendingStream(request, on_chunk, on_complete))

    def close(self) -> None:
        pass


@pytest.fixture
def manual_session() -> ManualHTTPSession:
    return ManualHTTPSession()
