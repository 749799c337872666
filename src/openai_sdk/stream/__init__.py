"""Streaming module for the OpenAI SDK.

This module decodes server-sent event responses into typed partial results
and keeps running sessions alive until their stream completes.
"""

from .registry import StreamingSessionRegistry
from .session import SessionState, StreamingSession
from .sse import ServerSentEvent, SSEDecoder

__all__ = [
    "SSEDecoder",
    "ServerSentEvent",
    "SessionState",
    "StreamingSession",
    "StreamingSessionRegistry",
]
