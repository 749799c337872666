"""Typed callback-based client for OpenAI-compatible inference APIs."""

from .client import OpenAI
from .errors import (
    APIError,
    DecodeError,
    EmptyDataError,
    EncodingError,
    OpenAIError,
    TransportError,
)
from .payloads import (
    AudioSpeechQuery,
    AudioSpeechResult,
    AudioTranscriptionQuery,
    AudioTranscriptionResult,
    AudioTranslationQuery,
    AudioTranslationResult,
    ChatMessage,
    ChatQuery,
    ChatResult,
    ChatStreamResult,
    CompletionsQuery,
    CompletionsResult,
    EditsQuery,
    EditsResult,
    EmbeddingsQuery,
    EmbeddingsResult,
    ImageEditsQuery,
    ImagesQuery,
    ImagesResult,
    ImageVariationsQuery,
    ModelQuery,
    ModelResult,
    ModelsResult,
    ModerationsQuery,
    ModerationsResult,
)
from .requests import (
    BodilessRequest,
    FormField,
    FormFile,
    JSONRequest,
    MultipartFormDataRequest,
    build_request,
)
from .stream import SessionState, StreamingSession, StreamingSessionRegistry
from .transport import HTTPSession, ThreadedHTTPSession
from .types import Configuration, StaticTokenProvider, TokenProvider

__all__ = [
    "APIError",
    "AudioSpeechQuery",
    "AudioSpeechResult",
    "AudioTranscriptionQuery",
    "AudioTranscriptionResult",
    "AudioTranslationQuery",
    "AudioTranslationResult",
    "BodilessRequest",
    "ChatMessage",
    "ChatQuery",
    "ChatResult",
    "ChatStreamResult",
    "CompletionsQuery",
    "CompletionsResult",
    "Configuration",
    "DecodeError",
    "EditsQuery",
    "EditsResult",
    "EmbeddingsQuery",
    "EmbeddingsResult",
    "EmptyDataError",
    "EncodingError",
    "FormField",
    "FormFile",
    "HTTPSession",
    "ImageEditsQuery",
    "ImageVariationsQuery",
    "ImagesQuery",
    "ImagesResult",
    "JSONRequest",
    "ModelQuery",
    "ModelResult",
    "ModelsResult",
    "ModerationsQuery",
    "ModerationsResult",
    "MultipartFormDataRequest",
    "OpenAI",
    "OpenAIError",
    "SessionState",
    "StaticTokenProvider",
    "StreamingSession",
    "StreamingSessionRegistry",
    "ThreadedHTTPSession",
    "TokenProvider",
    "TransportError",
    "build_request",
]
