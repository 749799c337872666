"""Client for OpenAI-compatible inference APIs."""

from collections.abc import Callable
from concurrent.futures import Future
from typing import TypeVar

import httpx
from pydantic import BaseModel

from . import urls
from .dispatch import perform_request, perform_streaming_request
from .errors import OpenAIError
from .payloads import (
    AudioSpeechQuery,
    AudioSpeechResult,
    AudioTranscriptionQuery,
    AudioTranscriptionResult,
    AudioTranslationQuery,
    AudioTranslationResult,
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
from .requests import BodilessRequest, JSONRequest, MultipartFormDataRequest, RequestDescriptor
from .stream.registry import StreamingSessionRegistry
from .stream.session import StreamingSession
from .transport import HTTPSession, ThreadedHTTPSession
from .types import Configuration


T = TypeVar("T", bound=BaseModel)

OnError = Callable[[OpenAIError], None]
OnComplete = Callable[[OpenAIError | None], None]


class OpenAI:
    """Client exposing one method per API endpoint.

    Single-shot methods return a ``concurrent.futures.Future`` resolving to the
    typed result or failing with an ``OpenAIError``. Streaming methods deliver
    each decoded frame to ``on_result``, each undecodable frame to ``on_error``
    and finally call ``on_complete`` once with ``None`` or the terminal error.
    Callbacks run on the HTTP session's worker threads.

    Example:
        ```python
        from openai_sdk import ChatMessage, ChatQuery, Configuration, OpenAI

        with OpenAI(Configuration.from_token("sk-...")) as client:
            query = ChatQuery(
                model="gpt-4o-mini",
                messages=[ChatMessage(role="user", content="Hello")],
            )
            result = client.chats(query).result()
            print(result.choices[0].message.content)
        ```

    Args:
        configuration: Connection and authentication settings
        transport: Optional httpx transport for the default HTTP session
        http_session: Replaces the default threaded HTTP session entirely
        max_workers: Worker threads of the default HTTP session
    """

    def __init__(
        self,
        configuration: Configuration,
        *,
        transport: httpx.BaseTransport | None = None,
        http_session: HTTPSession | None = None,
        max_workers: int = 8,
    ):
        self.configuration = configuration
        self.streaming_sessions = StreamingSessionRegistry()
        self._http_session = http_session or ThreadedHTTPSession(
            transport=transport, max_workers=max_workers
        )

    @classmethod
    def from_api_token(cls, api_token: str, **kwargs) -> "OpenAI":
        return cls(Configuration.from_token(api_token), **kwargs)

    def __enter__(self) -> "OpenAI":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Wait for in-flight work and release the HTTP session."""
        self._http_session.close()

    def build_url(self, path: str) -> httpx.URL:
        config = self.configuration
        return urls.build_url(config.scheme, config.host, config.port, config.base_path, path)

    def _request(self, descriptor: RequestDescriptor, result_type: type[T]) -> "Future[T]":
        return perform_request(self._http_session, self.configuration, descriptor, result_type)

    def _stream(
        self,
        descriptor: RequestDescriptor,
        result_type: type[T],
        on_result: Callable[[T], None],
        on_error: OnError | None,
        on_complete: OnComplete | None,
    ) -> StreamingSession[T] | None:
        return perform_streaming_request(
            self._http_session,
            self.configuration,
            self.streaming_sessions,
            descriptor,
            result_type,
            on_result,
            on_error,
            on_complete,
        )

    def completions(self, query: CompletionsQuery) -> "Future[CompletionsResult]":
        return self._request(
            JSONRequest(self.build_url(urls.COMPLETIONS), query), CompletionsResult
        )

    def completions_stream(
        self,
        query: CompletionsQuery,
        on_result: Callable[[CompletionsResult], None],
        on_error: OnError | None = None,
        on_complete: OnComplete | None = None,
    ) -> StreamingSession[CompletionsResult] | None:
        return self._stream(
            JSONRequest(self.build_url(urls.COMPLETIONS), query.make_streamable()),
            CompletionsResult,
            on_result,
            on_error,
            on_complete,
        )

    def images(self, query: ImagesQuery) -> "Future[ImagesResult]":
        return self._request(JSONRequest(self.build_url(urls.IMAGES), query), ImagesResult)

    def image_edits(self, query: ImageEditsQuery) -> "Future[ImagesResult]":
        return self._request(
            MultipartFormDataRequest(self.build_url(urls.IMAGE_EDITS), query.form_parts()),
            ImagesResult,
        )

    def image_variations(self, query: ImageVariationsQuery) -> "Future[ImagesResult]":
        return self._request(
            MultipartFormDataRequest(self.build_url(urls.IMAGE_VARIATIONS), query.form_parts()),
            ImagesResult,
        )

    def embeddings(self, query: EmbeddingsQuery) -> "Future[EmbeddingsResult]":
        return self._request(
            JSONRequest(self.build_url(urls.EMBEDDINGS), query), EmbeddingsResult
        )

    def chats(self, query: ChatQuery) -> "Future[ChatResult]":
        return self._request(JSONRequest(self.build_url(urls.CHATS), query), ChatResult)

    def chats_stream(
        self,
        query: ChatQuery,
        on_result: Callable[[ChatStreamResult], None],
        on_error: OnError | None = None,
        on_complete: OnComplete | None = None,
    ) -> StreamingSession[ChatStreamResult] | None:
        return self._stream(
            JSONRequest(self.build_url(urls.CHATS), query.make_streamable()),
            ChatStreamResult,
            on_result,
            on_error,
            on_complete,
        )

    def edits(self, query: EditsQuery) -> "Future[EditsResult]":
        return self._request(JSONRequest(self.build_url(urls.EDITS), query), EditsResult)

    def model(self, query: ModelQuery) -> "Future[ModelResult]":
        url = self.build_url(urls.with_path(urls.MODELS, query.model))
        return self._request(BodilessRequest(url), ModelResult)

    def models(self) -> "Future[ModelsResult]":
        return self._request(BodilessRequest(self.build_url(urls.MODELS)), ModelsResult)

    def moderations(self, query: ModerationsQuery) -> "Future[ModerationsResult]":
        return self._request(
            JSONRequest(self.build_url(urls.MODERATIONS), query), ModerationsResult
        )

    def audio_transcriptions(
        self, query: AudioTranscriptionQuery
    ) -> "Future[AudioTranscriptionResult]":
        return self._request(
            MultipartFormDataRequest(
                self.build_url(urls.AUDIO_TRANSCRIPTIONS), query.form_parts()
            ),
            AudioTranscriptionResult,
        )

    def audio_translations(
        self, query: AudioTranslationQuery
    ) -> "Future[AudioTranslationResult]":
        return self._request(
            MultipartFormDataRequest(self.build_url(urls.AUDIO_TRANSLATIONS), query.form_parts()),
            AudioTranslationResult,
        )

    def audio_create_speech(self, query: AudioSpeechQuery) -> "Future[AudioSpeechResult]":
        return self._request(
            JSONRequest(self.build_url(urls.AUDIO_SPEECH), query), AudioSpeechResult
        )
