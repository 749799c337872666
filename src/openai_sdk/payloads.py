"""Query and result payloads for each API endpoint.

Queries serialize with unset optional fields omitted. Results ignore fields
they do not model so newer server responses keep decoding.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .requests import FormField, FormFile, FormPart
from .types import BinaryResult


class _Result(BaseModel):
    model_config = ConfigDict(extra="ignore", protected_namespaces=())


class _Query(BaseModel):
    model_config = ConfigDict(protected_namespaces=())


class Usage(_Result):
    prompt_tokens: int = 0
    completion_tokens: int | None = None
    total_tokens: int = 0


# Completions


class CompletionsQuery(_Query):
    model: str
    prompt: str | list[str] | None = None
    temperature: float | None = None
    max_tokens: int | None = None
    top_p: float | None = None
    n: int | None = None
    stop: str | list[str] | None = None
    presence_penalty: float | None = None
    frequency_penalty: float | None = None
    logit_bias: dict[str, int] | None = None
    user: str | None = None
    stream: bool | None = None

    def make_streamable(self) -> "CompletionsQuery":
        return self.model_copy(update={"stream": True})


class CompletionChoice(_Result):
    text: str
    index: int
    finish_reason: str | None = None


class CompletionsResult(_Result):
    id: str
    object: str
    created: int
    model: str
    choices: list[CompletionChoice]
    usage: Usage | None = None


# Chat


Role = Literal["system", "user", "assistant", "tool", "function"]


class ChatMessage(_Query):
    role: Role
    content: str | None = None
    name: str | None = None
    tool_call_id: str | None = None


class ChatQuery(_Query):
    model: str
    messages: list[ChatMessage]
    temperature: float | None = None
    top_p: float | None = None
    n: int | None = None
    stop: str | list[str] | None = None
    max_tokens: int | None = None
    presence_penalty: float | None = None
    frequency_penalty: float | None = None
    logit_bias: dict[str, int] | None = None
    response_format: dict[str, Any] | None = None
    seed: int | None = None
    tools: list[dict[str, Any]] | None = None
    tool_choice: str | dict[str, Any] | None = None
    user: str | None = None
    stream: bool | None = None

    def make_streamable(self) -> "ChatQuery":
        return self.model_copy(update={"stream": True})


class ChatResultMessage(_Result):
    role: str
    content: str | None = None
    tool_calls: list[dict[str, Any]] | None = None


class ChatChoice(_Result):
    index: int
    message: ChatResultMessage
    finish_reason: str | None = None


class ChatResult(_Result):
    id: str
    object: str
    created: int
    model: str
    choices: list[ChatChoice]
    usage: Usage | None = None
    system_fingerprint: str | None = None


class ChatDelta(_Result):
    role: str | None = None
    content: str | None = None
    tool_calls: list[dict[str, Any]] | None = None


class ChatStreamChoice(_Result):
    index: int
    delta: ChatDelta
    finish_reason: str | None = None


class ChatStreamResult(_Result):
    id: str
    object: str
    created: int
    model: str
    choices: list[ChatStreamChoice]
    system_fingerprint: str | None = None


# Edits


class EditsQuery(_Query):
    model: str
    instruction: str
    input: str | None = None
    n: int | None = None
    temperature: float | None = None
    top_p: float | None = None


class EditsChoice(_Result):
    text: str
    index: int


class EditsResult(_Result):
    object: str
    created: int
    choices: list[EditsChoice]
    usage: Usage


# Embeddings


class EmbeddingsQuery(_Query):
    model: str
    input: str | list[str]
    encoding_format: Literal["float", "base64"] | None = None
    user: str | None = None


class Embedding(_Result):
    object: str
    embedding: list[float]
    index: int


class EmbeddingsResult(_Result):
    object: str
    data: list[Embedding]
    model: str
    usage: Usage


# Images


class ImagesQuery(_Query):
    prompt: str
    model: str | None = None
    n: int | None = None
    size: str | None = None
    quality: str | None = None
    style: str | None = None
    response_format: Literal["url", "b64_json"] | None = None
    user: str | None = None


class ImageEditsQuery(_Query):
    image: bytes
    prompt: str
    mask: bytes | None = None
    model: str | None = None
    n: int | None = None
    size: str | None = None
    response_format: Literal["url", "b64_json"] | None = None
    user: str | None = None

    def form_parts(self) -> list[FormPart]:
        # Image must precede the mask
        parts: list[FormPart] = [FormFile("image", "image.png", "image/png", self.image)]
        if self.mask is not None:
            parts.append(FormFile("mask", "mask.png", "image/png", self.mask))
        parts += [
            FormField("prompt", self.prompt),
            FormField("model", self.model),
            FormField("n", self.n),
            FormField("size", self.size),
            FormField("response_format", self.response_format),
            FormField("user", self.user),
        ]
        return parts


class ImageVariationsQuery(_Query):
    image: bytes
    model: str | None = None
    n: int | None = None
    size: str | None = None
    response_format: Literal["url", "b64_json"] | None = None
    user: str | None = None

    def form_parts(self) -> list[FormPart]:
        return [
            FormFile("image", "image.png", "image/png", self.image),
            FormField("model", self.model),
            FormField("n", self.n),
            FormField("size", self.size),
            FormField("response_format", self.response_format),
            FormField("user", self.user),
        ]


class Image(_Result):
    url: str | None = None
    b64_json: str | None = None
    revised_prompt: str | None = None


class ImagesResult(_Result):
    created: int
    data: list[Image]


# Models


class ModelQuery(_Query):
    model: str


class ModelResult(_Result):
    id: str
    object: str
    owned_by: str
    created: int | None = None


class ModelsResult(_Result):
    object: str
    data: list[ModelResult]


# Moderations


class ModerationsQuery(_Query):
    input: str | list[str]
    model: str | None = None


class Moderation(_Result):
    flagged: bool
    categories: dict[str, bool]
    category_scores: dict[str, float]


class ModerationsResult(_Result):
    id: str
    model: str
    results: list[Moderation]


# Audio


class AudioSpeechQuery(_Query):
    model: str
    input: str
    voice: str
    response_format: Literal["mp3", "opus", "aac", "flac", "wav", "pcm"] | None = None
    speed: float | None = None


class AudioSpeechResult(BinaryResult):
    audio: bytes

    @classmethod
    def from_bytes(cls, data: bytes) -> "AudioSpeechResult":
        return cls(audio=data)


AudioFileType = Literal["flac", "mp3", "mpga", "mp4", "m4a", "mpeg", "ogg", "wav", "webm"]


class AudioTranslationQuery(_Query):
    file: bytes
    file_type: AudioFileType
    model: str
    prompt: str | None = None
    temperature: float | None = None
    response_format: Literal["json", "text", "srt", "verbose_json", "vtt"] | None = None

    def _file_part(self) -> FormFile:
        return FormFile("file", f"audio.{self.file_type}", f"audio/{self.file_type}", self.file)

    def form_parts(self) -> list[FormPart]:
        return [
            self._file_part(),
            FormField("model", self.model),
            FormField("prompt", self.prompt),
            FormField("temperature", self.temperature),
            FormField("response_format", self.response_format),
        ]


class AudioTranscriptionQuery(AudioTranslationQuery):
    language: str | None = None

    def form_parts(self) -> list[FormPart]:
        return [*super().form_parts(), FormField("language", self.language)]


class AudioTranscriptionResult(_Result):
    text: str


class AudioTranslationResult(_Result):
    text: str
