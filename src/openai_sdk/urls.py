"""Endpoint paths and URL composition."""

import httpx

COMPLETIONS = "/completions"
EMBEDDINGS = "/embeddings"
CHATS = "/chat/completions"
EDITS = "/edits"
MODELS = "/models"
MODERATIONS = "/moderations"

AUDIO_SPEECH = "/audio/speech"
AUDIO_TRANSCRIPTIONS = "/audio/transcriptions"
AUDIO_TRANSLATIONS = "/audio/translations"

IMAGES = "/images/generations"
IMAGE_EDITS = "/images/edits"
IMAGE_VARIATIONS = "/images/variations"


def with_path(path: str, component: str) -> str:
    """Append one path component, e.g. a model id under /models."""
    return f"{path}/{component}"


def build_url(scheme: str, host: str, port: int, base_path: str, path: str) -> httpx.URL:
    """Compose an absolute URL from its parts.

    The port is dropped from the rendered URL when it is the scheme's default.
    """
    return httpx.URL(scheme=scheme, host=host, port=port, path=base_path + path)
