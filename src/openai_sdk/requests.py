"""Request descriptors and their materialization into httpx requests.

A descriptor is a declarative description of one outgoing call. It carries no
credentials; ``build_request`` combines it with the token, organization and
timeout at dispatch time. Exactly one body encoding applies per descriptor:

- ``JSONRequest``: JSON body, POST unless stated otherwise
- ``MultipartFormDataRequest``: ordered ``multipart/form-data`` parts, POST
- ``BodilessRequest``: no body, GET unless stated otherwise
"""

import json
import logging
import secrets
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, assert_never

import httpx
from pydantic import BaseModel
from pydantic_core import PydanticSerializationError

from .errors import EncodingError

log: logging.Logger = logging.getLogger(__name__)

ORGANIZATION_HEADER = "OpenAI-Organization"


@dataclass(frozen=True)
class FormField:
    """Scalar multipart field."""

    name: str
    value: str | int | float | bool | None


@dataclass(frozen=True)
class FormFile:
    """File multipart field. ``data`` may be a path read when the request is built."""

    name: str
    filename: str
    content_type: str
    data: bytes | Path


FormPart = FormField | FormFile


@dataclass(frozen=True)
class JSONRequest:
    url: httpx.URL | str
    body: BaseModel | Any
    method: str = "POST"
    kind: Literal["json"] = field(default="json", init=False)


@dataclass(frozen=True)
class MultipartFormDataRequest:
    url: httpx.URL | str
    parts: Sequence[FormPart]
    method: str = "POST"
    kind: Literal["multipart"] = field(default="multipart", init=False)


@dataclass(frozen=True)
class BodilessRequest:
    url: httpx.URL | str
    method: str = "GET"
    kind: Literal["bodiless"] = field(default="bodiless", init=False)


RequestDescriptor = JSONRequest | MultipartFormDataRequest | BodilessRequest


def _auth_headers(token: str, organization_identifier: str | None) -> dict[str, str]:
    headers = {"Authorization": f"Bearer {token}"}
    if organization_identifier:
        headers[ORGANIZATION_HEADER] = organization_identifier
    return headers


def _encode_json(body: BaseModel | Any) -> bytes:
    """Serialize a JSON body, omitting unset optional fields of models."""
    try:
        if isinstance(body, BaseModel):
            return body.model_dump_json(exclude_none=True, by_alias=True).encode()
        return json.dumps(body, allow_nan=False).encode()
    except (PydanticSerializationError, TypeError, ValueError) as e:
        raise EncodingError(f"Could not serialize JSON body: {e}") from e


def _form_value(value: str | int | float | bool) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _encode_parts(parts: Sequence[FormPart]) -> list[tuple[str, tuple[Any, ...]]]:
    """Convert parts into httpx ``files`` entries, keeping caller order.

    Scalars are sent as filename-less parts so they interleave with files
    exactly as given; endpoints such as image edits depend on that order.
    """
    encoded: list[tuple[str, tuple[Any, ...]]] = []
    for part in parts:
        if isinstance(part, FormField):
            if part.value is None:
                continue
            encoded.append((part.name, (None, _form_value(part.value).encode())))
        elif isinstance(part, FormFile):
            data = part.data
            if isinstance(data, Path):
                try:
                    data = data.read_bytes()
                except OSError as e:
                    raise EncodingError(f"Could not read file part {part.name!r}: {e}") from e
            if not isinstance(data, bytes):
                raise EncodingError(f"File part {part.name!r} must be bytes or a path")
            encoded.append((part.name, (part.filename, data, part.content_type)))
        else:
            raise EncodingError(f"Unsupported form part: {part!r}")
    return encoded


def build_request(
    descriptor: RequestDescriptor,
    *,
    token: str,
    organization_identifier: str | None,
    timeout: float,
) -> httpx.Request:
    """Materialize a descriptor into an httpx request.

    Raises:
        EncodingError: If the body cannot be serialized
    """
    log.debug("Building %s request: %s %s", descriptor.kind, descriptor.method, descriptor.url)
    headers = _auth_headers(token, organization_identifier)
    extensions = {"timeout": httpx.Timeout(timeout).as_dict()}

    if descriptor.kind == "json":
        headers["Content-Type"] = "application/json"
        return httpx.Request(
            descriptor.method,
            descriptor.url,
            headers=headers,
            content=_encode_json(descriptor.body),
            extensions=extensions,
        )
    elif descriptor.kind == "multipart":
        boundary = secrets.token_hex(16)
        headers["Content-Type"] = f"multipart/form-data; boundary={boundary}"
        request = httpx.Request(
            descriptor.method,
            descriptor.url,
            headers=headers,
            files=_encode_parts(descriptor.parts),
            extensions=extensions,
        )
        # Multipart streams are lazy; render now so failures surface at build
        request.read()
        return request
    elif descriptor.kind == "bodiless":
        return httpx.Request(
            descriptor.method,
            descriptor.url,
            headers=headers,
            extensions=extensions,
        )
    else:
        assert_never(descriptor.kind)
