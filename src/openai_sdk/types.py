"""Type definitions for the OpenAI SDK."""

from abc import abstractmethod
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, field_validator

from .errors import APIError


@runtime_checkable
class TokenProvider(Protocol):
    """Supplies the API token. Called once before every request."""

    def get_token(self) -> str: ...


@dataclass(frozen=True)
class StaticTokenProvider:
    """Token provider that always returns the same token."""

    token: str

    def get_token(self) -> str:
        return self.token


@dataclass(frozen=True)
class Configuration:
    """Configuration for connecting to an OpenAI-compatible API."""

    token_provider: TokenProvider
    """Produces the bearer token for each request"""

    organization_identifier: str | None = None
    """Optional organization, sent as the OpenAI-Organization header"""

    host: str = "api.openai.com"
    """API host. Set this when going through a proxy or a self-hosted server"""

    port: int = 443
    scheme: str = "https"

    base_path: str = "/api/v1"
    """Path prefix joined with every endpoint path"""

    timeout: float = 60.0
    """Request timeout in seconds"""

    @classmethod
    def from_token(cls, token: str, **kwargs: Any) -> "Configuration":
        """Build a configuration around a fixed token."""
        return cls(token_provider=StaticTokenProvider(token), **kwargs)


class BinaryResult(BaseModel):
    """Result built from raw response bytes instead of a JSON body."""

    @classmethod
    @abstractmethod
    def from_bytes(cls, data: bytes) -> "BinaryResult":
        """Build the result from the raw response body. Subclasses must override."""


# Internal response types for parsing error payloads
# These are not exported in __init__.py but are used across package modules


class APIErrorDetail(BaseModel):
    """Body of a structured API error (internal)."""

    model_config = ConfigDict(extra="ignore")

    message: str
    type: str | None = None
    param: str | None = None
    code: str | None = None

    @field_validator("message", mode="before")
    @classmethod
    def _join_messages(cls, value: Any) -> Any:
        # Some servers report validation failures as a list of messages
        if isinstance(value, list) and all(isinstance(item, str) for item in value):
            return "\n".join(value)
        return value

    @field_validator("code", mode="before")
    @classmethod
    def _stringify_code(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class APIErrorResponse(BaseModel):
    """Error envelope returned by the API (internal)."""

    error: APIErrorDetail

    def to_error(self, status_code: int | None = None) -> APIError:
        return APIError(
            self.error.message,
            type=self.error.type,
            param=self.error.param,
            code=self.error.code,
            status_code=status_code,
        )
