"""Error types for the OpenAI SDK."""


class OpenAIError(Exception):
    """Base error for everything the SDK reports.

    Attributes:
        code: Stable machine-readable error kind
        raw_text: Raw payload that caused the error, when there is one
    """

    def __init__(self, message: str, code: str, raw_text: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.raw_text = raw_text

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code!r}, {self.message!r})"


class TransportError(OpenAIError):
    """Network-layer failure, including timeouts and unusable HTTP statuses."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message, "TRANSPORT_ERROR")
        self.status_code = status_code


class EmptyDataError(OpenAIError):
    """A response carried no body where one was expected."""

    def __init__(self, message: str = "Response contained no data"):
        super().__init__(message, "EMPTY_DATA")


class DecodeError(OpenAIError):
    """A body was present but matched neither the result nor the error schema."""

    def __init__(self, message: str, raw_text: str | None = None):
        super().__init__(message, "DECODE_ERROR", raw_text)


class EncodingError(OpenAIError):
    """A request body could not be serialized before sending."""

    def __init__(self, message: str):
        super().__init__(message, "ENCODING_ERROR")


class APIError(OpenAIError):
    """Structured error payload returned by the server."""

    def __init__(
        self,
        message: str,
        type: str | None = None,
        param: str | None = None,
        code: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message, code or "API_ERROR")
        self.type = type
        self.param = param
        self.status_code = status_code
