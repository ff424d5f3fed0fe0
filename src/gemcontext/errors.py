"""Error taxonomy shared by the client and the MCP adapter.

Every error raised on purpose by gemcontext derives from ``GemContextError``
and carries a machine-readable ``code``, a message that is safe to show to the
agent, and a ``recoverable`` flag telling the caller whether retrying later
might help.
"""

from __future__ import annotations

import json
from enum import StrEnum

# Upstream bodies are truncated to this many bytes in error payloads.
BODY_EXCERPT_LIMIT = 500


class ErrorCode(StrEnum):
    INVALID_INPUT = "INVALID_INPUT"
    NOT_FOUND = "NOT_FOUND"
    CLIENT_ERROR = "CLIENT_ERROR"
    SERVER_ERROR = "SERVER_ERROR"
    API_ERROR = "API_ERROR"
    CORRUPTED_DATA = "CORRUPTED_DATA"
    RESPONSE_TOO_LARGE = "RESPONSE_TOO_LARGE"


class GemContextError(Exception):
    code: ErrorCode = ErrorCode.API_ERROR
    recoverable: bool = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, object]:
        return {
            "error": {
                "code": str(self.code),
                "message": self.message,
                "recoverable": self.recoverable,
            }
        }

    def to_json(self) -> str:
        return json.dumps(self.to_payload())


class InvalidInputError(GemContextError):
    """A caller-supplied argument failed a precondition."""

    code = ErrorCode.INVALID_INPUT


class APIError(GemContextError):
    """An upstream request failed (HTTP status or transport)."""

    code = ErrorCode.API_ERROR
    recoverable = True

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str | None = None,
        body_excerpt: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url
        self.body_excerpt = body_excerpt


class NotFoundError(APIError):
    code = ErrorCode.NOT_FOUND
    recoverable = False


class ClientError(APIError):
    code = ErrorCode.CLIENT_ERROR
    recoverable = False


class ServerError(APIError):
    code = ErrorCode.SERVER_ERROR


class CorruptedDataError(GemContextError):
    """A response failed integrity or shape validation."""

    code = ErrorCode.CORRUPTED_DATA
    recoverable = True

    def __init__(
        self,
        message: str,
        *,
        response_size: int | None = None,
        url: str | None = None,
        original_error: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.response_size = response_size
        self.url = url
        self.original_error = original_error


class ResponseSizeExceededError(GemContextError):
    code = ErrorCode.RESPONSE_TOO_LARGE
    recoverable = True

    def __init__(self, size: int, max_size: int, *, url: str | None = None) -> None:
        super().__init__(
            f"Response size ({size} bytes) exceeds maximum allowed size ({max_size} bytes). "
            "This may indicate crawler protection."
        )
        self.size = size
        self.max_size = max_size
        self.url = url
