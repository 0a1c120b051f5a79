"""Exception types raised by the Webmaster Tools client."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .http_response import RawResponse


class WebmasterError(RuntimeError):
    """Base class for every error raised by this package."""


class ConfigurationError(WebmasterError):
    """Required credentials or options are missing or invalid."""


class MalformedDocument(WebmasterError):
    """The XML body could not be parsed."""


class MalformedResponse(WebmasterError):
    """The raw HTTP response has an unparseable status line."""


class TransportError(WebmasterError):
    """The HTTP exchange could not be completed."""


class APIError(WebmasterError):
    """The API answered with a status code the caller did not expect.

    The complete response is kept so callers can inspect the status and the
    body Google sent back.
    """

    def __init__(self, message: str, response: Optional["RawResponse"] = None) -> None:
        super().__init__(message)
        self.response = response
        self.code = response.status_code if response is not None else None
        self.body = response.body if response is not None else ""

    def __str__(self) -> str:
        base = super().__str__()
        if self.code is None:
            return base
        return f"{base} (HTTP {self.code})"
