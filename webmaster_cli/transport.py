"""Blocking HTTP transport driven by an option map.

Options are set one at a time with :meth:`RequestsTransport.setopt` and stay in
effect until the transport is discarded, so a consumer creates a fresh
transport for every logical call (see ``OAuthConsumer.reset``).
"""

from __future__ import annotations

import logging
import sys
from enum import Enum
from typing import Any, Dict, List, Mapping, Tuple, Union

import requests

from .errors import ConfigurationError, TransportError
from .http_response import CRLF, HEADER_BOUNDARY

logger = logging.getLogger(__name__)


class TransportOption(str, Enum):
    VERIFY = "verify"
    RETURN_OUTPUT = "return_output"
    HEADERS = "headers"
    URL = "url"
    HTTP_GET = "http_get"
    HTTP_POST = "http_post"
    HTTP_PUT = "http_put"
    CUSTOM_REQUEST = "custom_request"
    INCLUDE_HEADERS = "include_headers"
    BODY = "body"
    TIMEOUT = "timeout"


OPTION_ALIASES: Dict[str, TransportOption] = {
    "verify_ssl": TransportOption.VERIFY,
    "return_output": TransportOption.RETURN_OUTPUT,
    "headers": TransportOption.HEADERS,
    "url": TransportOption.URL,
    "http_get": TransportOption.HTTP_GET,
    "http_post": TransportOption.HTTP_POST,
    "http_put": TransportOption.HTTP_PUT,
}

OptionKey = Union[str, TransportOption]


def resolve_option(key: OptionKey) -> TransportOption:
    """Map an alias or a raw option identifier onto a :class:`TransportOption`."""
    if isinstance(key, TransportOption):
        return key
    if key in OPTION_ALIASES:
        return OPTION_ALIASES[key]
    try:
        return TransportOption(key)
    except ValueError:
        raise ConfigurationError(f"Unknown transport option: {key}") from None


def method_option(method: str) -> Tuple[TransportOption, Any]:
    """Option that makes the transport issue ``method``."""
    verb = method.upper()
    if verb == "GET":
        return TransportOption.HTTP_GET, True
    if verb == "POST":
        return TransportOption.HTTP_POST, True
    return TransportOption.CUSTOM_REQUEST, verb


_METHOD_OPTIONS = {
    TransportOption.HTTP_GET: "GET",
    TransportOption.HTTP_POST: "POST",
    TransportOption.HTTP_PUT: "PUT",
    TransportOption.CUSTOM_REQUEST: None,
}


def _header_dict(headers: Any) -> Dict[str, str]:
    if not headers:
        return {}
    if isinstance(headers, Mapping):
        return {str(name): str(value) for name, value in headers.items()}
    result: Dict[str, str] = {}
    for line in headers:
        name, _, value = str(line).partition(":")
        result[name.strip()] = value.strip()
    return result


def format_raw_response(response: requests.Response) -> str:
    """Render a :class:`requests.Response` back into raw HTTP text."""
    version = "1.0" if getattr(response.raw, "version", 11) == 10 else "1.1"
    lines: List[str] = [f"HTTP/{version} {response.status_code} {response.reason or ''}".rstrip()]
    lines.extend(f"{name}: {value}" for name, value in response.headers.items())
    return CRLF.join(lines) + HEADER_BOUNDARY + response.text


class RequestsTransport:
    """Transport backed by a :class:`requests.Session`."""

    def __init__(self, session: requests.Session | None = None) -> None:
        self.session = session or requests.Session()
        self.options: Dict[TransportOption, Any] = {}
        self._method = "GET"

    def setopt(self, option: OptionKey, value: Any) -> None:
        option = resolve_option(option)
        self.options[option] = value
        # the most recent method option decides the verb
        if value and option in _METHOD_OPTIONS:
            self._method = _METHOD_OPTIONS[option] or str(value).upper()

    def getopt(self, option: OptionKey, default: Any = None) -> Any:
        return self.options.get(resolve_option(option), default)

    def method(self) -> str:
        return self._method

    def perform(self) -> str:
        url = self.options.get(TransportOption.URL)
        if not url:
            raise ConfigurationError("No URL set on the transport")

        method = self.method()
        logger.debug("%s %s", method, url.split("?", 1)[0])
        try:
            response = self.session.request(
                method,
                url,
                headers=_header_dict(self.options.get(TransportOption.HEADERS)),
                data=self.options.get(TransportOption.BODY),
                verify=self.options.get(TransportOption.VERIFY, True),
                timeout=self.options.get(TransportOption.TIMEOUT),
                allow_redirects=False,
            )
        except requests.exceptions.Timeout as exc:
            raise TransportError(f"Request to {url.split('?', 1)[0]} timed out") from exc
        except requests.exceptions.RequestException as exc:
            raise TransportError(f"Request to {url.split('?', 1)[0]} failed: {exc}") from exc

        if self.options.get(TransportOption.INCLUDE_HEADERS):
            output = format_raw_response(response)
        else:
            output = response.text

        if self.options.get(TransportOption.RETURN_OUTPUT, True):
            return output
        sys.stdout.write(output)
        return ""

    def close(self) -> None:
        self.session.close()
