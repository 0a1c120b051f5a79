"""Parsing of raw HTTP responses and the default headers for Google's GData API."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from .errors import MalformedResponse

CRLF = "\r\n"
HEADER_BOUNDARY = CRLF + CRLF

ATOM_CONTENT_TYPE = "application/atom+xml"
GDATA_VERSION = "2.0"


@dataclass(frozen=True)
class RawResponse:
    status_code: int
    status_message: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Case-insensitive header lookup with surrounding whitespace removed."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value.strip()
        return default


def _parse_status_line(line: str) -> tuple[int, str]:
    parts = line.split(" ", 2)
    if len(parts) < 2 or not (parts[1].isascii() and parts[1].isdigit()):
        raise MalformedResponse(f"Invalid HTTP status line: {line!r}")
    message = parts[2] if len(parts) > 2 else ""
    return int(parts[1]), message


def parse_response(raw: str) -> RawResponse:
    """Split a raw HTTP response into status, headers and body.

    Header values are kept exactly as received (including the space that
    follows the colon); use :meth:`RawResponse.header` for trimmed lookups.
    """
    head, _, body = raw.partition(HEADER_BOUNDARY)

    status_code: Optional[int] = None
    status_message = ""
    headers: Dict[str, str] = {}

    for line in head.split(CRLF):
        if not line:
            continue
        if ":" in line:
            name, _, value = line.partition(":")
            headers[name] = value
        else:
            status_code, status_message = _parse_status_line(line)

    if status_code is None:
        raise MalformedResponse("HTTP response has no status line")

    return RawResponse(status_code=status_code, status_message=status_message, headers=headers, body=body)


def convert_headers(headers: Mapping[str, object]) -> List[str]:
    return [f"{name}: {value}" for name, value in headers.items()]


def default_headers(content_length: Optional[int] = None) -> List[str]:
    """Headers sent with every GData call; ``Content-Length`` only for write calls."""
    headers: Dict[str, object] = {
        "Content-Type": ATOM_CONTENT_TYPE,
        "GData-Version": GDATA_VERSION,
    }
    if content_length:
        headers["Content-Length"] = content_length
    return convert_headers(headers)
