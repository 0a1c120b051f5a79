"""OAuth 1.0 HMAC-SHA1 request signing.

Signing is a pure function of the credentials, the request, a nonce and a
timestamp. The nonce and timestamp are passed in explicitly so a signature can
be reproduced; :func:`generate_nonce` and :func:`generate_timestamp` provide
the values used for real requests.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
import secrets
import string
import time
from dataclasses import dataclass, field, replace
from typing import Dict, Mapping, Optional
from urllib.parse import parse_qsl, quote, urlsplit, urlunsplit

logger = logging.getLogger(__name__)

OAUTH_VERSION = "1.0"
SIGNATURE_METHOD = "HMAC-SHA1"
SUPPORTED_METHODS = ("GET", "POST", "PUT", "DELETE")

_NONCE_ALPHABET = string.ascii_letters + string.digits
_DEFAULT_PORTS = {"http": 80, "https": 443}


@dataclass(frozen=True)
class Credentials:
    consumer_key: str
    consumer_secret: str
    token: Optional[str] = None
    token_secret: Optional[str] = None

    def with_tokens(self, token: Optional[str], token_secret: Optional[str]) -> "Credentials":
        return replace(self, token=token, token_secret=token_secret)


@dataclass(frozen=True)
class RequestSpec:
    url: str
    method: str = "GET"
    parameters: Mapping[str, object] = field(default_factory=dict)
    body: Optional[str] = None


@dataclass(frozen=True)
class SignedRequest:
    method: str
    url: str
    base_string: str
    signature: str
    signed_url: str
    parameters: Dict[str, str]


def generate_nonce(length: int = 16) -> str:
    return "".join(secrets.choice(_NONCE_ALPHABET) for _ in range(length))


def generate_timestamp() -> int:
    return int(time.time())


def percent_encode(value: object) -> str:
    """Encode ``value`` leaving only RFC 3986 unreserved characters."""
    return quote(str(value), safe="~")


def normalize_url(url: str) -> str:
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    netloc = (parts.hostname or "").lower()
    if parts.port is not None and parts.port != _DEFAULT_PORTS.get(scheme):
        netloc = f"{netloc}:{parts.port}"
    return urlunsplit((scheme, netloc, parts.path or "/", "", ""))


def normalize_parameters(parameters: Mapping[str, object]) -> str:
    pairs = sorted(
        (percent_encode(key), percent_encode(value))
        for key, value in parameters.items()
        if key != "oauth_signature"
    )
    return "&".join(f"{key}={value}" for key, value in pairs)


def signature_base_string(method: str, url: str, parameters: Mapping[str, object]) -> str:
    return "&".join(
        [
            percent_encode(method.upper()),
            percent_encode(normalize_url(url)),
            percent_encode(normalize_parameters(parameters)),
        ]
    )


def signing_key(credentials: Credentials) -> str:
    return f"{percent_encode(credentials.consumer_secret)}&{percent_encode(credentials.token_secret or '')}"


def hmac_sha1(key: str, text: str) -> str:
    digest = hmac.new(key.encode("utf-8"), text.encode("utf-8"), hashlib.sha1).digest()
    return base64.b64encode(digest).decode("ascii")


def oauth_parameters(credentials: Credentials, nonce: str, timestamp: int) -> Dict[str, str]:
    params = {
        "oauth_consumer_key": credentials.consumer_key,
        "oauth_nonce": nonce,
        "oauth_signature_method": SIGNATURE_METHOD,
        "oauth_timestamp": str(timestamp),
        "oauth_version": OAUTH_VERSION,
    }
    if credentials.token:
        params["oauth_token"] = credentials.token
    return params


def sign(credentials: Credentials, request: RequestSpec, nonce: str, timestamp: int) -> SignedRequest:
    """Sign ``request`` and build the URL carrying every OAuth parameter."""
    method = request.method.upper()
    if method not in SUPPORTED_METHODS:
        raise ValueError(f"Unsupported HTTP method: {request.method}")

    parameters: Dict[str, str] = dict(parse_qsl(urlsplit(request.url).query, keep_blank_values=True))
    parameters.update(oauth_parameters(credentials, nonce, timestamp))
    parameters.update({key: str(value) for key, value in (request.parameters or {}).items() if value is not None})

    base_string = signature_base_string(method, request.url, parameters)
    signature = hmac_sha1(signing_key(credentials), base_string)
    base_url = normalize_url(request.url)
    signed_url = f"{base_url}?{normalize_parameters(parameters)}&oauth_signature={percent_encode(signature)}"

    logger.debug("Signed %s %s (nonce=%s, timestamp=%s)", method, base_url, nonce, timestamp)
    return SignedRequest(
        method=method,
        url=request.url,
        base_string=base_string,
        signature=signature,
        signed_url=signed_url,
        parameters=parameters,
    )
