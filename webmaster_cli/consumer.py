"""OAuth consumer that signs requests and sends them through a transport.

Basic usage::

    consumer = OAuthConsumer("example.com", "consumer-secret")
    body = consumer.request("https://www.google.com/webmasters/tools/feeds/sites/")

Transport options set through :meth:`OAuthConsumer.set_transport_option` or the
``transport_options`` argument of :meth:`OAuthConsumer.sign` stick to the
current transport. Call :meth:`OAuthConsumer.reset` before every new logical
call so headers or a body from a previous request are not sent again.

A consumer is not thread-safe: use one instance per concurrent caller, or
serialize the whole ``reset`` / ``sign`` / ``request`` sequence externally.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional

from .errors import ConfigurationError
from .signer import Credentials, RequestSpec, SignedRequest, generate_nonce, generate_timestamp, sign
from .transport import OptionKey, RequestsTransport, TransportOption, method_option

logger = logging.getLogger(__name__)

DEFAULT_TRANSPORT_CONFIG: Dict[OptionKey, Any] = {
    "verify_ssl": True,
    "return_output": True,
}


class ConsumerState(str, Enum):
    UNCONFIGURED = "unconfigured"
    CONFIGURED = "configured"
    SIGNED = "signed"
    SENT = "sent"


class OAuthConsumer:
    def __init__(
        self,
        consumer_key: str,
        consumer_secret: str,
        transport_config: Optional[Mapping[OptionKey, Any]] = None,
        transport_factory: Callable[[], Any] = RequestsTransport,
        nonce_factory: Callable[[], str] = generate_nonce,
        clock: Callable[[], int] = generate_timestamp,
    ) -> None:
        missing = [
            name
            for name, value in (("consumer_key", consumer_key), ("consumer_secret", consumer_secret))
            if not value
        ]
        if missing:
            raise ConfigurationError(f"The following keys are required: {', '.join(missing)}")

        self.state = ConsumerState.UNCONFIGURED
        self._credentials = Credentials(consumer_key=consumer_key, consumer_secret=consumer_secret)
        self._transport_config: Dict[OptionKey, Any] = dict(transport_config or {})
        self._transport_factory = transport_factory
        self._nonce_factory = nonce_factory
        self._clock = clock
        self.transport: Any = None

        self.reset()

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    def set_tokens(self, token: Optional[str], token_secret: Optional[str]) -> None:
        """Use ``token``/``token_secret`` for every following request."""
        self._credentials = self._credentials.with_tokens(token, token_secret)

    def clear_tokens(self) -> None:
        self.set_tokens(None, None)

    def reset(self) -> None:
        """Start over with a fresh transport carrying only the configured defaults."""
        if self.transport is not None:
            self.transport.close()

        self.transport = self._transport_factory()
        config: Dict[OptionKey, Any] = {**DEFAULT_TRANSPORT_CONFIG, **self._transport_config}
        for key, value in config.items():
            self.set_transport_option(key, value)
        self.state = ConsumerState.CONFIGURED

    def set_transport_option(self, key: OptionKey, value: Any) -> None:
        """Set a transport option by raw identifier or alias (``verify_ssl``, ``headers``, ...)."""
        self.transport.setopt(key, value)

    def sign(
        self,
        url: str,
        method: str = "GET",
        parameters: Optional[Mapping[str, object]] = None,
        transport_options: Optional[Mapping[OptionKey, Any]] = None,
    ) -> SignedRequest:
        """Sign a request without sending it."""
        for key, value in (transport_options or {}).items():
            self.set_transport_option(key, value)

        request = RequestSpec(url=url, method=method, parameters=dict(parameters or {}))
        signed = sign(self._credentials, request, nonce=self._nonce_factory(), timestamp=self._clock())

        option, value = method_option(signed.method)
        self.set_transport_option(option, value)
        self.state = ConsumerState.SIGNED
        return signed

    def request(
        self,
        url: str,
        method: str = "GET",
        parameters: Optional[Mapping[str, object]] = None,
        transport_options: Optional[Mapping[OptionKey, Any]] = None,
    ) -> str:
        """Sign and send a request, returning the raw response text."""
        signed = self.sign(url, method, parameters, transport_options)
        self.set_transport_option(TransportOption.URL, signed.signed_url)

        output = self.transport.perform()
        self.state = ConsumerState.SENT
        logger.debug("%s %s completed", signed.method, url)
        return output
