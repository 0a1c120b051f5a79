"""Three-legged OAuth handshake against Google's account endpoints.

1. :meth:`Authorizer.authorize_user` fetches a request token for a scope,
   remembers its secret in the session store and returns the URL the user has
   to visit to grant access.
2. Google redirects the user back to the callback with ``oauth_token`` and
   ``oauth_verifier`` in the query string.
3. :meth:`Authorizer.get_access_token` trades those for a long-lived access
   token and secret, which should be stored and passed to
   ``OAuthConsumer.set_tokens`` for all following API calls.
"""

from __future__ import annotations

import logging
from typing import Dict, Mapping, Optional, Protocol
from urllib.parse import parse_qsl

from sqlalchemy.orm import Session

from .consumer import OAuthConsumer
from .errors import APIError, ConfigurationError
from .http_response import RawResponse, parse_response
from .models import SessionValue
from .signer import Credentials
from .transport import TransportOption

logger = logging.getLogger(__name__)

GOOGLE_URLS: Dict[str, str] = {
    "request_token": "https://www.google.com/accounts/OAuthGetRequestToken",
    "authorize_token": "https://www.google.com/accounts/OAuthAuthorizeToken",
    "access_token": "https://www.google.com/accounts/OAuthGetAccessToken",
}

TOKEN_SECRET_KEY = "oauth_token_secret"


class SessionStore(Protocol):
    def put(self, key: str, value: str) -> None:
        ...

    def get(self, key: str) -> Optional[str]:
        ...


class MemorySessionStore:
    def __init__(self) -> None:
        self._values: Dict[str, str] = {}

    def put(self, key: str, value: str) -> None:
        self._values[key] = value

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)


class DatabaseSessionStore:
    """Session store persisted in the ``oauth_session_values`` table."""

    def __init__(self, db: Session, namespace: str = "") -> None:
        self.db = db
        self.namespace = namespace

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}" if self.namespace else key

    def put(self, key: str, value: str) -> None:
        record = self.db.query(SessionValue).filter(SessionValue.key == self._key(key)).first()
        if not record:
            record = SessionValue(key=self._key(key))
            self.db.add(record)
        record.value = value
        self.db.commit()

    def get(self, key: str) -> Optional[str]:
        record = self.db.query(SessionValue).filter(SessionValue.key == self._key(key)).first()
        return record.value if record else None


def _token_response(response: RawResponse, action: str) -> Dict[str, str]:
    if response.status_code != 200:
        raise APIError(f"The {action} could not be retrieved.", response)

    values = dict(parse_qsl(response.body.strip(), keep_blank_values=True))
    if not values.get("oauth_token") or not values.get("oauth_token_secret"):
        raise APIError(f"The {action} response did not contain a token and secret.", response)
    return values


class Authorizer:
    """Runs the handshake on the consumer it is given.

    The request-token leg clears the consumer's tokens and a successful
    access-token leg leaves the request token installed; callers install the
    returned access token with ``set_tokens``. When a leg fails the consumer
    gets back the tokens it had before the call.
    """

    def __init__(
        self,
        consumer: OAuthConsumer,
        session_store: SessionStore,
        urls: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.consumer = consumer
        self.session_store = session_store
        self.urls = dict(urls or GOOGLE_URLS)

    def _get(self, url: str, parameters: Mapping[str, str]) -> RawResponse:
        raw = self.consumer.request(
            url, "GET", parameters, {TransportOption.INCLUDE_HEADERS: True}
        )
        return parse_response(raw)

    def _restore_tokens(self, previous: Credentials) -> None:
        self.consumer.set_tokens(previous.token, previous.token_secret)
        self.consumer.reset()

    def get_request_token(self, scope: str, callback: str) -> Dict[str, str]:
        previous = self.consumer.credentials
        self.consumer.clear_tokens()
        self.consumer.reset()
        try:
            response = self._get(self.urls["request_token"], {"scope": scope, "oauth_callback": callback})
            return _token_response(response, "request token")
        except Exception:
            self._restore_tokens(previous)
            raise

    def authorize_user(self, scope: str, callback: str) -> str:
        """Return the Google URL the user must visit to authorize ``scope``."""
        tokens = self.get_request_token(scope, callback)
        self.session_store.put(TOKEN_SECRET_KEY, tokens["oauth_token_secret"])

        self.consumer.reset()
        signed = self.consumer.sign(
            self.urls["authorize_token"], "GET", {"oauth_token": tokens["oauth_token"]}
        )
        logger.info("Request token obtained for scope %s", scope)
        return signed.signed_url

    def get_access_token(self, oauth_token: str, oauth_verifier: str) -> Dict[str, str]:
        """Exchange an authorized request token for an access token and secret."""
        token_secret = self.session_store.get(TOKEN_SECRET_KEY)
        if not token_secret:
            raise ConfigurationError(
                "No oauth_token_secret in the session store; run the authorization step first."
            )

        previous = self.consumer.credentials
        self.consumer.set_tokens(oauth_token, token_secret)
        self.consumer.reset()

        try:
            response = self._get(
                self.urls["access_token"],
                {"oauth_verifier": oauth_verifier, "oauth_token": oauth_token},
            )
            tokens = _token_response(response, "access token")
        except Exception:
            self._restore_tokens(previous)
            raise
        logger.info("Access token obtained")
        return tokens
