"""OAuth2 client-credentials bearer tokens.

This module provides the three pieces that turn a
:class:`~cis_client.models.ClientConfig` into cached
:class:`~cis_client.models.Credential` objects:

- :func:`fetch_access_token` -- the non-interactive Client Credentials grant
  (:rfc:`6749` section 4.4).  Posts ``client_id``, ``client_secret``,
  ``audience``, ``grant_type`` and ``scopes`` as a JSON body to the token
  endpoint and returns the ``access_token`` string.
- :func:`expiry_of` -- reads the registered ``exp`` claim with PyJWT from the
  middle segment of a compact signed token.  The signature is **not**
  verified: the only producer of tokens reaching this function is the
  token endpoint the client itself called.
- :class:`BearerTokenRefresher` -- the
  :class:`~cis_client.auth.base.Refreshable` combining both, which
  :class:`~cis_client.auth.store.CredentialCache` drives.

Every failure raised here is a :class:`~cis_client.exceptions.CredentialError`.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, Optional

import httpx
import jwt

from cis_client.auth.base import Refreshable
from cis_client.exceptions import (
    AuthEndpointError,
    TokenEndpointTransportError,
    TokenFormatError,
)
from cis_client.models import ClientConfig, Credential

logger = logging.getLogger(__name__)

GRANT_TYPE = "client_credentials"


def fetch_access_token(
    config: ClientConfig,
    client: Optional[httpx.Client] = None,
    timeout: float = 30.0,
) -> str:
    """Exchange client credentials for a raw access token.

    Args:
        config: Token endpoint URL and client credentials.
        client: Optional shared :class:`httpx.Client`.  When ``None`` a
            one-off request is made with :func:`httpx.post`.
        timeout: Request timeout in seconds for the one-off request.

    Returns:
        The ``access_token`` string from the JSON response.

    Raises:
        TokenEndpointTransportError: If the token endpoint cannot be reached.
        AuthEndpointError: If the endpoint answers with a non-2xx status, a
            body that is not a JSON object, or no string ``access_token``.
    """
    payload: dict[str, Any] = {
        "client_id": config.client_id,
        "client_secret": config.client_secret,
        "audience": config.audience,
        "grant_type": GRANT_TYPE,
        "scopes": config.scopes,
    }
    headers = {"Accept": "application/json"}

    logger.debug("Requesting access token from %s", config.token_endpoint)
    try:
        if client is None:
            response = httpx.post(
                config.token_endpoint, json=payload, headers=headers, timeout=timeout
            )
        else:
            response = client.post(config.token_endpoint, json=payload, headers=headers)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise AuthEndpointError(
            f"Token request failed with status {exc.response.status_code}",
            status_code=exc.response.status_code,
        ) from exc
    except httpx.HTTPError as exc:
        raise TokenEndpointTransportError(f"Can't get token: {exc}") from exc

    try:
        token_data = response.json()
    except ValueError as exc:
        raise AuthEndpointError(
            f"Can't parse token response: {exc}", status_code=response.status_code
        ) from exc

    if not isinstance(token_data, dict):
        raise AuthEndpointError(
            f"Token response must be a JSON object (got {type(token_data).__name__})",
            status_code=response.status_code,
        )

    access_token = token_data.get("access_token")
    if not isinstance(access_token, str) or not access_token:
        raise AuthEndpointError(
            "Token response missing 'access_token' field", status_code=response.status_code
        )
    return access_token


_SEGMENT = re.compile(r"[A-Za-z0-9_-]*")


def expiry_of(token: str) -> datetime:
    """Return the expiration instant embedded in *token*.

    Args:
        token: A compact ``header.claims.signature`` token.

    Returns:
        The ``exp`` claim as a timezone-aware UTC datetime.

    Raises:
        TokenFormatError: If the token does not have three base64url
            segments, the claims are not a JSON object, or the ``exp``
            claim is missing or not a number.
    """
    segments = token.split(".")
    if len(segments) != 3:
        raise TokenFormatError(
            f"Unable to get payload from token: expected 3 segments, got {len(segments)}"
        )
    if not all(_SEGMENT.fullmatch(segment) for segment in segments):
        raise TokenFormatError("Unable to get payload from token: segment is not base64url")

    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError as exc:
        raise TokenFormatError(f"Unable to get payload from token: {exc}") from exc

    exp = claims.get("exp")
    if exp is None:
        raise TokenFormatError("No expiration set in token")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        raise TokenFormatError(f"Invalid expiration claim in token: {exp!r}")

    try:
        return datetime.fromtimestamp(exp, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as exc:
        raise TokenFormatError(f"Invalid expiration claim in token: {exc}") from exc


class BearerTokenRefresher(Refreshable[Credential]):
    """Produce bearer :class:`~cis_client.models.Credential` objects on demand.

    Stateless apart from its configuration: each :meth:`refresh` is a fresh
    issuance at the token endpoint.

    Args:
        config: Client credentials and token endpoint.
        client: Optional shared :class:`httpx.Client` for the token request.
        timeout: Timeout for one-off requests when *client* is ``None``.
    """

    def __init__(
        self,
        config: ClientConfig,
        client: Optional[httpx.Client] = None,
        timeout: float = 30.0,
    ) -> None:
        self._config = config
        self._client = client
        self._timeout = timeout

    @property
    def config(self) -> ClientConfig:
        return self._config

    def refresh(self) -> Credential:
        """Fetch a new token and read its expiry.

        Raises:
            CredentialError: On any token endpoint or token format failure.
        """
        token = fetch_access_token(self._config, client=self._client, timeout=self._timeout)
        return Credential(token=token, expiry=expiry_of(token))

    def expiry(self, value: Credential) -> datetime:
        return value.expiry
