"""Synchronous client for the CIS person and change APIs.

This module provides :class:`CisClient`, which wraps a shared
:class:`httpx.Client` and layers on:

- **Bearer auth** -- every request first obtains a valid token from a
  :class:`~cis_client.auth.store.CredentialCache`, which refreshes it
  through the client-credentials grant only when it is missing or expired.
- **Safe URL construction** -- user identifiers are percent-encoded with no
  safe characters, so ``ad|Mozilla-LDAP|jdoe`` or ``a/b c`` reach the
  remote API intact.
- **Error mapping** -- transport failures become
  :class:`~cis_client.exceptions.TransportError`; error statuses and
  unparsable bodies become
  :class:`~cis_client.exceptions.ApiEndpointError`.

Nothing is retried here.  A single :class:`CisClient` is safe to share
between threads.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional, Union
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from cis_client.auth.bearer import BearerTokenRefresher
from cis_client.auth.store import CredentialCache
from cis_client.exceptions import ApiEndpointError, InvalidUsageError, TransportError
from cis_client.models import CisSettings, Credential, GetBy, ProfileDocument

logger = logging.getLogger(__name__)

ProfileInput = Union[Mapping[str, Any], BaseModel]


def encode_user_id(user_id: str) -> str:
    """Percent-encode *user_id* for embedding in a URL path or query value.

    Every character outside the RFC 3986 unreserved set is encoded, including
    ``/``, ``|``, ``@`` and spaces.
    """
    return quote(user_id, safe="")


class CisClient:
    """Client for profile lookups and profile changes.

    Args:
        settings: Endpoints, client credentials, and transport settings.
        http_client: Optional pre-built :class:`httpx.Client`.  When omitted
            one is created from ``settings.request`` and closed by
            :meth:`close`.
        token_cache: Optional credential cache.  When omitted a
            :class:`~cis_client.auth.store.CredentialCache` over a
            :class:`~cis_client.auth.bearer.BearerTokenRefresher` is created,
            sharing *http_client* for token requests.

    Example::

        with CisClient.from_settings(settings) as client:
            profile = client.get_user_by("ad|Mozilla-LDAP|jdoe", GetBy.USER_ID)
    """

    def __init__(
        self,
        settings: CisSettings,
        http_client: Optional[httpx.Client] = None,
        token_cache: Optional[CredentialCache[Credential]] = None,
    ) -> None:
        self._settings = settings
        self._owns_http_client = http_client is None
        if http_client is None:
            http_client = httpx.Client(
                timeout=settings.request.timeout,
                verify=settings.request.verify_ssl,
                follow_redirects=True,
            )
        self._http = http_client
        if token_cache is None:
            token_cache = CredentialCache(
                BearerTokenRefresher(settings.client_config, client=self._http)
            )
        self._token_cache = token_cache

    @classmethod
    def from_settings(cls, settings: CisSettings) -> CisClient:
        """Build a client that owns its HTTP transport and token cache."""
        return cls(settings)

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> CisClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP transport if this client created it."""
        if self._owns_http_client:
            self._http.close()

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    @property
    def token_cache(self) -> CredentialCache[Credential]:
        return self._token_cache

    def bearer_token(self) -> str:
        """Return a currently valid bearer token, refreshing it if needed.

        Raises:
            CredentialError: If a token cannot be obtained.
        """
        return self._token_cache.get().token

    def get_user_by(
        self,
        user_id: str,
        by: Union[GetBy, str],
        filter: Optional[str] = None,
    ) -> ProfileDocument:
        """Fetch a profile from the person API.

        Args:
            user_id: Identifier interpreted according to *by*.
            by: Lookup kind; a :class:`~cis_client.models.GetBy` member or
                its string value.
            filter: Optional ``filterDisplay`` level (e.g. ``"public"``).

        Returns:
            The profile document.

        Raises:
            InvalidUsageError: If *by* is not a known lookup kind.
            CredentialError: If no bearer token could be obtained.
            TransportError: If the person API cannot be reached.
            ApiEndpointError: On a non-2xx status or a body that is not JSON.
        """
        url = self._user_url(user_id, _coerce_get_by(by))
        token = self.bearer_token()
        params = {"filterDisplay": filter} if filter is not None else None

        response = self._send("GET", url, token, params=params, label="person API")
        if not response.is_success:
            raise ApiEndpointError(
                f"Person API returned: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )
        profile = _parse_json(response, "Invalid JSON from user endpoint")
        if not isinstance(profile, dict):
            raise ApiEndpointError(
                f"Invalid profile from user endpoint: expected an object, "
                f"got {type(profile).__name__}",
                status_code=response.status_code,
            )
        return profile

    def update_user(self, user_id: str, profile: ProfileInput) -> Any:
        """Submit *profile* to the change API for *user_id*.

        The change API reports pipeline failures as structured JSON, so the
        body is returned whatever the status code; callers inspect it.

        Raises:
            CredentialError: If no bearer token could be obtained.
            TransportError: If the change API cannot be reached.
            ApiEndpointError: If the response body is not JSON.
        """
        return self._change("POST", user_id, profile)

    def delete_user(self, user_id: str, profile: ProfileInput) -> Any:
        """Ask the change API to retract the fields present in *profile*.

        Identical to :meth:`update_user` but sent as ``DELETE`` with the
        profile as body.
        """
        return self._change("DELETE", user_id, profile)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _user_url(self, user_id: str, by: GetBy) -> str:
        base = self._settings.person_api_user_endpoint.rstrip("/")
        return f"{base}/{by.value}/{encode_user_id(user_id)}"

    def _change_url(self, user_id: str) -> httpx.URL:
        url = httpx.URL(self._settings.change_api_user_endpoint)
        query = f"user_id={encode_user_id(user_id)}"
        return url.copy_with(query=query.encode("ascii"))

    def _change(self, method: str, user_id: str, profile: ProfileInput) -> Any:
        body = _profile_body(profile)
        token = self.bearer_token()
        response = self._send(method, self._change_url(user_id), token, json_body=body, label="change.api")
        return _parse_json(response, "change.api returned invalid JSON")

    def _send(
        self,
        method: str,
        url: Union[str, httpx.URL],
        token: str,
        params: Optional[dict[str, str]] = None,
        json_body: Optional[Any] = None,
        label: str = "API",
    ) -> httpx.Response:
        """Issue one authenticated request, mapping transport failures."""
        headers = {
            "Accept": "application/json",
            "Authorization": f"Bearer {token}",
        }
        logger.debug("%s %s", method, url)
        try:
            response = self._http.request(
                method, url, headers=headers, params=params, json=json_body
            )
        except httpx.HTTPError as exc:
            raise TransportError(f"{label}: {exc}") from exc
        logger.debug("%s %s -> %s", method, url, response.status_code)
        return response


def _coerce_get_by(by: Union[GetBy, str]) -> GetBy:
    try:
        return GetBy(by)
    except ValueError as exc:
        choices = ", ".join(member.value for member in GetBy)
        raise InvalidUsageError(f"Unknown lookup kind '{by}'. Choose one of: {choices}") from exc


def _profile_body(profile: ProfileInput) -> Any:
    """Serialise a profile document or pydantic model into a JSON-ready value."""
    if isinstance(profile, BaseModel):
        return profile.model_dump(mode="json", by_alias=True)
    if isinstance(profile, Mapping):
        return dict(profile)
    raise InvalidUsageError(
        f"Profile must be a JSON object or a pydantic model, got {type(profile).__name__}"
    )


def _parse_json(response: httpx.Response, message: str) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise ApiEndpointError(f"{message}: {exc}", status_code=response.status_code) from exc
