"""Canonical Pydantic models shared across all cis_client modules.

The models fall into two groups:

**Configuration models** -- loaded from the settings file by
:mod:`cis_client.config`:
    :class:`ClientConfig`, :class:`RequestConfig`, and :class:`CisSettings`.

**Value models** -- produced at runtime:
    :class:`Credential` (the cached bearer token) and :class:`GetBy` (the
    lookup kinds understood by the person API).

Profile documents themselves are owned by an external schema and travel
through this package as plain JSON objects (:data:`ProfileDocument`).
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


ProfileDocument = dict[str, Any]
"""A user profile as returned by the person API and accepted by the change API."""


# --- Configuration ---


class ClientConfig(BaseModel):
    """OAuth2 client-credentials parameters for the token endpoint.

    ``client_secret`` may hold the secret itself or an ``env:VAR`` /
    ``file:/path`` indirection; :func:`cis_client.config.load_settings`
    resolves it before the model is handed to the token issuer.

    Example::

        ClientConfig(
            client_id="abc",
            client_secret="env:CIS_CLIENT_SECRET",
            audience="api.sso.mozilla.com",
            token_endpoint="https://auth.mozilla.auth0.com/oauth/token",
            scopes="classification:public display:all",
        )
    """

    client_id: str
    client_secret: str
    audience: str
    token_endpoint: str
    scopes: str = Field(
        default="", description="Space-separated scopes, sent verbatim to the token endpoint"
    )


class RequestConfig(BaseModel):
    """HTTP transport settings shared by every outbound request."""

    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify TLS certificates")


class CisSettings(BaseModel):
    """Everything a :class:`~cis_client.client.CisClient` needs to run.

    Attributes:
        client_config: Token endpoint credentials.
        person_api_user_endpoint: Base URL of the person API user lookups,
            e.g. ``https://person.api.sso.mozilla.com/v2/user``.
        change_api_user_endpoint: URL of the change API user endpoint,
            e.g. ``https://change.api.sso.mozilla.com/v2/user``.
        request: Transport settings.
    """

    client_config: ClientConfig
    person_api_user_endpoint: str
    change_api_user_endpoint: str
    request: RequestConfig = Field(default_factory=RequestConfig)


# --- Runtime values ---


class Credential(BaseModel):
    """A bearer token together with the instant it stops being usable.

    Instances are frozen: a refresh replaces the whole credential, it never
    edits one in place.
    """

    model_config = ConfigDict(frozen=True)

    token: str
    expiry: datetime


class GetBy(str, enum.Enum):
    """How the person API should interpret the identifier of a lookup.

    The value of each member is the URL path segment the person API expects.
    """

    UUID = "uuid"
    USER_ID = "user_id"
    PRIMARY_EMAIL = "primary_email"
    PRIMARY_USERNAME = "primary_username"
