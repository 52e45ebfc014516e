"""Bearer credential lifecycle for cis_client.

The main entry points are:

- :class:`Refreshable` -- abstract capability: produce a value, report its expiry.
- :class:`CredentialCache` -- single-flight, thread-safe cache over any
  :class:`Refreshable`.
- :class:`BearerTokenRefresher` -- client-credentials token issuance plus
  unverified ``exp`` claim parsing.

Typical usage::

    from cis_client.auth import BearerTokenRefresher, CredentialCache

    cache = CredentialCache(BearerTokenRefresher(settings.client_config))
    token = cache.get().token
"""

from cis_client.auth.base import Refreshable
from cis_client.auth.bearer import BearerTokenRefresher, expiry_of, fetch_access_token
from cis_client.auth.store import CredentialCache

__all__ = [
    "Refreshable",
    "CredentialCache",
    "BearerTokenRefresher",
    "expiry_of",
    "fetch_access_token",
]
