"""HTTP client module for cis_client.

Provides :class:`CisClient`, a blocking client backed by
:class:`httpx.Client` that authorizes every request with a cached
client-credentials bearer token.

Example::

    from cis_client.client import CisClient
    from cis_client.models import GetBy

    with CisClient.from_settings(settings) as client:
        profile = client.get_user_by("jdoe@mozilla.com", GetBy.PRIMARY_EMAIL)
"""

from cis_client.client.sync_client import CisClient, encode_user_id

__all__ = ["CisClient", "encode_user_id"]
