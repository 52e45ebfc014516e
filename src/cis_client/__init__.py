"""cis_client -- client-credentials bearer tokens for the CIS person and change APIs.

This package obtains a short-lived bearer token through the OAuth2
client-credentials grant, caches it in a thread-safe single-flight slot, and
uses it to authorize profile lookups (person API) and profile changes
(change API).

Typical use::

    from cis_client.client import CisClient
    from cis_client.config import load_settings
    from cis_client.models import GetBy

    with CisClient.from_settings(load_settings("cis-client.yaml")) as client:
        profile = client.get_user_by("ad|Mozilla-LDAP|jdoe", GetBy.USER_ID)

Modules:
    auth: Refreshable capability, single-flight credential cache, bearer tokens.
    client: Person/change API client.
    models: Pydantic models shared across the package.
    config: Settings files, environment overrides, XDG paths.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes for the CLI.
    output: stdout/stderr formatting with Rich.
    app: Typer CLI entry point.
"""

__version__ = "0.3.0"
