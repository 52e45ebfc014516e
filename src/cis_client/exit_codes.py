"""Numeric process exit codes used by the ``cis-client`` command line.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~cis_client.exceptions.CisClientError` subclass.
Shell wrappers and cron jobs can inspect the exit code to tell a rejected
credential apart from an unreachable person API without parsing stderr.

Example::

    $ cis-client get-user ad|Mozilla-LDAP|jdoe --by user_id
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- the token endpoint refused the client
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred (including configuration problems)."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or an unreadable input file."""

EXIT_AUTH_FAILURE = 3
"""A bearer token could not be obtained from the token endpoint."""

EXIT_NOT_FOUND = 4
"""The person API returned HTTP 404 for the requested profile."""

EXIT_API_ERROR = 5
"""The person or change API returned an error status or an unparsable body."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_TOKEN_FORMAT_ERROR = 7
"""The issued bearer token is malformed or carries no expiration claim."""
