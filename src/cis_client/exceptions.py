"""Exception hierarchy for cis_client.

All exceptions inherit from :class:`CisClientError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`cis_client.exit_codes`.
The command-line entry point in :func:`cis_client.app.main` catches
``CisClientError`` and exits with the matching code.

Every failure of :meth:`~cis_client.auth.store.CredentialCache.get` for
bearer tokens is a :class:`CredentialError`, so callers that only care
whether a token could be obtained need a single ``except`` clause.

Subclass hierarchy::

    CisClientError (exit 1)
    +-- ConfigError                  (exit 1)
    +-- InvalidUsageError            (exit 2)
    +-- TransportError               (exit 6)
    +-- CredentialError              (exit 3)
    |   +-- AuthEndpointError        (exit 3)
    |   +-- TokenFormatError         (exit 7)
    |   +-- TokenEndpointTransportError (also a TransportError)
    +-- ApiEndpointError             (exit 5, or 4 for HTTP 404)
"""

from __future__ import annotations

from cis_client.exit_codes import (
    EXIT_API_ERROR,
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_TOKEN_FORMAT_ERROR,
)


class CisClientError(Exception):
    """Base exception for all cis_client errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(CisClientError):
    """Raised for configuration problems (missing settings file, invalid JSON/YAML, bad credential sources)."""

    exit_code = EXIT_GENERIC_FAILURE


class InvalidUsageError(CisClientError):
    """Raised for invalid CLI arguments or unreadable profile files."""

    exit_code = EXIT_INVALID_USAGE


class TransportError(CisClientError):
    """Raised on network-level failures reaching the token, person, or change endpoints."""

    exit_code = EXIT_CONNECTION_ERROR


class CredentialError(CisClientError):
    """Raised when a bearer token cannot be obtained or understood."""

    exit_code = EXIT_AUTH_FAILURE


class AuthEndpointError(CredentialError):
    """Raised when the token endpoint answers with an error or without an ``access_token``.

    Args:
        message: Human-readable error description.
        status_code: HTTP status returned by the token endpoint, if any.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class TokenFormatError(CredentialError):
    """Raised when a bearer token is not a three-segment token with a readable ``exp`` claim."""

    exit_code = EXIT_TOKEN_FORMAT_ERROR


class TokenEndpointTransportError(CredentialError, TransportError):
    """Raised when the token endpoint cannot be reached at all."""

    exit_code = EXIT_CONNECTION_ERROR


class ApiEndpointError(CisClientError):
    """Raised when the person or change API returns an error status or an unparsable body.

    Args:
        message: Human-readable error description.
        status_code: HTTP status of the offending response.
    """

    exit_code = EXIT_API_ERROR

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message, exit_code=EXIT_NOT_FOUND if status_code == 404 else None)
        self.status_code = status_code
