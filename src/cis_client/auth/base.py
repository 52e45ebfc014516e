"""The capability a :class:`~cis_client.auth.store.CredentialCache` is built over.

A :class:`Refreshable` knows how to produce a fresh value (usually with a
network round trip) and how to tell when a value it produced stops being
usable.  The cache itself knows nothing about tokens; the bearer-token case
is the :class:`~cis_client.auth.bearer.BearerTokenRefresher` instantiation.

See Also:
    :mod:`cis_client.auth.store` for the single-flight cache.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Generic, TypeVar

T = TypeVar("T")


class Refreshable(ABC, Generic[T]):
    """Abstract source of expiring values.

    Subclasses must implement:

    1. :meth:`refresh` -- obtain a brand-new value, raising on failure.
    2. :meth:`expiry` -- the UTC instant at which a given value expires.

    Implementations must not keep mutable state that the cache relies on;
    the cache owns the produced value.
    """

    @abstractmethod
    def refresh(self) -> T:
        """Obtain a new value.

        Returns:
            A freshly produced value.

        Raises:
            Exception: Any failure.  The cache hands the same exception to
                every caller waiting on this refresh.
        """
        ...

    @abstractmethod
    def expiry(self, value: T) -> datetime:
        """Return the timezone-aware instant at which *value* expires.

        Args:
            value: A value previously returned by :meth:`refresh`.
        """
        ...
