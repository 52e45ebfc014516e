"""Thread-safe single-slot cache for expiring values with single-flight refresh.

:class:`CredentialCache` holds at most one value produced by a
:class:`~cis_client.auth.base.Refreshable`.  While the value is unexpired,
:meth:`~CredentialCache.get` returns it after a short critical section.
When the slot is empty or expired, exactly one caller (the *refresher*)
runs :meth:`~cis_client.auth.base.Refreshable.refresh` with the lock
released; every other caller arriving in the meantime parks on a
:class:`threading.Condition` and receives the refresher's outcome -- the same
value, or the same exception instance.

A value is usable while ``now < expiry``.  A value whose expiry equals the
current instant is expired.

A failed refresh never clears the slot: the previous value (if any) stays in
place and remains visible through :meth:`~CredentialCache.peek`, and the next
:meth:`~CredentialCache.get` starts a new refresh cycle.  The cache does not
retry on its own.

See Also:
    :class:`~cis_client.auth.bearer.BearerTokenRefresher` -- the bearer-token
    instantiation used by :class:`~cis_client.client.CisClient`.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Generic, Optional, TypeVar

from cis_client.auth.base import Refreshable

logger = logging.getLogger(__name__)

T = TypeVar("T")

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class _Flight(Generic[T]):
    """Outcome holder for one refresh cycle, shared by the refresher and its waiters."""

    __slots__ = ("done", "value", "error")

    def __init__(self) -> None:
        self.done = False
        self.value: Optional[T] = None
        self.error: Optional[BaseException] = None

    def result(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


class CredentialCache(Generic[T]):
    """Lazily refreshed, concurrency-safe slot for one expiring value.

    Args:
        refresher: Produces new values and reports their expiry.
        clock: Returns the current timezone-aware time.  Defaults to
            :func:`utcnow`; tests inject a controllable clock.

    Example::

        cache = CredentialCache(BearerTokenRefresher(client_config))
        credential = cache.get()   # first call fetches a token
        credential = cache.get()   # later calls reuse it until it expires
    """

    def __init__(self, refresher: Refreshable[T], clock: Optional[Clock] = None) -> None:
        self._refresher = refresher
        self._clock = clock or utcnow
        self._cond = threading.Condition()
        self._value: Optional[T] = None
        self._expires_at: Optional[datetime] = None
        self._forced = False
        self._flight: Optional[_Flight[T]] = None

    @property
    def refresher(self) -> Refreshable[T]:
        """The strategy used to produce new values."""
        return self._refresher

    @property
    def expires_at(self) -> Optional[datetime]:
        """Expiry of the held value, or ``None`` when nothing was ever cached."""
        with self._cond:
            return self._expires_at

    def get(self) -> T:
        """Return a usable value, refreshing it first if necessary.

        Blocks while another thread refreshes the slot.  There is no timeout
        and no cancellation: a waiting caller returns when the in-flight
        refresh succeeds or fails.

        Returns:
            The cached value, or the value produced by the refresh this call
            took part in.

        Raises:
            Exception: Whatever the refresher raised for this refresh cycle.
        """
        with self._cond:
            if self._is_fresh():
                logger.debug("Credential cache hit (expires %s)", self._expires_at)
                return self._value  # type: ignore[return-value]

            flight = self._flight
            if flight is not None:
                logger.debug("Waiting for in-flight credential refresh")
                while not flight.done:
                    self._cond.wait()
                return flight.result()

            flight = _Flight()
            self._flight = flight

        logger.debug("Credential cache miss, refreshing")
        try:
            value = self._refresher.refresh()
            expires_at = self._refresher.expiry(value)
        except BaseException as exc:
            self._finish(flight, error=exc)
            raise

        self._finish(flight, value=value, expires_at=expires_at)
        return value

    def peek(self) -> Optional[T]:
        """Return the held value without refreshing, even if it is expired."""
        with self._cond:
            return self._value

    def invalidate(self) -> None:
        """Force the next :meth:`get` to refresh.

        The held value is kept as the stale fallback visible through
        :meth:`peek` until a refresh succeeds.
        """
        with self._cond:
            self._forced = True

    def _is_fresh(self) -> bool:
        """Whether the held value may be handed out.  Caller holds the lock."""
        if self._expires_at is None or self._forced:
            return False
        return self._clock() < self._expires_at

    def _finish(
        self,
        flight: _Flight[T],
        value: Optional[T] = None,
        expires_at: Optional[datetime] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        """Publish the outcome of *flight* and wake every waiter."""
        with self._cond:
            if error is None:
                self._value = value
                self._expires_at = expires_at
                self._forced = False
                flight.value = value
                logger.info("Refreshed credential, valid until %s", expires_at)
            else:
                flight.error = error
                if self._value is not None:
                    logger.warning(
                        "Credential refresh failed, keeping previous credential: %s", error
                    )
                else:
                    logger.warning("Credential refresh failed: %s", error)
            flight.done = True
            self._flight = None
            self._cond.notify_all()
