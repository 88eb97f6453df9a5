"""Latest-request-wins guard for overlapping lookups.

Each logical stream (ticker search, expiry loading, strike loading) keeps a
monotonically increasing sequence number. Issuing a request cancels the
previous in-flight one; a response is applied only if its ticket is still the
latest. Stale responses, cancelled or not, are dropped without touching state.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Generic, Optional, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _Superseded:
    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "SUPERSEDED"


SUPERSEDED = _Superseded()


class SequenceGuard(Generic[T]):
    def __init__(self, name: str = "default"):
        self.name = name
        self._latest = 0
        self._in_flight: Optional[asyncio.Task] = None

    @property
    def latest(self) -> int:
        return self._latest

    def issue(self) -> int:
        """Start a new request and return its ticket."""

        self._latest += 1
        return self._latest

    def is_current(self, ticket: int) -> bool:
        return ticket == self._latest

    def apply_if_current(self, ticket: int, value: T, apply: Optional[Callable[[T], None]] = None) -> bool:
        if not self.is_current(ticket):
            logger.debug(f"[{self.name}] dropping stale response #{ticket} (latest #{self._latest})")
            return False
        if apply is not None:
            apply(value)
        return True

    def cancel(self) -> None:
        if self._in_flight is not None and not self._in_flight.done():
            self._in_flight.cancel()
        self._in_flight = None

    async def run(
        self,
        factory: Callable[[], Awaitable[T]],
        apply: Optional[Callable[[T], None]] = None,
    ) -> Union[T, _Superseded]:
        """Run one request on this stream.

        Returns the result (after passing it to ``apply``) when this request is
        still the latest once it completes, otherwise :data:`SUPERSEDED`.
        Errors of the latest request propagate; errors of stale ones are
        dropped along with their results.
        """

        ticket = self.issue()
        self.cancel()
        task = asyncio.ensure_future(factory())
        self._in_flight = task
        try:
            value = await task
        except asyncio.CancelledError:
            caller = asyncio.current_task()
            if self.is_current(ticket) or (caller is not None and caller.cancelling()):
                raise
            return SUPERSEDED
        except Exception:
            if self.is_current(ticket):
                raise
            logger.debug(f"[{self.name}] ignoring failure of superseded request #{ticket}")
            return SUPERSEDED
        finally:
            if self._in_flight is task:
                self._in_flight = None

        if not self.apply_if_current(ticket, value, apply):
            return SUPERSEDED
        return value


__all__ = ["SUPERSEDED", "SequenceGuard"]
