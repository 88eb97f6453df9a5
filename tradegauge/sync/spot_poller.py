from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

from tradegauge.adapters.base import RateLimitError
from tradegauge.models.option import positive_or_none

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 10.0
DEFAULT_COOLDOWN_SECONDS = 60.0


class SpotPoller:
    """Refreshes the underlying price on a fixed cadence.

    Polls are skipped while the page is hidden and during the cooldown that
    follows a rate-limit response. There is no retry or exponential backoff:
    the next poll after the cooldown simply goes ahead as usual.
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[Optional[float]]],
        *,
        interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        cooldown_seconds: float = DEFAULT_COOLDOWN_SECONDS,
        visible: Callable[[], bool] = lambda: True,
        on_price: Optional[Callable[[float], None]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._fetch = fetch
        self.interval_seconds = interval_seconds
        self.cooldown_seconds = cooldown_seconds
        self._visible = visible
        self._on_price = on_price
        self._clock = clock
        self._cooldown_until = 0.0
        self._stopped = asyncio.Event()
        self.last_price: Optional[float] = None
        self.supported = True

    @property
    def cooldown_until(self) -> float:
        return self._cooldown_until

    def in_cooldown(self) -> bool:
        return self._clock() < self._cooldown_until

    async def tick(self) -> Optional[float]:
        """Run one poll decision and return the fresh price, if any."""

        if not self.supported or not self._visible() or self.in_cooldown():
            return None
        try:
            price = positive_or_none(await self._fetch())
        except RateLimitError:
            self._cooldown_until = self._clock() + self.cooldown_seconds
            logger.warning(f"Spot quote rate-limited; pausing polls for {self.cooldown_seconds:.0f}s")
            return None
        except NotImplementedError:
            self.supported = False
            logger.info("Spot quotes are not supported by this provider; polling stopped")
            self.stop()
            return None
        except Exception as exc:
            logger.warning(f"Spot poll failed: {exc!r}")
            return None

        if price is not None:
            self.last_price = price
            if self._on_price is not None:
                self._on_price(price)
        return price

    async def run(self) -> None:
        self._stopped.clear()
        while self.supported and not self._stopped.is_set():
            await self.tick()
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                continue

    def stop(self) -> None:
        self._stopped.set()


__all__ = ["DEFAULT_COOLDOWN_SECONDS", "DEFAULT_POLL_INTERVAL_SECONDS", "SpotPoller"]
