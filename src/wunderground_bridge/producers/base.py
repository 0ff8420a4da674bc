"""Base producer class with the periodic polling loop."""

import asyncio
import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


def next_tick_after(previous_tick: float, now: float, interval: float) -> float:
    """Next tick on the grid `previous_tick + k * interval` that lies after `now`.

    Ticks missed while a cycle overran are dropped, so a slow cycle is never
    followed by back-to-back runs.
    """
    tick = previous_tick + interval
    if tick <= now:
        missed = int((now - tick) // interval) + 1
        tick += missed * interval
    return tick


class BaseProducer(ABC):
    """Base class for producers polled on a fixed interval."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Name used as log prefix."""

    @property
    @abstractmethod
    def interval_seconds(self) -> float:
        """Time between two tick boundaries."""

    @abstractmethod
    async def run_once(self) -> bool:
        """Run a single cycle. Returns True if anything was published."""

    async def close(self) -> None:
        """Clean up resources."""

    async def run_forever(self, shutdown_event: asyncio.Event | None = None) -> None:
        """Run cycles on the tick grid until shutdown is signalled.

        A cycle that raises is logged and the loop carries on with the next
        tick.

        Args:
            shutdown_event: Optional event that ends the loop when set.
        """
        loop = asyncio.get_running_loop()
        tick = loop.time()

        while shutdown_event is None or not shutdown_event.is_set():
            try:
                await self.run_once()
            except Exception as e:
                logger.error("%s: Error in fetch cycle: %s", self.name, e, exc_info=True)

            logger.info("%s: Sleeping", self.name)
            tick = next_tick_after(tick, loop.time(), self.interval_seconds)
            delay = max(0.0, tick - loop.time())

            if shutdown_event is None:
                await asyncio.sleep(delay)
                continue

            try:
                await asyncio.wait_for(shutdown_event.wait(), timeout=delay)
                # If we get here, shutdown was signaled
                break
            except asyncio.TimeoutError:
                continue
