"""
Display-refresh clock.

Playback waits are poll loops over refresh ticks so that clearing an
"active" flag ends them on the next tick.
"""

import asyncio
from typing import Callable, Optional

from ..shared.config import PLAYBACK_CONFIG


class RefreshTicker:
    """Yields once per display refresh and reports the tick time in milliseconds."""

    def __init__(self, refresh_hz: Optional[float] = None):
        self.refresh_hz = refresh_hz or PLAYBACK_CONFIG['refresh_hz']
        self.interval_s = 1.0 / self.refresh_hz

    def now(self) -> float:
        return asyncio.get_running_loop().time() * 1000.0

    async def next_tick(self) -> float:
        await asyncio.sleep(self.interval_s)
        return self.now()


async def wait_ms(ticker, duration_ms: float, keep_waiting: Callable[[], bool]) -> bool:
    """
    Wait ``duration_ms`` on refresh ticks.

    Args:
        ticker: Tick source (``now()`` / ``next_tick()``)
        duration_ms: Time to wait
        keep_waiting: Polled every tick; returning False abandons the wait

    Returns:
        True if the full duration elapsed, False if abandoned
    """
    deadline = ticker.now() + duration_ms
    while keep_waiting():
        if await ticker.next_tick() >= deadline:
            return keep_waiting()
    return False
