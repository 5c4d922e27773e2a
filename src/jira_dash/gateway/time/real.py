"""Production time implementation backed by asyncio."""

import asyncio
import time

from jira_dash.gateway.time.abc import Time


class RealTime(Time):
    """Sleeps on the running event loop without blocking other tasks."""

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)

    def monotonic(self) -> float:
        return time.monotonic()
