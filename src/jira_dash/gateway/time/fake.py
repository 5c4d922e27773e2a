"""Fake time implementation for testing."""

import asyncio

from jira_dash.gateway.time.abc import Time


class FakeTime(Time):
    """Records sleeps and advances a virtual clock instead of waiting.

    This class has NO public setup methods. The starting clock value is
    provided via constructor.
    """

    def __init__(self, *, start: float = 0.0) -> None:
        self._now = start
        self._sleep_calls: list[float] = []

    async def sleep(self, seconds: float) -> None:
        """Record the delay, advance the clock and yield to the event loop."""
        self._sleep_calls.append(seconds)
        self._now += seconds
        await asyncio.sleep(0)

    def monotonic(self) -> float:
        return self._now

    @property
    def sleep_calls(self) -> list[float]:
        """Delays passed to sleep(), in call order.

        This property is for test assertions only.
        """
        return self._sleep_calls
