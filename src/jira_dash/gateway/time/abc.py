"""Abstract time operations.

Retry backoff sleeps through this interface so tests can observe the
requested delays without waiting for them.
"""

from abc import ABC, abstractmethod


class Time(ABC):
    """Abstract interface for clock and sleep operations."""

    @abstractmethod
    async def sleep(self, seconds: float) -> None:
        """Suspend the calling task for the given number of seconds.

        Args:
            seconds: Delay in seconds
        """
        ...

    @abstractmethod
    def monotonic(self) -> float:
        """Return a monotonic clock reading in seconds."""
        ...
