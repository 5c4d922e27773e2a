"""Unbounded many-producer, single-consumer channel for result messages."""

import queue
import threading

from jira_dash.tasks.messages import ApiMessage


class ResultChannel:
    """Carries ApiMessages from background operations to the interface loop.

    Any number of producers may call send(); exactly one consumer calls
    try_receive() or drain(). Neither side ever blocks. Once closed, further
    sends are dropped and report False so producers can finish quietly after
    the interface has gone away.
    """

    def __init__(self) -> None:
        self._queue: queue.SimpleQueue[ApiMessage] = queue.SimpleQueue()
        self._closed = threading.Event()

    def send(self, message: ApiMessage) -> bool:
        """Post a message.

        Returns:
            True if the message was queued, False if the channel is closed
        """
        if self._closed.is_set():
            return False
        self._queue.put_nowait(message)
        return True

    def try_receive(self) -> ApiMessage | None:
        """Take the next message, or None when nothing is waiting."""
        try:
            return self._queue.get_nowait()
        except queue.Empty:
            return None

    def drain(self) -> list[ApiMessage]:
        """Take every message currently waiting, in arrival order."""
        messages: list[ApiMessage] = []
        while (message := self.try_receive()) is not None:
            messages.append(message)
        return messages

    def close(self) -> None:
        self._closed.set()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()
