"""Tests for ResultChannel."""

from jira_dash.tasks.channel import ResultChannel
from jira_dash.tasks.messages import Err, Ok, PrioritiesFetched


def test_try_receive_on_empty_channel_returns_none() -> None:
    channel = ResultChannel()

    assert channel.try_receive() is None


def test_messages_arrive_in_send_order() -> None:
    channel = ResultChannel()
    first = PrioritiesFetched(outcome=Ok([]))
    second = PrioritiesFetched(outcome=Err("boom"))

    assert channel.send(first)
    assert channel.send(second)

    assert channel.try_receive() is first
    assert channel.try_receive() is second
    assert channel.try_receive() is None


def test_drain_takes_everything_waiting() -> None:
    channel = ResultChannel()
    for _ in range(3):
        channel.send(PrioritiesFetched(outcome=Ok([])))

    assert len(channel.drain()) == 3
    assert channel.drain() == []


def test_send_after_close_is_dropped() -> None:
    channel = ResultChannel()
    channel.close()

    accepted = channel.send(PrioritiesFetched(outcome=Ok([])))

    assert not accepted
    assert channel.closed
    assert channel.try_receive() is None
