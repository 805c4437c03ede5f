"""Tests for the bounded fan-in channel."""

from __future__ import annotations

import asyncio

import pytest

from orderbook_merger.services.channel import UpdateChannel
from orderbook_merger.services.orderbook_feeds import SendError

from .helpers import make_update

pytestmark = pytest.mark.unit


@pytest.mark.asyncio
async def test_preserves_send_order():
    channel = UpdateChannel(capacity=4)
    for name in ("a", "b", "c"):
        await channel.send(make_update(name))

    assert channel.qsize() == 3
    received = [(await channel.recv()).exchange for _ in range(3)]
    assert received == ["a", "b", "c"]
    assert channel.qsize() == 0


@pytest.mark.asyncio
async def test_full_channel_blocks_senders():
    channel = UpdateChannel(capacity=1)
    await channel.send(make_update("a"))

    blocked = asyncio.create_task(channel.send(make_update("b")))
    await asyncio.sleep(0.02)
    assert not blocked.done()

    assert (await channel.recv()).exchange == "a"
    await asyncio.wait_for(blocked, timeout=1.0)
    assert (await channel.recv()).exchange == "b"


@pytest.mark.asyncio
async def test_send_timeout_raises_send_error():
    channel = UpdateChannel(capacity=1, send_timeout=0.02)
    await channel.send(make_update("a"))
    with pytest.raises(SendError):
        await channel.send(make_update("b"))
    assert channel.qsize() == 1


@pytest.mark.asyncio
async def test_close_drains_then_ends():
    channel = UpdateChannel(capacity=4)
    await channel.send(make_update("a"))
    channel.close()

    with pytest.raises(SendError):
        await channel.send(make_update("b"))
    assert (await channel.recv()).exchange == "a"
    assert await channel.recv() is None
    assert await channel.recv() is None
    assert channel.closed


@pytest.mark.asyncio
async def test_close_wakes_blocked_senders():
    channel = UpdateChannel(capacity=1)
    await channel.send(make_update("a"))
    senders = [asyncio.create_task(channel.send(make_update(name))) for name in ("b", "c")]
    await asyncio.sleep(0.01)

    channel.close()
    results = await asyncio.wait_for(asyncio.gather(*senders, return_exceptions=True), timeout=1.0)

    assert all(isinstance(result, SendError) for result in results)


@pytest.mark.asyncio
async def test_close_wakes_waiting_receiver():
    channel = UpdateChannel()
    receiver = asyncio.create_task(channel.recv())
    await asyncio.sleep(0.01)
    channel.close()
    assert await asyncio.wait_for(receiver, timeout=1.0) is None


def test_invalid_capacity():
    with pytest.raises(ValueError):
        UpdateChannel(capacity=0)
