"""
Fan-in channel
Bounded queue carrying canonical updates from every feed to the single consumer
"""

from __future__ import annotations

import asyncio
from typing import Optional

from ..models.orderbook import OrderBookUpdate
from ..utils.logger import get_logger
from .orderbook_feeds.errors import SendError

logger = get_logger()

_CLOSED = object()


class UpdateChannel:
    """
    Multi-producer / single-consumer queue of OrderBookUpdate.

    ``send`` suspends while ``capacity`` updates are pending; this is where a
    slow consumer pushes back on every feed. Once closed, ``send`` raises
    SendError and ``recv`` returns None after the pending updates are drained.
    """

    def __init__(self, capacity: int = 64, send_timeout: Optional[float] = None):
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._capacity = capacity
        self._send_timeout = send_timeout
        self._queue: asyncio.Queue = asyncio.Queue()
        self._slots = asyncio.Semaphore(capacity)
        self._pending = 0
        self._closed = False

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def closed(self) -> bool:
        return self._closed

    def qsize(self) -> int:
        """Updates sent but not yet received"""
        return self._pending

    async def send(self, update: OrderBookUpdate) -> None:
        if self._closed:
            raise SendError("channel closed")

        if self._send_timeout is None:
            await self._slots.acquire()
        else:
            try:
                await asyncio.wait_for(self._slots.acquire(), timeout=self._send_timeout)
            except asyncio.TimeoutError:
                raise SendError(f"channel full for {self._send_timeout}s") from None

        if self._closed:
            # pass the wake-up on to the next blocked sender
            self._slots.release()
            raise SendError("channel closed")

        self._pending += 1
        self._queue.put_nowait(update)

    async def recv(self) -> Optional[OrderBookUpdate]:
        if self._closed and self._queue.empty():
            return None
        item = await self._queue.get()
        if item is _CLOSED:
            return None
        self._pending -= 1
        self._slots.release()
        return item

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)
        self._slots.release()
        logger.info("update_channel_closed", pending=self._pending)
