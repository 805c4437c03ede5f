"""Test helpers: scripted websocket sessions and canned exchange payloads."""

from __future__ import annotations

import asyncio
import json
from decimal import Decimal
from typing import Any, List, Sequence

from orderbook_merger.models.orderbook import OrderBookUpdate, PriceLevel


# ─── Canned payloads ──────────────────────────────────────────────────────────

def binance_depth(bids: Sequence[Sequence[str]], asks: Sequence[Sequence[str]], update_id: int = 1) -> str:
    return json.dumps({
        "lastUpdateId": update_id,
        "bids": [list(level) for level in bids],
        "asks": [list(level) for level in asks],
    })


def bitstamp_data(bids: Sequence[Sequence[str]], asks: Sequence[Sequence[str]], pair: str = "btcusdt") -> str:
    return json.dumps({
        "event": "data",
        "channel": f"order_book_{pair}",
        "data": {
            "timestamp": "1700000000",
            "microtimestamp": "1700000000000000",
            "bids": [list(level) for level in bids],
            "asks": [list(level) for level in asks],
        },
    })


def bitstamp_subscribed(pair: str = "btcusdt") -> str:
    return json.dumps({
        "event": "bts:subscription_succeeded",
        "channel": f"order_book_{pair}",
        "data": {},
    })


def make_update(exchange: str, bids=(), asks=()) -> OrderBookUpdate:
    """Build an update from (price, amount) string pairs"""
    return OrderBookUpdate(
        exchange=exchange,
        bids=[PriceLevel(Decimal(p), Decimal(a)) for p, a in bids],
        asks=[PriceLevel(Decimal(p), Decimal(a)) for p, a in asks],
    )


# ─── Fake websocket ───────────────────────────────────────────────────────────

class FakeWebSocket:
    """Replays scripted messages, then goes silent so the idle timeout fires."""

    def __init__(self, messages: Sequence[Any] = ()):
        self._messages: List[Any] = list(messages)
        self.sent: List[str] = []
        self.closed = False

    async def __aenter__(self) -> "FakeWebSocket":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.closed = True

    async def send(self, message: str) -> None:
        self.sent.append(message)

    async def recv(self) -> Any:
        if self._messages:
            item = self._messages.pop(0)
            if isinstance(item, BaseException):
                raise item
            return item
        await asyncio.Event().wait()


class _FailingSession:
    def __init__(self, error: BaseException):
        self.error = error

    async def __aenter__(self):
        raise self.error

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None


class FakeConnector:
    """
    Stand-in for ``websockets.connect``.

    Each call consumes the next scripted session: a list of messages, or an
    exception raised while connecting. Once the script runs out every
    connection stays silent.
    """

    def __init__(self, *sessions: Any):
        self._sessions = list(sessions)
        self.urls: List[str] = []
        self.sockets: List[FakeWebSocket] = []

    def __call__(self, url: str):
        self.urls.append(url)
        session = self._sessions.pop(0) if self._sessions else []
        if isinstance(session, BaseException):
            return _FailingSession(session)
        ws = FakeWebSocket(session)
        self.sockets.append(ws)
        return ws


async def wait_until(predicate, timeout: float = 2.0, interval: float = 0.005) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(interval)
