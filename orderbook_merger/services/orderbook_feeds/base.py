"""
Order book feed base class
Defines the connection lifecycle shared by every exchange feed
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Optional, Union

import websockets
from websockets.exceptions import ConnectionClosedOK, WebSocketException

from ...models.orderbook import OrderBookUpdate
from ...utils.logger import get_logger
from .errors import FeedConnectionError, FeedError, FeedTimeoutError

if TYPE_CHECKING:
    from ..channel import UpdateChannel

logger = get_logger()

# Seconds without a message before the connection is considered dead
READ_TIMEOUT_SECONDS = 15.0

# Fixed pause between a failure and the next connection attempt
RECONNECT_DELAY_SECONDS = 2.0


class FeedState(Enum):
    """Connection lifecycle"""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    HANDSHAKING = "handshaking"
    STREAMING = "streaming"


class BaseOrderBookFeed(ABC):
    """
    Websocket order book feed for one exchange.

    ``begin`` spawns a supervisor task that never gives up: every failure
    (transport, idle timeout, bad payload, closed channel) tears the
    connection down, waits ``reconnect_delay`` and connects again.
    Cancelling the task is the only way to stop it.

    Subclasses provide ``url``, ``decode`` and optionally ``_handshake``.
    """

    def __init__(
        self,
        exchange_name: str,
        currency_pair: str,
        *,
        read_timeout: float = READ_TIMEOUT_SECONDS,
        reconnect_delay: float = RECONNECT_DELAY_SECONDS,
        connect: Callable[[str], Any] = websockets.connect,
    ):
        self.exchange_name = exchange_name
        self.currency_pair = currency_pair
        self.read_timeout = read_timeout
        self.reconnect_delay = reconnect_delay
        self._connect = connect

        # Connection state
        self._state = FeedState.DISCONNECTED
        self._reconnect_count = 0
        self._updates_sent = 0

    @abstractmethod
    def url(self) -> str:
        """Endpoint of the exchange stream"""

    @abstractmethod
    def decode(self, message: Union[str, bytes]) -> Optional[OrderBookUpdate]:
        """
        Decode one raw message.

        Returns None for recognized non-data messages, raises DecodeError
        (or FeedConnectionError for server-requested reconnects) otherwise.
        """

    async def _handshake(self, ws) -> None:
        """Messages to send right after connecting (subclasses may override)"""

    @property
    def state(self) -> FeedState:
        return self._state

    @property
    def reconnect_count(self) -> int:
        return self._reconnect_count

    @property
    def updates_sent(self) -> int:
        return self._updates_sent

    def begin(self, channel: UpdateChannel) -> asyncio.Task:
        """Start the supervisor task feeding ``channel``"""
        return asyncio.create_task(self._run(channel), name=f"{self.exchange_name}_orderbook_feed")

    async def _run(self, channel: UpdateChannel) -> None:
        while True:
            try:
                await self.connect(channel)
                logger.error(f"{self.exchange_name}_ws_stream_ended", action="reconnecting")
            except FeedError as e:
                logger.error(f"{self.exchange_name}_ws_error", error=str(e), kind=type(e).__name__)
            except Exception as e:
                logger.exception(f"{self.exchange_name}_ws_unexpected_error", error=str(e))

            self._state = FeedState.DISCONNECTED
            self._reconnect_count += 1
            logger.info(
                f"{self.exchange_name}_ws_reconnecting",
                attempt=self._reconnect_count,
                wait_time=self.reconnect_delay,
            )
            await asyncio.sleep(self.reconnect_delay)

    async def connect(self, channel: UpdateChannel) -> None:
        """One connection attempt; returns when the server closes cleanly"""
        url = self.url()
        self._state = FeedState.CONNECTING
        logger.info(f"{self.exchange_name}_ws_connecting", url=url)

        try:
            async with self._connect(url) as ws:
                self._state = FeedState.HANDSHAKING
                await self._handshake(ws)

                self._state = FeedState.STREAMING
                logger.info(f"{self.exchange_name}_ws_connected", url=url)

                while True:
                    try:
                        message = await asyncio.wait_for(ws.recv(), timeout=self.read_timeout)
                    except asyncio.TimeoutError:
                        raise FeedTimeoutError(f"no message for {self.read_timeout}s") from None

                    update = self.decode(message)
                    if update is None:
                        continue

                    await channel.send(update)
                    self._updates_sent += 1
        except ConnectionClosedOK:
            return
        except (OSError, asyncio.TimeoutError, WebSocketException) as e:
            # asyncio.TimeoutError covers the opening handshake timing out on Python < 3.11
            raise FeedConnectionError(f"{type(e).__name__}: {e}") from e
        finally:
            self._state = FeedState.DISCONNECTED

    # Internal helpers (subclasses may override)

    def _normalize_symbol(self, symbol: str) -> str:
        """Lower-case and strip separators: BTC/USDT, btc-usdt -> btcusdt"""
        return "".join(ch for ch in symbol.strip().lower() if ch.isalnum())

    def __str__(self) -> str:
        return f"{self.exchange_name}OrderBookFeed({self._state.value}, {self.currency_pair})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(exchange={self.exchange_name}, "
            f"pair={self.currency_pair}, state={self._state.value})"
        )
