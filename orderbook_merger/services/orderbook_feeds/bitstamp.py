"""
Bitstamp websocket order book feed
Subscribes to the order_book_<pair> channel, which pushes a top-100 snapshot on every change
"""

from __future__ import annotations

import json
from typing import Annotated, Any, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from ...models.orderbook import OrderBookUpdate, ParseError
from ...utils.logger import get_logger
from .base import BaseOrderBookFeed
from .errors import DecodeError, FeedConnectionError

logger = get_logger()


class BitstampOrderBookData(BaseModel):
    timestamp: str
    microtimestamp: Optional[str] = None
    bids: List[Tuple[str, str]]
    asks: List[Tuple[str, str]]


class BitstampSubscriptionSucceeded(BaseModel):
    event: Literal["bts:subscription_succeeded"]
    channel: str
    data: Any = None


class BitstampRequestReconnect(BaseModel):
    """Sent by the server ahead of maintenance"""
    event: Literal["bts:request_reconnect"]
    channel: str = ""
    data: Any = None


class BitstampData(BaseModel):
    event: Literal["data"]
    channel: str
    data: BitstampOrderBookData


class BitstampError(BaseModel):
    event: Literal["bts:error"]
    channel: str = ""
    data: Any = None


BitstampMessage = Annotated[
    Union[
        BitstampSubscriptionSucceeded,
        BitstampRequestReconnect,
        BitstampData,
        BitstampError,
    ],
    Field(discriminator="event"),
]

_message_adapter = TypeAdapter(BitstampMessage)


class BitstampOrderBookFeed(BaseOrderBookFeed):
    """Bitstamp live order book"""

    ws_url = "wss://ws.bitstamp.net"

    def __init__(self, currency_pair: str, **kwargs):
        super().__init__("bitstamp", currency_pair, **kwargs)
        self.symbol = self._normalize_symbol(currency_pair)

    @property
    def channel(self) -> str:
        return f"order_book_{self.symbol}"

    def url(self) -> str:
        return self.ws_url

    def subscribe_message(self) -> str:
        return json.dumps({
            "event": "bts:subscribe",
            "data": {"channel": self.channel},
        })

    async def _handshake(self, ws) -> None:
        await ws.send(self.subscribe_message())
        logger.debug("bitstamp_ws_subscribe_sent", channel=self.channel)

    def decode(self, message: Union[str, bytes]) -> Optional[OrderBookUpdate]:
        try:
            msg = _message_adapter.validate_json(message)
        except ValidationError as e:
            raise DecodeError(f"unexpected bitstamp message: {e.error_count()} validation errors") from e

        if isinstance(msg, BitstampSubscriptionSucceeded):
            logger.info("bitstamp_ws_subscribed", channel=msg.channel)
            return None

        if isinstance(msg, BitstampRequestReconnect):
            raise FeedConnectionError("server requested reconnect")

        if isinstance(msg, BitstampError):
            detail = msg.data.get("message", msg.data) if isinstance(msg.data, dict) else msg.data
            raise DecodeError(f"bitstamp error: {detail}")

        logger.info("bitstamp_orderbook_received", timestamp=msg.data.timestamp)

        try:
            return OrderBookUpdate.from_raw(self.exchange_name, msg.data.bids, msg.data.asks)
        except ParseError as e:
            raise DecodeError(str(e)) from e
