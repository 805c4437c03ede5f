"""
Binance websocket order book feed
Uses the partial book depth stream (<symbol>@depth20@100ms): a full top-20 snapshot every 100ms
"""

from __future__ import annotations

import json
from typing import List, Optional, Tuple, Union

from pydantic import BaseModel, Field, ValidationError

from ...models.orderbook import OrderBookUpdate, ParseError
from ...utils.logger import get_logger
from .base import BaseOrderBookFeed
from .errors import DecodeError

logger = get_logger()


class BinanceDepthMessage(BaseModel):
    """Partial book depth payload"""
    last_update_id: int = Field(alias="lastUpdateId", description="Book update id")
    bids: List[Tuple[str, str]] = Field(description="[[price, qty], ...], best first")
    asks: List[Tuple[str, str]] = Field(description="[[price, qty], ...], best first")


class BinanceOrderBookFeed(BaseOrderBookFeed):
    """Binance top-20 depth snapshots"""

    ws_base = "wss://stream.binance.com:9443/ws"

    def __init__(self, currency_pair: str, **kwargs):
        super().__init__("binance", currency_pair, **kwargs)
        self.symbol = self._normalize_symbol(currency_pair)

    def url(self) -> str:
        return f"{self.ws_base}/{self.symbol}@depth20@100ms"

    def decode(self, message: Union[str, bytes]) -> Optional[OrderBookUpdate]:
        try:
            data = json.loads(message)
        except json.JSONDecodeError as e:
            raise DecodeError(f"invalid json: {e}") from e

        # Skip subscription acknowledgements
        if isinstance(data, dict) and "result" in data and "id" in data:
            logger.debug("binance_ws_ack_ignored", id=data.get("id"))
            return None

        try:
            msg = BinanceDepthMessage.model_validate(data)
        except ValidationError as e:
            raise DecodeError(f"unexpected binance message: {e.error_count()} validation errors") from e

        logger.info("binance_orderbook_received", update_id=msg.last_update_id)

        try:
            return OrderBookUpdate.from_raw(self.exchange_name, msg.bids, msg.asks)
        except ParseError as e:
            raise DecodeError(str(e)) from e
