"""
Order book feeds
One websocket feed per exchange, each producing canonical OrderBookUpdate objects
"""

from .base import BaseOrderBookFeed, FeedState, READ_TIMEOUT_SECONDS, RECONNECT_DELAY_SECONDS
from .binance import BinanceOrderBookFeed
from .bitstamp import BitstampOrderBookFeed
from .errors import (
    FeedError,
    FeedConnectionError,
    FeedTimeoutError,
    DecodeError,
    SendError,
)

# Feed classes by exchange name
FEEDS = {
    "binance": BinanceOrderBookFeed,
    "bitstamp": BitstampOrderBookFeed,
}

__all__ = [
    'BaseOrderBookFeed',
    'FeedState',
    'READ_TIMEOUT_SECONDS',
    'RECONNECT_DELAY_SECONDS',
    'BinanceOrderBookFeed',
    'BitstampOrderBookFeed',
    'FeedError',
    'FeedConnectionError',
    'FeedTimeoutError',
    'DecodeError',
    'SendError',
    'FEEDS',
]
