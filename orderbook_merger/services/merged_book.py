"""
Merged order book
Keeps the latest snapshot per exchange and ranks the global top N on every update
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, List, Optional

from ..models.orderbook import (
    ExchangeLevel,
    MergedResult,
    OrderBookUpdate,
    PriceLevel,
    exact_difference,
)
from ..utils.logger import get_logger

logger = get_logger()


class MergedOrderBook:
    """
    Cross-exchange top-N book.

    Each update replaces that exchange's bids and asks wholesale; the other
    exchanges keep their last snapshot. Owned by a single consumer, so the
    per-exchange maps are never locked.
    """

    def __init__(self, top_n: int = 10):
        if top_n < 1:
            raise ValueError("top_n must be >= 1")
        self.top_n = top_n
        self._latest_bids: Dict[str, List[PriceLevel]] = {}
        self._latest_asks: Dict[str, List[PriceLevel]] = {}

    @property
    def sources(self) -> List[str]:
        """Exchanges that have delivered at least one update"""
        return sorted(set(self._latest_bids) | set(self._latest_asks))

    def update(self, update: OrderBookUpdate) -> MergedResult:
        top_asks = self._update_asks(update.exchange, update.asks)
        top_bids = self._update_bids(update.exchange, update.bids)

        spread: Optional[Decimal] = None
        if top_asks and top_bids:
            spread = exact_difference(top_asks[0].price, top_bids[0].price)

        if spread is not None and spread < 0:
            logger.debug("merged_book_crossed", best_ask=str(top_asks[0].price), best_bid=str(top_bids[0].price))

        return MergedResult(asks=top_asks, bids=top_bids, spread=spread)

    # Internal methods

    def _update_bids(self, exchange: str, bids: List[PriceLevel]) -> List[ExchangeLevel]:
        self._latest_bids[exchange] = list(bids)
        candidates = self._collect(self._latest_bids)
        # highest price first, ties broken by exchange name
        candidates.sort(key=lambda level: level.exchange)
        candidates.sort(key=lambda level: level.price, reverse=True)
        return candidates[:self.top_n]

    def _update_asks(self, exchange: str, asks: List[PriceLevel]) -> List[ExchangeLevel]:
        self._latest_asks[exchange] = list(asks)
        candidates = self._collect(self._latest_asks)
        candidates.sort(key=lambda level: (level.price, level.exchange))
        return candidates[:self.top_n]

    def _collect(self, latest: Dict[str, List[PriceLevel]]) -> List[ExchangeLevel]:
        # each exchange already sorts its own side, so its first N are its best N
        collected: List[ExchangeLevel] = []
        for exchange, levels in latest.items():
            collected.extend(
                ExchangeLevel(exchange=exchange, price=level.price, amount=level.amount)
                for level in levels[:self.top_n]
            )
        return collected
