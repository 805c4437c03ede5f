"""
Order book data models
Exact decimal price levels, the canonical per-exchange update, and the merged result
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, Inexact, InvalidOperation, ROUND_HALF_EVEN, localcontext
from typing import Any, Dict, List, Optional, Sequence, Tuple


# Rounding mode for every normalization step
ROUNDING = ROUND_HALF_EVEN

# Minimum working precision; exact_difference widens it for longer operands
_EXACT_PRECISION = 64


class ParseError(ValueError):
    """Text is not a valid finite decimal"""


def parse_decimal(text: Any) -> Decimal:
    """
    Parse decimal text into an exact Decimal.

    Only strings are accepted so a binary float can never leak into a price.
    """
    if not isinstance(text, str):
        raise ParseError(f"expected decimal text, got {type(text).__name__}: {text!r}")
    try:
        value = Decimal(text.strip())
    except InvalidOperation:
        raise ParseError(f"invalid decimal: {text!r}") from None
    if not value.is_finite():
        raise ParseError(f"non-finite decimal: {text!r}")
    return value


def round_dp(value: Decimal, places: int) -> Decimal:
    """Round to at most ``places`` fractional digits; shorter values pass through unchanged."""
    if places < 0:
        raise ValueError("places must be >= 0")
    exponent = value.as_tuple().exponent
    if isinstance(exponent, int) and exponent >= -places:
        return value
    with localcontext() as ctx:
        ctx.prec = max(_EXACT_PRECISION, value.adjusted() + places + 2)
        return value.quantize(Decimal(1).scaleb(-places), rounding=ROUNDING)


def exact_difference(minuend: Decimal, subtrahend: Decimal) -> Decimal:
    """``minuend - subtrahend`` with enough precision that no digit is lost."""
    # digits spanned from the highest integer place to the lowest fractional place, plus a carry
    span = max(minuend.adjusted(), subtrahend.adjusted()) - min(
        minuend.as_tuple().exponent, subtrahend.as_tuple().exponent
    ) + 2
    with localcontext() as ctx:
        ctx.prec = max(_EXACT_PRECISION, span)
        ctx.traps[Inexact] = True
        return minuend - subtrahend


@dataclass(frozen=True)
class PriceLevel:
    """One bid or ask level"""
    price: Decimal
    amount: Decimal

    @classmethod
    def parse(cls, price: Any, amount: Any) -> "PriceLevel":
        level = cls(price=parse_decimal(price), amount=parse_decimal(amount))
        if level.price < 0 or level.amount < 0:
            raise ParseError(f"negative price level: ({price!r}, {amount!r})")
        return level


@dataclass
class OrderBookUpdate:
    """
    Canonical snapshot from one exchange.

    Bids arrive sorted best (highest) first and asks best (lowest) first,
    exactly as the exchange delivered them.
    """
    exchange: str
    bids: List[PriceLevel] = field(default_factory=list)
    asks: List[PriceLevel] = field(default_factory=list)

    @classmethod
    def from_raw(
        cls,
        exchange: str,
        bids: Sequence[Sequence[str]],
        asks: Sequence[Sequence[str]],
    ) -> "OrderBookUpdate":
        """Build from ``[[price, amount], ...]`` text pairs; raises ParseError on bad numbers."""
        return cls(
            exchange=exchange,
            bids=[PriceLevel.parse(*_pair(entry)) for entry in bids],
            asks=[PriceLevel.parse(*_pair(entry)) for entry in asks],
        )


def _pair(entry: Sequence[str]) -> Tuple[str, str]:
    if len(entry) != 2:
        raise ParseError(f"expected [price, amount], got {list(entry)!r}")
    return entry[0], entry[1]


@dataclass
class ExchangeLevel:
    """A price level tagged with the exchange it came from"""
    exchange: str
    price: Decimal
    amount: Decimal

    def to_dict(self) -> Dict[str, str]:
        return {
            "exchange": self.exchange,
            "price": str(self.price),
            "amount": str(self.amount),
        }


@dataclass
class MergedResult:
    """Top-N merged book across exchanges"""
    asks: List[ExchangeLevel]
    bids: List[ExchangeLevel]
    spread: Optional[Decimal] = None

    @property
    def best_bid(self) -> Optional[ExchangeLevel]:
        return self.bids[0] if self.bids else None

    @property
    def best_ask(self) -> Optional[ExchangeLevel]:
        return self.asks[0] if self.asks else None

    @property
    def is_crossed(self) -> bool:
        """Best ask at or below best bid; reported as is, never corrected"""
        return self.spread is not None and self.spread <= 0

    def normalize(self, price_decimal_places: int, amount_decimal_places: int, spread_decimal_places: int) -> None:
        """Round every numeric field in place."""
        for level in self.asks:
            level.price = round_dp(level.price, price_decimal_places)
            level.amount = round_dp(level.amount, amount_decimal_places)

        for level in self.bids:
            level.price = round_dp(level.price, price_decimal_places)
            level.amount = round_dp(level.amount, amount_decimal_places)

        if self.spread is not None:
            self.spread = round_dp(self.spread, spread_decimal_places)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "asks": [level.to_dict() for level in self.asks],
            "bids": [level.to_dict() for level in self.bids],
            "spread": str(self.spread) if self.spread is not None else None,
        }
