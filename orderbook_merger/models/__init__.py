from .orderbook import (
    ParseError,
    parse_decimal,
    round_dp,
    exact_difference,
    PriceLevel,
    OrderBookUpdate,
    ExchangeLevel,
    MergedResult,
)

__all__ = [
    # Decimal model
    "ParseError",
    "parse_decimal",
    "round_dp",
    "exact_difference",

    # Canonical update
    "PriceLevel",
    "OrderBookUpdate",

    # Merge output
    "ExchangeLevel",
    "MergedResult",
]
