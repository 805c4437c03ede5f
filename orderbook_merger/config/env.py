"""
Environment configuration module
Loads the .env file and exposes the tuning knobs of the merger
"""

import math
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from ..utils.logger import get_logger

# Load the .env file at the repository root
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(env_path)

logger = get_logger()


class EnvConfig:
    """Environment-backed configuration"""

    def _get_int(self, name: str, default: int, minimum: Optional[int] = None) -> int:
        raw = os.getenv(name)
        if raw is None or raw.strip() == "":
            return default
        try:
            value = int(raw)
        except ValueError:
            logger.warning("config_invalid_int", key=name, value=raw, default=default)
            return default
        if minimum is not None and value < minimum:
            logger.warning("config_value_below_minimum", key=name, value=value, minimum=minimum, default=default)
            return default
        return value

    def _get_float(self, name: str, default: float, minimum: float = 0.0, exclusive: bool = False) -> float:
        raw = os.getenv(name)
        if raw is None or raw.strip() == "":
            return default
        try:
            value = float(raw)
        except ValueError:
            logger.warning("config_invalid_float", key=name, value=raw, default=default)
            return default
        if not math.isfinite(value):
            logger.warning("config_invalid_float", key=name, value=raw, default=default)
            return default
        if value < minimum or (exclusive and value == minimum):
            logger.warning(
                "config_value_below_minimum",
                key=name,
                value=value,
                minimum=minimum,
                exclusive=exclusive,
                default=default,
            )
            return default
        return value

    @property
    def LOG_LEVEL(self) -> str:
        return os.getenv("LOG_LEVEL", "INFO")

    @property
    def TOP_N(self) -> int:
        """Depth of the merged book, per side"""
        return self._get_int("TOP_N", 10, minimum=1)

    @property
    def CHANNEL_CAPACITY(self) -> int:
        """Bound of the fan-in queue; the only backpressure knob"""
        return self._get_int("CHANNEL_CAPACITY", 64, minimum=1)

    @property
    def READ_TIMEOUT_SECONDS(self) -> float:
        """Idle window per connection; must be positive or no recv ever completes"""
        return self._get_float("READ_TIMEOUT_SECONDS", 15.0, minimum=0.0, exclusive=True)

    @property
    def RECONNECT_DELAY_SECONDS(self) -> float:
        return self._get_float("RECONNECT_DELAY_SECONDS", 2.0)

    @property
    def PRICE_DECIMALS(self) -> int:
        return self._get_int("PRICE_DECIMALS", 2, minimum=0)

    @property
    def AMOUNT_DECIMALS(self) -> int:
        return self._get_int("AMOUNT_DECIMALS", 4, minimum=0)

    @property
    def SPREAD_DECIMALS(self) -> int:
        return self._get_int("SPREAD_DECIMALS", 3, minimum=0)

    def as_dict(self) -> dict:
        """Snapshot of the effective settings, logged at startup"""
        return {
            "log_level": self.LOG_LEVEL,
            "top_n": self.TOP_N,
            "channel_capacity": self.CHANNEL_CAPACITY,
            "read_timeout_seconds": self.READ_TIMEOUT_SECONDS,
            "reconnect_delay_seconds": self.RECONNECT_DELAY_SECONDS,
            "price_decimals": self.PRICE_DECIMALS,
            "amount_decimals": self.AMOUNT_DECIMALS,
            "spread_decimals": self.SPREAD_DECIMALS,
        }


# Shared configuration instance
config = EnvConfig()
