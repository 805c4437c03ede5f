"""Merged multi-exchange order book."""

__version__ = "0.1.0"
