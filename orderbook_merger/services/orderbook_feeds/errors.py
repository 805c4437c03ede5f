"""
Failure taxonomy of the exchange feeds
Every subclass is handled the same way: tear down, back off, reconnect
"""


class FeedError(Exception):
    """Base class for feed failures"""


class FeedConnectionError(FeedError):
    """Transport could not be established or was lost"""


class FeedTimeoutError(FeedError):
    """No message arrived within the idle window"""


class DecodeError(FeedError):
    """Payload is not the expected shape or carries non-numeric price/amount text"""


class SendError(FeedError):
    """Destination channel closed, or full for longer than the send timeout"""
