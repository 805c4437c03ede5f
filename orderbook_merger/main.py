"""
Entry point
Starts one feed per exchange, merges their updates and prints each merged book as JSON
"""

from __future__ import annotations

import argparse
import asyncio
import json
import signal
import sys
from typing import Callable, List, Optional, Sequence, TextIO

from .config.env import config
from .models.orderbook import MergedResult
from .services.channel import UpdateChannel
from .services.merged_book import MergedOrderBook
from .services.orderbook_feeds import FEEDS, BaseOrderBookFeed
from .utils.logger import configure_logging, get_logger

logger = get_logger()


def render_result(result: MergedResult) -> str:
    return json.dumps(result.to_dict(), indent=2)


def print_result(result: MergedResult, stream: Optional[TextIO] = None) -> None:
    stream = stream or sys.stdout
    stream.write(render_result(result) + "\n")
    stream.flush()


def build_feeds(currency_pair: str, exchanges: Sequence[str]) -> List[BaseOrderBookFeed]:
    feeds = []
    for name in exchanges:
        feed_cls = FEEDS.get(name)
        if feed_cls is None:
            raise ValueError(f"unknown exchange: {name}")
        feeds.append(feed_cls(
            currency_pair,
            read_timeout=config.READ_TIMEOUT_SECONDS,
            reconnect_delay=config.RECONNECT_DELAY_SECONDS,
        ))
    return feeds


async def consume(
    channel: UpdateChannel,
    order_book: MergedOrderBook,
    sink: Callable[[MergedResult], None] = print_result,
) -> int:
    """Drive the merged book until the channel closes; returns the number of updates merged"""
    merged = 0
    while True:
        update = await channel.recv()
        if update is None:
            break

        logger.info("orderbook_update_received", exchange=update.exchange)

        result = order_book.update(update)
        result.normalize(config.PRICE_DECIMALS, config.AMOUNT_DECIMALS, config.SPREAD_DECIMALS)
        sink(result)
        merged += 1
    return merged


async def run(currency_pair: str, exchanges: Sequence[str], top_n: int) -> None:
    channel = UpdateChannel(capacity=config.CHANNEL_CAPACITY)
    order_book = MergedOrderBook(top_n)
    feeds = build_feeds(currency_pair, exchanges)

    tasks = [feed.begin(channel) for feed in feeds]
    logger.info("feeds_started", pair=currency_pair, exchanges=list(exchanges), top_n=top_n)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, channel.close)
        except (NotImplementedError, RuntimeError):
            # Not supported on this platform; KeyboardInterrupt still ends the loop
            pass

    try:
        await consume(channel, order_book)
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("feeds_stopped", sources=order_book.sources)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Merge live order books from several exchanges")
    parser.add_argument("currency_pair", help="Instrument, e.g. ethbtc or BTC/USDT")
    parser.add_argument(
        "--top-n",
        type=int,
        default=None,
        help="Levels per side in the merged book (default: TOP_N or 10)",
    )
    parser.add_argument(
        "--exchanges",
        default=",".join(FEEDS),
        help="Comma separated exchanges to merge (default: all)",
    )
    args = parser.parse_args(argv)

    args.exchanges = [name.strip().lower() for name in args.exchanges.split(",") if name.strip()]
    unknown = [name for name in args.exchanges if name not in FEEDS]
    if unknown or not args.exchanges:
        parser.error(f"exchanges must be a subset of: {', '.join(FEEDS)}")
    if args.top_n is None:
        args.top_n = config.TOP_N
    elif args.top_n < 1:
        parser.error("--top-n must be >= 1")
    return args


def main(argv: Optional[Sequence[str]] = None) -> int:
    # Before parse_args: config warnings must reach stderr, not stdout
    configure_logging(config.LOG_LEVEL)
    args = parse_args(argv)
    logger.info("service_start", **config.as_dict())

    try:
        asyncio.run(run(args.currency_pair, args.exchanges, args.top_n))
    except KeyboardInterrupt:
        pass

    logger.info("service_stop", success=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
