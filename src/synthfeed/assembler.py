"""Synthetic bar assembly.

Walks a :class:`~synthfeed.types.BucketPlan` and produces one slice per bucket
with prices following a sine curve anchored to the end of the plan.
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from datetime import datetime

from loguru import logger

from synthfeed.securities import SecurityRegistry
from synthfeed.slices import CashBook, SliceFactory, create_slice
from synthfeed.timezones import convert_from_utc
from synthfeed.types import (ActiveConfig, BucketPlan, DataFeedPacket,
                             SecurityChanges, Slice, SyntheticBar)

BASE_PRICE = 100.0
AMPLITUDE = 10.0
# high = close * BAND, low = close / BAND
BAND = 1.005
VOLUME = 1000.0


def sine_price(index: int, count: int) -> float:
    """Close price of bucket ``index`` out of ``count``.

    The phase advances one degree per bucket and the last bucket always lands
    at 359 degrees, so the curve is anchored to the end of the span.

    :param index: Zero-based bucket position.
    :param count: Total number of buckets.
    :returns: Synthetic close price.
    """
    return BASE_PRICE + AMPLITUDE * math.sin(math.pi * (360 - count + index) / 180.0)


def build_bar(config: ActiveConfig, utc_time: datetime, close: float) -> SyntheticBar:
    """Build the bar closing at ``utc_time`` for ``config``.

    The bar is stamped with its open time in the config's data time zone.

    :param config: Active configuration the bar belongs to.
    :param utc_time: Bucket close time in UTC.
    :param close: Close price.
    :returns: Generated bar.
    """
    period = config.period
    return SyntheticBar(
        symbol=config.symbol,
        time=convert_from_utc(utc_time - period, config.data_time_zone),
        period=period,
        open=close,
        high=close * BAND,
        low=close / BAND,
        close=close,
        volume=VOLUME,
    )


def assemble(
    bucket_plan: BucketPlan,
    slice_time_zone: str,
    securities: SecurityRegistry,
    slice_factory: SliceFactory = create_slice,
) -> Iterator[Slice]:
    """Lazily produce one slice per bucket of ``bucket_plan``.

    Configs whose symbol is not in ``securities`` are skipped; the bucket
    still yields a slice, possibly without packets. The registry is never
    modified.

    :param bucket_plan: Plan produced by :func:`synthfeed.planner.plan`.
    :param slice_time_zone: Zone slices are stamped in.
    :param securities: Registry used to resolve symbols.
    :param slice_factory: Builds the slice from the bucket's packets.
    :returns: Iterator of slices in bucket order.
    """
    count = len(bucket_plan)
    for index, (utc_time, configs) in enumerate(bucket_plan.items()):
        close = sine_price(index, count)

        packets: list[DataFeedPacket] = []
        for config in configs:
            security = securities.try_get(config.symbol)
            if security is None:
                logger.debug("Skipping {} at {}: not registered", config.symbol, utc_time.isoformat())
                continue
            bar = build_bar(config, utc_time, close)
            packets.append(DataFeedPacket(symbol=security.symbol, config=config, data=[bar]))

        yield slice_factory(
            utc_time,
            slice_time_zone,
            CashBook(),
            packets,
            SecurityChanges.NONE,
            {},
        )


__all__ = ["BASE_PRICE", "AMPLITUDE", "BAND", "VOLUME", "sine_price", "build_bar", "assemble"]
