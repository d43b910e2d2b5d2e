"""Bucket planning.

Merges heterogeneous history requests onto one UTC timeline spaced by the
finest requested resolution and keeps, per bucket, the requests whose
exchange is open at that instant.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from loguru import logger

from synthfeed.exceptions import EmptyInputError
from synthfeed.timezones import convert_from_utc
from synthfeed.types import ActiveConfig, BucketPlan, DataRequest


def _is_trading(request: DataRequest, utc_time: datetime) -> bool:
    exchange = request.exchange_hours
    local_time = convert_from_utc(utc_time, exchange.time_zone)
    return exchange.is_open(local_time, request.include_extended_market_hours)


def plan(requests: Iterable[DataRequest]) -> BucketPlan:
    """Build the bucket plan for a set of requests.

    Candidate instants start at the earliest request start and advance by the
    smallest bar size while the bar they open closes no later than the latest
    request end, so a trailing partial bar is never planned. Each bucket is
    keyed by its close time (candidate + bar size) and holds one config per
    request open at the candidate instant, in request order. Candidates where
    no request is open are dropped.

    :param requests: History requests, in the order configs should appear.
    :returns: Ordered, read-only bucket plan.
    :raises EmptyInputError: If ``requests`` is empty.
    """
    requests = list(requests)
    if not requests:
        raise EmptyInputError("Cannot plan history without at least one request")

    bar_size = min(request.resolution.to_timedelta() for request in requests)
    start_utc = min(request.start_time_utc for request in requests)
    end_utc = max(request.end_time_utc for request in requests)

    buckets: dict[datetime, tuple[ActiveConfig, ...]] = {}
    candidates = 0
    utc_time = start_utc
    while utc_time + bar_size <= end_utc:
        candidates += 1
        active = tuple(
            ActiveConfig.from_request(request)
            for request in requests
            if _is_trading(request, utc_time)
        )
        if active:
            buckets[utc_time + bar_size] = active
        utc_time += bar_size

    logger.debug(
        "Planned {} of {} candidate buckets for {} requests (bar size {}, {} -> {})",
        len(buckets),
        candidates,
        len(requests),
        bar_size,
        start_utc.isoformat(),
        end_utc.isoformat(),
    )
    return BucketPlan(buckets, bar_size=bar_size, start_utc=start_utc, end_utc=end_utc)


__all__ = ["plan"]
