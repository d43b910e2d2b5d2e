"""Slice construction.

Turns the packets generated for one bucket into a :class:`~synthfeed.types.Slice`
stamped in the caller's display time zone.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from datetime import datetime
from typing import Any

from pydantic import Field

from synthfeed.timezones import convert_from_utc
from synthfeed.types import (DataFeedPacket, FrozenModel, SecurityChanges,
                             Slice, SyntheticBar)


class CashBook(FrozenModel):
    """Currency holdings handed to a slice.

    Synthetic history holds no cash, so books built during assembly carry
    only the account currency.

    :param account_currency: Currency the account is denominated in.
    :param cash: Amount held per currency code.
    """

    account_currency: str = "USD"
    cash: dict[str, float] = Field(default_factory=dict)


SliceFactory = Callable[
    [datetime, str, CashBook, Sequence[DataFeedPacket], SecurityChanges, Mapping[str, Any]],
    Slice,
]


def create_slice(
    utc_time: datetime,
    slice_time_zone: str,
    cash_book: CashBook,
    packets: Sequence[DataFeedPacket],
    security_changes: SecurityChanges,
    universe_data: Mapping[str, Any],
) -> Slice:
    """Build the slice for one bucket.

    :param utc_time: Bucket close time in UTC.
    :param slice_time_zone: Zone the slice time is expressed in.
    :param cash_book: Cash book for the bucket, unused by the default slice.
    :param packets: Generated packets for the bucket.
    :param security_changes: Universe changes at this bucket.
    :param universe_data: Universe selection data keyed by universe name.
    :returns: The assembled slice.
    """
    # Later packets for the same symbol replace earlier ones
    bars: dict[str, SyntheticBar] = {}
    for packet in packets:
        if packet.data:
            bars[str(packet.symbol)] = packet.data[-1]

    return Slice(
        time=convert_from_utc(utc_time, slice_time_zone),
        utc_time=utc_time,
        packets=list(packets),
        bars=bars,
        security_changes=security_changes,
        universe_data=dict(universe_data),
    )


__all__ = ["CashBook", "SliceFactory", "create_slice"]
