"""Core type definitions for the synthetic history generator.

All data models use Pydantic BaseModel for automatic validation, JSON
serialization, and better error messages.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping
from datetime import datetime, timedelta
from enum import Enum
from typing import Annotated, Any, ClassVar, Literal, NewType

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator

from synthfeed.timezones import UTC, resolve_time_zone

# Type aliases for domain-specific identifiers
Symbol = NewType("Symbol", str)
DatasetId = NewType("DatasetId", str)


# ---------------------------------------------------------------------------
# Base Configuration
# ---------------------------------------------------------------------------


class FrozenModel(BaseModel):
    """Base model with frozen (immutable) configuration."""

    model_config = ConfigDict(frozen=True)


class MutableModel(BaseModel):
    """Base model for mutable state objects."""

    model_config = ConfigDict(validate_assignment=True)


def _check_time_zone(value: str) -> str:
    resolve_time_zone(value)
    return value


# IANA zone name, checked against the zone database on validation
TimeZoneName = Annotated[str, AfterValidator(_check_time_zone)]


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class Resolution(str, Enum):
    """Bar duration of a subscription."""

    SECOND = "second"
    MINUTE = "minute"
    HOUR = "hour"
    DAILY = "daily"

    def to_timedelta(self) -> timedelta:
        """Duration of one bar at this resolution."""
        return _RESOLUTION_PERIODS[self]


_RESOLUTION_PERIODS = {
    Resolution.SECOND: timedelta(seconds=1),
    Resolution.MINUTE: timedelta(minutes=1),
    Resolution.HOUR: timedelta(hours=1),
    Resolution.DAILY: timedelta(days=1),
}


class TickType(str, Enum):
    """Kind of market data a subscription carries."""

    TRADE = "trade"
    QUOTE = "quote"
    OPEN_INTEREST = "open_interest"


class DataNormalizationMode(str, Enum):
    """Price adjustment applied to a subscription."""

    RAW = "raw"
    ADJUSTED = "adjusted"
    SPLIT_ADJUSTED = "split_adjusted"
    TOTAL_RETURN = "total_return"


# ---------------------------------------------------------------------------
# Trading Calendar Interface
# ---------------------------------------------------------------------------


class ExchangeHours(FrozenModel, ABC):
    """Trading calendar of an exchange.

    Concrete calendars live in :mod:`synthfeed.calendars`.

    :param time_zone: IANA name of the exchange's local time zone.
    """

    time_zone: TimeZoneName = "UTC"

    @abstractmethod
    def is_open(self, local_time: datetime, extended_market_hours: bool = False) -> bool:
        """Whether the exchange is trading at ``local_time``.

        :param local_time: Time in the exchange's time zone.
        :param extended_market_hours: Include pre- and post-market sessions.
        :returns: True if open.
        """
        ...


# ---------------------------------------------------------------------------
# Request Types
# ---------------------------------------------------------------------------


class DataRequest(FrozenModel):
    """One symbol's history need.

    :param symbol: Symbol to generate bars for.
    :param resolution: Bar duration.
    :param start_time_utc: Start of the requested span (inclusive).
    :param end_time_utc: End of the requested span (exclusive).
    :param exchange_hours: Trading calendar deciding when the symbol trades.
    :param include_extended_market_hours: Include pre- and post-market sessions.
    :param data_time_zone: Zone bars are stamped in.
    :param fill_forward_resolution: Fill-forward resolution, if any.
    :param is_custom_data: Whether the symbol is a custom data type.
    :param tick_type: Kind of market data.
    :param data_normalization_mode: Price adjustment mode.
    :param data_type: Name of the bar type requested.
    """

    symbol: Symbol
    resolution: Resolution
    start_time_utc: datetime
    end_time_utc: datetime
    exchange_hours: ExchangeHours
    include_extended_market_hours: bool = False
    data_time_zone: TimeZoneName = "UTC"
    fill_forward_resolution: Resolution | None = None
    is_custom_data: bool = False
    tick_type: TickType = TickType.TRADE
    data_normalization_mode: DataNormalizationMode = DataNormalizationMode.ADJUSTED
    data_type: str = "trade_bar"

    @field_validator("start_time_utc", "end_time_utc")
    @classmethod
    def _normalize_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)


class ActiveConfig(FrozenModel):
    """Subscription configuration materialized for one bucket.

    Built from a :class:`DataRequest` when its exchange is open at the bucket.
    ``is_synthetic`` marks it as generated rather than a live subscription.
    """

    data_type: str
    symbol: Symbol
    resolution: Resolution
    data_time_zone: str
    exchange_time_zone: str
    fill_forward: bool
    extended_market_hours: bool
    is_internal_feed: bool = False
    is_custom_data: bool
    tick_type: TickType
    is_filtered_subscription: bool = True
    data_normalization_mode: DataNormalizationMode
    is_synthetic: Literal[True] = True

    @property
    def period(self) -> timedelta:
        """Bar duration of this configuration."""
        return self.resolution.to_timedelta()

    @classmethod
    def from_request(cls, request: DataRequest) -> ActiveConfig:
        """Materialize the static parameters of ``request``."""
        return cls(
            data_type=request.data_type,
            symbol=request.symbol,
            resolution=request.resolution,
            data_time_zone=request.data_time_zone,
            exchange_time_zone=request.exchange_hours.time_zone,
            fill_forward=request.fill_forward_resolution is not None,
            extended_market_hours=request.include_extended_market_hours,
            is_custom_data=request.is_custom_data,
            tick_type=request.tick_type,
            data_normalization_mode=request.data_normalization_mode,
        )


class BucketPlan(Mapping[datetime, tuple[ActiveConfig, ...]]):
    """Read-only ordered mapping from bucket close time (UTC) to active configs.

    Keys iterate in strictly increasing order. A plan can be assembled any
    number of times; nothing downstream mutates it.

    :param buckets: Bucket close time to configs, already in key order.
    :param bar_size: Spacing between buckets.
    :param start_utc: Earliest request start.
    :param end_utc: Latest request end.
    """

    __slots__ = ("_buckets", "bar_size", "start_utc", "end_utc")

    def __init__(
        self,
        buckets: Mapping[datetime, tuple[ActiveConfig, ...]],
        bar_size: timedelta,
        start_utc: datetime,
        end_utc: datetime,
    ) -> None:
        self._buckets = dict(buckets)
        self.bar_size = bar_size
        self.start_utc = start_utc
        self.end_utc = end_utc

    def __getitem__(self, key: datetime) -> tuple[ActiveConfig, ...]:
        return self._buckets[key]

    def __iter__(self) -> Iterator[datetime]:
        return iter(self._buckets)

    def __len__(self) -> int:
        return len(self._buckets)

    def __repr__(self) -> str:
        return (
            f"BucketPlan(buckets={len(self)}, bar_size={self.bar_size}, "
            f"start_utc={self.start_utc.isoformat()}, end_utc={self.end_utc.isoformat()})"
        )

    def bucket_counts(self) -> dict[str, int]:
        """Number of buckets each symbol appears in."""
        counts: dict[str, int] = {}
        for configs in self._buckets.values():
            for config in configs:
                counts[str(config.symbol)] = counts.get(str(config.symbol), 0) + 1
        return counts


# ---------------------------------------------------------------------------
# Market Data Types
# ---------------------------------------------------------------------------


class SyntheticBar(FrozenModel):
    """Generated trade bar.

    :param symbol: Market symbol for this bar.
    :param time: Bar open time, local to the subscription's data time zone.
    :param period: Bar duration.
    :param open: Opening price.
    :param high: Highest price during the bar period.
    :param low: Lowest price during the bar period.
    :param close: Closing price.
    :param volume: Trading volume during the bar period.
    """

    symbol: Symbol
    time: datetime
    period: timedelta
    open: float
    high: float
    low: float
    close: float
    volume: float

    @property
    def end_time(self) -> datetime:
        """Bar close time in the same zone as ``time``."""
        return self.time + self.period


class DataFeedPacket(FrozenModel):
    """Bars generated for one security within a slice.

    :param symbol: Registry identifier of the security the bars belong to.
    :param config: Configuration the bars were generated for.
    :param data: Generated bars, oldest first.
    """

    symbol: Symbol
    config: ActiveConfig
    data: list[SyntheticBar] = Field(default_factory=list)


class SecurityChanges(FrozenModel):
    """Securities added to or removed from the universe at a slice."""

    NONE: ClassVar[SecurityChanges]

    added: tuple[Symbol, ...] = ()
    removed: tuple[Symbol, ...] = ()


SecurityChanges.NONE = SecurityChanges()


class Slice(FrozenModel):
    """Market snapshot at one bucket.

    :param time: Bucket close time in the caller's display time zone.
    :param utc_time: Bucket close time in UTC.
    :param packets: Generated packets, one per registered active config.
    :param bars: Latest bar per symbol.
    :param security_changes: Universe changes at this slice.
    :param universe_data: Universe selection data keyed by universe name.
    """

    time: datetime
    utc_time: datetime
    packets: list[DataFeedPacket] = Field(default_factory=list)
    bars: dict[str, SyntheticBar] = Field(default_factory=dict)
    security_changes: SecurityChanges = SecurityChanges.NONE
    universe_data: dict[str, Any] = Field(default_factory=dict)

    @property
    def has_data(self) -> bool:
        """Whether the slice carries at least one bar."""
        return bool(self.bars)


# ---------------------------------------------------------------------------
# Configuration Types
# ---------------------------------------------------------------------------


class GenHistoryConfig(FrozenModel):
    """Configuration for generating synthetic history.

    :param requests: History requests to merge.
    :param slice_time_zone: Zone slices are stamped in.
    :param securities: Symbols registered before generation.
    :param output: CSV output path, or None to skip writing.
    :param dataset_id: Dataset identifier, auto-generated if None.
    """

    requests: list[DataRequest]
    slice_time_zone: TimeZoneName = "UTC"
    securities: list[Symbol] = Field(default_factory=list)
    output: str | None = None
    dataset_id: DatasetId | None = None


# ---------------------------------------------------------------------------
# Exports
# ---------------------------------------------------------------------------

__all__ = [
    # Type aliases
    "Symbol",
    "DatasetId",
    # Base models
    "FrozenModel",
    "MutableModel",
    # Enumerations
    "Resolution",
    "TickType",
    "DataNormalizationMode",
    # Calendar
    "TimeZoneName",
    "ExchangeHours",
    # Requests
    "DataRequest",
    "ActiveConfig",
    "BucketPlan",
    # Market data
    "SyntheticBar",
    "DataFeedPacket",
    "SecurityChanges",
    "Slice",
    # Configuration
    "GenHistoryConfig",
]
