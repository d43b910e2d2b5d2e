"""Trading calendars.

Concrete :class:`~synthfeed.types.ExchangeHours` implementations used to decide
which requests trade at a bucket, plus presets and a resolver that builds a
calendar from configuration values.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Any

from pydantic import ValidationError, field_validator

from synthfeed.exceptions import ConfigError, DataValidationError
from synthfeed.timezones import convert_from_utc
from synthfeed.types import ExchangeHours

WEEKDAYS = frozenset(range(5))


class AlwaysOpenExchangeHours(ExchangeHours):
    """Calendar that trades at every instant."""

    def is_open(self, local_time: datetime, extended_market_hours: bool = False) -> bool:
        return True


class SessionExchangeHours(ExchangeHours):
    """Calendar with one daily session on trading days.

    The regular session is ``[market_open, market_close)``. When extended hours
    are requested the session widens to ``[pre_market_open, post_market_close)``
    for whichever bound is set.

    :param market_open: Regular session start.
    :param market_close: Regular session end, or None for end of day.
    :param pre_market_open: Extended session start, or None for no pre-market.
    :param post_market_close: Extended session end, or None for no post-market.
    :param trading_days: Weekday numbers the exchange trades on (Mon=0).
    :param holidays: Dates the exchange is closed all day.
    """

    market_open: time = time(0, 0)
    market_close: time | None = None
    pre_market_open: time | None = None
    post_market_close: time | None = None
    trading_days: frozenset[int] = WEEKDAYS
    holidays: frozenset[date] = frozenset()

    @field_validator(
        "market_open", "market_close", "pre_market_open", "post_market_close", mode="before"
    )
    @classmethod
    def _require_time_text(cls, value: Any) -> Any:
        # Unquoted YAML times such as 9:30 load as sexagesimal integers
        if value is None or isinstance(value, (str, time)):
            return value
        raise ValueError(f"expected a time such as \"09:30\", got {value!r}")

    @field_validator("market_open", "market_close", "pre_market_open", "post_market_close")
    @classmethod
    def _require_local_time(cls, value: time | None) -> time | None:
        if value is not None and value.tzinfo is not None:
            raise ValueError("session times are local to the calendar time zone and take no offset")
        return value

    def is_open(self, local_time: datetime, extended_market_hours: bool = False) -> bool:
        if local_time.tzinfo is not None:
            local_time = convert_from_utc(local_time, self.time_zone)

        if local_time.weekday() not in self.trading_days:
            return False
        if local_time.date() in self.holidays:
            return False

        session_open = self.market_open
        session_close = self.market_close
        if extended_market_hours:
            if self.pre_market_open is not None:
                session_open = self.pre_market_open
            if self.post_market_close is not None:
                session_close = self.post_market_close

        current = local_time.time()
        if current < session_open:
            return False
        return session_close is None or current < session_close


def always_open(time_zone: str = "UTC") -> AlwaysOpenExchangeHours:
    """Calendar open around the clock in ``time_zone``."""
    return AlwaysOpenExchangeHours(time_zone=time_zone)


def us_equity(holidays: frozenset[date] = frozenset()) -> SessionExchangeHours:
    """NYSE-style hours: 09:30-16:00 Eastern, 04:00-20:00 extended, Mon-Fri."""
    return SessionExchangeHours(
        time_zone="America/New_York",
        market_open=time(9, 30),
        market_close=time(16, 0),
        pre_market_open=time(4, 0),
        post_market_close=time(20, 0),
        holidays=holidays,
    )


def forex() -> SessionExchangeHours:
    """Round-the-clock UTC trading on weekdays."""
    return SessionExchangeHours(time_zone="UTC")


_PRESETS = {
    "always_open": always_open,
    "us_equity": us_equity,
    "forex": forex,
}


def resolve_exchange_hours(spec: str | dict[str, Any] | ExchangeHours) -> ExchangeHours:
    """Construct a trading calendar from configuration.

    Accepts a preset name (``"always_open"``, ``"us_equity"``, ``"forex"``), a
    mapping with a ``type`` key (a preset or ``"session"``) plus parameters, or
    an already-built calendar.

    :param spec: Calendar specification.
    :returns: ExchangeHours instance.
    :raises ConfigError: If the calendar type or its parameters are invalid.
    """
    if isinstance(spec, ExchangeHours):
        return spec

    if isinstance(spec, str):
        spec = {"type": spec}
    if not isinstance(spec, dict):
        raise ConfigError("'exchange' must be a preset name or a mapping")

    params = dict(spec)
    calendar_type = str(params.pop("type", "session")).lower()

    try:
        if calendar_type == "session":
            return SessionExchangeHours.model_validate(params)
        if calendar_type == "always_open":
            return AlwaysOpenExchangeHours.model_validate(params)
        if calendar_type in _PRESETS:
            if params:
                raise ConfigError(
                    f"Calendar preset '{calendar_type}' takes no parameters, got: {sorted(params)}"
                )
            return _PRESETS[calendar_type]()
    except ValidationError as e:
        raise ConfigError(f"Invalid '{calendar_type}' calendar: {e}") from e
    except DataValidationError as e:
        raise ConfigError(str(e)) from e

    raise ConfigError(
        f"Unrecognized calendar type: '{calendar_type}'. "
        f"Supported types: session, {', '.join(sorted(_PRESETS))}"
    )


__all__ = [
    "AlwaysOpenExchangeHours",
    "SessionExchangeHours",
    "always_open",
    "us_equity",
    "forex",
    "resolve_exchange_hours",
]
