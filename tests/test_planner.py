"""Tests for bucket planning."""

from datetime import datetime, timedelta, timezone

import pytest

from synthfeed.calendars import (always_open, forex, resolve_exchange_hours,
                                 us_equity)
from synthfeed.exceptions import EmptyInputError
from synthfeed.planner import plan
from synthfeed.types import DataRequest, Resolution, Symbol

T0 = datetime(2024, 1, 2, 0, 0, tzinfo=timezone.utc)


def _request(
    symbol: str = "A",
    resolution: Resolution = Resolution.MINUTE,
    start: datetime = T0,
    end: datetime = T0 + timedelta(minutes=4),
    **kwargs,
) -> DataRequest:
    kwargs.setdefault("exchange_hours", always_open())
    return DataRequest(
        symbol=Symbol(symbol),
        resolution=resolution,
        start_time_utc=start,
        end_time_utc=end,
        **kwargs,
    )


class TestPlanBasics:
    """Basic planning behaviour."""

    def test_empty_requests_raise(self) -> None:
        """Planning without requests raises EmptyInputError."""
        with pytest.raises(EmptyInputError):
            plan([])

    def test_keys_are_bucket_close_times(self) -> None:
        """Keys are candidate instants shifted by one bar."""
        bucket_plan = plan([_request()])

        assert list(bucket_plan) == [T0 + timedelta(minutes=k) for k in (1, 2, 3, 4)]

    def test_plan_exposes_span_and_bar_size(self) -> None:
        """The plan records bar size and the merged span."""
        bucket_plan = plan(
            [
                _request("A", start=T0 + timedelta(minutes=2), end=T0 + timedelta(minutes=3)),
                _request("B", start=T0, end=T0 + timedelta(minutes=10)),
            ]
        )

        assert bucket_plan.bar_size == timedelta(minutes=1)
        assert bucket_plan.start_utc == T0
        assert bucket_plan.end_utc == T0 + timedelta(minutes=10)

    def test_accepts_any_iterable(self) -> None:
        """Requests may be passed as a generator."""
        bucket_plan = plan(r for r in [_request()])
        assert len(bucket_plan) == 4


class TestPlanBucketCount:
    """Bucket counts for a single always-open resolution."""

    def test_exact_multiple(self) -> None:
        """An exact span yields span / bar_size buckets."""
        bucket_plan = plan([_request(end=T0 + timedelta(minutes=10))])
        assert len(bucket_plan) == 10

    def test_partial_bar_dropped(self) -> None:
        """A trailing partial bar is never planned."""
        bucket_plan = plan([_request(end=T0 + timedelta(minutes=10, seconds=30))])

        assert len(bucket_plan) == 10
        assert max(bucket_plan) == T0 + timedelta(minutes=10)

    def test_span_shorter_than_bar_yields_no_buckets(self) -> None:
        """A span shorter than one bar has no complete bar to plan."""
        bucket_plan = plan([_request(resolution=Resolution.HOUR, end=T0 + timedelta(minutes=5))])

        assert len(bucket_plan) == 0


class TestPlanMerging:
    """Merging requests with different resolutions."""

    def test_finest_resolution_sets_grid(self) -> None:
        """Bar size is the smallest resolution across requests."""
        bucket_plan = plan(
            [
                _request("A", resolution=Resolution.MINUTE),
                _request("B", resolution=Resolution.HOUR),
            ]
        )

        assert bucket_plan.bar_size == timedelta(minutes=1)
        assert len(bucket_plan) == 4

    def test_open_requests_appear_in_every_bucket(self) -> None:
        """A coarser request open all day is active at every fine bucket."""
        bucket_plan = plan(
            [
                _request("A", resolution=Resolution.MINUTE),
                _request("B", resolution=Resolution.HOUR),
            ]
        )

        for configs in bucket_plan.values():
            assert [c.symbol for c in configs] == ["A", "B"]
            assert [c.resolution for c in configs] == [Resolution.MINUTE, Resolution.HOUR]

    def test_config_order_follows_request_order(self) -> None:
        """Configs keep the order requests were given in."""
        bucket_plan = plan([_request("B"), _request("A"), _request("C")])

        for configs in bucket_plan.values():
            assert [c.symbol for c in configs] == ["B", "A", "C"]

    def test_configs_never_exceed_request_count(self) -> None:
        """No bucket carries more configs than there are requests."""
        requests = [_request("A"), _request("B", exchange_hours=forex())]
        bucket_plan = plan(requests)

        assert all(len(configs) <= len(requests) for configs in bucket_plan.values())

    def test_configs_are_fresh_per_bucket(self) -> None:
        """Each bucket owns its own config objects."""
        bucket_plan = plan([_request()])
        first, second = list(bucket_plan.values())[:2]

        assert first[0] == second[0]
        assert first[0] is not second[0]


class TestPlanCalendars:
    """Filtering by trading calendar."""

    def test_regular_session_only(self) -> None:
        """Buckets before the open are dropped."""
        # 14:00-15:00 UTC is 09:00-10:00 New York
        start = datetime(2024, 1, 2, 14, 0, tzinfo=timezone.utc)
        bucket_plan = plan(
            [_request("SPY", start=start, end=start + timedelta(hours=1), exchange_hours=us_equity())]
        )
        keys = list(bucket_plan)

        assert len(keys) == 30
        assert keys[0] == datetime(2024, 1, 2, 14, 31, tzinfo=timezone.utc)
        assert keys[-1] == datetime(2024, 1, 2, 15, 0, tzinfo=timezone.utc)

    def test_extended_hours_included(self) -> None:
        """Extended hours keep the pre-market buckets."""
        start = datetime(2024, 1, 2, 14, 0, tzinfo=timezone.utc)
        bucket_plan = plan(
            [
                _request(
                    "SPY",
                    start=start,
                    end=start + timedelta(hours=1),
                    exchange_hours=us_equity(),
                    include_extended_market_hours=True,
                )
            ]
        )

        assert len(bucket_plan) == 60
        assert all(c.extended_market_hours for configs in bucket_plan.values() for c in configs)

    def test_closed_only_request_yields_no_buckets(self) -> None:
        """A request closed for the whole span produces an empty plan."""
        saturday = datetime(2024, 1, 6, 12, 0, tzinfo=timezone.utc)
        bucket_plan = plan(
            [_request("EURUSD", start=saturday, end=saturday + timedelta(hours=2), exchange_hours=forex())]
        )

        assert len(bucket_plan) == 0

    def test_closed_request_contributes_nothing(self) -> None:
        """A closed request is absent while open ones still produce buckets."""
        saturday = datetime(2024, 1, 6, 12, 0, tzinfo=timezone.utc)
        bucket_plan = plan(
            [
                _request("BTC", start=saturday, end=saturday + timedelta(minutes=5)),
                _request("EURUSD", start=saturday, end=saturday + timedelta(minutes=5), exchange_hours=forex()),
            ]
        )

        assert len(bucket_plan) == 5
        assert bucket_plan.bucket_counts() == {"BTC": 5}

    def test_calendar_queried_in_exchange_zone(self) -> None:
        """Openness is evaluated in the calendar's own time zone."""
        # 23:00 UTC Monday is 08:00 Tuesday in Tokyo; the session opens at 09:00
        start = datetime(2024, 1, 1, 23, 0, tzinfo=timezone.utc)
        tokyo = {"type": "session", "time_zone": "Asia/Tokyo", "market_open": "09:00", "market_close": "15:00"}
        bucket_plan = plan(
            [
                _request(
                    "7203",
                    resolution=Resolution.HOUR,
                    start=start,
                    end=start + timedelta(hours=3),
                    exchange_hours=resolve_exchange_hours(tokyo),
                )
            ]
        )

        assert list(bucket_plan) == [
            datetime(2024, 1, 2, 1, 0, tzinfo=timezone.utc),
            datetime(2024, 1, 2, 2, 0, tzinfo=timezone.utc),
        ]


class TestPlanProperties:
    """Ordering and bounds invariants."""

    def test_keys_strictly_increasing_and_bounded(self) -> None:
        """Keys increase strictly and lie in [start + bar, end]."""
        start = datetime(2024, 1, 2, 13, 0, tzinfo=timezone.utc)
        end = datetime(2024, 1, 2, 22, 0, tzinfo=timezone.utc)
        bucket_plan = plan(
            [
                _request("SPY", start=start, end=end, exchange_hours=us_equity()),
                _request("EURUSD", resolution=Resolution.HOUR, start=start, end=end, exchange_hours=forex()),
            ]
        )
        keys = list(bucket_plan)

        assert keys == sorted(set(keys))
        assert keys[0] >= start + bucket_plan.bar_size
        assert keys[-1] <= end

    def test_deterministic(self) -> None:
        """Identical inputs give identical plans."""
        requests = [_request("A"), _request("B", resolution=Resolution.HOUR)]

        assert list(plan(requests).items()) == list(plan(requests).items())
