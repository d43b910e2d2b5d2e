"""Configuration for the gen-history command.

Example config file (gen_history.yaml):

    slice_time_zone: "America/New_York"
    securities:            # Optional, defaults to every requested symbol
      - "SPY"
      - "EURUSD"
    requests:
      - symbol: "SPY"
        resolution: "minute"
        start: "2024-01-02T14:00:00Z"
        end: "2024-01-02T16:00:00Z"
        exchange: "us_equity"
        extended_market_hours: false
        data_time_zone: "America/New_York"
      - symbol: "EURUSD"
        resolution: "hour"
        start: "2024-01-02"
        end: "2024-01-03"
        exchange: "forex"
    output: "sine_history.csv"   # Optional
    dataset_id: "sine_demo"      # Optional
"""

from __future__ import annotations

import hashlib
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from synthfeed.calendars import resolve_exchange_hours
from synthfeed.exceptions import ConfigError, DataValidationError
from synthfeed.types import (DataNormalizationMode, DataRequest, DatasetId,
                             GenHistoryConfig, Resolution, Symbol, TickType)

VALID_RESOLUTIONS = frozenset(r.value for r in Resolution)

REQUIRED_REQUEST_FIELDS = ("symbol", "resolution", "start", "end")


def _parse_datetime(value: str | datetime) -> datetime:
    """Parse a datetime string or pass through datetime objects.

    :param value: ISO format string or datetime object.
    :returns: Timezone-aware datetime (UTC if no timezone specified).
    :raises ConfigError: If parsing fails.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    try:
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt
    except ValueError:
        pass

    try:
        dt = datetime.strptime(str(value), "%Y-%m-%d")
        return dt.replace(tzinfo=timezone.utc)
    except ValueError as e:
        raise ConfigError(f"Invalid datetime format: {value}") from e


def _parse_resolution(value: Any, field: str) -> Resolution:
    if not isinstance(value, str) or value not in VALID_RESOLUTIONS:
        raise ConfigError(
            f"Invalid {field} '{value}'. Valid options: {sorted(VALID_RESOLUTIONS)}"
        )
    return Resolution(value)


def _generate_dataset_id(requests: list[DataRequest]) -> DatasetId:
    """Generate a dataset ID from the requests.

    :param requests: Parsed requests (non-empty).
    :returns: Generated dataset ID.
    """
    symbols_str = "_".join(sorted({str(r.symbol) for r in requests}))
    if len(symbols_str) > 15:
        symbols_hash = hashlib.md5(symbols_str.encode()).hexdigest()[:6]
        symbols_part = f"{len({r.symbol for r in requests})}s_{symbols_hash}"
    else:
        symbols_part = symbols_str.lower()

    finest = min(requests, key=lambda r: r.resolution.to_timedelta()).resolution
    start_str = min(r.start_time_utc for r in requests).strftime("%Y%m%d")
    end_str = max(r.end_time_utc for r in requests).strftime("%Y%m%d")

    return DatasetId(f"sine_{symbols_part}_{finest.value}_{start_str}_{end_str}")


def _parse_request(raw: Any, index: int) -> DataRequest:
    """Parse one entry of the ``requests`` list.

    :param raw: Raw YAML value.
    :param index: Position in the list, used in error messages.
    :returns: Validated DataRequest.
    :raises ConfigError: If the entry is invalid.
    """
    where = f"requests[{index}]"
    if not isinstance(raw, dict):
        raise ConfigError(f"'{where}' must be a mapping")

    for field in REQUIRED_REQUEST_FIELDS:
        if field not in raw:
            raise ConfigError(f"Missing required field: {where}.{field}")

    resolution = _parse_resolution(raw["resolution"], f"{where}.resolution")
    fill_forward = raw.get("fill_forward_resolution")
    fill_forward_resolution = (
        _parse_resolution(fill_forward, f"{where}.fill_forward_resolution")
        if fill_forward is not None
        else None
    )

    start_dt = _parse_datetime(raw["start"])
    end_dt = _parse_datetime(raw["end"])
    if start_dt >= end_dt:
        raise ConfigError(f"'{where}.start' must be before '{where}.end'")

    exchange_hours = resolve_exchange_hours(raw.get("exchange", "always_open"))

    try:
        return DataRequest(
            symbol=Symbol(str(raw["symbol"])),
            resolution=resolution,
            start_time_utc=start_dt,
            end_time_utc=end_dt,
            exchange_hours=exchange_hours,
            include_extended_market_hours=bool(raw.get("extended_market_hours", False)),
            data_time_zone=raw.get("data_time_zone", exchange_hours.time_zone),
            fill_forward_resolution=fill_forward_resolution,
            is_custom_data=bool(raw.get("is_custom_data", False)),
            tick_type=TickType(raw.get("tick_type", TickType.TRADE.value)),
            data_normalization_mode=DataNormalizationMode(
                raw.get("data_normalization_mode", DataNormalizationMode.ADJUSTED.value)
            ),
            data_type=str(raw.get("data_type", "trade_bar")),
        )
    except (ValidationError, ValueError, DataValidationError) as e:
        raise ConfigError(f"Invalid '{where}': {e}") from e


def load_gen_history_config(config_path: str | Path) -> GenHistoryConfig:
    """Parse and validate a gen-history configuration file.

    :param config_path: Path to YAML configuration file.
    :returns: Validated GenHistoryConfig object.
    :raises ConfigError: If file cannot be read or config is invalid.
    """
    config_path = Path(config_path)

    # Read and parse YAML
    try:
        with open(config_path) as f:
            raw_config = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Configuration file not found: {config_path}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in configuration file: {e}") from e

    if not isinstance(raw_config, dict):
        raise ConfigError("Configuration must be a YAML mapping")

    if "requests" not in raw_config:
        raise ConfigError("Missing required field: requests")

    raw_requests = raw_config["requests"]
    if not isinstance(raw_requests, list) or len(raw_requests) == 0:
        raise ConfigError("'requests' must be a non-empty list")
    requests = [_parse_request(raw, i) for i, raw in enumerate(raw_requests)]

    # Parse securities (optional)
    raw_securities = raw_config.get("securities")
    if raw_securities is None:
        securities = list(dict.fromkeys(r.symbol for r in requests))
    elif isinstance(raw_securities, list):
        securities = [Symbol(str(s)) for s in raw_securities]
    else:
        raise ConfigError("'securities' must be a list")

    output = raw_config.get("output")
    if output is not None and not isinstance(output, str):
        raise ConfigError("'output' must be a path string")

    # Parse or generate dataset_id
    if "dataset_id" in raw_config:
        dataset_id = DatasetId(str(raw_config["dataset_id"]))
    else:
        dataset_id = _generate_dataset_id(requests)

    try:
        return GenHistoryConfig(
            requests=requests,
            slice_time_zone=raw_config.get("slice_time_zone", "UTC"),
            securities=securities,
            output=output,
            dataset_id=dataset_id,
        )
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
    except DataValidationError as e:
        raise ConfigError(str(e)) from e
