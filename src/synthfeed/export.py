"""CSV export of generated slices."""

from __future__ import annotations

import csv
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

from synthfeed.exceptions import ExportError
from synthfeed.types import Slice

CSV_COLUMNS = [
    "utc_time",
    "slice_time",
    "symbol",
    "time",
    "end_time",
    "open",
    "high",
    "low",
    "close",
    "volume",
]


def iter_rows(time_slice: Slice) -> Iterator[dict[str, Any]]:
    """Yield one CSV row per bar in ``time_slice``."""
    for packet in time_slice.packets:
        for bar in packet.data:
            yield {
                "utc_time": time_slice.utc_time.isoformat(),
                "slice_time": time_slice.time.isoformat(),
                "symbol": str(bar.symbol),
                "time": bar.time.isoformat(),
                "end_time": bar.end_time.isoformat(),
                "open": bar.open,
                "high": bar.high,
                "low": bar.low,
                "close": bar.close,
                "volume": bar.volume,
            }


def write_slices_csv(slices: Iterable[Slice], path: str | Path) -> int:
    """Write every bar of ``slices`` to a CSV file.

    :param slices: Slices to write, consumed once.
    :param path: Destination file; parent directories are created.
    :returns: Number of rows written.
    :raises ExportError: If the file cannot be written.
    """
    path = Path(path)
    rows = 0
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=CSV_COLUMNS)
            writer.writeheader()
            for time_slice in slices:
                for row in iter_rows(time_slice):
                    writer.writerow(row)
                    rows += 1
    except OSError as e:
        raise ExportError(f"Failed to write CSV file {path}: {e}") from e
    return rows


__all__ = ["CSV_COLUMNS", "iter_rows", "write_slices_csv"]
