"""Sine-curve history provider.

Entry point for callers that want synthetic history: plans buckets for the
requests, then lazily assembles slices from the plan.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from loguru import logger

from synthfeed.assembler import assemble
from synthfeed.events import HistoryObserver
from synthfeed.exceptions import EmptyInputError
from synthfeed.planner import plan
from synthfeed.securities import SecurityRegistry
from synthfeed.types import DataRequest, Slice


class SineHistoryProvider:
    """History provider whose prices follow a sine function.

    :param securities: Registry of securities a history request can return.
    :param observer: Optional observer notified of debug messages and errors.
    """

    def __init__(
        self,
        securities: SecurityRegistry,
        observer: HistoryObserver | None = None,
    ) -> None:
        self._securities = securities
        self._observer = observer
        self._data_point_count = 0

    @property
    def data_point_count(self) -> int:
        """Total number of bars emitted by this provider."""
        return self._data_point_count

    def initialize(self, parameters: Mapping[str, Any] | None = None) -> None:
        """Accept provider initialization parameters.

        Synthetic history needs no job-specific setup, so parameters are
        ignored.
        """
        logger.debug("SineHistoryProvider initialized (ignoring {} parameters)", len(parameters or {}))

    def get_history(
        self,
        requests: Iterable[DataRequest],
        slice_time_zone: str,
    ) -> Iterator[Slice]:
        """Get synthetic history for ``requests``.

        Buckets are planned before this method returns; slices are produced
        as the returned iterator is consumed. Iterating it a second time
        yields nothing, call again to replay.

        :param requests: History requests to merge.
        :param slice_time_zone: Zone slices are stamped in.
        :returns: Iterator of slices covering the requested span.
        :raises EmptyInputError: If ``requests`` is empty.
        """
        requests = list(requests)
        try:
            bucket_plan = plan(requests)
        except EmptyInputError as e:
            self._notify_error(str(e))
            raise

        self._notify_debug(
            f"Generating {len(bucket_plan)} slices for {len(requests)} requests"
        )
        return self._track(assemble(bucket_plan, slice_time_zone, self._securities))

    def _track(self, slices: Iterator[Slice]) -> Iterator[Slice]:
        try:
            for time_slice in slices:
                self._data_point_count += sum(len(packet.data) for packet in time_slice.packets)
                yield time_slice
        except Exception as e:
            if self._observer is not None:
                self._observer.on_runtime_error(f"History generation failed: {e}", e)
            raise

    def _notify_debug(self, message: str) -> None:
        logger.debug(message)
        if self._observer is not None:
            self._observer.on_debug(message)

    def _notify_error(self, message: str) -> None:
        if self._observer is not None:
            self._observer.on_error(message)


__all__ = ["SineHistoryProvider"]
