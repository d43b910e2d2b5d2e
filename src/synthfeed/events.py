"""Optional observers for history generation.

A provider works the same with or without an observer; observers only receive
notifications.
"""

from __future__ import annotations

from loguru import logger


class HistoryObserver:
    """Receives debug and error notifications from a history provider.

    All hooks are no-ops; subclasses override the ones they care about.
    """

    def on_debug(self, message: str) -> None:
        """Informational message."""

    def on_error(self, message: str) -> None:
        """A history call failed before producing data."""

    def on_runtime_error(self, message: str, error: BaseException) -> None:
        """Generation failed while slices were being produced."""


class LoggingObserver(HistoryObserver):
    """Observer that forwards notifications to loguru."""

    def on_debug(self, message: str) -> None:
        logger.debug(message)

    def on_error(self, message: str) -> None:
        logger.error(message)

    def on_runtime_error(self, message: str, error: BaseException) -> None:
        logger.opt(exception=error).error(message)


__all__ = ["HistoryObserver", "LoggingObserver"]
