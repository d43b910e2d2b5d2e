"""Loguru configuration.

Library modules log through ``loguru.logger`` and never touch sinks. The
package disables its own records on import; applications call
:func:`configure_logging` to install a handler and turn them on.
"""

from __future__ import annotations

import sys
from typing import Any, TextIO

from loguru import logger

from synthfeed.exceptions import ConfigError

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)

_handler_id: int | None = None


def configure_logging(level: str = "INFO", sink: TextIO | Any = sys.stderr) -> int:
    """Install the synthfeed log handler.

    Replaces loguru's default handler on first use and the previously
    installed synthfeed handler on later calls.

    :param level: Minimum level to emit.
    :param sink: Any loguru sink (stream, path or callable).
    :returns: Loguru handler id.
    :raises ConfigError: If ``level`` is not a loguru level name.
    """
    global _handler_id

    level = level.upper()
    try:
        logger.level(level)
    except ValueError as e:
        raise ConfigError(f"Unknown log level '{level}'") from e

    if _handler_id is None:
        logger.remove()
    else:
        logger.remove(_handler_id)

    _handler_id = logger.add(
        sink,
        level=level,
        format=LOG_FORMAT,
        backtrace=False,
        diagnose=False,
    )
    logger.enable("synthfeed")
    return _handler_id


__all__ = ["LOG_FORMAT", "configure_logging"]
