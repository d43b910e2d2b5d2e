"""Synthetic sine-curve market history generator."""

from loguru import logger

from synthfeed.exceptions import EmptyInputError, SynthFeedError
from synthfeed.provider import SineHistoryProvider

# Applications opt in through synthfeed.logger.configure_logging
logger.disable("synthfeed")

__version__ = "0.1.0"

__all__ = ["EmptyInputError", "SineHistoryProvider", "SynthFeedError", "__version__"]
