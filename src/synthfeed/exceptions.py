"""Synthetic history exception hierarchy.

All synthfeed-specific exceptions derive from :class:`SynthFeedError` so callers
can catch all generator-related errors uniformly.
"""

from __future__ import annotations


class SynthFeedError(Exception):
    """Base class for synthfeed exceptions.

    Derived exceptions should extend this class so that callers can catch all
    synthfeed-specific errors uniformly.
    """


class EmptyInputError(SynthFeedError):
    """Raised when a history call receives no requests.

    Without at least one request there is no bar size, start or end to plan
    buckets from.
    """


class ConfigError(SynthFeedError):
    """Raised when configuration files or parameters are invalid."""


class DataValidationError(SynthFeedError):
    """Raised when input data fails validation checks.

    Named DataValidationError to avoid conflict with pydantic's ValidationError.
    """


class ExportError(SynthFeedError):
    """Raised when writing generated slices to disk fails."""


__all__ = [
    "SynthFeedError",
    "EmptyInputError",
    "ConfigError",
    "DataValidationError",
    "ExportError",
]
