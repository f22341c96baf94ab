"""
Exception hierarchy for EEG Pipes.

All errors raised by the stage derive from PipesError. Every failure in
this package is a configuration problem: filtering is a deterministic
transform over in-memory state, so nothing here is ever retried.
"""


class PipesError(Exception):
    """Base class for EEG Pipes specific errors."""

    pass


class ConfigError(PipesError, ValueError):
    """Missing or invalid stage parameters, or a record that violates them."""

    pass


class FilterDesignError(ConfigError):
    """Coefficient synthesis rejected the requested filter."""

    pass


class RecordShapeError(ConfigError):
    """Record data does not match the configured channel count or unit shape."""

    pass
