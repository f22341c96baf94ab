"""
Pipes Module

Streaming stages that map EEG records one-to-one.
"""

from .safe_highpass import (
    SafeHighpassFilter,
    StageConfig,
    UnitShape,
    safe_highpass_filter,
    unit_shape,
)

__all__ = [
    "SafeHighpassFilter",
    "StageConfig",
    "UnitShape",
    "safe_highpass_filter",
    "unit_shape",
]
