"""
Filtering Module

Contains high-pass coefficient synthesis, the per-channel streaming
filter bank, and gap repair for filtering around missing samples.
"""

from .design import FilterCharacteristic, design_highpass_sos
from .filter_bank import FilterBank, IIRFilter
from .gap_repair import (
    MISSING,
    RepairResult,
    interpolate,
    is_missing,
    repair,
    restore,
)

__all__ = [
    "FilterCharacteristic",
    "design_highpass_sos",
    "FilterBank",
    "IIRFilter",
    "MISSING",
    "RepairResult",
    "interpolate",
    "is_missing",
    "repair",
    "restore",
]
