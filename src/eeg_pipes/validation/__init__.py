"""
Validation Module for EEG Pipes

Provides cutoff-vs-Nyquist checks and YAML config validation
with actionable feedback.
"""

from __future__ import annotations

from eeg_pipes.validation.input_validators import (
    ConfigValidationResult,
    NyquistResult,
    validate_config_file,
    validate_cutoff,
)

__all__ = [
    "NyquistResult",
    "ConfigValidationResult",
    "validate_cutoff",
    "validate_config_file",
]
