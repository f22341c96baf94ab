"""
EEG Pipes - Gap-Safe Streaming Signal Conditioning

This package contains:
- Filtering: high-pass design, per-channel filter bank, gap repair
- Pipes: the safe high-pass stage applied to EEG records
- Simulation: synthetic recordings and a record streamer
- Validation: cutoff and config file checks

Usage:
    # After installing with: pip install -e .
    from eeg_pipes import SafeHighpassFilter, ConfigError

    stage = SafeHighpassFilter(n_channels=4, sampling_rate=256, cutoff_frequency=60)
    filtered = stage.process(record)
"""

from eeg_pipes.errors import ConfigError, FilterDesignError, PipesError, RecordShapeError
from eeg_pipes.pipes.safe_highpass import SafeHighpassFilter, StageConfig, safe_highpass_filter

__version__ = "0.1.0"
__all__ = [
    "ConfigError",
    "FilterDesignError",
    "PipesError",
    "RecordShapeError",
    "SafeHighpassFilter",
    "StageConfig",
    "safe_highpass_filter",
]
