"""
Acquisition and Filter Defaults for EEG Pipes

All constants include units in their names where a unit applies.
"""

from __future__ import annotations

# =============================================================================
# Acquisition Defaults
# =============================================================================

# Headband-class EEG acquisition (4 electrodes + AUX at 256 Hz)
SAMPLING_RATE_HZ: float = 256.0
DEFAULT_CHUNK_SIZE: int = 12  # Samples per channel per chunk

# =============================================================================
# High-Pass Filter Defaults
# =============================================================================

# Number of cascaded second-order sections (filter order = 2 * ORDER)
ORDER: int = 2
CHARACTERISTIC: str = "butterworth"
DEFAULT_CUTOFF_HZ: float = 2.0

# Cutoff above this fraction of Nyquist triggers a validation warning
NYQUIST_MARGIN_FRACTION: float = 0.9

# =============================================================================
# Simulation Defaults
# =============================================================================

DURATION_SEC: float = 2.0
DEFAULT_RANDOM_SEED: int = 42
DC_OFFSET_UV: float = 800.0  # Electrode offset the high-pass stage removes
DEFAULT_DROPOUT_RATE: float = 0.02  # Fraction of samples lost in transit
