"""
Simulation Module

Synthetic EEG recordings with dropouts and a record streamer that
replays them as chunk or sample records.
"""

from .streamer import RecordStreamer
from .time_series import (
    generate_pink_noise,
    generate_time_vector,
    inject_dropouts,
    simulate_eeg_recording,
)

__all__ = [
    "RecordStreamer",
    "generate_pink_noise",
    "generate_time_vector",
    "inject_dropouts",
    "simulate_eeg_recording",
]
