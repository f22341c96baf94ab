"""
Time Series Generator - Synthetic EEG With Dropouts

Generates multi-channel EEG-like recordings for exercising the stage:

Signal Model (per channel):
- Alpha rhythm: 10 Hz sine with a per-channel phase
- Background activity: pink noise (1/f)
- Electrode offset: large DC term the high-pass filter must remove

Dropouts model samples lost in transit (e.g. a Bluetooth packet) and are
written as NaN.
"""

from __future__ import annotations

import numpy as np

from eeg_pipes.constants import (
    DC_OFFSET_UV,
    DEFAULT_DROPOUT_RATE,
    DEFAULT_RANDOM_SEED,
    DURATION_SEC,
    SAMPLING_RATE_HZ,
)


def generate_time_vector(
    duration_sec: float = DURATION_SEC,
    sampling_rate_hz: float = SAMPLING_RATE_HZ,
) -> np.ndarray:
    """
    Generate time vector for simulation.

    Parameters
    ----------
    duration_sec : float
        Duration in seconds.
    sampling_rate_hz : float
        Sampling rate in Hz.

    Returns
    -------
    np.ndarray
        Time vector with shape (n_samples,) in seconds.
    """
    n_samples = int(duration_sec * sampling_rate_hz)
    return np.linspace(0, duration_sec, n_samples, endpoint=False)


def generate_pink_noise(n_samples: int, rng: np.random.Generator) -> np.ndarray:
    """
    Generate unit-variance pink noise (1/f) by spectral shaping.

    Parameters
    ----------
    n_samples : int
        Number of samples to generate.
    rng : np.random.Generator
        Random generator.

    Returns
    -------
    np.ndarray
        Pink noise with zero mean and unit variance, shape (n_samples,).
    """
    white_noise = rng.standard_normal(n_samples)
    fft_white = np.fft.rfft(white_noise)
    freqs = np.fft.rfftfreq(n_samples)

    # PSD ∝ 1/f means amplitude ∝ 1/sqrt(f); DC bin zeroed
    pink_filter = np.zeros_like(freqs)
    nonzero_mask = freqs > 0
    pink_filter[nonzero_mask] = 1.0 / np.sqrt(freqs[nonzero_mask])

    pink = np.fft.irfft(fft_white * pink_filter, n=n_samples)

    std = np.std(pink)
    if std == 0:
        return pink
    return (pink - np.mean(pink)) / std


def simulate_eeg_recording(
    n_channels: int = 4,
    duration_sec: float = DURATION_SEC,
    sampling_rate_hz: float = SAMPLING_RATE_HZ,
    alpha_freq_hz: float = 10.0,
    alpha_amplitude_uv: float = 20.0,
    noise_amplitude_uv: float = 5.0,
    dc_offset_uv: float = DC_OFFSET_UV,
    seed: int = DEFAULT_RANDOM_SEED,
) -> np.ndarray:
    """
    Simulate a multi-channel EEG recording.

    Parameters
    ----------
    n_channels : int
        Number of channels.
    duration_sec : float
        Duration in seconds.
    sampling_rate_hz : float
        Sampling rate in Hz.
    alpha_freq_hz : float
        Frequency of the alpha rhythm. Default 10 Hz.
    alpha_amplitude_uv : float
        Alpha amplitude in microvolts.
    noise_amplitude_uv : float
        Pink noise standard deviation in microvolts.
    dc_offset_uv : float
        Mean electrode offset in microvolts. Each channel gets a jittered copy.
    seed : int
        Random seed for reproducibility.

    Returns
    -------
    np.ndarray
        Recording with shape (n_channels, n_samples) in microvolts.
    """
    rng = np.random.default_rng(seed)
    t = generate_time_vector(duration_sec, sampling_rate_hz)
    n_samples = len(t)

    recording = np.zeros((n_channels, n_samples))
    for ch in range(n_channels):
        phase = rng.uniform(0, 2 * np.pi)
        offset = dc_offset_uv * rng.uniform(0.5, 1.5)
        alpha = alpha_amplitude_uv * np.sin(2 * np.pi * alpha_freq_hz * t + phase)
        noise = noise_amplitude_uv * generate_pink_noise(n_samples, rng)
        recording[ch] = offset + alpha + noise

    return recording


def inject_dropouts(
    recording: np.ndarray,
    dropout_rate: float = DEFAULT_DROPOUT_RATE,
    seed: int = DEFAULT_RANDOM_SEED,
) -> np.ndarray:
    """
    Replace a random fraction of samples with NaN.

    Parameters
    ----------
    recording : np.ndarray
        Recording with shape (n_channels, n_samples).
    dropout_rate : float
        Probability that any one sample is lost, in [0, 1].
    seed : int
        Random seed for reproducibility.

    Returns
    -------
    np.ndarray
        Float copy of the recording with NaN at dropped samples.
    """
    if not 0.0 <= dropout_rate <= 1.0:
        raise ValueError(f"dropout_rate must be in [0, 1], got {dropout_rate}")

    rng = np.random.default_rng(seed)
    corrupted = np.array(recording, dtype=np.float64, copy=True)
    corrupted[rng.random(corrupted.shape) < dropout_rate] = np.nan
    return corrupted
