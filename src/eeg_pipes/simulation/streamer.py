"""
Record Streamer - Upstream Source Simulation

Replays an in-memory recording as a stream of EEG records, either as
fixed-size chunks or one sample per record, mimicking a live headband
feed.

Usage:
    from eeg_pipes.simulation.streamer import RecordStreamer

    streamer = RecordStreamer(recording, sampling_rate_hz=256.0)
    for record in stage(streamer.get_chunks(chunk_size=12)):
        ...
"""

from __future__ import annotations

from typing import Any, Generator

import numpy as np

from eeg_pipes.constants import DEFAULT_CHUNK_SIZE, SAMPLING_RATE_HZ


class RecordStreamer:
    """
    Streams a recording as EEG records.

    Each record has the shape::

        {"timestamp": float, "info": dict, "data": [...]}

    where ``data`` holds one entry per channel: a list of samples for
    chunks, a single float for samples.

    Parameters
    ----------
    recording : np.ndarray
        Recording with shape (n_channels, n_samples). NaN marks gaps.
    sampling_rate_hz : float, optional
        Sampling rate of the recording. Default 256 Hz.
    channel_names : list of str, optional
        Names carried in every record's ``info``.

    Attributes
    ----------
    n_channels : int
        Number of channels in the recording.
    n_samples : int
        Total number of time samples.
    duration_sec : float
        Total recording duration in seconds.
    """

    def __init__(
        self,
        recording: np.ndarray,
        sampling_rate_hz: float = SAMPLING_RATE_HZ,
        channel_names: list[str] | None = None,
    ) -> None:
        self.recording = np.asarray(recording, dtype=np.float64)
        if self.recording.ndim != 2:
            raise ValueError(f"recording must be 2D, got shape {self.recording.shape}")

        self.sampling_rate_hz = sampling_rate_hz
        self.n_channels, self.n_samples = self.recording.shape
        self.duration_sec = self.n_samples / self.sampling_rate_hz

        if channel_names is None:
            channel_names = [f"ch{i}" for i in range(self.n_channels)]
        if len(channel_names) != self.n_channels:
            raise ValueError(
                f"Got {len(channel_names)} channel names for {self.n_channels} channels"
            )
        self.channel_names = list(channel_names)

        # Internal state
        self._current_sample = 0

    def reset(self) -> None:
        """Reset streamer to beginning of recording."""
        self._current_sample = 0

    def _record(self, data: list[Any], start_sample: int) -> dict[str, Any]:
        return {
            "timestamp": start_sample / self.sampling_rate_hz,
            "info": {
                "sampling_rate_hz": self.sampling_rate_hz,
                "channel_names": list(self.channel_names),
                "start_sample": start_sample,
            },
            "data": data,
        }

    def get_next_chunk(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> dict[str, Any] | None:
        """
        Get the next chunk record from the stream.

        Parameters
        ----------
        chunk_size : int
            Samples per channel. The final chunk may be shorter.

        Returns
        -------
        dict | None
            Chunk record, or None if stream exhausted.
        """
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
        if self._current_sample >= self.n_samples:
            return None

        start = self._current_sample
        end = min(start + chunk_size, self.n_samples)
        self._current_sample = end

        return self._record(self.recording[:, start:end].tolist(), start)

    def get_chunks(
        self,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> Generator[dict[str, Any], None, None]:
        """
        Generator that yields all chunk records from the recording.

        Yields
        ------
        dict
            Chunk record with ``data`` as a list of per-channel sample lists.
        """
        self.reset()

        while True:
            record = self.get_next_chunk(chunk_size)
            if record is None:
                break
            yield record

    def get_samples(self) -> Generator[dict[str, Any], None, None]:
        """
        Generator that yields one record per time sample.

        Yields
        ------
        dict
            Sample record with ``data`` as a list of per-channel floats.
        """
        self.reset()

        while self._current_sample < self.n_samples:
            start = self._current_sample
            self._current_sample += 1
            yield self._record(self.recording[:, start].tolist(), start)

    def get_chunk_count(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
        """Total number of chunks, including a truncated final chunk."""
        return int(np.ceil(self.n_samples / chunk_size))

    def __repr__(self) -> str:
        return (
            f"RecordStreamer("
            f"n_channels={self.n_channels}, "
            f"duration={self.duration_sec:.2f}s, "
            f"fs={self.sampling_rate_hz:.0f}Hz)"
        )
