"""
Filter Bank - Per-Channel Streaming IIR Filters

Holds one independent high-pass filter per channel. Every channel runs the
same synthesized cascade of second-order sections but owns its own
delay-line memory, so no channel ever reads or writes another's state.

Filter Model (per section, transposed direct form II):
    y[n]  = b0 * x[n] + z1[n-1]
    z1[n] = b1 * x[n] - a1 * y[n] + z2[n-1]
    z2[n] = b2 * x[n] - a2 * y[n]

State:
    Each channel's state is an array of shape (n_sections, 2) holding
    (z1, z2) for every section. It starts at zero and is never reset by
    the stage; ``multi_step`` over a block leaves it exactly where the
    same number of ``single_step`` calls would.

Usage:
    from eeg_pipes.filtering.filter_bank import FilterBank

    bank = FilterBank.from_config(config)
    y = bank.step_one(0, 12.5)
    block = bank.step_many(1, [1.0, 2.0, 3.0])
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import math
from numbers import Real
from typing import TYPE_CHECKING, Callable, Sequence

import numpy as np
from scipy import signal

from eeg_pipes.errors import ConfigError, FilterDesignError
from eeg_pipes.filtering.design import design_highpass_sos

if TYPE_CHECKING:
    from eeg_pipes.pipes.safe_highpass import StageConfig

logger = logging.getLogger(__name__)

# (order, characteristic, cutoff_frequency, sampling_rate) -> sos array
DesignFunction = Callable[..., np.ndarray]


def _is_integer(value: object) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


def _is_positive_real(value: object) -> bool:
    return (
        isinstance(value, Real)
        and not isinstance(value, bool)
        and math.isfinite(value)
        and value > 0
    )


@dataclass
class IIRFilter:
    """
    Streaming IIR filter built from second-order sections.

    Parameters
    ----------
    sos : np.ndarray
        Section coefficients, shape (n_sections, 6).

    Attributes
    ----------
    state : np.ndarray
        Delay-line memory, shape (n_sections, 2). Zero on construction
        unless given; a given state is copied, never shared.

    Examples
    --------
    >>> filt = IIRFilter(sos=design_highpass_sos(2, "butterworth", 2.0, 256.0))
    >>> y = filt.single_step(1.0)
    >>> block = filt.multi_step(np.ones(12))
    """

    sos: np.ndarray
    state: np.ndarray = field(default_factory=lambda: np.array([]))

    def __post_init__(self) -> None:
        """Validate coefficients and initialize filter state."""
        self.sos = np.array(self.sos, dtype=np.float64)
        if self.sos.ndim != 2 or self.sos.shape[0] < 1 or self.sos.shape[1] != 6:
            raise FilterDesignError(
                f"sos must have shape (n_sections, 6), got {self.sos.shape}"
            )
        state = np.array(self.state, dtype=np.float64)
        if state.size == 0:
            state = np.zeros((self.n_sections, 2), dtype=np.float64)
        elif state.shape != (self.n_sections, 2):
            raise FilterDesignError(
                f"state must have shape ({self.n_sections}, 2), got {state.shape}"
            )
        self.state = state

    @property
    def n_sections(self) -> int:
        """Number of cascaded second-order sections."""
        return self.sos.shape[0]

    def reset(self) -> None:
        """Reset filter to initial state."""
        self.state = np.zeros((self.n_sections, 2), dtype=np.float64)

    def single_step(self, value: float) -> float:
        """
        Process one sample and advance the state by one step.

        Parameters
        ----------
        value : float
            Input sample. Must be a finite number (gaps are handled upstream).

        Returns
        -------
        float
            Filtered output sample.
        """
        output, self.state = signal.sosfilt(
            self.sos, np.array([value], dtype=np.float64), zi=self.state
        )
        return float(output[0])

    def multi_step(self, values: Sequence[float] | np.ndarray) -> np.ndarray:
        """
        Filter a block of samples, advancing the state once per sample.

        Parameters
        ----------
        values : array_like
            Input samples, shape (n_samples,).

        Returns
        -------
        np.ndarray
            Filtered samples, shape (n_samples,).
        """
        values = np.asarray(values, dtype=np.float64)
        if values.ndim != 1:
            raise ValueError(f"values must be 1D, got shape {values.shape}")
        if values.size == 0:
            return np.zeros(0, dtype=np.float64)

        output, self.state = signal.sosfilt(self.sos, values, zi=self.state)
        return output


class FilterBank:
    """
    One independent ``IIRFilter`` per channel.

    Parameters
    ----------
    filters : list of IIRFilter
        Per-channel filters, indexed by channel. Each must own its arrays.

    Attributes
    ----------
    n_channels : int
        Number of channels in the bank.
    """

    def __init__(self, filters: list[IIRFilter]) -> None:
        if len(filters) < 1:
            raise ConfigError("FilterBank requires at least one channel")
        self._filters = list(filters)

    @classmethod
    def construct(
        cls,
        n_channels: int,
        order: int,
        characteristic: str,
        cutoff_frequency: float,
        sampling_rate: float,
        design: DesignFunction = design_highpass_sos,
    ) -> "FilterBank":
        """
        Synthesize coefficients and build one fresh filter per channel.

        The synthesis function is called once per channel, so every channel
        receives its own coefficient array.

        Parameters
        ----------
        n_channels : int
            Number of channels (>= 1).
        order : int
            Number of cascaded second-order sections.
        characteristic : str
            Response shape passed to ``design``.
        cutoff_frequency : float
            Cutoff in Hz.
        sampling_rate : float
            Sampling rate in Hz.
        design : callable
            Coefficient synthesis function. Defaults to scipy-backed
            ``design_highpass_sos``.

        Returns
        -------
        FilterBank
            Bank with zeroed state on every channel.

        Raises
        ------
        ConfigError
            If a parameter is invalid, or synthesis fails or returns
            unusable coefficients.
        """
        if not _is_integer(n_channels) or n_channels < 1:
            raise ConfigError(f"n_channels must be an integer >= 1, got {n_channels!r}")
        if not _is_integer(order) or order < 1:
            raise ConfigError(f"order must be an integer >= 1, got {order!r}")
        if not isinstance(characteristic, str) or not characteristic:
            raise ConfigError(f"characteristic must be a non-empty string, got {characteristic!r}")
        if not _is_positive_real(cutoff_frequency):
            raise ConfigError(f"cutoff_frequency must be > 0 Hz, got {cutoff_frequency!r}")
        if not _is_positive_real(sampling_rate):
            raise ConfigError(f"sampling_rate must be > 0 Hz, got {sampling_rate!r}")

        filters = []
        for _ in range(n_channels):
            try:
                sos = design(order, characteristic, cutoff_frequency, sampling_rate)
                filters.append(IIRFilter(sos=sos))
            except ConfigError:
                raise
            except Exception as e:
                raise FilterDesignError(f"Filter synthesis failed: {e}") from e

        logger.info(
            "Built %d-channel high-pass bank: %d sections, %s, fc=%.3g Hz, fs=%.3g Hz",
            n_channels,
            filters[0].n_sections,
            getattr(characteristic, "value", characteristic),
            cutoff_frequency,
            sampling_rate,
        )
        return cls(filters)

    @classmethod
    def from_config(
        cls,
        config: "StageConfig",
        design: DesignFunction = design_highpass_sos,
    ) -> "FilterBank":
        """Build a bank from a validated ``StageConfig``."""
        return cls.construct(
            n_channels=config.n_channels,
            order=config.order,
            characteristic=config.characteristic,
            cutoff_frequency=config.cutoff_frequency,
            sampling_rate=config.sampling_rate,
            design=design,
        )

    @property
    def n_channels(self) -> int:
        """Number of channels in the bank."""
        return len(self._filters)

    def step_one(self, channel: int, value: float) -> float:
        """
        Advance one channel by exactly one sample.

        Parameters
        ----------
        channel : int
            Channel index.
        value : float
            Finite input sample (never a gap).

        Returns
        -------
        float
            Filtered sample.
        """
        return self._filter(channel).single_step(value)

    def step_many(self, channel: int, values: Sequence[float] | np.ndarray) -> np.ndarray:
        """
        Advance one channel by ``len(values)`` samples.

        Output and final state are identical to calling ``step_one`` once
        per element, in order.
        """
        return self._filter(channel).multi_step(values)

    def state(self, channel: int) -> np.ndarray:
        """Return a copy of one channel's delay-line memory."""
        return self._filter(channel).state.copy()

    def reset(self) -> None:
        """Reset every channel to zero state."""
        for filt in self._filters:
            filt.reset()

    def _filter(self, channel: int) -> IIRFilter:
        if not 0 <= channel < len(self._filters):
            raise IndexError(
                f"channel {channel} out of range for {len(self._filters)}-channel bank"
            )
        return self._filters[channel]

    def __repr__(self) -> str:
        return (
            f"FilterBank("
            f"n_channels={self.n_channels}, "
            f"n_sections={self._filters[0].n_sections})"
        )
