"""
Gap Repair - Filtering Around Missing Samples

Makes a channel block safe to push through a stateful IIR filter and puts
the gaps back afterwards:

    repair  : fill each missing sample from its immediate neighbours and
              remember where the gaps were
    restore : overwrite the filter output at those positions with MISSING

Fill rule (per gap, using the ORIGINAL neighbours, never repaired ones):
    both neighbours present -> their mean
    one neighbour present   -> that neighbour
    none present            -> 0.0

The filter does see the fill value, so its state keeps advancing at the
block's sample rate; only the emitted value at a gap is discarded.

Single samples follow a different rule handled by the stage: a missing
sample is passed through and the channel's filter is not advanced.

Missing samples may be given as ``None`` or NaN. Gap positions are
tracked as indices, so ``restore`` never compares against a sentinel.
"""

from __future__ import annotations

from dataclasses import dataclass
from numbers import Real
from typing import Any, Sequence

import numpy as np

# Value written back at gap positions in emitted blocks
MISSING: float = float("nan")


@dataclass
class RepairResult:
    """
    Output of ``repair``.

    Attributes
    ----------
    safe_series : np.ndarray
        Gap-free copy of the input, shape (n_samples,).
    gap_positions : np.ndarray
        Ascending indices that were missing in the input (dtype intp).
    """

    safe_series: np.ndarray
    gap_positions: np.ndarray

    @property
    def n_gaps(self) -> int:
        """Number of repaired samples."""
        return int(self.gap_positions.size)


def is_missing(value: Any) -> bool:
    """
    Return True if a single sample is a gap (None or NaN).

    Raises
    ------
    TypeError
        If the sample is not a real number. Strings and Decimals are
        rejected here so they can never reach a filter as NaN.
    """
    if value is None:
        return True
    if isinstance(value, np.ndarray) and value.ndim == 0:
        value = value.item()
    if not isinstance(value, Real):
        raise TypeError(
            f"sample must be a real number or None, got {type(value).__name__}"
        )
    return bool(np.isnan(value))


def interpolate(before: float | None, after: float | None) -> float:
    """
    Fill value for a gap from its neighbours.

    Parameters
    ----------
    before, after : float or None
        Neighbour values; None means absent (series boundary or itself a gap).

    Returns
    -------
    float
        Mean of the present neighbours, or 0.0 if neither is present.

    Examples
    --------
    >>> interpolate(1.0, 3.0)
    2.0
    >>> interpolate(None, 5.0)
    5.0
    >>> interpolate(None, None)
    0.0
    """
    if before is not None:
        if after is not None:
            return (before + after) / 2.0
        return float(before)
    if after is not None:
        return float(after)
    return 0.0


def missing_mask(series: Sequence[Any] | np.ndarray) -> np.ndarray:
    """Boolean mask of gap positions, shape (n_samples,)."""
    if isinstance(series, np.ndarray) and series.dtype.kind in "fiu":
        return np.isnan(series) if series.dtype.kind == "f" else np.zeros(series.shape, dtype=bool)
    return np.array([is_missing(value) for value in series], dtype=bool)


def repair(
    series: Sequence[Any] | np.ndarray,
    missing: np.ndarray | None = None,
) -> RepairResult:
    """
    Replace every gap in a block with a neighbour-based fill value.

    Parameters
    ----------
    series : array_like
        One channel's block, shape (n_samples,). Gaps are None or NaN.
    missing : np.ndarray, optional
        Explicit boolean gap mask, shape (n_samples,). When given it is used
        instead of inspecting the values, so NaN-free data can carry gaps.

    Returns
    -------
    RepairResult
        Gap-free float64 series and the ordered gap indices.

    Examples
    --------
    >>> result = repair([1.0, float("nan"), 3.0])
    >>> result.safe_series.tolist(), result.gap_positions.tolist()
    ([1.0, 2.0, 3.0], [1])
    """
    explicit = missing is not None
    if explicit:
        missing = np.asarray(missing, dtype=bool)
    else:
        missing = missing_mask(series)

    n_samples = len(series)
    if missing.shape != (n_samples,):
        raise ValueError(
            f"missing mask has shape {missing.shape}, expected ({n_samples},)"
        )

    safe = np.zeros(n_samples, dtype=np.float64)
    present = ~missing
    values = [series[i] for i in np.flatnonzero(present)]
    if explicit:
        for i, value in zip(np.flatnonzero(present), values):
            if is_missing(value):
                raise ValueError(f"sample {i} is marked present but holds {value!r}")
    safe[present] = np.asarray(values, dtype=np.float64)

    gap_positions = np.flatnonzero(missing)
    for i in gap_positions:
        # Neighbours come from the original values: fills never chain
        before = safe[i - 1] if i > 0 and present[i - 1] else None
        after = safe[i + 1] if i + 1 < n_samples and present[i + 1] else None
        safe[i] = interpolate(before, after)

    return RepairResult(safe_series=safe, gap_positions=gap_positions)


def restore(
    series: Sequence[float] | np.ndarray,
    gap_positions: Sequence[int] | np.ndarray,
    marker: float = MISSING,
) -> np.ndarray:
    """
    Mark recorded gap positions as missing again.

    Parameters
    ----------
    series : array_like
        Filtered block, shape (n_samples,).
    gap_positions : array_like of int
        Indices returned by ``repair``.
    marker : float
        Value written at each gap. Default is NaN.

    Returns
    -------
    np.ndarray
        Float64 copy of ``series`` with ``marker`` at every gap position and
        all other positions untouched.
    """
    restored = np.array(series, dtype=np.float64, copy=True)
    gap_positions = np.asarray(gap_positions, dtype=np.intp)
    if gap_positions.size > 0:
        restored[gap_positions] = marker
    return restored
