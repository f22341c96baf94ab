"""
High-Pass Coefficient Synthesis

Maps {order, characteristic, cutoff, sampling rate} to a cascade of
second-order sections (biquads) using scipy.signal. The rest of the
package treats this as a black box: it only ever sees the ``(n_sections, 6)``
sos array returned here.

Order convention:
    ``order`` counts cascaded biquads, so the designed filter has
    polynomial order ``2 * order`` and the sos array has ``order`` rows.

Chebyshev characteristics are type I with the passband ripple encoded in
the name (tschebyscheff05 = 0.5 dB, tschebyscheff3 = 3 dB).
"""

from __future__ import annotations

from enum import Enum

import numpy as np
from scipy import signal

from eeg_pipes.errors import FilterDesignError


class FilterCharacteristic(str, Enum):
    """Response shape of the synthesized high-pass filter."""

    BUTTERWORTH = "butterworth"
    BESSEL = "bessel"
    TSCHEBYSCHEFF05 = "tschebyscheff05"
    TSCHEBYSCHEFF1 = "tschebyscheff1"
    TSCHEBYSCHEFF2 = "tschebyscheff2"
    TSCHEBYSCHEFF3 = "tschebyscheff3"

    @classmethod
    def parse(cls, value: "FilterCharacteristic | str") -> "FilterCharacteristic":
        """
        Resolve a characteristic from an enum member or a name.

        Lookup ignores case, spaces, dashes and underscores.

        Raises
        ------
        FilterDesignError
            If the name matches no characteristic.
        """
        if isinstance(value, cls):
            return value
        key = str(value).lower().replace(" ", "").replace("-", "").replace("_", "")
        for member in cls:
            if member.value == key:
                return member
        valid = ", ".join(member.value for member in cls)
        raise FilterDesignError(
            f"Unknown filter characteristic '{value}'. Use one of: {valid}."
        )


# Passband ripple (dB) for each Chebyshev type I variant
CHEBYSHEV_RIPPLE_DB: dict[FilterCharacteristic, float] = {
    FilterCharacteristic.TSCHEBYSCHEFF05: 0.5,
    FilterCharacteristic.TSCHEBYSCHEFF1: 1.0,
    FilterCharacteristic.TSCHEBYSCHEFF2: 2.0,
    FilterCharacteristic.TSCHEBYSCHEFF3: 3.0,
}


def design_highpass_sos(
    order: int,
    characteristic: FilterCharacteristic | str,
    cutoff_frequency: float,
    sampling_rate: float,
) -> np.ndarray:
    """
    Synthesize a high-pass IIR filter as second-order sections.

    Parameters
    ----------
    order : int
        Number of cascaded second-order sections (>= 1).
    characteristic : FilterCharacteristic or str
        Response shape, e.g. "butterworth".
    cutoff_frequency : float
        -3 dB cutoff in Hz (Chebyshev: passband edge). Must lie in
        (0, sampling_rate / 2).
    sampling_rate : float
        Sampling rate in Hz.

    Returns
    -------
    np.ndarray
        Section coefficients with shape (order, 6), rows ``[b0, b1, b2, a0, a1, a2]``.

    Raises
    ------
    FilterDesignError
        If any parameter is invalid or scipy rejects the design.

    Examples
    --------
    >>> sos = design_highpass_sos(2, "butterworth", 2.0, 256.0)
    >>> sos.shape
    (2, 6)
    """
    characteristic = FilterCharacteristic.parse(characteristic)

    if isinstance(order, bool) or not isinstance(order, (int, np.integer)) or order < 1:
        raise FilterDesignError(f"order must be a positive integer, got {order!r}")
    if not sampling_rate > 0:
        raise FilterDesignError(f"sampling_rate must be > 0 Hz, got {sampling_rate!r}")
    if not cutoff_frequency > 0:
        raise FilterDesignError(
            f"cutoff_frequency must be > 0 Hz, got {cutoff_frequency!r}"
        )

    nyquist_hz = sampling_rate / 2.0
    if cutoff_frequency >= nyquist_hz:
        raise FilterDesignError(
            f"cutoff_frequency ({cutoff_frequency} Hz) must be below the Nyquist "
            f"frequency ({nyquist_hz} Hz) for sampling_rate={sampling_rate} Hz."
        )

    n = 2 * int(order)
    try:
        if characteristic is FilterCharacteristic.BUTTERWORTH:
            sos = signal.butter(
                n, cutoff_frequency, btype="highpass", fs=sampling_rate, output="sos"
            )
        elif characteristic is FilterCharacteristic.BESSEL:
            sos = signal.bessel(
                n,
                cutoff_frequency,
                btype="highpass",
                fs=sampling_rate,
                output="sos",
                norm="mag",
            )
        else:
            sos = signal.cheby1(
                n,
                CHEBYSHEV_RIPPLE_DB[characteristic],
                cutoff_frequency,
                btype="highpass",
                fs=sampling_rate,
                output="sos",
            )
    except ValueError as e:
        raise FilterDesignError(f"Filter synthesis failed: {e}") from e

    return np.asarray(sos, dtype=np.float64)
