"""
Input Validators for EEG Pipes

Provides validation for:
- High-pass cutoff against the Nyquist frequency
- YAML configuration file parsing

These validators return result objects with errors, warnings and
recovery suggestions instead of raising, so callers decide what is fatal.
The stage itself turns any error into a ConfigError at construction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from eeg_pipes.constants import NYQUIST_MARGIN_FRACTION, SAMPLING_RATE_HZ


# =============================================================================
# Validation Result Types
# =============================================================================


@dataclass
class NyquistResult:
    """Result of cutoff-vs-Nyquist validation.

    Attributes
    ----------
    is_valid : bool
        True if the cutoff lies strictly inside (0, Nyquist).
    cutoff_frequency_hz : float
        The cutoff being validated.
    sampling_rate_hz : float
        The sampling rate being validated.
    nyquist_frequency_hz : float
        Nyquist frequency (sampling_rate / 2).
    normalized_cutoff : float
        Cutoff as a fraction of Nyquist.
    warnings : list[str]
        Non-fatal warnings (e.g., cutoff close to Nyquist).
    errors : list[str]
        Fatal errors (e.g., cutoff at or above Nyquist).
    recovery_suggestions : list[str]
        Actionable suggestions for fixing issues.
    """

    is_valid: bool
    cutoff_frequency_hz: float
    sampling_rate_hz: float
    nyquist_frequency_hz: float
    normalized_cutoff: float
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    recovery_suggestions: list[str] = field(default_factory=list)


@dataclass
class ConfigValidationResult:
    """Result of YAML configuration file validation.

    Attributes
    ----------
    is_valid : bool
        True if config loaded and validated successfully.
    config : dict | None
        Loaded configuration (None if load failed).
    file_path : Path | None
        Path to the config file (None if using defaults).
    warnings : list[str]
        Non-fatal warnings (e.g., missing optional fields).
    errors : list[str]
        Fatal errors (e.g., parse failures).
    recovery_suggestions : list[str]
        Actionable suggestions for fixing issues.
    """

    is_valid: bool
    config: dict[str, Any] | None
    file_path: Path | None
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    recovery_suggestions: list[str] = field(default_factory=list)


# =============================================================================
# Nyquist Validation
# =============================================================================


def validate_cutoff(
    cutoff_frequency_hz: float,
    sampling_rate_hz: float = SAMPLING_RATE_HZ,
    margin_fraction: float = NYQUIST_MARGIN_FRACTION,
) -> NyquistResult:
    """
    Validate that a high-pass cutoff is realizable at the sampling rate.

    A digital filter needs 0 < fc < fs / 2. Cutoffs above
    ``margin_fraction`` of Nyquist are accepted with a warning since the
    filter then passes almost nothing.

    Parameters
    ----------
    cutoff_frequency_hz : float
        High-pass cutoff.
    sampling_rate_hz : float
        Sampling rate of the stream.
    margin_fraction : float, optional
        Fraction of Nyquist above which a warning is raised. Default 0.9.

    Returns
    -------
    NyquistResult
        Validation result with is_valid status and diagnostic info.

    Examples
    --------
    >>> validate_cutoff(60.0, 256.0).is_valid
    True
    >>> validate_cutoff(200.0, 256.0).errors
    ['NYQUIST VIOLATION: ...']
    """
    nyquist_freq = sampling_rate_hz / 2.0
    normalized = cutoff_frequency_hz / nyquist_freq if nyquist_freq > 0 else float("inf")

    warnings = []
    errors = []
    suggestions = []

    is_valid = True

    if sampling_rate_hz <= 0:
        is_valid = False
        errors.append(
            f"INVALID SAMPLING RATE: sampling rate must be > 0 Hz, got {sampling_rate_hz}."
        )
    elif cutoff_frequency_hz <= 0:
        is_valid = False
        errors.append(
            f"INVALID CUTOFF: cutoff frequency must be > 0 Hz, got {cutoff_frequency_hz}."
        )
    elif cutoff_frequency_hz >= nyquist_freq:
        is_valid = False
        errors.append(
            f"NYQUIST VIOLATION: Cutoff ({cutoff_frequency_hz} Hz) must be "
            f"< sampling_rate / 2 ({nyquist_freq} Hz)."
        )
        suggestions.append(
            f"Lower the cutoff below {margin_fraction * nyquist_freq:.1f} Hz, "
            f"or raise the sampling rate above {2.0 * cutoff_frequency_hz / margin_fraction:.1f} Hz."
        )
    elif normalized > margin_fraction:
        warnings.append(
            f"CUTOFF NEAR NYQUIST: Cutoff ({cutoff_frequency_hz} Hz) is "
            f"{normalized * 100:.0f}% of Nyquist ({nyquist_freq} Hz). "
            "Almost the entire band will be removed."
        )

    return NyquistResult(
        is_valid=is_valid,
        cutoff_frequency_hz=cutoff_frequency_hz,
        sampling_rate_hz=sampling_rate_hz,
        nyquist_frequency_hz=nyquist_freq,
        normalized_cutoff=normalized,
        warnings=warnings,
        errors=errors,
        recovery_suggestions=suggestions,
    )


# =============================================================================
# Configuration File Validation
# =============================================================================

# Required sections in config
REQUIRED_CONFIG_SECTIONS = ["temporal", "highpass"]

# Type specifications for validation
CONFIG_TYPE_SPECS = {
    "temporal": {
        "sampling_rate_hz": (float, 1.0, 100_000.0),
        "chunk_size": (int, 1, 100_000),
    },
    "highpass": {
        "order": (int, 1, 16),
        "cutoff_frequency_hz": (float, 0.001, 50_000.0),
    },
    "stream": {
        "n_channels": (int, 1, 10_000),
    },
}


def validate_config_file(
    config_path: Path | str | None = None,
    strict: bool = False,
) -> ConfigValidationResult:
    """
    Load and validate YAML configuration file.

    Provides graceful error handling with helpful messages for:
    - Missing files (falls back to defaults)
    - Malformed YAML (syntax errors)
    - Invalid parameter values (type/range checks, cutoff vs Nyquist)

    Parameters
    ----------
    config_path : Path or str, optional
        Path to YAML config file. If None, uses default_pipes.yaml.
    strict : bool
        If True, treat warnings as errors. Default False.

    Returns
    -------
    ConfigValidationResult
        Validation result with loaded config and any issues found.

    Examples
    --------
    >>> result = validate_config_file("configs/default_pipes.yaml")
    >>> result.is_valid
    True
    >>> result.config["highpass"]["order"]
    2
    """
    from eeg_pipes.config import DEFAULT_CONFIG_PATH, get_default_config
    from eeg_pipes.errors import FilterDesignError
    from eeg_pipes.filtering.design import FilterCharacteristic

    warnings = []
    errors = []
    suggestions = []

    # Determine file path
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH
    else:
        config_path = Path(config_path)

    # Attempt to load file
    config = None
    file_exists = config_path.exists()

    if not file_exists:
        warnings.append(
            f"CONFIG FILE NOT FOUND: '{config_path}' does not exist. "
            "Using built-in defaults."
        )
        suggestions.append(
            f"Create config file at '{config_path}' or use load_config() without path."
        )
        config = get_default_config()
    else:
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f)
            # Handle empty YAML file (returns None)
            if config is None:
                warnings.append(
                    f"CONFIG FILE EMPTY: '{config_path}' contains no data. "
                    "Using built-in defaults."
                )
                config = get_default_config()
        except yaml.YAMLError as e:
            errors.append(f"YAML PARSE ERROR in '{config_path}': {str(e)}")
            suggestions.append(
                "Check YAML syntax: proper indentation (2 spaces), "
                "colons after keys, no tabs."
            )
            config = get_default_config()
        except IOError as e:
            errors.append(f"FILE READ ERROR for '{config_path}': {str(e)}")
            suggestions.append("Check file permissions and path.")
            config = get_default_config()

    if not isinstance(config, dict):
        errors.append(
            f"INVALID STRUCTURE: '{config_path}' must contain a mapping of sections, "
            f"got {type(config).__name__}."
        )
        config = get_default_config()

    # Check required sections
    for section in REQUIRED_CONFIG_SECTIONS:
        if section not in config:
            if strict:
                errors.append(
                    f"MISSING REQUIRED SECTION: '{section}' not found in config."
                )
            else:
                warnings.append(
                    f"MISSING SECTION: '{section}' not found. Using defaults."
                )
            # Merge in defaults for missing section
            defaults = get_default_config()
            if section in defaults:
                config[section] = defaults[section]

    # Type and range validation
    for section, specs in CONFIG_TYPE_SPECS.items():
        if not isinstance(config.get(section), dict):
            continue
        for param, (expected_type, min_val, max_val) in specs.items():
            if param not in config[section]:
                continue
            value = config[section][param]

            # YAML has no float/int distinction for whole numbers
            accepted = (float, int) if expected_type is float else (expected_type,)
            if isinstance(value, bool) or not isinstance(value, accepted):
                if strict:
                    errors.append(
                        f"TYPE ERROR: {section}.{param} should be {expected_type.__name__}, "
                        f"got {type(value).__name__}."
                    )
                else:
                    warnings.append(
                        f"TYPE WARNING: {section}.{param} should be {expected_type.__name__}, "
                        f"got {type(value).__name__}. Attempting conversion."
                    )
                    try:
                        config[section][param] = expected_type(value)
                    except (ValueError, TypeError):
                        errors.append(
                            f"CONVERSION FAILED: Cannot convert {section}.{param} "
                            f"value '{value}' to {expected_type.__name__}."
                        )
                        continue
                value = config[section][param]

            # Range check (only for numeric types)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                if value < min_val or value > max_val:
                    warnings.append(
                        f"RANGE WARNING: {section}.{param}={value} is outside "
                        f"expected range [{min_val}, {max_val}]."
                    )

    # Characteristic must name a known filter shape
    highpass = config.get("highpass", {})
    if "characteristic" in highpass:
        try:
            FilterCharacteristic.parse(highpass["characteristic"])
        except FilterDesignError as e:
            errors.append(f"UNKNOWN CHARACTERISTIC: {e}")

    # Cutoff must be realizable at the configured sampling rate
    cutoff = highpass.get("cutoff_frequency_hz")
    sampling_rate = config.get("temporal", {}).get("sampling_rate_hz")
    if isinstance(cutoff, (int, float)) and isinstance(sampling_rate, (int, float)):
        nyquist_result = validate_cutoff(float(cutoff), float(sampling_rate))
        errors.extend(nyquist_result.errors)
        warnings.extend(nyquist_result.warnings)
        suggestions.extend(nyquist_result.recovery_suggestions)

    # Determine overall validity
    is_valid = len(errors) == 0
    if strict:
        is_valid = is_valid and len(warnings) == 0

    return ConfigValidationResult(
        is_valid=is_valid,
        config=config,
        file_path=config_path if file_exists else None,
        warnings=warnings,
        errors=errors,
        recovery_suggestions=suggestions,
    )
