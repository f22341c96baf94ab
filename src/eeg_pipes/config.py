"""
Configuration Management for EEG Pipes

Loads stage parameters from YAML config files with fallback to
hardcoded defaults in eeg_pipes.constants.

The channel count is deliberately absent from the defaults: a stage
cannot be built until the caller (or the YAML file) supplies it.

Usage:
    from eeg_pipes.config import load_config, get_config_path

    cfg = load_config()  # Load default config
    cfg = load_config("configs/custom.yaml")  # Load custom config

    # Access parameters
    cutoff = cfg["highpass"]["cutoff_frequency_hz"]
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# File is at: src/eeg_pipes/config.py
# Project root: src/eeg_pipes -> src -> project_root
_THIS_FILE = Path(__file__)
PROJECT_ROOT = _THIS_FILE.parent.parent.parent

DEFAULT_CONFIG_PATH = PROJECT_ROOT / "configs" / "default_pipes.yaml"


def get_config_path(config_name: str = "default_pipes.yaml") -> Path:
    """
    Get the full path to a config file.

    Parameters
    ----------
    config_name : str
        Name of the config file (with or without .yaml extension).

    Returns
    -------
    Path
        Full path to the config file.
    """
    if not config_name.endswith(".yaml"):
        config_name = f"{config_name}.yaml"
    return PROJECT_ROOT / "configs" / config_name


def get_default_config() -> dict[str, Any]:
    """
    Return hardcoded default configuration.

    Used as fallback when config file is missing.
    """
    from eeg_pipes.constants import (
        CHARACTERISTIC,
        DEFAULT_CHUNK_SIZE,
        DEFAULT_CUTOFF_HZ,
        DEFAULT_DROPOUT_RATE,
        DEFAULT_RANDOM_SEED,
        DURATION_SEC,
        ORDER,
        SAMPLING_RATE_HZ,
    )

    return {
        "temporal": {
            "sampling_rate_hz": SAMPLING_RATE_HZ,
            "chunk_size": DEFAULT_CHUNK_SIZE,
        },
        "highpass": {
            "order": ORDER,
            "characteristic": CHARACTERISTIC,
            "cutoff_frequency_hz": DEFAULT_CUTOFF_HZ,
        },
        "simulation": {
            "duration_sec": DURATION_SEC,
            "dropout_rate": DEFAULT_DROPOUT_RATE,
            "random_seed": DEFAULT_RANDOM_SEED,
        },
    }


def load_config(config_path: str | Path | None = None) -> dict[str, Any]:
    """
    Load configuration from YAML file with fallback to defaults.

    Parameters
    ----------
    config_path : str or Path, optional
        Path to YAML config file. If None, uses default_pipes.yaml.
        If file doesn't exist, falls back to hardcoded defaults.

    Returns
    -------
    dict
        Configuration dictionary.

    Raises
    ------
    None
        This function never raises; it gracefully falls back to defaults.

    Examples
    --------
    >>> cfg = load_config()
    >>> cfg["highpass"]["cutoff_frequency_hz"]
    2.0
    >>> cfg["temporal"]["sampling_rate_hz"]
    256.0
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH
    else:
        config_path = Path(config_path)

    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f)
            if config is None:
                # Empty YAML file
                return get_default_config()
            return config
        except yaml.YAMLError:
            # For detailed error info, use validation.validate_config_file()
            logger.warning("Malformed YAML in %s, using defaults", config_path)
            return get_default_config()
        except IOError:
            logger.warning("Cannot read %s, using defaults", config_path)
            return get_default_config()
    else:
        logger.debug("Config file %s not found, using defaults", config_path)
        return get_default_config()


def load_config_safe(
    config_path: str | Path | None = None,
) -> tuple[dict[str, Any], list[str]]:
    """
    Load configuration with detailed error reporting.

    Unlike load_config(), this function returns error messages
    for debugging and user feedback.

    Parameters
    ----------
    config_path : str or Path, optional
        Path to YAML config file.

    Returns
    -------
    tuple[dict, list[str]]
        (config_dict, error_messages). Config is always valid (defaults used on error).
        error_messages is empty if load succeeded.
    """
    errors = []

    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH
    else:
        config_path = Path(config_path)

    if not config_path.exists():
        errors.append(f"Config file not found: {config_path}. Using defaults.")
        return get_default_config(), errors

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
        if config is None:
            errors.append(f"Config file is empty: {config_path}. Using defaults.")
            return get_default_config(), errors
        return config, errors
    except yaml.YAMLError as e:
        errors.append(
            f"YAML parse error in {config_path}: {e}. "
            "Check indentation and syntax. Using defaults."
        )
        return get_default_config(), errors
    except IOError as e:
        errors.append(f"Cannot read {config_path}: {e}. Using defaults.")
        return get_default_config(), errors


def save_config(config: dict[str, Any], config_path: str | Path) -> None:
    """
    Save configuration to a YAML file.

    Parameters
    ----------
    config : dict
        Configuration dictionary.
    config_path : str or Path
        Output path for the YAML file.
    """
    config_path = Path(config_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w", encoding="utf-8") as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)
