"""
Logging configuration for EEG Pipes.

Library modules log through ``logging.getLogger(__name__)`` and never
install handlers themselves. Entry points (demos, notebooks) call
``setup_logging`` once to route the ``eeg_pipes`` namespace to the console.

Usage:
    from eeg_pipes.logging_config import setup_logging
    setup_logging(dev_mode=True)
"""

from __future__ import annotations

import logging
import sys

ROOT_LOGGER_NAME = "eeg_pipes"

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEV_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - "
    "[%(filename)s:%(lineno)d] - %(message)s"
)


def setup_logging(
    level: int = logging.INFO,
    dev_mode: bool = False,
) -> logging.Logger:
    """
    Configure the ``eeg_pipes`` logger with a single console handler.

    Parameters
    ----------
    level : int
        Logging level for normal operation. Default is INFO.
    dev_mode : bool
        If True, log at DEBUG and include file/line information.

    Returns
    -------
    logging.Logger
        The configured package logger.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)

    # Remove existing handlers so repeated calls do not duplicate output
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    if dev_mode:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(DEV_FORMAT if dev_mode else DEFAULT_FORMAT))

    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False

    return logger

