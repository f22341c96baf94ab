#!/usr/bin/env python
"""
EEG Pipes - One-Click Demo

Simulates a 4-channel EEG recording with a large electrode offset and
random sample dropouts, streams it through the safe high-pass stage in
chunks, and prints how many gaps were carried through untouched.

Usage:
    pip install -e .
    python run_demo.py

For custom parameters, edit configs/default_pipes.yaml.
"""

from __future__ import annotations

import sys


def main() -> int:
    """Run the safe high-pass filter demo."""
    try:
        from eeg_pipes.pipes.safe_highpass import main as demo
    except ImportError as e:
        print(f"[!] Cannot import eeg_pipes ({e}). Install with: pip install -e .")
        return 1

    demo()
    return 0


if __name__ == "__main__":
    sys.exit(main())
