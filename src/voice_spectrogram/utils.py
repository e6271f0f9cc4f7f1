"""Numeric helpers shared by the scale and analysis code."""

from __future__ import annotations

import math

import numpy as np

EPS = 1e-12

# Digits kept by ``base_log`` so that neighbouring bins do not flicker across a
# pixel boundary because of float noise.
LOG_PRECISION = 9


def dbfs(x: np.ndarray) -> np.ndarray:
    """Convert a linear magnitude array into dBFS."""
    return 20.0 * np.log10(np.maximum(x, EPS))


def base_log(number: float, base: float) -> float:
    """Return ``log_base(number)`` rounded to :data:`LOG_PRECISION` digits.

    ``number <= 0`` yields ``-inf`` instead of raising.
    """
    if number <= 0:
        return float("-inf")
    return round(math.log(number) / math.log(base), LOG_PRECISION)


def un_base_log(answer: float, base: float) -> float:
    """Inverse of :func:`base_log`."""
    return base**answer


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


__all__ = ["EPS", "LOG_PRECISION", "dbfs", "base_log", "un_base_log", "round_half_up"]
