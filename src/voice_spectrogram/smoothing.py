"""Stateless smoothing and peak-picking routines for byte spectra."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Sequence

import numpy as np

# Anchor emitted ahead of every peak list so the first real peak has a left
# neighbour when formants are picked.
PEAK_SENTINEL = (1.0, 10.0)

# Exponent applied to amplitudes when averaging a formant position. Large
# enough that the loudest of three neighbouring peaks dominates.
FORMANT_WEIGHT_EXPONENT = 40


@dataclass(frozen=True)
class Peak:
    index: float
    amplitude: float


@dataclass(frozen=True)
class FormantEstimate:
    index: float = 0.0
    amplitude: float = 0.0
    active: bool = False


def moving_average(
    samples: Sequence[float] | np.ndarray, half_window: int, limit: int = 1000
) -> np.ndarray:
    """Centered moving average without zero padding.

    Only the first ``min(len(samples), limit)`` values are used. Near the edges
    the window is clipped and the divisor shrinks accordingly.
    """
    data = np.asarray(samples, dtype=np.float64)
    n = min(data.size, int(limit))
    if n <= 0:
        return np.zeros(0, dtype=np.float64)
    data = data[:n]
    half_window = max(0, int(half_window))
    csum = np.concatenate(([0.0], np.cumsum(data)))
    idx = np.arange(n)
    lo = np.clip(idx - half_window, 0, n)
    hi = np.clip(idx + half_window + 1, 0, n)
    return (csum[hi] - csum[lo]) / (hi - lo)


def detect_peaks(
    samples: Sequence[float] | np.ndarray,
    base_segment_size: float,
    growth_factor: float,
) -> list[Peak]:
    """Keep the maximum of successive segments of exponentially growing size.

    Segment ``n`` (starting at 1) spans ``base_segment_size * growth_factor **
    (n - 1)`` samples. The maximum of each segment (the later index on ties) is
    appended when the segment ends; a trailing partial segment is flushed at
    the end of the input. The first element is always :data:`PEAK_SENTINEL`.
    """
    if base_segment_size <= 0:
        raise ValueError("base_segment_size must be positive")
    if growth_factor <= 0:
        raise ValueError("growth_factor must be positive")

    data = np.asarray(samples, dtype=np.float64)
    peaks = [Peak(*PEAK_SENTINEL)]

    segment_size = float(base_segment_size)
    segment_end = segment_size
    peak_index = 0
    peak_value = 0.0
    pending = False
    for k, value in enumerate(data):
        if k >= segment_end:
            peaks.append(Peak(float(peak_index), float(peak_value)))
            segment_size *= growth_factor
            segment_end += segment_size
            peak_value = 0.0
            pending = False
        if value >= peak_value:
            peak_index = k
            peak_value = float(value)
        pending = True
    if pending:
        peaks.append(Peak(float(peak_index), float(peak_value)))
    return peaks


def estimate_formants(peaks: Sequence[Peak], count: int = 3) -> list[FormantEstimate]:
    """Pick formants out of a peak list.

    Every local maximum (strictly louder than both neighbours) that is louder
    than the entry at the head of the result buffer is pushed into the buffer,
    evicting that head entry. Its position is the amplitude**40 weighted
    centroid of itself and its two neighbours.

    The buffer holds ``count + 1`` entries ordered by insertion, oldest first.
    Untouched slots stay as inactive, zero-amplitude estimates.
    """
    count = max(0, int(count))
    found: deque[FormantEstimate] = deque(
        [FormantEstimate()] * (count + 1), maxlen=count + 1
    )

    for i in range(1, len(peaks) - 1):
        left, mid, right = peaks[i - 1], peaks[i], peaks[i + 1]
        if mid.amplitude <= found[0].amplitude:
            continue
        if not (left.amplitude < mid.amplitude > right.amplitude):
            continue
        neighbours = (left, mid, right)
        weights = np.array(
            [p.amplitude for p in neighbours], dtype=np.float64
        ) ** FORMANT_WEIGHT_EXPONENT
        positions = np.array([p.index for p in neighbours], dtype=np.float64)
        centroid = float(np.dot(positions, weights) / weights.sum())
        found.append(FormantEstimate(centroid, mid.amplitude, True))

    return list(found)


def refine_fundamental(
    samples: Sequence[float] | np.ndarray, approx_index: int, span: int = 2
) -> float:
    """Sub-bin position of a peak: amplitude-weighted centroid of ``approx_index ± span``."""
    data = np.asarray(samples, dtype=np.float64)
    lo = max(int(approx_index) - span, 0)
    hi = min(int(approx_index) + span + 1, data.size)
    window = data[lo:hi]
    total = float(window.sum())
    if total <= 0.0:
        return float(approx_index)
    return float(np.dot(np.arange(lo, hi, dtype=np.float64), window) / total)


__all__ = [
    "FORMANT_WEIGHT_EXPONENT",
    "PEAK_SENTINEL",
    "FormantEstimate",
    "Peak",
    "detect_peaks",
    "estimate_formants",
    "moving_average",
    "refine_fundamental",
]
