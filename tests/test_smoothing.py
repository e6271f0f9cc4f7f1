import math
import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from voice_spectrogram.smoothing import (
    PEAK_SENTINEL,
    FormantEstimate,
    Peak,
    detect_peaks,
    estimate_formants,
    moving_average,
    refine_fundamental,
)


def test_moving_average_constant_input_is_unchanged():
    out = moving_average(np.full(50, 7.0), half_window=100)
    assert out.shape == (50,)
    assert np.allclose(out, 7.0)


def test_moving_average_shrinks_divisor_at_edges():
    out = moving_average([0.0, 3.0, 6.0], half_window=1)
    assert np.allclose(out, [1.5, 3.0, 4.5])


def test_moving_average_respects_limit():
    data = np.arange(20, dtype=float)
    out = moving_average(data, half_window=2, limit=10)
    assert out.shape == (10,)
    # Values beyond the limit are not part of the window.
    assert out[9] == pytest.approx((7 + 8 + 9) / 3)


def test_moving_average_empty():
    assert moving_average([], half_window=3).size == 0


def test_detect_peaks_sentinel_and_segment_maxima():
    peaks = detect_peaks([0, 5, 1, 2, 9, 3], base_segment_size=3, growth_factor=1)
    assert peaks[0] == Peak(*PEAK_SENTINEL)
    assert peaks[1:] == [Peak(1.0, 5.0), Peak(4.0, 9.0)]


def test_detect_peaks_constant_segments_count():
    for length in (1, 6, 12, 13, 100):
        peaks = detect_peaks(np.ones(length), base_segment_size=6, growth_factor=1)
        assert len(peaks) == math.ceil(length / 6) + 1


def test_detect_peaks_only_sentinel_for_empty_input():
    assert detect_peaks([], base_segment_size=6, growth_factor=1.5) == [Peak(*PEAK_SENTINEL)]


def test_detect_peaks_grows_logarithmically():
    small = detect_peaks(np.ones(1000), base_segment_size=6, growth_factor=1.5)
    large = detect_peaks(np.ones(10000), base_segment_size=6, growth_factor=1.5)
    linear = detect_peaks(np.ones(10000), base_segment_size=6, growth_factor=1)
    assert len(large) - len(small) < 10
    assert len(large) < 30
    assert len(linear) > 1000


def test_detect_peaks_rejects_bad_parameters():
    with pytest.raises(ValueError):
        detect_peaks([1, 2], base_segment_size=0, growth_factor=1)
    with pytest.raises(ValueError):
        detect_peaks([1, 2], base_segment_size=2, growth_factor=0)


def _peaks(amplitudes):
    return [Peak(float(i * 10), float(a)) for i, a in enumerate(amplitudes)]


def test_estimate_formants_keeps_insertion_order():
    peaks = [
        Peak(1, 10),
        Peak(5, 20),
        Peak(10, 100),
        Peak(20, 30),
        Peak(40, 80),
        Peak(60, 10),
    ]
    formants = estimate_formants(peaks, count=3)
    assert len(formants) == 4
    assert formants[0] == FormantEstimate()
    assert formants[1] == FormantEstimate()
    assert formants[2].index == pytest.approx(10.0)
    assert formants[2].amplitude == 100
    assert formants[3].index == pytest.approx(40.0)
    assert formants[3].amplitude == 80
    assert formants[3].active


def test_estimate_formants_evicts_oldest_first():
    formants = estimate_formants(_peaks([10, 50, 5, 60, 5, 70, 5]), count=1)
    assert [f.amplitude for f in formants] == [60, 70]


def test_estimate_formants_requires_beating_the_evicted_entry():
    formants = estimate_formants(_peaks([10, 50, 5, 60, 5, 40, 5]), count=1)
    assert [f.amplitude for f in formants] == [50, 60]


def test_estimate_formants_ignores_plateaus():
    formants = estimate_formants(_peaks([10, 50, 50, 10]), count=2)
    assert not any(f.active for f in formants)


def test_estimate_formants_centroid_snaps_to_dominant_peak():
    peaks = [Peak(9, 50), Peak(10, 100), Peak(11, 90), Peak(12, 10)]
    formant = estimate_formants(peaks, count=1)[-1]
    linear = (9 * 50 + 10 * 100 + 11 * 90) / 240
    assert abs(formant.index - 10.0) < 0.05
    assert linear - 10.0 > 0.1


def test_refine_fundamental_centroid():
    assert refine_fundamental([0, 0, 10, 20, 10, 0, 0], 3) == pytest.approx(3.0)
    assert refine_fundamental([0, 0, 0, 20, 20, 0], 3) == pytest.approx(3.5)


def test_refine_fundamental_clips_window_and_handles_silence():
    assert refine_fundamental([30, 10, 0, 0], 0) == pytest.approx(0.25)
    assert refine_fundamental(np.zeros(8), 4) == 4.0
