import math
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from voice_spectrogram.scale import InvalidScaleMode, ScaleMode, ScaleState, ScaleTransform


def _transform(mode="log", max_frequency=1000.0, width=800, height=600, axis="horizontal"):
    state = ScaleState(mode=ScaleMode.parse(mode), log_base=2.0, max_frequency=max_frequency)
    transform = ScaleTransform(44100, 1024, state, axis=axis)
    transform.update_scale(width, height)
    return transform


def test_index_hz_round_trip_both_modes():
    for mode in ("linear", "log"):
        t = _transform(mode=mode)
        for hz in (0.0, 1.0, 27.5, 440.0, 999.9, 1000.0):
            assert math.isclose(t.hz_from_index(t.index_from_hz(hz)), hz, abs_tol=1e-9)


def test_index_from_hz_uses_nyquist_and_bin_count():
    t = _transform()
    assert t.index_from_hz(22050.0) == pytest.approx(1024.0)
    assert t.index_from_hz(0.0) == 0.0


def test_position_round_trip_within_one_pixel():
    for mode in ("linear", "log"):
        t = _transform(mode=mode)
        for x in range(0, 800, 7):
            assert abs(t.position_from_index(t.index_from_position(x)) - x) <= 1.0


def test_log_scale_maps_max_frequency_to_edge():
    t = _transform(mode="log", max_frequency=1000.0, width=800)
    assert t.position_from_hz(1000.0) == pytest.approx(800.0, abs=1e-6)
    assert t.position_from_hz(0.0) == float("-inf")


def test_linear_scale_factor():
    t = _transform(mode="linear", max_frequency=1000.0, width=800)
    top = t.index_from_hz(1000.0)
    assert t.scale_factor == pytest.approx(800.0 / top)
    assert t.position_from_index(top / 2) == pytest.approx(400.0)
    assert t.position_from_hz(0.0) == 0.0


def test_vertical_axis_uses_height():
    t = _transform(mode="linear", width=800, height=600, axis="vertical")
    assert t.position_from_hz(1000.0) == pytest.approx(600.0)


def test_update_scale_only_reports_real_resizes():
    state = ScaleState(mode=ScaleMode.LINEAR, max_frequency=1000.0)
    t = ScaleTransform(44100, 1024, state, axis="horizontal")
    assert t.update_scale(800, 600) is True
    factor = t.scale_factor
    assert t.update_scale(800, 600) is False
    assert t.scale_factor == factor
    assert t.update_scale(400, 600) is True
    assert t.scale_factor == pytest.approx(factor / 2)


def test_mode_and_max_frequency_changes_recompute_factor():
    t = _transform(mode="linear")
    linear_factor = t.scale_factor
    t.mode = "log"
    assert t.scale_factor != linear_factor
    t.max_frequency = 100000.0
    assert t.max_frequency == 22050.0
    assert t.position_from_hz(22050.0) == pytest.approx(800.0, abs=1e-6)


def test_invalid_mode_fails_fast():
    with pytest.raises(InvalidScaleMode):
        ScaleMode.parse("bark")
    t = _transform()
    with pytest.raises(InvalidScaleMode):
        t.mode = "mel"
    t.state.mode = "mel"
    with pytest.raises(InvalidScaleMode):
        t.position_from_index(10)
    with pytest.raises(InvalidScaleMode):
        t.index_from_position(10)
    assert issubclass(InvalidScaleMode, ValueError)


def test_log_rounding_is_stable_at_powers_of_base():
    t = _transform(mode="log")
    assert t.position_from_index(1.0) == 0.0
    assert t.position_from_index(0.0) == float("-inf")
    assert t.position_from_index(-3.0) == float("-inf")


def test_hz_from_position_inverts_position_from_hz():
    for mode in ("linear", "log"):
        t = _transform(mode=mode)
        for hz in (55.0, 440.0, 990.0):
            assert t.hz_from_position(t.position_from_hz(hz)) == pytest.approx(hz, rel=1e-6)


def test_min_frequency_is_validated_and_exposed():
    state = ScaleState(mode=ScaleMode.LINEAR, min_frequency=100.0, max_frequency=1000.0)
    t = ScaleTransform(44100, 1024, state)
    assert t.min_frequency == 100.0
    with pytest.raises(ValueError):
        ScaleTransform(44100, 1024, ScaleState(min_frequency=2000.0, max_frequency=1000.0))
