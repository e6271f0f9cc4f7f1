import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from voice_spectrogram.scroll import ScrollBuffer


def test_exact_advances_leave_no_residual():
    buf = ScrollBuffer(pixels_per_second=100)
    assert [buf.advance(0.01) for _ in range(3)] == [1, 1, 1]
    assert buf.accumulated_fraction == pytest.approx(0.0)


def test_fractions_accumulate_between_frames():
    buf = ScrollBuffer(pixels_per_second=120)
    assert [buf.advance(0.01) for _ in range(3)] == [1, 1, 2]
    assert buf.accumulated_fraction == 0.0


def test_minimum_advance_is_one_pixel():
    buf = ScrollBuffer(pixels_per_second=10)
    assert [buf.advance(0.01) for _ in range(5)] == [1] * 5
    assert buf.accumulated_fraction >= 0.0


def test_large_steps():
    buf = ScrollBuffer(pixels_per_second=100)
    assert buf.advance(0.5) == 50
    assert buf.advance(0.025) == 3  # 2.5 rounds half up


def test_paused_buffer_does_not_move():
    buf = ScrollBuffer(pixels_per_second=100, accumulated_fraction=0.3)
    assert buf.pause_toggle() is True
    for dt in (0.0, 0.01, 1.0):
        assert buf.advance(dt) == 0
    assert buf.accumulated_fraction == 0.3
    assert buf.pause_toggle() is False
    assert buf.advance(0.01) == 1


def test_reset():
    buf = ScrollBuffer(pixels_per_second=120)
    buf.advance(0.01)
    buf.reset()
    assert buf.accumulated_fraction == 0.0


def test_rounded_up_frames_are_not_paid_back():
    # 100 px/s at 60 fps adds 1.67 px per frame; each frame rounds to 2 and
    # the negative remainder is dropped, so the view runs at 120 px/s.
    buf = ScrollBuffer(pixels_per_second=100)
    steps = [buf.advance(1 / 60) for _ in range(60)]
    assert steps == [2] * 60
    assert sum(steps) == 120
    assert buf.accumulated_fraction == 0.0
