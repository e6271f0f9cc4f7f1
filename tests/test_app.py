import sys
from pathlib import Path
from types import SimpleNamespace

import matplotlib

matplotlib.use("Agg")

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from voice_spectrogram.app import AudioSystem, SpectrogramWindow
from voice_spectrogram.audio import DemoSource
from voice_spectrogram.config import VisualizerConfig


def _system(**overrides) -> AudioSystem:
    base = dict(colormap=None, fft_size=2048, width=320, height=240)
    base.update(overrides)
    config = VisualizerConfig(**base)
    return AudioSystem(DemoSource(config.sample_rate, config.block_size, seed=0), config)


def test_update_skips_non_positive_delta():
    system = _system()
    assert system.update(0.0, 300, 200) is False
    assert system.avg_fps == 0.0


def test_update_drives_both_views():
    system = _system()
    assert system.update(1 / 60, 300, 200) is True
    assert system.avg_fps == 3.0
    assert system.spectrogram.canvas.width == 300
    assert system.bar_view.canvas.height == 200
    assert system.analyser.data.any()


def test_toggle_view_and_keys():
    system = _system()
    assert system.active_visualizer is system.spectrogram
    assert system.handle_key("v") is True
    assert system.visualize_mode == "1d-fft"
    assert system.active_visualizer is system.bar_view
    assert system.handle_key(" ") is True
    assert system.bar_view.paused
    assert not system.spectrogram.paused
    assert system.handle_key("x") is False
    assert system.handle_key(None) is False
    assert system.toggle_view() == "spectrogram"


def test_frequency_keys_step_the_active_view():
    system = _system()
    system.handle_key("down")
    assert system.spectrogram.scale.max_frequency == 14500.0
    system.handle_key("up")
    system.handle_key("up")
    assert system.spectrogram.scale.max_frequency == 15000.0


def test_tracking_key_flips_both_flags():
    system = _system()
    system.handle_key("f")
    assert system.spectrogram.track.state == "both"
    assert system.bar_view.track.state == "idle"


def test_window_timer_renders_active_view():
    window = SpectrogramWindow(_system())
    window.on_timer()
    window.on_timer()
    shape = window.im.get_array().shape
    assert shape[:2] == (240, 320)
    assert window.system.avg_fps > 0
    window.on_key(SimpleNamespace(key="n"))
    assert window.system.spectrogram.notation == "experimental"
