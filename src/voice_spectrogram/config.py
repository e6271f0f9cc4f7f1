"""Configuration for the live spectrogram."""

from __future__ import annotations

import dataclasses
import json
from pathlib import Path
from typing import Any, Dict, Optional

from .scale import ScaleMode
from .tracking import TrackConfig

_DEFAULTS_NAME = "visualizer_defaults.json"


@dataclasses.dataclass
class VisualizerConfig:
    """Settings shared by the audio front end and both visualizers."""

    sample_rate: int = 44100
    fft_size: int = 4096
    block_size: int = 1024
    smoothing_time_constant: float = 0.8
    min_decibels: float = -100.0
    max_decibels: float = -30.0
    speed: float = 100.0  # spectrogram scroll speed, pixels per second
    scale_mode: str = "log"
    log_base: float = 2.0
    min_frequency: float = 0.0
    spectrogram_max_frequency: float = 15000.0
    bar_view_max_frequency: float = 1000.0
    colormap: Optional[str] = "viridis"
    notation: str = "musical"
    scale_width: int = 100
    width: int = 1200
    height: int = 700
    frame_interval_ms: int = 16
    track_fundamental: bool = False
    track_formants: bool = False
    formant_count: int = 3
    fundamental_min_amplitude: float = 150.0
    first_run_only: bool = True
    peak_growth_factor: float = 1.1
    device: Optional[str] = None

    def __post_init__(self) -> None:
        ScaleMode.parse(self.scale_mode)
        if self.fft_size < 32 or self.fft_size & (self.fft_size - 1):
            raise ValueError("fft_size must be a power of two >= 32")
        if self.min_decibels >= self.max_decibels:
            raise ValueError("min_decibels must be below max_decibels")
        if not 0.0 <= self.smoothing_time_constant < 1.0:
            raise ValueError("smoothing_time_constant must be within [0, 1)")
        if not 0.0 <= self.min_frequency < min(
            self.spectrogram_max_frequency, self.bar_view_max_frequency
        ):
            raise ValueError("min_frequency must be below both max frequencies")

    @property
    def bin_count(self) -> int:
        return self.fft_size // 2

    def track_config(self) -> TrackConfig:
        return TrackConfig(
            track_fundamental=self.track_fundamental,
            track_formants=self.track_formants,
            formant_count=self.formant_count,
            fundamental_min_amplitude=self.fundamental_min_amplitude,
            first_run_only=self.first_run_only,
            peak_growth_factor=self.peak_growth_factor,
        )

    @staticmethod
    def from_dict(raw: Dict[str, Any]) -> "VisualizerConfig":
        known = {f.name for f in dataclasses.fields(VisualizerConfig)}
        filtered = {k: v for k, v in raw.items() if k in known}
        return VisualizerConfig(**filtered)


def load_defaults() -> Dict[str, Any]:
    """Load the packaged default settings."""
    path = Path(__file__).with_name(_DEFAULTS_NAME)
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def load_config(path: Optional[Path] = None) -> VisualizerConfig:
    """Packaged defaults, overlaid with the JSON file at ``path`` if given."""
    data = load_defaults()
    if path is not None:
        data.update(json.loads(Path(path).read_text()))
    return VisualizerConfig.from_dict(data)


__all__ = ["VisualizerConfig", "load_config", "load_defaults"]
