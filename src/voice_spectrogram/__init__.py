"""Live spectrogram with pitch and formant tracking."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

__all__ = [
    "AudioSource",
    "AudioSystem",
    "BarView",
    "DemoSource",
    "FrequencyAnalyser",
    "FrequencyTrack",
    "InvalidScaleMode",
    "MicSource",
    "ScaleMode",
    "ScaleTransform",
    "ScrollBuffer",
    "Spectrogram",
    "TrackConfig",
    "VisualizerConfig",
    "detect_peaks",
    "estimate_formants",
    "main",
    "moving_average",
    "refine_fundamental",
]

_EXPORT_MAP = {
    "AudioSource": ("voice_spectrogram.audio", "AudioSource"),
    "DemoSource": ("voice_spectrogram.audio", "DemoSource"),
    "MicSource": ("voice_spectrogram.audio", "MicSource"),
    "AudioSystem": ("voice_spectrogram.app", "AudioSystem"),
    "BarView": ("voice_spectrogram.visualizers", "BarView"),
    "Spectrogram": ("voice_spectrogram.visualizers", "Spectrogram"),
    "FrequencyAnalyser": ("voice_spectrogram.analyser", "FrequencyAnalyser"),
    "FrequencyTrack": ("voice_spectrogram.tracking", "FrequencyTrack"),
    "TrackConfig": ("voice_spectrogram.tracking", "TrackConfig"),
    "InvalidScaleMode": ("voice_spectrogram.scale", "InvalidScaleMode"),
    "ScaleMode": ("voice_spectrogram.scale", "ScaleMode"),
    "ScaleTransform": ("voice_spectrogram.scale", "ScaleTransform"),
    "ScrollBuffer": ("voice_spectrogram.scroll", "ScrollBuffer"),
    "VisualizerConfig": ("voice_spectrogram.config", "VisualizerConfig"),
    "detect_peaks": ("voice_spectrogram.smoothing", "detect_peaks"),
    "estimate_formants": ("voice_spectrogram.smoothing", "estimate_formants"),
    "moving_average": ("voice_spectrogram.smoothing", "moving_average"),
    "refine_fundamental": ("voice_spectrogram.smoothing", "refine_fundamental"),
    "main": ("voice_spectrogram.cli", "main"),
}


if TYPE_CHECKING:  # pragma: no cover - only for type checkers
    from voice_spectrogram.analyser import FrequencyAnalyser
    from voice_spectrogram.app import AudioSystem
    from voice_spectrogram.audio import AudioSource, DemoSource, MicSource
    from voice_spectrogram.cli import main
    from voice_spectrogram.config import VisualizerConfig
    from voice_spectrogram.scale import InvalidScaleMode, ScaleMode, ScaleTransform
    from voice_spectrogram.scroll import ScrollBuffer
    from voice_spectrogram.smoothing import (
        detect_peaks,
        estimate_formants,
        moving_average,
        refine_fundamental,
    )
    from voice_spectrogram.tracking import FrequencyTrack, TrackConfig
    from voice_spectrogram.visualizers import BarView, Spectrogram


def __getattr__(name: str) -> Any:
    """Lazily import heavy submodules on demand."""

    if name in _EXPORT_MAP:
        module_name, attribute = _EXPORT_MAP[name]
        module = import_module(module_name)
        value = getattr(module, attribute)
        globals()[name] = value
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return sorted(set(__all__))
