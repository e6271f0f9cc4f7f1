"""Frame loop tying the audio front end to the two visualizers."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

import matplotlib.pyplot as plt
import numpy as np

from .analyser import FrequencyAnalyser
from .audio import AudioSource
from .config import VisualizerConfig
from .visualizers import BarView, ScaleLabel, Spectrogram, Visualizer

logger = logging.getLogger(__name__)

MAX_FREQUENCY_STEP = 500.0
# Blocks drained from the source per frame before drawing.
MAX_BLOCKS_PER_FRAME = 12


class AudioSystem:
    """Owns the analyser and both views and drives them once per frame."""

    def __init__(self, source: AudioSource, config: Optional[VisualizerConfig] = None) -> None:
        self.config = config if config is not None else VisualizerConfig()
        cfg = self.config
        self.source = source
        self.analyser = FrequencyAnalyser(
            fft_size=cfg.fft_size,
            smoothing_time_constant=cfg.smoothing_time_constant,
            min_decibels=cfg.min_decibels,
            max_decibels=cfg.max_decibels,
        )
        self.avg_fps = 0.0
        self.spectrogram = Spectrogram(cfg)
        self.bar_view = BarView(cfg)
        self.visualize_mode = "spectrogram"
        self.active_visualizer: Visualizer = self.spectrogram
        self._keymap: dict[str, Callable[[], object]] = {
            " ": lambda: self.active_visualizer.pause_toggle(),
            "v": self.toggle_view,
            "l": lambda: self.active_visualizer.scale_mode_toggle(),
            "f": lambda: self.active_visualizer.toggle_formants(),
            "t": lambda: self.active_visualizer.pitch_track_mode_toggle(),
            "n": lambda: self.active_visualizer.notation_toggle(),
            "up": lambda: self.active_visualizer.max_frequency_increment(MAX_FREQUENCY_STEP),
            "down": lambda: self.active_visualizer.max_frequency_increment(-MAX_FREQUENCY_STEP),
        }

    @property
    def visualizers(self) -> tuple[Visualizer, Visualizer]:
        return (self.spectrogram, self.bar_view)

    def drain_source(self) -> int:
        blocks = 0
        while blocks < MAX_BLOCKS_PER_FRAME:
            chunk = self.source.read()
            if chunk.size == 0:
                break
            self.analyser.push(chunk)
            blocks += 1
        return blocks

    def update(self, delta: float, width: int, height: int) -> bool:
        """Run one frame. ``delta`` is the time since the last frame in seconds."""
        if delta <= 0:
            return False
        self.drain_source()
        frame = self.analyser.update()
        self.avg_fps = ((1.0 / delta) + self.avg_fps * 19) / 20
        for vis in self.visualizers:
            vis.update_scale(width, height)
            vis.update(frame, delta)
        return True

    def toggle_view(self) -> str:
        if self.visualize_mode == "spectrogram":
            self.visualize_mode = "1d-fft"
            self.active_visualizer = self.bar_view
        else:
            self.visualize_mode = "spectrogram"
            self.active_visualizer = self.spectrogram
        logger.info("view: %s", self.visualize_mode)
        return self.visualize_mode

    def handle_key(self, key: Optional[str]) -> bool:
        action = self._keymap.get(key or "")
        if action is None:
            return False
        action()
        return True


class SpectrogramWindow:
    """Matplotlib window showing the active visualizer's raster."""

    def __init__(self, system: AudioSystem) -> None:
        self.system = system
        cfg = system.config
        dpi = 100
        self.fig = plt.figure(figsize=(cfg.width / dpi, cfg.height / dpi), dpi=dpi)
        if self.fig.canvas.manager is not None:
            self.fig.canvas.manager.set_window_title("voice spectrogram")
        self.ax = self.fig.add_axes((0.0, 0.0, 1.0, 1.0))
        self.ax.set_axis_off()
        self.im = self.ax.imshow(
            np.zeros((cfg.height, cfg.width, 3), dtype=np.uint8),
            interpolation="nearest",
            aspect="auto",
        )
        self.fps_text = self.ax.text(10, 30, "", color="#ffffff80", fontsize=14, family="monospace")
        self._label_artists: list = []
        self._labels: list[ScaleLabel] = []
        self._last_time: Optional[float] = None
        self.fig.canvas.mpl_connect("key_press_event", self.on_key)

    def on_key(self, event) -> None:
        if event.key in ("q", "escape"):
            plt.close(self.fig)
            return
        if self.system.handle_key(event.key):
            self._labels = []

    def _sync_labels(self, labels: list[ScaleLabel]) -> None:
        if labels == self._labels:
            return
        for artist in self._label_artists:
            artist.remove()
        self._label_artists = [
            self.ax.text(
                label.x,
                label.y,
                label.text,
                color=label.color,
                fontsize=label.size * 0.7,
                family="monospace",
            )
            for label in labels
        ]
        self._labels = list(labels)

    def on_timer(self) -> None:
        now = time.perf_counter()
        delta = 0.0 if self._last_time is None else now - self._last_time
        self._last_time = now
        width, height = self.fig.canvas.get_width_height()
        if not self.system.update(delta, width, height):
            return
        vis = self.system.active_visualizer
        pixels = vis.canvas.pixels
        self.im.set_data(pixels)
        self.im.set_extent((0, pixels.shape[1], pixels.shape[0], 0))
        self.ax.set_xlim(0, pixels.shape[1])
        self.ax.set_ylim(pixels.shape[0], 0)
        self._sync_labels(vis.labels)
        self.fps_text.set_text(str(int(self.system.avg_fps)))
        self.fig.canvas.draw_idle()

    def run(self) -> None:
        self.system.source.start()
        try:
            timer = self.fig.canvas.new_timer(interval=self.system.config.frame_interval_ms)
            timer.add_callback(self.on_timer)
            timer.start()
            plt.show()
        finally:
            self.system.source.stop()


__all__ = ["AudioSystem", "SpectrogramWindow"]
