"""Spectrogram and bar-view renderers.

Both views share :class:`Visualizer`, which owns the scale, the tracker, the
scroll accumulator and the raster they paint into. Each frame the host calls
:meth:`Visualizer.update_scale` with the current window size and then
:meth:`Visualizer.update` with the latest byte spectrum.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .canvas import RGB, Canvas, ColorRamp
from .config import VisualizerConfig
from .notation import NOTATIONS, note_name_from_hz
from .scale import ScaleMode, ScaleState, ScaleTransform
from .scroll import ScrollBuffer
from .tracking import FrequencyTrack

logger = logging.getLogger(__name__)

FORMANT_COLORS = [
    "#fff",  # f0
    "#f3f",  # f1
    "#ff1",  # f2
    "#6ff",  # f3
    "#f22",
    "#ff2",
    "#2f2",
    "#22f",
]
MARKER_BORDER = "#333333"
SCALE_BACKGROUND = (0, 0, 0)
MIN_MAX_FREQUENCY = 1000.0
MAX_MAX_FREQUENCY = 15000.0
# A1; note marks run from A0 upwards.
NOTE_REFERENCE_HZ = 55.0
LOG_TICK_STEPS_HZ = (100, 500, 1000, 5000, 10000)


@dataclass(frozen=True)
class ScaleLabel:
    """Text the host window draws on top of the raster."""

    x: float
    y: float
    text: str
    color: str
    size: int = 15


class Visualizer:
    """Shared state and toggles of the two views."""

    scale_axis = "vertical"
    show_note_marks = False
    marker_height = 2
    pitch_marker_height = 8

    def __init__(
        self,
        config: Optional[VisualizerConfig] = None,
        max_frequency: Optional[float] = None,
    ) -> None:
        self.config = config if config is not None else VisualizerConfig()
        cfg = self.config
        state = ScaleState(
            mode=ScaleMode.parse(cfg.scale_mode),
            log_base=cfg.log_base,
            min_frequency=cfg.min_frequency,
            max_frequency=(
                max_frequency
                if max_frequency is not None
                else self.default_max_frequency(cfg)
            ),
        )
        self.scale = ScaleTransform(cfg.sample_rate, cfg.bin_count, state, axis=self.scale_axis)
        self.track = FrequencyTrack(self.scale, cfg.track_config())
        self.scroll = ScrollBuffer(pixels_per_second=cfg.speed)
        self.ramp = ColorRamp(cfg.colormap)
        self.canvas = Canvas(0, 0)
        self.scale_width = int(cfg.scale_width)
        self.notation = cfg.notation
        self.pitch_track_mode = False
        self.formant_colors = list(FORMANT_COLORS)
        self.labels: list[ScaleLabel] = []

    @staticmethod
    def default_max_frequency(config: VisualizerConfig) -> float:
        return config.spectrogram_max_frequency

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------
    @property
    def viewport_right(self) -> int:
        raise NotImplementedError

    @property
    def viewport_bottom(self) -> int:
        raise NotImplementedError

    def screen_from_index(self, index: float) -> float:
        """Screen coordinate of ``index`` along the frequency axis."""
        raise NotImplementedError

    def index_from_screen(self, coordinate: float) -> float:
        raise NotImplementedError

    def screen_from_hz(self, hz: float) -> float:
        return self.screen_from_index(self.scale.index_from_hz(hz))

    def hz_from_screen(self, coordinate: float) -> float:
        return self.scale.hz_from_index(self.index_from_screen(coordinate))

    @property
    def paused(self) -> bool:
        return self.scroll.paused

    def color(self, d: int) -> RGB:
        return self.ramp.color_from_intensity(d)

    def update_scale(self, width: int, height: int) -> bool:
        """Poll the window size; repaint everything if it changed."""
        self.canvas.resize(width, height)
        redraw = self.scale.update_scale(width, height)
        if redraw:
            logger.debug("%s resized to %dx%d", type(self).__name__, width, height)
            self.clear()
            self.draw_scale()
        return redraw

    def clear(self) -> None:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Toggles
    # ------------------------------------------------------------------
    def pause_toggle(self) -> bool:
        return self.scroll.pause_toggle()

    def toggle_formants(self) -> None:
        self.track.toggle_formants()

    def pitch_track_mode_toggle(self) -> bool:
        self.pitch_track_mode = not self.pitch_track_mode
        return self.pitch_track_mode

    def scale_mode_toggle(self) -> ScaleMode:
        self.scale.mode = ScaleMode.LINEAR if self.scale.mode is ScaleMode.LOG else ScaleMode.LOG
        self.draw_scale()
        return self.scale.mode

    def notation_toggle(self) -> str:
        self.notation = NOTATIONS[(NOTATIONS.index(self.notation) + 1) % len(NOTATIONS)]
        self.draw_scale()
        return self.notation

    def max_frequency_increment(self, amount: float) -> float:
        hz = min(max(self.scale.max_frequency + amount, MIN_MAX_FREQUENCY), MAX_MAX_FREQUENCY)
        self.scale.max_frequency = hz
        self.draw_scale()
        return self.scale.max_frequency

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------
    def update(self, frame: np.ndarray, dt: float) -> None:
        raise NotImplementedError

    def _skip_frame(self, frame: np.ndarray, dt: float) -> bool:
        return self.paused or dt <= 0 or len(frame) == 0 or self.canvas.width == 0

    def _track(self, frame: np.ndarray) -> None:
        self.track.update(frame)
        if self.pitch_track_mode and not self.track.config.track_fundamental:
            self.track.get_fundamental(frame)

    def _tick(self, coordinate: float, length: int, color: str, offset: int = 0) -> None:
        raise NotImplementedError

    def _label(self, coordinate: float, text: str, color: str, offset: int = 0) -> ScaleLabel:
        raise NotImplementedError

    def _clear_scale(self) -> None:
        raise NotImplementedError

    def _screen_extent(self) -> int:
        raise NotImplementedError

    def _visible(self, coordinate: float) -> bool:
        return math.isfinite(coordinate) and 0 <= coordinate <= self._screen_extent()

    def draw_scale(self) -> list[ScaleLabel]:
        """Repaint the ruler strip and return the labels to draw on top of it."""
        self._clear_scale()
        labels: list[ScaleLabel] = []
        if self.canvas.width == 0:
            self.labels = labels
            return labels

        if self.show_note_marks:
            for i in range(-1, 12):
                hz = NOTE_REFERENCE_HZ * (2**i)
                pos = self.screen_from_hz(hz)
                if not self._visible(pos):
                    continue
                self._tick(pos, 77, "#2b2640")
                self._tick(pos, 5, "#a9f")
                labels.append(
                    self._label(pos, note_name_from_hz(hz, self.notation), "#a9f", offset=70)
                )

        if self.scale.mode is ScaleMode.LOG:
            step = 50
            for i in range(1, math.ceil(self._screen_extent() / step)):
                pos = i * step
                self._tick(pos, 20, "#888")
                labels.append(self._label(pos, str(math.floor(self.hz_from_screen(pos))), "#777"))
            for hz in LOG_TICK_STEPS_HZ:
                if not self.scale.min_frequency <= hz <= self.scale.max_frequency:
                    continue
                pos = self.screen_from_hz(hz)
                if not self._visible(pos):
                    continue
                self._tick(pos, 30, "#555")
                labels.append(self._label(pos, str(hz), "#444", offset=30))
        else:
            min_hz = self.scale.min_frequency
            max_hz = self.scale.max_frequency
            for i in range(math.ceil(max_hz / 100)):
                if i * 100 < min_hz:
                    continue
                self._tick(self.screen_from_hz(i * 100), 5, "#555")
            for i in range(math.ceil(max_hz / 500)):
                if i * 500 < min_hz:
                    continue
                pos = self.screen_from_hz(i * 500)
                self._tick(pos, 10, "#777")
                labels.append(self._label(pos, str(i * 500), "#777", offset=20))

        self.labels = labels
        return labels

    def _marker_color(self, slot: int) -> str:
        return self.formant_colors[slot % len(self.formant_colors)]

    def _bin_start(self) -> int:
        """First bin drawn; bins below ``min_frequency`` are left blank."""
        return max(math.floor(self.scale.index_from_hz(self.scale.min_frequency)), 0)

    def _bin_limit(self, frame: np.ndarray) -> int:
        top = math.ceil(self.scale.index_from_hz(self.scale.max_frequency))
        return min(top + 1, len(frame))


class Spectrogram(Visualizer):
    """Scrolling spectrogram: time runs left to right, frequency bottom to top."""

    scale_axis = "vertical"
    show_note_marks = True

    @property
    def viewport_right(self) -> int:
        return max(self.canvas.width - self.scale_width, 0)

    @property
    def viewport_bottom(self) -> int:
        return self.canvas.height

    def screen_from_index(self, index: float) -> float:
        return self.viewport_bottom - self.scale.position_from_index(index)

    def index_from_screen(self, coordinate: float) -> float:
        return self.scale.index_from_position(self.viewport_bottom - coordinate)

    y_from_index = screen_from_index
    index_from_y = index_from_screen

    def _screen_extent(self) -> int:
        return self.viewport_bottom

    def clear(self) -> None:
        self.canvas.fill_rect(0, 0, self.viewport_right, self.viewport_bottom, self.color(0))

    def clear_current_slice(self, width: int) -> None:
        self.canvas.fill_rect(
            self.viewport_right - width, 0, width, self.viewport_bottom, self.color(0)
        )

    def scroll_canvas(self, width: int) -> None:
        self.canvas.scroll_left(width, self.viewport_right)

    def update(self, frame: np.ndarray, dt: float) -> None:
        if self._skip_frame(frame, dt):
            return
        self._track(frame)
        width = self.scroll.advance(dt)
        self.scroll_canvas(width)
        self.clear_current_slice(width)
        if self.pitch_track_mode:
            self.draw_pitch_tracker_mode(width)
        else:
            self.draw_spectrogram_slice(frame, width)
        self.plot_formants(width)

    def draw_spectrogram_slice(self, frame: np.ndarray, width: int) -> None:
        """Paint one column of bins into the rightmost ``width`` pixels."""
        x = self.viewport_right - width
        count = self._bin_limit(frame)
        colors = [tuple(c) for c in self.ramp.colors(frame[:count]).tolist()]
        start = self._bin_start()
        upper = self.y_from_index(start)
        for i in range(start, count):
            lower, upper = upper, self.y_from_index(i + 1)
            if not (math.isfinite(lower) and math.isfinite(upper)):
                continue
            y = math.ceil(lower)
            # -1 when both bin edges fall inside the same pixel row.
            height = math.floor(upper) - y
            if height == -1:
                continue
            self.canvas.fill_rect(x, y, width, height, colors[i])

    def draw_pitch_tracker_mode(self, width: int) -> None:
        if self.track.fundamental_amplitude > self.track.config.fundamental_min_amplitude:
            self.plot(
                self.viewport_right - width,
                self.y_from_index(self.track.fundamental.index),
                self._marker_color(0),
                width,
                self.pitch_marker_height,
            )

    def plot_formants(self, width: int) -> None:
        x = self.viewport_right - width
        cfg = self.track.config
        if cfg.track_fundamental and self.track.fundamental_amplitude > cfg.fundamental_min_amplitude:
            self.plot(
                x,
                self.y_from_index(self.track.fundamental.index),
                self._marker_color(0),
                width,
                self.marker_height,
            )
        if cfg.track_formants:
            for slot, formant in enumerate(self.track.formants, start=1):
                if not formant.active:
                    continue
                self.plot(
                    x,
                    self.y_from_index(formant.index),
                    self._marker_color(slot),
                    width,
                    self.marker_height,
                )

    def plot(self, x: float, y: float, color: str, width: int, height: int) -> None:
        """Marker with a one pixel dark border above and below."""
        if not math.isfinite(y):
            return
        top = round(y - height / 2)
        self.canvas.fill_rect(x, top - 1, width, height + 2, MARKER_BORDER)
        self.canvas.fill_rect(x, top, width, height, color)

    def _clear_scale(self) -> None:
        self.canvas.fill_rect(
            self.viewport_right, 0, self.scale_width, self.canvas.height, SCALE_BACKGROUND
        )

    def _tick(self, coordinate: float, length: int, color: str, offset: int = 0) -> None:
        self.canvas.fill_rect(self.viewport_right + offset, coordinate, length, 1, color)

    def _label(self, coordinate: float, text: str, color: str, offset: int = 0) -> ScaleLabel:
        return ScaleLabel(self.viewport_right + offset, coordinate - 5, text, color)


class BarView(Visualizer):
    """Static spectrum: one bar per bin, frequency left to right."""

    scale_axis = "horizontal"
    bar_fill_ratio = 0.7

    @staticmethod
    def default_max_frequency(config: VisualizerConfig) -> float:
        return config.bar_view_max_frequency

    @property
    def viewport_right(self) -> int:
        return self.canvas.width

    @property
    def viewport_bottom(self) -> int:
        return max(self.canvas.height - self.scale_width, 0)

    def screen_from_index(self, index: float) -> float:
        return self.scale.position_from_index(index)

    def index_from_screen(self, coordinate: float) -> float:
        return self.scale.index_from_position(coordinate)

    x_from_index = screen_from_index
    index_from_x = index_from_screen

    def _screen_extent(self) -> int:
        return self.viewport_right

    def clear(self) -> None:
        self.canvas.fill_rect(0, 0, self.viewport_right, self.viewport_bottom, self.color(0))

    def update(self, frame: np.ndarray, dt: float) -> None:
        if self._skip_frame(frame, dt):
            return
        self._track(frame)
        self.clear()
        if self.pitch_track_mode:
            if self.track.fundamental_amplitude > self.track.config.fundamental_min_amplitude:
                self.plot_marker(self.track.fundamental.index, 0, self.pitch_marker_height)
        else:
            self.draw_bars(frame)
        self.plot_formants()

    def draw_bars(self, frame: np.ndarray) -> None:
        count = self._bin_limit(frame)
        colors = [tuple(c) for c in self.ramp.colors(frame[:count]).tolist()]
        unit = self.viewport_bottom * self.bar_fill_ratio / 255
        start = self._bin_start()
        right = self.x_from_index(start)
        for i in range(start, count):
            left, right = right, self.x_from_index(i + 1)
            if not (math.isfinite(left) and math.isfinite(right)):
                continue
            self.canvas.fill_rect(
                left, self.viewport_bottom, right - left, -unit * int(frame[i]), colors[i]
            )

    def plot_formants(self) -> None:
        cfg = self.track.config
        if cfg.track_fundamental and self.track.fundamental_amplitude > cfg.fundamental_min_amplitude:
            self.plot_marker(self.track.fundamental.index, 0, self.marker_height)
        if cfg.track_formants:
            for slot, formant in enumerate(self.track.formants, start=1):
                if formant.active:
                    self.plot_marker(formant.index, slot, self.marker_height)

    def plot_marker(self, index: float, slot: int, width: int) -> None:
        """Vertical line across the bar area at ``index``."""
        if index <= 0:
            return
        x = self.x_from_index(index)
        if not math.isfinite(x):
            return
        left = round(x - width / 2)
        self.canvas.fill_rect(left - 1, 0, width + 2, self.viewport_bottom, MARKER_BORDER)
        self.canvas.fill_rect(left, 0, width, self.viewport_bottom, self._marker_color(slot))

    def _clear_scale(self) -> None:
        self.canvas.fill_rect(
            0, self.viewport_bottom, self.canvas.width, self.scale_width, SCALE_BACKGROUND
        )

    def _tick(self, coordinate: float, length: int, color: str, offset: int = 0) -> None:
        self.canvas.fill_rect(coordinate, self.viewport_bottom + offset, 1, length, color)

    def _label(self, coordinate: float, text: str, color: str, offset: int = 0) -> ScaleLabel:
        return ScaleLabel(coordinate - 5, self.viewport_bottom + offset + 15, text, color)


__all__ = [
    "BarView",
    "FORMANT_COLORS",
    "ScaleLabel",
    "Spectrogram",
    "Visualizer",
]
