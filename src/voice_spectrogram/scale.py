"""Frequency bin <-> screen coordinate mapping."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from .utils import base_log, un_base_log

logger = logging.getLogger(__name__)


class InvalidScaleMode(ValueError):
    """Raised when a scale mode other than ``linear`` or ``log`` is used."""


class ScaleMode(str, Enum):
    LINEAR = "linear"
    LOG = "log"

    @classmethod
    def parse(cls, value: "ScaleMode | str") -> "ScaleMode":
        if isinstance(value, ScaleMode):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InvalidScaleMode(f"invalid scale mode: {value!r}") from None


@dataclass
class ScaleState:
    """Scale settings owned by a single visualizer."""

    mode: ScaleMode = ScaleMode.LOG
    log_base: float = 2.0
    min_frequency: float = 0.0
    max_frequency: float = 15000.0
    viewport_width: int = 0
    viewport_height: int = 0


class ScaleTransform:
    """Bidirectional mapping between bin index, frequency and axis position.

    Positions are measured along one axis (``"vertical"`` uses the viewport
    height, ``"horizontal"`` the width) starting at 0 for the lowest
    frequency. Renderers flip the value when their screen axis grows the
    other way.

    The scale factor is cached. It is recomputed on resize and whenever the
    mode or the maximum frequency is set.
    """

    def __init__(
        self,
        sample_rate: float,
        bin_count: int,
        state: ScaleState | None = None,
        axis: str = "vertical",
    ) -> None:
        if axis not in ("vertical", "horizontal"):
            raise ValueError(f"axis must be 'vertical' or 'horizontal', not {axis!r}")
        self.sample_rate = float(sample_rate)
        self.bin_count = int(bin_count)
        self.state = state if state is not None else ScaleState()
        self.axis = axis
        self.state.mode = ScaleMode.parse(self.state.mode)
        self.state.max_frequency = min(self.state.max_frequency, self.nyquist)
        if not 0 <= self.state.min_frequency < self.state.max_frequency:
            raise ValueError("min_frequency must be within [0, max_frequency)")
        self.scale_factor = 1.0

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------
    @property
    def nyquist(self) -> float:
        return self.sample_rate / 2.0

    @property
    def mode(self) -> ScaleMode:
        return self.state.mode

    @mode.setter
    def mode(self, value: ScaleMode | str) -> None:
        self.state.mode = ScaleMode.parse(value)
        self._recompute()

    @property
    def min_frequency(self) -> float:
        """Lowest frequency drawn. Positions still start at 0 Hz."""
        return self.state.min_frequency

    @property
    def max_frequency(self) -> float:
        return self.state.max_frequency

    @max_frequency.setter
    def max_frequency(self, hz: float) -> None:
        self.state.max_frequency = min(float(hz), self.nyquist)
        self._recompute()

    @property
    def extent(self) -> int:
        if self.axis == "vertical":
            return self.state.viewport_height
        return self.state.viewport_width

    def update_scale(self, width: int, height: int) -> bool:
        """Poll the viewport size and refresh the cached scale factor.

        Returns ``True`` when the viewport changed, in which case static
        scale decorations must be repainted.
        """
        resized = (width, height) != (
            self.state.viewport_width,
            self.state.viewport_height,
        )
        if resized:
            self.state.viewport_width = int(width)
            self.state.viewport_height = int(height)
            self._recompute()
        return resized

    def _recompute(self) -> None:
        top_index = self.index_from_hz(self.state.max_frequency)
        if self.mode is ScaleMode.LINEAR:
            span = top_index
        elif self.mode is ScaleMode.LOG:
            span = base_log(top_index, self.state.log_base)
        else:  # pragma: no cover - ScaleMode.parse guards assignments
            raise InvalidScaleMode(f"invalid scale mode: {self.mode!r}")
        if span > 0 and self.extent > 0:
            self.scale_factor = self.extent / span
        else:
            self.scale_factor = 1.0
        logger.debug(
            "scale recomputed: mode=%s extent=%d max=%.1f Hz factor=%.6f",
            self.mode.value,
            self.extent,
            self.state.max_frequency,
            self.scale_factor,
        )

    # ------------------------------------------------------------------
    # Conversions
    # ------------------------------------------------------------------
    def index_from_hz(self, hz: float) -> float:
        return hz / self.nyquist * self.bin_count

    def hz_from_index(self, index: float) -> float:
        return index / self.bin_count * self.nyquist

    def position_from_index(self, index: float) -> float:
        """Axis position of ``index``; ``-inf`` for index <= 0 in log mode."""
        if self.mode is ScaleMode.LINEAR:
            return index * self.scale_factor
        if self.mode is ScaleMode.LOG:
            return base_log(index, self.state.log_base) * self.scale_factor
        raise InvalidScaleMode(f"invalid scale mode: {self.mode!r}")

    def index_from_position(self, position: float) -> float:
        if self.mode is ScaleMode.LINEAR:
            return position / self.scale_factor
        if self.mode is ScaleMode.LOG:
            return un_base_log(position / self.scale_factor, self.state.log_base)
        raise InvalidScaleMode(f"invalid scale mode: {self.mode!r}")

    def position_from_hz(self, hz: float) -> float:
        return self.position_from_index(self.index_from_hz(hz))

    def hz_from_position(self, position: float) -> float:
        return self.hz_from_index(self.index_from_position(position))


__all__ = ["InvalidScaleMode", "ScaleMode", "ScaleState", "ScaleTransform"]
