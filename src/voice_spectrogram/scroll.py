"""Time to pixel-column conversion for the scrolling spectrogram."""

from __future__ import annotations

from dataclasses import dataclass

from .utils import round_half_up


@dataclass
class ScrollBuffer:
    """Accumulates fractional scroll distance between frames.

    Each call to :meth:`advance` converts the elapsed time into a whole number
    of pixel columns (at least one) and keeps the non-negative remainder for
    the next frame. A paused buffer reports 0 and leaves its state untouched.
    """

    pixels_per_second: float = 100.0
    paused: bool = False
    accumulated_fraction: float = 0.0

    def advance(self, dt: float) -> int:
        if self.paused:
            return 0
        self.accumulated_fraction += self.pixels_per_second * dt
        width = max(round_half_up(self.accumulated_fraction), 1)
        self.accumulated_fraction = max(self.accumulated_fraction - width, 0.0)
        return width

    def pause_toggle(self) -> bool:
        self.paused = not self.paused
        return self.paused

    def reset(self) -> None:
        self.accumulated_fraction = 0.0


__all__ = ["ScrollBuffer"]
