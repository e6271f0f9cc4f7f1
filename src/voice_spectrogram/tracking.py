"""Per-frame fundamental and formant tracking."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .scale import ScaleTransform
from .smoothing import (
    FormantEstimate,
    detect_peaks,
    estimate_formants,
    moving_average,
    refine_fundamental,
)

logger = logging.getLogger(__name__)

# Bins above this frequency are ignored when looking for the fundamental.
FUNDAMENTAL_SEARCH_HZ = 5000.0
# Fraction of the loudest bin a candidate must exceed.
FUNDAMENTAL_THRESHOLD_RATIO = 0.7


@dataclass
class TrackConfig:
    track_fundamental: bool = False
    track_formants: bool = False
    formant_count: int = 3
    fundamental_min_amplitude: float = 150.0
    # Only the first above-threshold run of each frame is considered. Setting
    # this to False picks the loudest run instead.
    first_run_only: bool = True
    smoothing_span: int = 20
    second_smoothing_span: int = 10
    smoothing_limit: int = 1000
    peak_segment_size: float = 6.0
    peak_growth_factor: float = 1.1

    def __post_init__(self) -> None:
        if self.formant_count < 0:
            raise ValueError("formant_count must be >= 0")
        if not 0 <= self.fundamental_min_amplitude <= 255:
            raise ValueError("fundamental_min_amplitude must be within 0-255")


@dataclass(frozen=True)
class FundamentalEstimate:
    """Result of :meth:`FrequencyTrack.get_fundamental`.

    ``index == 0`` means no usable fundamental in this frame; ``amplitude``
    still carries the raw level of the candidate run, if any.
    """

    index: float = 0.0
    amplitude: float = 0.0

    @property
    def found(self) -> bool:
        return self.index > 0


class FrequencyTrack:
    """Fundamental and formant estimator driven once per frame.

    ``estimates`` always holds ``formant_count + 1`` entries: slot 0 is the
    last committed fundamental, slots 1.. are the formants of the last frame
    in which formant tracking ran.
    """

    def __init__(self, scale: ScaleTransform, config: Optional[TrackConfig] = None) -> None:
        self.scale = scale
        self.config = config if config is not None else TrackConfig()
        self.fundamental_amplitude = 0.0
        self.estimates: list[FormantEstimate] = []
        self._reset_estimates()

    def _reset_estimates(self) -> None:
        self.estimates = [FormantEstimate() for _ in range(self.config.formant_count + 1)]

    # ------------------------------------------------------------------
    # Toggles
    # ------------------------------------------------------------------
    @property
    def state(self) -> str:
        cfg = self.config
        if cfg.track_fundamental and cfg.track_formants:
            return "both"
        if cfg.track_fundamental:
            return "fundamental"
        if cfg.track_formants:
            return "formants"
        return "idle"

    @property
    def enabled(self) -> bool:
        return self.config.track_fundamental or self.config.track_formants

    def toggle_formants(self) -> None:
        """Flip fundamental and formant tracking together."""
        self.config.track_fundamental = not self.config.track_fundamental
        self.config.track_formants = not self.config.track_formants
        logger.info("tracking state: %s", self.state)

    def set_tracking(
        self, fundamental: Optional[bool] = None, formants: Optional[bool] = None
    ) -> None:
        if fundamental is not None:
            self.config.track_fundamental = bool(fundamental)
        if formants is not None:
            self.config.track_formants = bool(formants)

    def set_formant_count(self, count: int) -> None:
        if count < 0:
            raise ValueError("formant_count must be >= 0")
        self.config.formant_count = int(count)
        fundamental = self.estimates[0] if self.estimates else FormantEstimate()
        self._reset_estimates()
        self.estimates[0] = fundamental

    # ------------------------------------------------------------------
    # Per-frame estimation
    # ------------------------------------------------------------------
    def get_fundamental(self, frame: np.ndarray) -> FundamentalEstimate:
        """Estimate the fundamental of ``frame``.

        The loudest bin below 5 kHz sets a threshold of 70 % of its level. The
        first run of bins above that threshold is taken as the fundamental; its
        maximum is refined to sub-bin precision and committed to slot 0 only if
        it is louder than ``fundamental_min_amplitude``. Later runs in the same
        frame are ignored unless ``first_run_only`` is disabled.
        """
        data = np.asarray(frame)
        limit = int(
            math.floor(min(self.scale.index_from_hz(FUNDAMENTAL_SEARCH_HZ), data.size))
        )
        if limit <= 0:
            return FundamentalEstimate()
        window = data[:limit].astype(np.float64)
        highest = float(window.max())
        threshold = highest * FUNDAMENTAL_THRESHOLD_RATIO

        best_index = 0
        best_amplitude = 0.0
        run_index = 0
        run_amplitude = 0.0
        for i, value in enumerate(window):
            if value > threshold:
                if value > run_amplitude:
                    run_index = i
                    run_amplitude = float(value)
                continue
            if run_index > 0:
                if self.config.first_run_only:
                    return self._commit(window, run_index, run_amplitude)
                if run_amplitude > best_amplitude:
                    best_index, best_amplitude = run_index, run_amplitude
                run_index = 0
                run_amplitude = 0.0
        if run_index > 0 and run_amplitude > best_amplitude:
            best_index, best_amplitude = run_index, run_amplitude
        if best_index > 0:
            return self._commit(window, best_index, best_amplitude)
        self.fundamental_amplitude = 0.0
        return FundamentalEstimate()

    def _commit(
        self, window: np.ndarray, index: int, amplitude: float
    ) -> FundamentalEstimate:
        refined = max(refine_fundamental(window, index), 1.0)
        self.fundamental_amplitude = amplitude
        if amplitude > self.config.fundamental_min_amplitude:
            self.estimates[0] = FormantEstimate(refined, amplitude, True)
            return FundamentalEstimate(refined, amplitude)
        return FundamentalEstimate(0.0, amplitude)

    def get_formants(self, frame: np.ndarray) -> list[FormantEstimate]:
        """Formant estimates of ``frame``, newest last, ``formant_count`` long."""
        cfg = self.config
        smoothed = moving_average(frame, cfg.smoothing_span, cfg.smoothing_limit)
        smoothed = moving_average(smoothed, cfg.second_smoothing_span, cfg.smoothing_limit)
        peaks = detect_peaks(smoothed, cfg.peak_segment_size, cfg.peak_growth_factor)
        return estimate_formants(peaks, cfg.formant_count)[1:]

    def update(self, frame: np.ndarray) -> None:
        if len(frame) == 0:
            return
        if self.config.track_fundamental:
            self.get_fundamental(frame)
        if self.config.track_formants:
            for slot, formant in enumerate(self.get_formants(frame), start=1):
                self.estimates[slot] = formant

    @property
    def fundamental(self) -> FormantEstimate:
        return self.estimates[0]

    @property
    def formants(self) -> list[FormantEstimate]:
        return self.estimates[1:]


__all__ = [
    "FUNDAMENTAL_SEARCH_HZ",
    "FUNDAMENTAL_THRESHOLD_RATIO",
    "FrequencyTrack",
    "FundamentalEstimate",
    "TrackConfig",
]
