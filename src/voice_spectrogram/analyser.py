"""Turns raw samples into byte spectra (one MagnitudeFrame per call)."""

from __future__ import annotations

import numpy as np
from scipy.signal import windows

from .utils import dbfs


class FrequencyAnalyser:
    """Rolling FFT analyser modelled on a browser ``AnalyserNode``.

    The last ``fft_size`` samples are Blackman-windowed, transformed, smoothed
    over time with ``smoothing_time_constant`` and converted to decibels. The
    decibel range ``[min_decibels, max_decibels]`` is mapped linearly onto
    0-255. Frames hold ``fft_size // 2`` bins.
    """

    def __init__(
        self,
        fft_size: int = 4096,
        smoothing_time_constant: float = 0.8,
        min_decibels: float = -100.0,
        max_decibels: float = -30.0,
    ) -> None:
        if min_decibels >= max_decibels:
            raise ValueError("min_decibels must be below max_decibels")
        self.fft_size = int(fft_size)
        self.smoothing_time_constant = float(smoothing_time_constant)
        self.min_decibels = float(min_decibels)
        self.max_decibels = float(max_decibels)
        self.window = windows.blackman(self.fft_size, sym=False).astype(np.float32)
        self.buffer = np.zeros(self.fft_size, dtype=np.float32)
        self.smoothed = np.zeros(self.bin_count, dtype=np.float64)
        self.data = np.zeros(self.bin_count, dtype=np.uint8)

    @property
    def bin_count(self) -> int:
        return self.fft_size // 2

    def push(self, samples: np.ndarray) -> None:
        """Append samples to the rolling time-domain buffer."""
        samples = np.asarray(samples, dtype=np.float32)
        if samples.size == 0:
            return
        if samples.size >= self.fft_size:
            self.buffer[:] = samples[-self.fft_size :]
            return
        self.buffer = np.roll(self.buffer, -samples.size)
        self.buffer[-samples.size :] = samples

    def update(self) -> np.ndarray:
        """Recompute ``data`` from the current buffer and return it."""
        spectrum = np.fft.rfft(self.buffer * self.window, n=self.fft_size)
        magnitude = np.abs(spectrum[: self.bin_count]) / self.fft_size
        tau = self.smoothing_time_constant
        self.smoothed = tau * self.smoothed + (1.0 - tau) * magnitude
        db = dbfs(self.smoothed)
        scaled = 255.0 * (db - self.min_decibels) / (self.max_decibels - self.min_decibels)
        self.data = np.clip(np.floor(scaled), 0, 255).astype(np.uint8)
        return self.data


__all__ = ["FrequencyAnalyser"]
