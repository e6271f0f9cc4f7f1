"""Audio sources feeding the analyser."""
from __future__ import annotations

import logging
import queue
import threading
from typing import Optional

import numpy as np

try:  # Optional dependency
    import sounddevice as sd
except Exception:  # pragma: no cover - optional dependency may be absent in CI
    sd = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)


class AudioSource:
    """Abstract audio stream interface."""

    samplerate: int

    def start(self) -> None:  # pragma: no cover - interface method
        raise NotImplementedError

    def read(self) -> np.ndarray:  # pragma: no cover - interface method
        raise NotImplementedError

    def stop(self) -> None:  # pragma: no cover - interface method
        raise NotImplementedError


class MicSource(AudioSource):
    """Audio source backed by the default system microphone.

    ``read`` never blocks: it returns an empty array when no block is queued,
    so it can be drained from the drawing timer.
    """

    def __init__(self, samplerate: int, blocksize: int, device: Optional[str] = None) -> None:
        if sd is None:
            raise RuntimeError("sounddevice is not available. Install it or use --demo.")

        self.samplerate = samplerate
        self.blocksize = blocksize
        self.device = device
        self.q: "queue.Queue[np.ndarray]" = queue.Queue(maxsize=64)
        self.stream = None
        self.dropped = 0
        self._lock = threading.Lock()

    def _callback(self, indata, frames, time_info, status):  # pragma: no cover - sounddevice callback
        if status:
            logger.debug("input stream status: %s", status)
        if indata.ndim == 2 and indata.shape[1] > 1:
            mono = indata.mean(axis=1).copy()
        else:
            mono = indata[:, 0].copy() if indata.ndim == 2 else indata.copy()
        try:
            self.q.put_nowait(mono)
        except queue.Full:
            with self._lock:
                self.dropped += 1

    def start(self) -> None:
        if sd is None:  # pragma: no cover - defensive
            raise RuntimeError("sounddevice is not available.")
        self.stream = sd.InputStream(
            channels=1,
            samplerate=self.samplerate,
            blocksize=self.blocksize,
            device=self.device,
            callback=self._callback,
            dtype="float32",
        )
        self.stream.start()
        logger.info("microphone stream started at %d Hz", self.samplerate)

    def read(self) -> np.ndarray:
        try:
            return self.q.get_nowait()
        except queue.Empty:
            return np.array([], dtype=np.float32)

    def stop(self) -> None:
        if self.stream is not None:
            try:  # pragma: no cover - depends on audio backend
                self.stream.stop()
                self.stream.close()
            except Exception as exc:
                logger.warning("could not close input stream: %s", exc)
            self.stream = None
        if self.dropped:
            logger.info("dropped %d audio blocks", self.dropped)


class DemoSource(AudioSource):
    """Synthetic voice-like source used when no microphone is available.

    A gliding fundamental with twelve harmonics, shaped by three fixed
    formant resonances, plus a little noise.
    """

    formants_hz = (700.0, 1220.0, 2600.0)
    formant_bandwidth_hz = 130.0

    def __init__(self, samplerate: int, blocksize: int, seed: Optional[int] = None) -> None:
        self.samplerate = samplerate
        self.blocksize = blocksize
        self.t = 0
        self.phase = 0.0
        self.rng = np.random.default_rng(seed)

    def start(self) -> None:
        pass

    def fundamental_at(self, seconds: float) -> float:
        return 160.0 + 60.0 * np.sin(2 * np.pi * 0.25 * seconds)

    def read(self) -> np.ndarray:
        n = self.blocksize
        sr = self.samplerate
        t = (self.t + np.arange(n)) / sr
        f0 = self.fundamental_at(t)
        phase = self.phase + 2 * np.pi * np.cumsum(f0) / sr
        y = np.zeros(n, dtype=np.float64)
        for k in range(1, 13):
            fk = k * float(f0.mean())
            gain = sum(
                1.0 / (1.0 + ((fk - fc) / self.formant_bandwidth_hz) ** 2)
                for fc in self.formants_hz
            )
            y += (gain / k) * np.sin(k * phase)
        y += 0.01 * self.rng.standard_normal(n)
        self.phase = float(phase[-1] % (2 * np.pi))
        self.t += n
        y = np.tanh(0.5 * y)
        return y.astype(np.float32)

    def stop(self) -> None:
        pass


__all__ = ["AudioSource", "MicSource", "DemoSource", "sd"]
