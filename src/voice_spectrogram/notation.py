"""Note labels for the frequency scale."""

from __future__ import annotations

import math

NOTE_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]
NOTATIONS = ("musical", "experimental")


def midi_from_freq(f: float) -> float:
    return 69 + 12.0 * math.log2(f / 440.0)


def freq_from_midi(m: float) -> float:
    return 440.0 * (2.0 ** ((m - 69) / 12.0))


def note_name_from_hz(hz: float, notation: str = "musical") -> str:
    """Name of the equal-tempered note closest to ``hz``.

    ``musical`` gives scientific pitch notation (``A4``); ``experimental``
    gives the MIDI note number with the cent offset (``m69+0``).
    """
    if notation not in NOTATIONS:
        raise ValueError(f"unknown notation {notation!r}")
    if not (hz and hz > 0):
        return ""
    m = round(midi_from_freq(hz))
    if notation == "experimental":
        cents = round(1200.0 * math.log2(hz / freq_from_midi(m)))
        return f"m{m}{cents:+d}"
    name = NOTE_NAMES[int(m) % 12]
    octave = int(m // 12) - 1
    return f"{name}{octave}"


__all__ = ["NOTATIONS", "NOTE_NAMES", "freq_from_midi", "midi_from_freq", "note_name_from_hz"]
