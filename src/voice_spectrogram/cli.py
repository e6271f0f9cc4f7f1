"""Command-line entry point for the live spectrogram."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .app import AudioSystem, SpectrogramWindow
from .audio import DemoSource, MicSource, sd
from .config import VisualizerConfig, load_config, load_defaults

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    defaults = load_defaults()
    parser = argparse.ArgumentParser(
        description="Live scrolling spectrogram with pitch and formant tracking"
    )
    parser.add_argument("--config", type=Path, default=None, help="JSON settings file")
    parser.add_argument(
        "--samplerate", type=int, default=int(defaults.get("sample_rate", 44100))
    )
    parser.add_argument("--fft", type=int, default=int(defaults.get("fft_size", 4096)))
    parser.add_argument(
        "--speed",
        type=float,
        default=float(defaults.get("speed", 100.0)),
        help="Scroll speed in pixels per second",
    )
    parser.add_argument(
        "--scale",
        choices=["log", "linear"],
        default=defaults.get("scale_mode", "log"),
    )
    parser.add_argument(
        "--max-freq",
        type=float,
        default=float(defaults.get("spectrogram_max_frequency", 15000.0)),
    )
    parser.add_argument("--colormap", type=str, default=defaults.get("colormap", "viridis"))
    parser.add_argument(
        "--track",
        action="store_true",
        help="Start with fundamental and formant tracking enabled",
    )
    parser.add_argument(
        "--formants", type=int, default=int(defaults.get("formant_count", 3))
    )
    parser.add_argument("--device", type=str, default=None)
    parser.add_argument("--demo", action="store_true")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> VisualizerConfig:
    config = load_config(args.config)
    overrides = {
        "sample_rate": args.samplerate,
        "fft_size": args.fft,
        "speed": args.speed,
        "scale_mode": args.scale,
        "spectrogram_max_frequency": args.max_freq,
        "colormap": args.colormap,
        "formant_count": args.formants,
        "device": args.device,
    }
    if args.track:
        overrides["track_fundamental"] = True
        overrides["track_formants"] = True
    data = dict(vars(config))
    data.update(overrides)
    return VisualizerConfig.from_dict(data)


def create_source(args: argparse.Namespace, config: VisualizerConfig):
    if args.demo or sd is None:
        return DemoSource(config.sample_rate, config.block_size)
    try:
        return MicSource(config.sample_rate, config.block_size, device=config.device)
    except Exception as exc:  # pragma: no cover - interactive fallback
        logger.warning("could not initialize microphone input: %s", exc)
        logger.warning("falling back to demo mode; use --device to select an input")
        return DemoSource(config.sample_rate, config.block_size)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = build_config(args)
    source = create_source(args, config)
    system = AudioSystem(source, config)
    SpectrogramWindow(system).run()


__all__ = ["parse_args", "build_config", "create_source", "main"]
