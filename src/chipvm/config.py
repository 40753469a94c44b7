import argparse
import string

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from chipvm.machine import SCREEN_HEIGHT, SCREEN_WIDTH, QuirksMode

# Constants
TIMER_HZ = 60
MIN_LERP_RATE = 0.1
MAX_LERP_RATE = 1.0
MAX_VOLUME = 32767


@dataclass
class Config:
    """
    Runtime options for a session.  Defaults match the original CHIP-8 look and feel.
    """
    rom: Optional[Path] = None
    quirks: QuirksMode = QuirksMode.CHIP8
    width: int = SCREEN_WIDTH
    height: int = SCREEN_HEIGHT
    scale: int = 20
    foreground: int = 0xFFFFFFFF
    background: int = 0x000000FF
    outlines: bool = True
    instructions_per_second: int = 700
    tone_frequency: int = 440
    sample_rate: int = 44100
    volume: int = 3000
    color_lerp_rate: float = 0.7
    tall_sprites: bool = False
    debug: bool = False

    @property
    def instructions_per_tick(self) -> int:
        return max(1, self.instructions_per_second // TIMER_HZ)


def clamp_lerp_rate(rate: float) -> float:
    return min(MAX_LERP_RATE, max(MIN_LERP_RATE, rate))


def parse_color(value: str) -> int:
    """
    Parse an RRGGBBAA hex string (optionally prefixed with # or 0x) into an integer color.
    :param value: The string to parse.
    :return: The color as 0xRRGGBBAA.
    """
    text = value.strip().lower()
    if text.startswith("#"):
        text = text[1:]
    elif text.startswith("0x"):
        text = text[2:]
    if len(text) == 6:
        text += "ff"
    if len(text) != 8 or any(char not in string.hexdigits for char in text):
        raise argparse.ArgumentTypeError(f"'{value}' is not an RRGGBB or RRGGBBAA color.")
    return int(text, 16)


def positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"'{value}' must be greater than 0.")
    return number


def build_parser() -> argparse.ArgumentParser:
    defaults = Config()
    parser = argparse.ArgumentParser(prog="chipvm", description="CHIP-8 / SUPER-CHIP / XO-CHIP emulator")
    parser.add_argument("rom", nargs="?", type=Path, help="Game to load.  A file picker is opened if omitted.")
    parser.add_argument("--quirks", choices=[mode.value for mode in QuirksMode], default=defaults.quirks.value, help="Variant whose quirks to emulate (default: %(default)s)")
    parser.add_argument("--scale", type=positive_int, default=defaults.scale, help="Window pixels per CHIP-8 pixel (default: %(default)s)")
    parser.add_argument("--foreground", type=parse_color, default=defaults.foreground, help="Color of lit pixels as RRGGBBAA (default: FFFFFFFF)")
    parser.add_argument("--background", type=parse_color, default=defaults.background, help="Color of unlit pixels as RRGGBBAA (default: 000000FF)")
    parser.add_argument("--no-outlines", dest="outlines", action="store_false", help="Do not outline lit pixels")
    parser.add_argument("--ips", type=positive_int, default=defaults.instructions_per_second, help="Instructions executed per second (default: %(default)s)")
    parser.add_argument("--tone", type=positive_int, default=defaults.tone_frequency, help="Frequency of the beep in Hz (default: %(default)s)")
    parser.add_argument("--sample-rate", type=positive_int, default=defaults.sample_rate, help="Audio sample rate in Hz (default: %(default)s)")
    parser.add_argument("--volume", type=int, default=defaults.volume, help=f"Beep amplitude, 0-{MAX_VOLUME} (default: %(default)s)")
    parser.add_argument("--lerp", type=float, default=defaults.color_lerp_rate, help="Pixel fade rate per frame, 0.1-1.0 (default: %(default)s)")
    parser.add_argument("--tall-sprites", action="store_true", help="Draw 16x16 sprites for DXY0 in xochip mode")
    parser.add_argument("--debug", action="store_true", help="Log every executed opcode")
    return parser


def parse_args(argv: Optional[List[str]] = None) -> Config:
    """
    Build the session config from command line arguments.
    :param argv: The arguments, excluding the program name.  sys.argv is used if not provided.
    :return: The config.
    """
    args = build_parser().parse_args(argv)
    return Config(
        rom=args.rom,
        quirks=QuirksMode(args.quirks),
        scale=args.scale,
        foreground=args.foreground,
        background=args.background,
        outlines=args.outlines,
        instructions_per_second=args.ips,
        tone_frequency=args.tone,
        sample_rate=args.sample_rate,
        volume=min(MAX_VOLUME, max(0, args.volume)),
        color_lerp_rate=clamp_lerp_rate(args.lerp),
        tall_sprites=args.tall_sprites,
        debug=args.debug,
    )
