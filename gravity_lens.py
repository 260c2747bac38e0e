#!/usr/bin/env python3
"""
Gravity Lens — Contribution Calendar Warp Renderer
CLI entry point. Also importable as a library.

Usage:
    python gravity_lens.py --demo
    python gravity_lens.py --demo --format gif --theme light -o lens.gif
    python gravity_lens.py --user octocat --token $GITHUB_TOKEN --strength 0.8
    python gravity_lens.py --demo --options presets/dramatic.json --fps 10
"""

import sys
import os
import logging
import argparse

# Add project root to path so imports work
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from pydantic import ValidationError

from gravity.demo_data import generate_demo_data
from gravity.fetch import FetchError, fetch_contributions
from gravity.options import RenderMode, RenderOptions, apply_overrides, load_options
from gravity.safety import SafetyError
from render import RENDERERS, render
from render.theme import ThemeError, list_themes

__version__ = "0.1.0"

logger = logging.getLogger("gravity_lens")


def parse_cli_options(argv=None) -> argparse.Namespace:
    """Parse command-line arguments.

    Render options left unset stay None, so they never override values
    loaded from an --options file.
    """
    parser = argparse.ArgumentParser(
        prog="gravity-lens",
        description="Gravity Lens — your contribution calendar, bent by its busiest days",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    source = parser.add_argument_group("data source")
    source.add_argument("-u", "--user", help="GitHub username")
    source.add_argument("-t", "--token", help="GitHub token (default: $GITHUB_TOKEN)")
    source.add_argument("-d", "--demo", action="store_true", help="Use built-in demo data")

    look = parser.add_argument_group("render options")
    look.add_argument("--theme", choices=list_themes(), help="Color theme (default: dark)")
    look.add_argument("--strength", type=float, help="Warp strength (default: 0.5)")
    look.add_argument("--duration", type=float, help="Loop length in seconds (default: 14)")
    look.add_argument("--clip-percent", type=float, help="Mass saturation percentile (default: 95)")
    look.add_argument("--anomaly-percent", type=float, help="Top percent of days that warp (default: 10)")
    look.add_argument("--fps", type=int, help="GIF frame rate (default: 12)")
    look.add_argument("--width", type=int, help="Output width in pixels")
    look.add_argument("--mode", choices=[m.value for m in RenderMode], help="Warp model (default: lens)")
    look.add_argument("--options", metavar="JSON", help="Load render options from a JSON file")

    out = parser.add_argument_group("output")
    out.add_argument("--format", choices=list(RENDERERS), default="svg", help="Output format")
    out.add_argument("-o", "--output", help="Output path (default: gravity-lens.<format>)")
    out.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args(argv)
    if args.token is None:
        args.token = os.environ.get("GITHUB_TOKEN")
    if args.output is None:
        args.output = f"gravity-lens{RENDERERS[args.format]['extension']}"
    return args


def build_options(args: argparse.Namespace) -> RenderOptions:
    """Options file (if any) first, then explicit CLI flags on top."""
    base = load_options(args.options) if args.options else RenderOptions()
    return apply_overrides(
        base,
        theme=args.theme,
        strength=args.strength,
        duration=args.duration,
        clip_percent=args.clip_percent,
        anomaly_percent=args.anomaly_percent,
        fps=args.fps,
        width=args.width,
        mode=args.mode,
    )


def load_days(args: argparse.Namespace):
    if args.demo:
        return generate_demo_data()
    if not args.user:
        raise ValueError("--user is required unless --demo is set")
    return fetch_contributions(args.user, args.token)


def _error_message(e: Exception) -> str:
    # KeyError subclasses repr() their message
    if isinstance(e, KeyError) and e.args:
        return str(e.args[0])
    return str(e)


def main(argv=None) -> int:
    args = parse_cli_options(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        options = build_options(args)
        days = load_days(args)
        data = render(days, args.format, options)

        mode = "wb" if RENDERERS[args.format]["binary"] else "w"
        with open(args.output, mode) as f:
            f.write(data)
    except (FetchError, SafetyError, ThemeError, ValidationError, ValueError, OSError) as e:
        print(f"Error: {_error_message(e)}", file=sys.stderr)
        return 1
    except Exception:
        logging.exception("Render failed")
        return 1

    size_kb = os.path.getsize(args.output) / 1024
    print(f"Output: {args.output} ({len(days)} days, {size_kb:.1f}KB)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
