"""
Gravity Lens -- Safety & Resource Guards
Preflight checks run before a renderer draws anything.
Bounds input length, frame count and canvas size so a bad option file
or an oversized calendar cannot exhaust memory.
"""

from __future__ import annotations

from typing import Sequence

from gravity.models import ContributionDay
from gravity.options import RenderOptions

# --- Configurable Limits ---
MAX_DAYS = 3660            # ten years of calendar data
MAX_FRAMES = 720           # one loop at 30 fps for 24 seconds
MAX_CANVAS_PX = 4096       # longest canvas edge
MAX_CANVAS_PIXELS = 8_000_000


class SafetyError(Exception):
    """Raised when a preflight check fails."""
    pass


def preflight_render(days: Sequence[ContributionDay], options: RenderOptions) -> dict:
    """Run all resource checks for a render job.

    Args:
        days: Contribution days to be rendered.
        options: Validated render options.

    Returns:
        dict with job geometry (num_days, frames, width, height).

    Raises:
        SafetyError: If any limit is exceeded.
    """
    num_days = len(days)

    # 1. Input length
    if num_days > MAX_DAYS:
        raise SafetyError(
            f"{num_days} days of data exceeds the {MAX_DAYS}-day limit. "
            f"Render a shorter range."
        )

    # 2. Frame count
    frames = options.frame_count
    if frames > MAX_FRAMES:
        raise SafetyError(
            f"{frames} frames ({options.fps} fps x {options.duration}s) exceeds "
            f"the {MAX_FRAMES}-frame limit. Lower fps or duration."
        )

    # 3. Canvas size
    width, height = options.output_size(num_days)
    if max(width, height) > MAX_CANVAS_PX:
        raise SafetyError(
            f"Canvas {width}x{height} exceeds the {MAX_CANVAS_PX}px edge limit."
        )
    if width * height > MAX_CANVAS_PIXELS:
        raise SafetyError(
            f"Canvas {width}x{height} exceeds {MAX_CANVAS_PIXELS} pixels."
        )

    return {"num_days": num_days, "frames": frames, "width": width, "height": height}
