"""
Gravity Lens -- Render Options

Pydantic model for every knob a render accepts. The CLI, JSON preset
files and tests all build one of these; renderers read nothing else.

apply_overrides() merges and revalidates, so a preset file can be loaded
first and individual CLI flags applied on top.
"""

from __future__ import annotations

import json
import math
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, model_validator

from gravity.models import DAYS_PER_WEEK
from gravity.timeline import FIRE_TIME, RESTORE_START, WARP_LAG, WARP_RAMP

# Canvas layout (pixels)
PADDING = 20
TAGLINE_HEIGHT = 40


class RenderMode(str, Enum):
    """Which warp model drives the animation."""
    LENS = "lens"            # staggered per-anomaly local lensing
    FIELD = "field"          # global repulsive field, one shared timeline
    ATTRACTOR = "attractor"  # displacement around the strongest gravity peaks


class RenderOptions(BaseModel):
    """Render configuration shared by the SVG and GIF backends."""

    model_config = {"allow_inf_nan": False, "use_enum_values": True}

    theme: str = Field(
        default="dark",
        description="Theme name ('dark' or 'light').",
    )
    strength: float = Field(
        default=0.5,
        ge=0.0,
        le=5.0,
        description="Max warp in cell steps before the theme's warp multiplier.",
    )
    duration: float = Field(
        default=14.0,
        gt=0.0,
        le=120.0,
        description="Loop length in seconds. The staggered timeline assumes 14.",
    )
    clip_percent: float = Field(
        default=95.0,
        gt=0.0,
        le=100.0,
        description="Percentile used as the mass saturation point.",
    )
    anomaly_percent: float = Field(
        default=10.0,
        ge=0.0,
        le=100.0,
        description="Top percent of days that act as lensing sources.",
    )
    cell_size: int = Field(default=11, ge=1, le=64, description="Cell edge in pixels.")
    cell_gap: int = Field(default=4, ge=0, le=64, description="Gap between cells in pixels.")
    corner_radius: float = Field(default=2.0, ge=0.0, description="Resting cell corner radius.")
    lens_radius: float = Field(
        default=60.0,
        ge=0.0,
        description="Pixel radius of each anomaly's lens zone.",
    )
    max_delay: float = Field(
        default=6.0,
        ge=0.0,
        description="Activation delay (seconds) of the rightmost anomaly column.",
    )
    fps: int = Field(default=12, ge=1, le=30, description="GIF frame rate.")
    width: int | None = Field(
        default=None,
        ge=64,
        description="Output width in pixels. None keeps the natural canvas size.",
    )
    mode: RenderMode = Field(default=RenderMode.LENS, description="Warp model.")

    @model_validator(mode="after")
    def validate_geometry(self) -> "RenderOptions":
        """Corner radius cannot exceed half the cell edge, and a lens loop
        must fit every source's fire, ramp and restore."""
        if self.corner_radius > self.cell_size / 2:
            raise ValueError(
                f"corner_radius ({self.corner_radius}) must be at most half of "
                f"cell_size ({self.cell_size})"
            )
        if self.mode == RenderMode.LENS:
            min_duration = max(RESTORE_START, FIRE_TIME + self.max_delay + WARP_LAG + WARP_RAMP)
            if self.duration <= min_duration:
                raise ValueError(
                    f"duration ({self.duration}s) is too short for lens mode: it must exceed "
                    f"{min_duration:g}s with max_delay={self.max_delay:g}s"
                )
        return self

    @property
    def cell_step(self) -> int:
        return self.cell_size + self.cell_gap

    @property
    def frame_count(self) -> int:
        """Number of frames a raster render of one loop produces."""
        return max(1, math.floor(self.fps * self.duration))

    def canvas_size(self, num_days: int) -> tuple[int, int]:
        """Natural (width, height) of the canvas for num_days of data."""
        weeks = max(1, math.ceil(num_days / DAYS_PER_WEEK))
        grid_w = weeks * self.cell_step - self.cell_gap
        grid_h = DAYS_PER_WEEK * self.cell_step - self.cell_gap
        return grid_w + 2 * PADDING, grid_h + 2 * PADDING + TAGLINE_HEIGHT

    def output_size(self, num_days: int) -> tuple[int, int]:
        """Canvas size after applying the optional target width."""
        natural_w, natural_h = self.canvas_size(num_days)
        if self.width is None or self.width == natural_w:
            return natural_w, natural_h
        return self.width, max(1, round(natural_h * self.width / natural_w))

    @classmethod
    def from_preset(cls, name: str) -> "RenderOptions":
        """Create RenderOptions from a named built-in preset.

        Raises:
            KeyError: If the preset name is not found.
        """
        if name not in RENDER_PRESETS:
            available = ", ".join(sorted(RENDER_PRESETS.keys()))
            raise KeyError(f"Unknown preset '{name}'. Available: {available}")
        return cls(**RENDER_PRESETS[name])


RENDER_PRESETS: dict[str, dict] = {
    "default": {},
    "subtle": {"strength": 0.3, "anomaly_percent": 5.0},
    "dramatic": {"strength": 1.0, "lens_radius": 90.0, "anomaly_percent": 15.0},
    "light": {"theme": "light"},
    "legacy_field": {"mode": "field", "duration": 6.0, "strength": 0.35},
}


def load_options(path: str | Path) -> RenderOptions:
    """Load RenderOptions from a JSON file.

    The file may be a plain options object, or {"preset": name, ...} in
    which case the named preset is applied first and the remaining keys
    override it.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not a JSON object.
        pydantic.ValidationError: If any value is out of range.
    """
    path = Path(path)
    with path.open() as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Options file must contain a JSON object: {path}")

    preset = data.pop("preset", None)
    if preset is None:
        return RenderOptions(**data)
    base = RenderOptions.from_preset(preset)
    return RenderOptions(**{**base.model_dump(), **data})


def apply_overrides(options: RenderOptions, **overrides) -> RenderOptions:
    """Merge non-None overrides into options, re-validating the result."""
    update = {k: v for k, v in overrides.items() if v is not None}
    if not update:
        return options
    return RenderOptions(**{**options.model_dump(), **update})
