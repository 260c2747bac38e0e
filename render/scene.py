"""
Gravity Lens -- Scene Sampling
Everything a renderer needs about one render, split into the part that
never changes between frames (LensScene) and the part that does
(FrameState). Both renderers sample the same scene, so the SVG keyframes
and the GIF frames agree on every position and color decision.

sample(time) is a pure function of the scene and the time value: frames
can be drawn in any order, skipped or re-sampled.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from gravity.field import (
    compute_anomaly_activation_delays,
    compute_field_warp,
    compute_gravity_center,
    compute_interference,
    compute_lens_zone,
    compute_local_lens_warp,
    compute_local_lens_warp_per_anomaly,
    compute_warp_intensity,
    compute_warped_positions,
    find_gravity_peaks,
)
from gravity.hashing import compute_interference_jitter, get_cell_rotation
from gravity.models import ContributionDay, WarpedCell
from gravity.normalize import detect_anomalies, normalize_contributions
from gravity.options import PADDING, TAGLINE_HEIGHT, RenderMode, RenderOptions
from gravity.timeline import (
    fold_time,
    get_anomaly_brightness_progress,
    get_anomaly_warp_progress,
    get_brightness_progress,
    get_interference_progress,
    get_warp_progress,
)
from render.color import (
    adjust_brightness,
    blend_colors,
    compute_anomaly_color,
    compute_cell_color,
    shift_hue,
)
from render.theme import Theme, get_theme

ATTRACTOR_PEAKS = 3

# Cell styling
ANOMALY_SCALE = 0.02          # anomaly cells grow 2% at full brightness
ANOMALY_RADIUS = 6.0          # corner radius an anomaly eases toward
INTERFERENCE_SCALE = 0.015
INTERFERENCE_RADIUS = 4.0
PEAK_MOMENT_THRESHOLD = 0.95
FIELD_HUE_SHIFT = 7.0         # degrees at full warp
INTERFERENCE_HUE_SHIFT = 5.0
FIELD_DIMMING = -0.08
ANOMALY_LIFT = 0.05
INTERFERENCE_LIFT = 0.25

# Glow
GLOW_STEPS = 4.0              # outer radius in cell steps
GLOW_ALPHA = 0.12
GLOW_PULSE_ALPHA = 0.3        # extra alpha at the interference peak
GLOW_PULSE_GROWTH = 0.15      # extra radius at the interference peak
GLOW_STOPS = ((0.0, 1.0), (0.5, 0.3), (1.0, 0.0))

TAGLINE = "Your commits bend spacetime."
BAR_HEIGHT = 3
BAR_OFFSET = 8                # gap between grid and progress bar


@dataclass
class FrameState:
    """Animation state at one time value."""
    time: float
    cells: list[WarpedCell]
    warp: dict[int, float] = field(default_factory=dict)        # source index -> progress
    brightness: dict[int, float] = field(default_factory=dict)  # source index -> progress
    interference: float = 0.0

    @property
    def lead_warp(self) -> float:
        return max(self.warp.values(), default=0.0)

    @property
    def lead_brightness(self) -> float:
        return max(self.brightness.values(), default=0.0)


@dataclass(frozen=True)
class CellLook:
    """Resolved drawing parameters for one cell in one frame (canvas pixels)."""
    x: float
    y: float
    size: float
    radius: float
    fill: str
    rotation: float = 0.0   # degrees about the cell center
    animated: bool = False

    @property
    def center(self) -> tuple[float, float]:
        return self.x + self.size / 2, self.y + self.size / 2


@dataclass(frozen=True)
class Glow:
    source: int             # index of the anomaly cell
    cx: float
    cy: float
    radius: float
    alpha: float


class LensScene:
    """Static per-render data for one contribution calendar."""

    def __init__(self, days: Sequence[ContributionDay], options: RenderOptions):
        self.options = options
        self.theme: Theme = get_theme(options.theme)
        self.mode = RenderMode(options.mode)
        self.strength = options.strength * self.theme.warp_multiplier
        self.radius = options.lens_radius

        size, gap = options.cell_size, options.cell_gap
        self.cell_size = size
        self.cell_gap = gap
        self.cell_step = size + gap

        base_cells = normalize_contributions(days, options.clip_percent)
        self.cells = detect_anomalies(base_cells, options.anomaly_percent)
        self.sources = [i for i, c in enumerate(self.cells) if c.is_anomaly]

        self.delays = compute_anomaly_activation_delays(self.cells, size, gap, options.max_delay)
        if self.mode == RenderMode.LENS:
            self.interference = compute_interference(self.cells, self.radius, size, gap)
            self.in_zone = compute_lens_zone(self.cells, self.radius, size, gap)
        else:
            self.interference = [0.0] * len(self.cells)
            self.in_zone = [True] * len(self.cells)

        self.peaks = []
        if self.mode == RenderMode.ATTRACTOR:
            self.peaks = find_gravity_peaks(self.cells, ATTRACTOR_PEAKS) or [compute_gravity_center(self.cells)]
        self.max_intensities = compute_warp_intensity(self._warp_cells(1.0))

        self.width, self.height = options.canvas_size(len(days))
        self.padding = PADDING
        self.tagline_height = TAGLINE_HEIGHT
        weeks = max((c.col for c in self.cells), default=0) + 1
        self.grid_width = weeks * self.cell_step
        self.grid_bottom = 7 * self.cell_step + PADDING

    @property
    def animated_count(self) -> int:
        return sum(1 for z in self.in_zone if z)

    def _warp_cells(self, progress: float) -> list[WarpedCell]:
        args = (self.strength, self.cell_size, self.cell_gap)
        if self.mode == RenderMode.FIELD:
            return compute_field_warp(self.cells, progress, *args)
        if self.mode == RenderMode.ATTRACTOR:
            return compute_warped_positions(self.cells, self.peaks, progress, *args)
        return compute_local_lens_warp(self.cells, progress, self.radius, *args)

    def sample(self, time: float) -> FrameState:
        duration = self.options.duration
        t = fold_time(time, duration)

        if self.mode != RenderMode.LENS:
            warp = get_warp_progress(t, duration)
            bright = get_brightness_progress(t, duration)
            return FrameState(
                time=t,
                cells=self._warp_cells(warp),
                warp={i: warp for i in self.sources},
                brightness={i: bright for i in self.sources},
            )

        warp = {i: get_anomaly_warp_progress(t, duration, self.delays[i]) for i in self.sources}
        bright = {i: get_anomaly_brightness_progress(t, duration, self.delays[i]) for i in self.sources}
        cells = compute_local_lens_warp_per_anomaly(
            self.cells, warp, self.radius, self.strength, self.cell_size, self.cell_gap,
        )
        return FrameState(
            time=t,
            cells=cells,
            warp=warp,
            brightness=bright,
            interference=get_interference_progress(t, duration),
        )

    def _fill(self, frame: FrameState, i: int, cell, brightness: float, warp: float) -> str:
        theme = self.theme
        base = theme.level_color(cell.level)

        if cell.is_anomaly:
            fill = compute_anomaly_color(
                base, theme.anomaly_accent, brightness, theme.peak_brightness_boost,
            )
            if frame.interference > PEAK_MOMENT_THRESHOLD:
                fill = theme.peak_moment_color
            elif frame.interference > 0:
                fill = blend_colors(fill, theme.peak_moment_color, frame.interference * 0.5)
            return adjust_brightness(fill, ANOMALY_LIFT * warp)

        gradient = theme.field_gradient
        if gradient is None:
            return base

        fill = compute_cell_color(
            base, gradient.peak_color, self.max_intensities[i], warp, gradient.intensity,
        )
        fill = shift_hue(fill, FIELD_HUE_SHIFT * warp)
        fill = adjust_brightness(fill, (FIELD_DIMMING + theme.dimming) * warp)
        level = self.interference[i]
        if level > 0 and frame.interference > 0:
            fill = shift_hue(fill, INTERFERENCE_HUE_SHIFT * frame.interference * level)
            fill = adjust_brightness(fill, INTERFERENCE_LIFT * frame.interference * level)
        return fill

    def cell_looks(self, frame: FrameState) -> list[CellLook]:
        """Position, size, corner radius, tilt and color of every cell."""
        pad = self.padding
        size = self.cell_size
        corner = self.options.corner_radius
        lead_warp = frame.lead_warp
        lead_brightness = frame.lead_brightness

        looks = []
        for i, cell in enumerate(frame.cells):
            if not self.in_zone[i]:
                looks.append(CellLook(
                    x=cell.original_x + pad,
                    y=cell.original_y + pad,
                    size=size,
                    radius=corner,
                    fill=self.theme.level_color(cell.level),
                ))
                continue

            x = cell.warped_x + pad
            y = cell.warped_y + pad
            if cell.is_anomaly:
                brightness = frame.brightness.get(i, 0.0)
                warp = frame.warp.get(i, 0.0)
            else:
                brightness = lead_brightness
                warp = lead_warp
            fill = self._fill(frame, i, cell, brightness, warp)

            if cell.is_anomaly and brightness > 0:
                scaled = size * (1 + ANOMALY_SCALE * brightness)
                offset = (scaled - size) / 2
                looks.append(CellLook(
                    x=x - offset,
                    y=y - offset,
                    size=scaled,
                    radius=corner + (ANOMALY_RADIUS - corner) * brightness,
                    fill=fill,
                    rotation=get_cell_rotation(cell.row, cell.col) * warp,
                    animated=True,
                ))
                continue

            level = self.interference[i]
            jitter = compute_interference_jitter(cell.row, cell.col, frame.interference, level)
            if level > 0 and frame.interference > 0:
                pulse = frame.interference * level
                scaled = size * (1 + INTERFERENCE_SCALE * pulse)
                offset = (scaled - size) / 2
                looks.append(CellLook(
                    x=x - offset + jitter.x,
                    y=y - offset + jitter.y,
                    size=scaled,
                    radius=corner + (INTERFERENCE_RADIUS - corner) * pulse,
                    fill=fill,
                    animated=True,
                ))
            else:
                looks.append(CellLook(
                    x=x + jitter.x,
                    y=y + jitter.y,
                    size=size,
                    radius=corner,
                    fill=fill,
                    animated=True,
                ))
        return looks

    def glows(self, frame: FrameState) -> list[Glow]:
        """Soft radial glow around every lit anomaly source."""
        result = []
        outer = self.cell_step * GLOW_STEPS
        for i in self.sources:
            brightness = frame.brightness.get(i, 0.0)
            if brightness <= 0:
                continue
            cell = self.cells[i]
            result.append(Glow(
                source=i,
                cx=cell.col * self.cell_step + self.cell_size / 2 + self.padding,
                cy=cell.row * self.cell_step + self.cell_size / 2 + self.padding,
                radius=outer * (1 + GLOW_PULSE_GROWTH * frame.interference),
                alpha=brightness * GLOW_ALPHA * (1 + GLOW_PULSE_ALPHA * frame.interference),
            ))
        return result

    def sample_times(self, count: int) -> list[float]:
        """count evenly spaced times covering one loop, starting at 0."""
        count = max(1, int(count))
        return [i / count * self.options.duration for i in range(count)]
