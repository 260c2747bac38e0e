"""
Gravity Lens -- SVG Renderer
Self-contained animated SVG: every moving cell gets its own CSS keyframes
sampled from the scene timeline, so the file plays in any browser with no
script.

Layers, back to front:
    gradient background
    static cells           outside every lens zone, no animation
    animated cells         translate/rotate/scale keyframes + color keyframes
    radial glows           one per anomaly source, opacity keyframes
    progress bar, tagline
"""

from __future__ import annotations

import logging
from typing import Sequence

from gravity.models import ContributionDay
from gravity.options import RenderOptions
from gravity.safety import preflight_render
from render.scene import BAR_HEIGHT, BAR_OFFSET, GLOW_STEPS, GLOW_STOPS, TAGLINE, LensScene

logger = logging.getLogger(__name__)

KEYFRAME_RATE = 2.0        # samples per second of loop
MIN_KEYFRAMES = 8
FONT_FAMILY = "Inter, system-ui, sans-serif"


def _num(value: float) -> str:
    return f"{round(value, 2):g}"


def _percent(index: int, count: int) -> str:
    return f"{round(index / count * 100, 2):g}%"


def _keyframes(name: str, values: Sequence[str], prop: str) -> str:
    """@keyframes block, merging consecutive samples that share a value.

    values holds one declaration value per sample; the loop closes with
    the first value at 100%.
    """
    count = len(values)
    groups: list[tuple[list[str], str]] = []
    for i, value in enumerate(list(values) + [values[0]]):
        stop = _percent(i, count)
        if groups and groups[-1][1] == value:
            groups[-1][0].append(stop)
        else:
            groups.append(([stop], value))

    lines = [f"@keyframes {name} {{"]
    for stops, value in groups:
        # first and last stop of a run are enough to hold the value
        selector = ", ".join(stops if len(stops) <= 2 else [stops[0], stops[-1]])
        lines.append(f"  {selector} {{ {prop}: {value}; }}")
    lines.append("}")
    return "\n".join(lines)


def _transform(dx: float, dy: float, rotation: float, scale: float) -> str:
    parts = [f"translate({_num(dx)}px, {_num(dy)}px)"]
    if rotation:
        parts.append(f"rotate({_num(rotation)}deg)")
    if scale != 1:
        parts.append(f"scale({round(scale, 4):g})")
    return " ".join(parts)


def keyframe_count(duration: float) -> int:
    return max(MIN_KEYFRAMES, round(duration * KEYFRAME_RATE))


def render_svg(days: Sequence[ContributionDay], options: RenderOptions | None = None) -> str:
    """Render an animated SVG document for a contribution calendar.

    Args:
        days: Contribution days in calendar order.
        options: Render options (defaults when None).

    Returns:
        The SVG document as a string.

    Raises:
        SafetyError: If the job exceeds the resource limits.
        ThemeError: If options.theme is unknown.
    """
    options = options or RenderOptions()
    job = preflight_render(days, options)
    scene = LensScene(days, options)
    theme = scene.theme
    duration = _num(options.duration)

    samples = keyframe_count(options.duration)
    frames = [scene.sample(t) for t in scene.sample_times(samples)]
    looks = [scene.cell_looks(f) for f in frames]
    glows = [{g.source: g for g in scene.glows(f)} for f in frames]
    logger.debug(
        "svg: %d days, %d animated cells, %d sources, %d keyframes",
        job["num_days"], scene.animated_count, len(scene.sources), samples,
    )

    size = scene.cell_size
    pad = scene.padding
    styles = [".a { transform-box: fill-box; transform-origin: center; }"]
    static_rects = []
    animated_rects = []

    for i, cell in enumerate(scene.cells):
        x = cell.col * scene.cell_step + pad
        y = cell.row * scene.cell_step + pad
        base = theme.level_color(cell.level)

        if not scene.in_zone[i]:
            static_rects.append(
                f'<rect x="{x}" y="{y}" width="{size}" height="{size}" '
                f'rx="{_num(options.corner_radius)}" fill="{base}" />'
            )
            continue

        cx, cy = x + size / 2, y + size / 2
        transforms = []
        fills = []
        for frame_looks in looks:
            look = frame_looks[i]
            lx, ly = look.center
            transforms.append(_transform(lx - cx, ly - cy, look.rotation, look.size / size))
            fills.append(look.fill)

        animations = [f"warp-{i} {duration}s linear infinite"]
        styles.append(_keyframes(f"warp-{i}", transforms, "transform"))
        if any(f != base for f in fills):
            animations.append(f"color-{i} {duration}s linear infinite")
            styles.append(_keyframes(f"color-{i}", fills, "fill"))

        animated_rects.append(
            f'<rect class="a" x="{x}" y="{y}" width="{size}" height="{size}" '
            f'rx="{_num(options.corner_radius)}" fill="{base}" '
            f'style="animation: {", ".join(animations)};" />'
        )

    glow_circles = []
    outer = scene.cell_step * GLOW_STEPS
    for i in scene.sources:
        lit = [g.get(i) for g in glows]
        if not any(lit):
            continue
        cell = scene.cells[i]
        cx = cell.col * scene.cell_step + size / 2 + pad
        cy = cell.row * scene.cell_step + size / 2 + pad
        opacity = [_num(min(1.0, g.alpha)) if g else "0" for g in lit]
        scale = [f"scale({round(g.radius / outer, 3):g})" if g else "scale(1)" for g in lit]
        styles.append(_keyframes(f"glow-{i}", opacity, "opacity"))
        styles.append(_keyframes(f"glow-size-{i}", scale, "transform"))
        glow_circles.append(
            f'<circle class="a" cx="{_num(cx)}" cy="{_num(cy)}" r="{_num(outer)}" fill="url(#glow)" '
            f'opacity="0" style="animation: glow-{i} {duration}s linear infinite, '
            f'glow-size-{i} {duration}s linear infinite;" />'
        )

    width, height = scene.width, scene.height
    out_w, out_h = options.output_size(len(days))
    bar_y = scene.grid_bottom + BAR_OFFSET
    styles.append("@keyframes progress {\n  0% { transform: scaleX(0); }\n  100% { transform: scaleX(1); }\n}")
    body = "\n  ".join(static_rects + animated_rects + glow_circles)
    css = "\n".join(styles)
    stops = "\n      ".join(
        f'<stop offset="{_num(offset * 100)}%" stop-color="{theme.anomaly_accent}" '
        f'stop-opacity="{_num(alpha)}" />'
        for offset, alpha in GLOW_STOPS
    )

    return f"""<svg xmlns="http://www.w3.org/2000/svg" width="{out_w}" height="{out_h}" viewBox="0 0 {width} {height}">
  <defs>
    <linearGradient id="bg" x1="0" y1="0" x2="0" y2="1">
      <stop offset="0%" stop-color="{theme.background_top}" />
      <stop offset="100%" stop-color="{theme.background_bottom}" />
    </linearGradient>
    <radialGradient id="glow">
      {stops}
    </radialGradient>
  </defs>
  <style>
{css}
.bar {{ transform-box: fill-box; transform-origin: left; animation: progress {duration}s linear infinite; }}
  </style>
  <rect width="{width}" height="{height}" fill="url(#bg)" rx="4" ry="4" />
  {body}
  <rect x="{pad}" y="{bar_y}" width="{scene.grid_width}" height="{BAR_HEIGHT}" rx="1.5" fill="{theme.text_color}" opacity="0.15" />
  <rect class="bar" x="{pad}" y="{bar_y}" width="{scene.grid_width}" height="{BAR_HEIGHT}" rx="1.5" fill="{theme.anomaly_accent}" opacity="0.6" />
  <text x="{width - pad}" y="{height - 8}" fill="{theme.text_color}" font-family="{FONT_FAMILY}" font-size="10" font-weight="300" letter-spacing="0.08em" text-anchor="end">{TAGLINE}</text>
</svg>
"""
