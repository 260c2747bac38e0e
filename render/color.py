"""
Gravity Lens -- Color Math
Scalar color helpers shared by the SVG and GIF renderers.
Colors travel as '#rrggbb' strings; CSS 'rgba(r, g, b, a)' is accepted
where a theme uses translucent colors.
"""

from __future__ import annotations

import colorsys
import re

_RGBA_RE = re.compile(
    r"rgba?\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*(?:,\s*([0-9.]+)\s*)?\)"
)


def hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    h = hex_color.lstrip("#")
    return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)


def rgb_to_hex(r: float, g: float, b: float) -> str:
    """Round each channel, clamp to 0-255, format as '#rrggbb'."""
    return "#" + "".join(
        f"{max(0, min(255, int(round(v)))):02x}" for v in (r, g, b)
    )


def parse_color(color: str) -> tuple[int, int, int, int]:
    """'#rrggbb' or CSS rgb()/rgba() -> (r, g, b, a) with alpha in 0-255."""
    if color.startswith("#"):
        return (*hex_to_rgb(color), 255)
    match = _RGBA_RE.fullmatch(color.strip())
    if match is None:
        raise ValueError(f"Unsupported color: {color!r}")
    r, g, b, a = match.groups()
    alpha = 255 if a is None else int(round(float(a) * 255))
    return int(r), int(g), int(b), max(0, min(255, alpha))


def blend_colors(color1: str, color2: str, ratio: float) -> str:
    """Linear blend: ratio 0 returns color1, ratio 1 returns color2."""
    r1, g1, b1 = hex_to_rgb(color1)
    r2, g2, b2 = hex_to_rgb(color2)
    return rgb_to_hex(
        r1 + (r2 - r1) * ratio,
        g1 + (g2 - g1) * ratio,
        b1 + (b2 - b1) * ratio,
    )


def compute_cell_color(
    base_color: str,
    peak_color: str,
    warp_intensity: float,
    warp_progress: float,
    gradient_intensity: float,
) -> str:
    """Tint a warped cell toward peak_color by intensity x progress x gradient."""
    ratio = warp_intensity * warp_progress * gradient_intensity
    if ratio <= 0:
        return base_color
    return blend_colors(base_color, peak_color, ratio)


def compute_anomaly_color(
    base_color: str,
    accent_color: str,
    brightness_progress: float,
    max_opacity: float = 0.15,
) -> str:
    """Tint an anomaly cell toward its accent, at most max_opacity of the way."""
    ratio = brightness_progress * max_opacity
    if ratio <= 0:
        return base_color
    return blend_colors(base_color, accent_color, ratio)


def adjust_brightness(hex_color: str, amount: float) -> str:
    """Move toward white (amount > 0) or black (amount < 0) by |amount|."""
    if amount == 0:
        return hex_color
    target = "#ffffff" if amount > 0 else "#000000"
    return blend_colors(hex_color, target, min(1.0, abs(amount)))


def shift_hue(hex_color: str, degrees: float) -> str:
    """Rotate hue by degrees, keeping saturation and value."""
    if degrees == 0:
        return hex_color
    r, g, b = (v / 255.0 for v in hex_to_rgb(hex_color))
    h, s, v = colorsys.rgb_to_hsv(r, g, b)
    r, g, b = colorsys.hsv_to_rgb((h + degrees / 360.0) % 1.0, s, v)
    return rgb_to_hex(r * 255, g * 255, b * 255)
