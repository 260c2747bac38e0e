"""
Gravity Lens -- Themes
Color tables and per-theme animation tuning for the renderers.
"""

from __future__ import annotations

from dataclasses import dataclass


class ThemeError(KeyError):
    """Raised when a theme name is not registered."""
    pass


@dataclass(frozen=True)
class FieldGradient:
    peak_color: str
    intensity: float


@dataclass(frozen=True)
class Theme:
    name: str
    background: str
    background_top: str
    background_bottom: str
    grid_base: str
    levels: tuple[str, str, str, str, str]
    accent_color: str
    warp_glow: str
    text_color: str
    anomaly_accent: str
    anomaly_highlight: str
    peak_moment_color: str
    field_gradient: FieldGradient | None = None
    warp_multiplier: float = 1.0      # scales RenderOptions.strength
    dimming: float = 0.0              # brightness offset for warped zone cells
    peak_brightness_boost: float = 0.15  # max accent opacity on anomaly cells

    def level_color(self, level: int) -> str:
        return self.levels[max(0, min(len(self.levels) - 1, int(level)))]


DARK = Theme(
    name="dark",
    background="#0d1117",
    background_top="#0b0f14",
    background_bottom="#0f1720",
    grid_base="#161b22",
    levels=("#161b22", "#0e4429", "#006d32", "#26a641", "#39d353"),
    accent_color="#39d353",
    warp_glow="rgba(120, 255, 180, 0.08)",
    text_color="rgba(255, 255, 255, 0.5)",
    anomaly_accent="#3ddcff",
    anomaly_highlight="#b8f3ff",
    peak_moment_color="#e6fbff",
    field_gradient=FieldGradient(peak_color="#a78bfa", intensity=0.6),
    warp_multiplier=1.0,
    dimming=0.0,
    peak_brightness_boost=0.15,
)

LIGHT = Theme(
    name="light",
    background="#ffffff",
    background_top="#ffffff",
    background_bottom="#f6f8fa",
    grid_base="#ebedf0",
    levels=("#ebedf0", "#9be9a8", "#40c463", "#30a14e", "#216e39"),
    accent_color="#216e39",
    warp_glow="rgba(0, 120, 60, 0.08)",
    text_color="rgba(0, 0, 0, 0.5)",
    anomaly_accent="#0969da",
    anomaly_highlight="#54aeff",
    peak_moment_color="#0550ae",
    field_gradient=FieldGradient(peak_color="#8250df", intensity=0.5),
    warp_multiplier=0.9,
    dimming=0.04,
    peak_brightness_boost=0.2,
)

THEMES: dict[str, Theme] = {
    "dark": DARK,
    "light": LIGHT,
}


def get_theme(name: str) -> Theme:
    """Look up a theme by name.

    Raises:
        ThemeError: If the name is not registered.
    """
    if name not in THEMES:
        available = ", ".join(sorted(THEMES))
        raise ThemeError(f"Unknown theme '{name}'. Available: {available}")
    return THEMES[name]


def list_themes() -> list[str]:
    return sorted(THEMES)
