"""
Gravity Lens — Renderer Registry
Every renderer is a function: (days, options) -> str | bytes
"""

from gravity.options import RenderOptions
from render.gif import render_gif
from render.svg import render_svg

RENDERERS = {
    "svg": {
        "fn": render_svg,
        "extension": ".svg",
        "binary": False,
        "description": "Animated SVG with CSS keyframes, plays in any browser",
    },
    "gif": {
        "fn": render_gif,
        "extension": ".gif",
        "binary": True,
        "description": "Looping GIF89a, rasterized frame by frame",
    },
}


def get_renderer(fmt: str) -> dict:
    """Get a renderer entry by format name.

    Raises:
        KeyError: If the format is not registered.
    """
    if fmt not in RENDERERS:
        available = ", ".join(sorted(RENDERERS))
        raise KeyError(f"Unknown format '{fmt}'. Available: {available}")
    return RENDERERS[fmt]


def list_renderers() -> list[dict]:
    """List all formats with descriptions."""
    return [
        {"name": name, "extension": entry["extension"], "description": entry["description"]}
        for name, entry in RENDERERS.items()
    ]


def render(days, fmt: str = "svg", options: RenderOptions | None = None):
    """Render days in the named format. Returns str for text formats, bytes otherwise."""
    entry = get_renderer(fmt)
    return entry["fn"](days, options or RenderOptions())
