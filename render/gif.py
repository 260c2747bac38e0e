"""
Gravity Lens -- GIF Renderer
Rasterizes fps x duration frames of the scene onto a Surface and encodes
them as a looping GIF89a with Pillow.
"""

from __future__ import annotations

import io
import logging
from typing import Callable, Sequence

from PIL import Image

from gravity.models import ContributionDay
from gravity.options import RenderOptions
from gravity.safety import preflight_render
from render.scene import BAR_HEIGHT, BAR_OFFSET, GLOW_STOPS, TAGLINE, FrameState, LensScene
from render.surface import PillowSurface, Surface

logger = logging.getLogger(__name__)

SurfaceFactory = Callable[[int, int], Surface]


def draw_frame(surface: Surface, scene: LensScene, frame: FrameState) -> None:
    """Draw one frame: background, cells, glows, progress bar, tagline."""
    theme = scene.theme
    surface.fill_gradient(theme.background_top, theme.background_bottom)

    for look in scene.cell_looks(frame):
        surface.rounded_rect(
            look.x, look.y, look.size, look.size, look.radius, look.fill,
            rotation=look.rotation,
        )

    for glow in scene.glows(frame):
        stops = [(offset, glow.alpha * alpha) for offset, alpha in GLOW_STOPS]
        surface.radial_glow(glow.cx, glow.cy, glow.radius, theme.anomaly_accent, stops)

    pad = scene.padding
    bar_y = scene.grid_bottom + BAR_OFFSET
    surface.rounded_rect(pad, bar_y, scene.grid_width, BAR_HEIGHT, 1.5, theme.text_color, opacity=0.15)
    progress = frame.time / scene.options.duration
    if progress > 0:
        surface.rounded_rect(
            pad, bar_y, scene.grid_width * progress, BAR_HEIGHT, 1.5, theme.anomaly_accent,
            opacity=0.6,
        )

    surface.text(scene.width - pad, scene.height - 8, TAGLINE, theme.text_color, size=10)


def render_frames(
    days: Sequence[ContributionDay],
    options: RenderOptions | None = None,
    surface_factory: SurfaceFactory = PillowSurface,
) -> list[Image.Image]:
    """Render every frame of one loop as an RGB image."""
    options = options or RenderOptions()
    job = preflight_render(days, options)
    scene = LensScene(days, options)
    logger.debug(
        "gif: %d days, %dx%d, %d frames, %d sources",
        job["num_days"], job["width"], job["height"], job["frames"], len(scene.sources),
    )

    images = []
    for t in scene.sample_times(options.frame_count):
        surface = surface_factory(scene.width, scene.height)
        draw_frame(surface, scene, scene.sample(t))
        images.append(surface.to_image(options.width))
    return images


def encode_gif(images: Sequence[Image.Image], fps: int) -> bytes:
    """Encode RGB frames as an infinitely looping GIF."""
    if not images:
        raise ValueError("At least one frame is required")
    buf = io.BytesIO()
    images[0].save(
        buf,
        format="GIF",
        save_all=True,
        append_images=list(images[1:]),
        duration=round(1000 / fps),
        loop=0,
        disposal=1,
    )
    return buf.getvalue()


def render_gif(
    days: Sequence[ContributionDay],
    options: RenderOptions | None = None,
    surface_factory: SurfaceFactory = PillowSurface,
) -> bytes:
    """Render an animated GIF of a contribution calendar.

    Raises:
        SafetyError: If the job exceeds the resource limits.
        ThemeError: If options.theme is unknown.
    """
    options = options or RenderOptions()
    images = render_frames(days, options, surface_factory)
    data = encode_gif(images, options.fps)
    logger.debug("gif: encoded %d frames, %d bytes", len(images), len(data))
    return data
