"""
Gravity Lens -- Drawing Surfaces
Raster backends for the GIF renderer. Every backend implements the
Surface interface; the renderer only ever talks to that interface, so a
test can inject a recording surface and a new backend needs no renderer
changes.

PillowSurface draws shapes and text with Pillow (alpha-blended through an
RGBA ImageDraw), builds gradients and glows as numpy arrays and resizes
with OpenCV.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod

import cv2
import numpy as np
from PIL import Image, ImageDraw, ImageFont

from render.color import parse_color

CORNER_SEGMENTS = 6
FONT_CANDIDATES = (
    "DejaVuSans.ttf",
    "/System/Library/Fonts/Helvetica.ttc",
)


class Surface(ABC):
    """Minimal 2D drawing capability needed to render one frame."""

    def __init__(self, width: int, height: int):
        self.width = int(width)
        self.height = int(height)

    @abstractmethod
    def fill_gradient(self, top: str, bottom: str) -> None:
        """Fill the whole surface with a vertical linear gradient."""

    @abstractmethod
    def rounded_rect(self, x, y, w, h, radius, fill, rotation=0.0, opacity=1.0) -> None:
        """Rounded rectangle, optionally rotated (degrees) about its center."""

    @abstractmethod
    def radial_glow(self, cx, cy, radius, color, stops) -> None:
        """Radial gradient disc; stops are (offset 0-1, alpha 0-1) pairs."""

    @abstractmethod
    def text(self, x, y, text, fill, size=10, align="right") -> None:
        """Single line of text with its baseline at y."""

    @abstractmethod
    def to_image(self, width: int | None = None) -> Image.Image:
        """Snapshot the surface as an RGB image, optionally resized to width."""


def rounded_rect_points(x, y, w, h, radius, rotation=0.0, segments=CORNER_SEGMENTS):
    """(K, 2) polygon outline of a rounded rectangle rotated about its center."""
    r = max(0.0, min(radius, w / 2, h / 2))
    cx, cy = x + w / 2, y + h / 2
    hx, hy = w / 2 - r, h / 2 - r

    points = []
    # corner centers clockwise from top-right, each sweeping 90 degrees
    for (sx, sy), start in (((1, -1), -90), ((1, 1), 0), ((-1, 1), 90), ((-1, -1), 180)):
        angles = np.radians(np.linspace(start, start + 90, segments))
        px = cx + sx * hx + r * np.cos(angles)
        py = cy + sy * hy + r * np.sin(angles)
        points.append(np.stack([px, py], axis=1))
    outline = np.concatenate(points)

    if rotation:
        theta = math.radians(rotation)
        c, s = math.cos(theta), math.sin(theta)
        dx = outline[:, 0] - cx
        dy = outline[:, 1] - cy
        outline = np.stack([cx + dx * c - dy * s, cy + dx * s + dy * c], axis=1)
    return outline


def _load_font(size):
    for name in FONT_CANDIDATES:
        try:
            return ImageFont.truetype(name, size)
        except OSError:
            continue
    return ImageFont.load_default()


class PillowSurface(Surface):
    """Pillow + numpy surface backed by an RGB image."""

    def __init__(self, width: int, height: int, background: str = "#000000"):
        super().__init__(width, height)
        self.image = Image.new("RGB", (self.width, self.height), parse_color(background)[:3])
        self._draw = ImageDraw.Draw(self.image, "RGBA")
        self._fonts: dict[int, ImageFont.ImageFont] = {}

    def _replace(self, array: np.ndarray) -> None:
        self.image = Image.fromarray(array, "RGB")
        self._draw = ImageDraw.Draw(self.image, "RGBA")

    def fill_gradient(self, top, bottom):
        t = np.linspace(0.0, 1.0, self.height, dtype=np.float32)[:, None, None]
        c0 = np.array(parse_color(top)[:3], dtype=np.float32)
        c1 = np.array(parse_color(bottom)[:3], dtype=np.float32)
        column = c0 + (c1 - c0) * t
        frame = np.broadcast_to(column, (self.height, self.width, 3))
        self._replace(np.clip(np.round(frame), 0, 255).astype(np.uint8))

    def rounded_rect(self, x, y, w, h, radius, fill, rotation=0.0, opacity=1.0):
        if w <= 0 or h <= 0:
            return
        r, g, b, a = parse_color(fill)
        rgba = (r, g, b, int(round(a * max(0.0, min(1.0, opacity)))))

        if not rotation:
            self._draw.rounded_rectangle(
                [x, y, x + w, y + h],
                radius=int(round(max(0.0, min(radius, w / 2, h / 2)))),
                fill=rgba,
            )
            return

        outline = rounded_rect_points(x, y, w, h, radius, rotation)
        self._draw.polygon([tuple(p) for p in outline.tolist()], fill=rgba)

    def radial_glow(self, cx, cy, radius, color, stops):
        if radius <= 0:
            return
        x0 = max(0, int(math.floor(cx - radius)))
        y0 = max(0, int(math.floor(cy - radius)))
        x1 = min(self.width, int(math.ceil(cx + radius)) + 1)
        y1 = min(self.height, int(math.ceil(cy + radius)) + 1)
        if x0 >= x1 or y0 >= y1:
            return

        yy, xx = np.ogrid[y0:y1, x0:x1]
        dist = np.hypot(xx + 0.5 - cx, yy + 0.5 - cy) / radius
        offsets, alphas = zip(*stops)
        alpha = np.interp(dist, offsets, alphas, right=0.0).astype(np.float32)[..., None]

        frame = np.array(self.image, dtype=np.float32)
        region = frame[y0:y1, x0:x1]
        tint = np.array(parse_color(color)[:3], dtype=np.float32)
        frame[y0:y1, x0:x1] = region * (1.0 - alpha) + tint * alpha
        self._replace(np.clip(np.round(frame), 0, 255).astype(np.uint8))

    def text(self, x, y, text, fill, size=10, align="right"):
        if size not in self._fonts:
            self._fonts[size] = _load_font(size)
        font = self._fonts[size]

        left, top, right, bottom = self._draw.textbbox((0, 0), text, font=font)
        tw, th = right - left, bottom - top
        if align == "right":
            x = x - tw
        elif align == "center":
            x = x - tw / 2
        self._draw.text((x, y - th), text, fill=parse_color(fill), font=font)

    def to_image(self, width=None):
        if width is None or width == self.width:
            return self.image.copy()
        height = max(1, round(self.height * width / self.width))
        interpolation = cv2.INTER_AREA if width < self.width else cv2.INTER_LINEAR
        resized = cv2.resize(np.asarray(self.image), (width, height), interpolation=interpolation)
        return Image.fromarray(resized, "RGB")
