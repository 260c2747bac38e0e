"""
Gravity Lens -- Warp Field Engine

Per-cell pixel displacement from mass-bearing sources. Every warp
variant is a parameterization of one force-accumulation primitive,
accumulate_displacement():

    targets  (N, 2) pixel centers of the cells being moved
    sources  (M, 2) pixel centers of the sources
    strength (M,)   numerator of the inverse-square kernel per source

    factor = strength / (r^2 + EPSILON)        (optionally capped)
    d      = sum over sources of (target - source) * factor * weight
    d      = d clamped to a maximum magnitude   (after the full sum)

Positive strength pushes targets away from a source. Variants:

    compute_field_warp                  global field, every massive cell
    compute_warped_positions            one or many external attractors
    compute_local_lens_warp             anomaly sources within a radius
    compute_local_lens_warp_per_anomaly same, each source on its own timeline

Geometry: cell_step = cell_size + cell_gap, a cell's original position is
(col, row) * cell_step and its center sits cell_size / 2 further in.
"""

from __future__ import annotations

from typing import Mapping, Sequence

import numpy as np

from gravity.models import GridCell, Point, WarpedCell
from gravity.timeline import DEFAULT_MAX_DELAY, compute_activation_delay

EPSILON = 0.01               # softens r^2 so a zero distance never divides by zero
FIELD_K_STEPS = 3.0          # k = 3 * cell_step for field and lens kernels
ATTRACTOR_K_STEPS = 50.0     # k = 50 * (avg_mass + bias) * cell_step
ATTRACTOR_MASS_BIAS = 0.1
LENS_ANISOTROPY = (1.2, 0.8)  # lens stretches horizontally, squashes vertically
DEFAULT_LENS_RADIUS = 60.0
PEAK_MIN_SEPARATION = 2.0    # grid units


def cell_step(cell_size: float, cell_gap: float) -> float:
    return cell_size + cell_gap


def _is_anomaly(cell) -> bool:
    return bool(getattr(cell, "is_anomaly", False))


def _origins(cells: Sequence[GridCell], step: float) -> np.ndarray:
    """(N, 2) top-left pixel positions of cells on the undistorted grid."""
    if not cells:
        return np.zeros((0, 2), dtype=np.float64)
    grid = np.array([(c.col, c.row) for c in cells], dtype=np.float64)
    return grid * step


def _centers(cells: Sequence[GridCell], cell_size: float, step: float) -> np.ndarray:
    return _origins(cells, step) + cell_size / 2.0


def _to_warped(cells, origins, displacement, progress) -> list[WarpedCell]:
    warped = origins + displacement * progress
    result = []
    for cell, (ox, oy), (wx, wy) in zip(cells, origins.tolist(), warped.tolist()):
        result.append(WarpedCell(
            row=cell.row,
            col=cell.col,
            count=cell.count,
            level=cell.level,
            mass=cell.mass,
            original_x=ox,
            original_y=oy,
            warped_x=wx,
            warped_y=wy,
            is_anomaly=_is_anomaly(cell),
            anomaly_intensity=float(getattr(cell, "anomaly_intensity", 0.0)),
        ))
    return result


def accumulate_displacement(
    targets: np.ndarray,
    sources: np.ndarray,
    strength: np.ndarray,
    weights: np.ndarray | None = None,
    factor_cap: float | None = None,
    radius: float | None = None,
    anisotropy: tuple[float, float] = (1.0, 1.0),
    movable: np.ndarray | None = None,
    clamp: float | None = None,
) -> np.ndarray:
    """Sum inverse-square contributions of every source on every target.

    Args:
        targets: (N, 2) pixel positions receiving displacement.
        sources: (M, 2) pixel positions of the sources.
        strength: (M,) kernel numerator per source.
        weights: Optional (M,) multiplier per source, applied after the cap.
        factor_cap: Upper bound on each source's scalar factor.
        radius: If set, sources farther than radius, or at exactly zero
            distance, contribute nothing.
        anisotropy: (x, y) multipliers applied to every contribution.
        movable: Optional (N,) bool mask. Masked-out targets stay at zero.
        clamp: Maximum magnitude of the summed vector.

    Returns:
        (N, 2) float64 displacement vectors.
    """
    targets = np.asarray(targets, dtype=np.float64).reshape(-1, 2)
    sources = np.asarray(sources, dtype=np.float64).reshape(-1, 2)
    displacement = np.zeros_like(targets)
    if len(targets) == 0 or len(sources) == 0:
        return displacement

    ddx = targets[:, 0:1] - sources[None, :, 0]
    ddy = targets[:, 1:2] - sources[None, :, 1]
    r2 = ddx * ddx + ddy * ddy

    factor = np.asarray(strength, dtype=np.float64)[None, :] / (r2 + EPSILON)
    if factor_cap is not None:
        factor = np.minimum(factor, factor_cap)
    if weights is not None:
        factor = factor * np.asarray(weights, dtype=np.float64)[None, :]
    if radius is not None:
        dist = np.sqrt(r2)
        factor = np.where((dist > radius) | (dist == 0), 0.0, factor)
    if movable is not None:
        factor = np.where(np.asarray(movable, dtype=bool)[:, None], factor, 0.0)

    dx = (ddx * factor * anisotropy[0]).sum(axis=1)
    dy = (ddy * factor * anisotropy[1]).sum(axis=1)

    if clamp is not None:
        mag = np.hypot(dx, dy)
        over = mag > clamp
        scale = np.where(over, clamp / np.where(over, mag, 1.0), 1.0)
        dx = dx * scale
        dy = dy * scale

    displacement[:, 0] = dx
    displacement[:, 1] = dy
    return displacement


# ─── Mass statistics ───────────────────────────────────────────────

def compute_gravity_center(cells: Sequence[GridCell]) -> Point:
    """Mass-weighted centroid in grid coordinates.

    Falls back to the bounding-box midpoint when every mass is zero,
    and to (0, 0) for an empty grid.
    """
    if not cells:
        return Point(0.0, 0.0)

    total_mass = 0.0
    weighted_x = 0.0
    weighted_y = 0.0
    for cell in cells:
        total_mass += cell.mass
        weighted_x += cell.col * cell.mass
        weighted_y += cell.row * cell.mass

    if total_mass == 0:
        cols = [c.col for c in cells]
        rows = [c.row for c in cells]
        return Point((min(cols) + max(cols)) / 2.0, (min(rows) + max(rows)) / 2.0)

    return Point(weighted_x / total_mass, weighted_y / total_mass)


def find_gravity_peaks(cells: Sequence[GridCell], n: int) -> list[Point]:
    """Up to n strongest cells, skipping any within 2 grid units of a chosen peak."""
    candidates = sorted((c for c in cells if c.mass > 0), key=lambda c: -c.mass)

    peaks: list[Point] = []
    for cell in candidates:
        if len(peaks) >= n:
            break
        too_close = any(
            np.hypot(p.x - cell.col, p.y - cell.row) <= PEAK_MIN_SEPARATION
            for p in peaks
        )
        if not too_close:
            peaks.append(Point(float(cell.col), float(cell.row)))
    return peaks


# ─── Warp variants ─────────────────────────────────────────────────

def compute_field_warp(
    cells: Sequence[GridCell],
    progress: float,
    max_warp: float,
    cell_size: float,
    cell_gap: float,
) -> list[WarpedCell]:
    """Global repulsive field: every massive cell pushes every other cell."""
    if not cells:
        return []

    step = cell_step(cell_size, cell_gap)
    origins = _origins(cells, step)
    centers = origins + cell_size / 2.0

    mass = np.array([c.mass for c in cells], dtype=np.float64)
    massive = mass > 0
    displacement = accumulate_displacement(
        centers,
        centers[massive],
        FIELD_K_STEPS * step * mass[massive] * mass[massive],
        clamp=max_warp * step,
    )
    return _to_warped(cells, origins, displacement, progress)


def compute_warped_positions(
    cells: Sequence[GridCell],
    centers: Point | Sequence[Point],
    progress: float,
    max_warp: float,
    cell_size: float,
    cell_gap: float,
) -> list[WarpedCell]:
    """Displace cells relative to one or more attractor points (grid space).

    Each center contributes min(k * avg_mass / r^2, max_warp) along the
    center-to-cell direction, k = 50 * (avg_mass + 0.1) * cell_step.
    """
    if not cells:
        return []
    if isinstance(centers, Point):
        centers = [centers]

    step = cell_step(cell_size, cell_gap)
    origins = _origins(cells, step)
    targets = origins + cell_size / 2.0

    avg_mass = sum(c.mass for c in cells) / len(cells)
    k = ATTRACTOR_K_STEPS * (avg_mass + ATTRACTOR_MASS_BIAS) * step
    sources = np.array([(p.x, p.y) for p in centers], dtype=np.float64).reshape(-1, 2)
    sources = sources * step + cell_size / 2.0

    displacement = accumulate_displacement(
        targets,
        sources,
        np.full(len(sources), k * avg_mass),
        factor_cap=max_warp,
    )
    return _to_warped(cells, origins, displacement, progress)


def _lens_displacement(cells, radius, max_warp, cell_size, cell_gap, weights=None):
    step = cell_step(cell_size, cell_gap)
    origins = _origins(cells, step)
    centers = origins + cell_size / 2.0

    anomaly = np.array([_is_anomaly(c) for c in cells], dtype=bool)
    mass = np.array([c.mass for c in cells], dtype=np.float64)
    displacement = accumulate_displacement(
        centers,
        centers[anomaly],
        FIELD_K_STEPS * step * mass[anomaly] * mass[anomaly],
        weights=weights,
        factor_cap=max_warp,
        radius=radius,
        anisotropy=LENS_ANISOTROPY,
        movable=~anomaly,
        clamp=max_warp * step,
    )
    return origins, displacement


def compute_local_lens_warp(
    cells: Sequence[GridCell],
    progress: float,
    radius: float,
    max_warp: float,
    cell_size: float,
    cell_gap: float,
) -> list[WarpedCell]:
    """Local lensing around anomaly sources only.

    Non-anomaly cells within `radius` pixels of a source are pushed away
    from it; anomaly cells and cells outside every radius stay put.
    """
    if not cells:
        return []
    origins, displacement = _lens_displacement(cells, radius, max_warp, cell_size, cell_gap)
    return _to_warped(cells, origins, displacement, progress)


def compute_local_lens_warp_per_anomaly(
    cells: Sequence[GridCell],
    progress_by_source: Mapping[int, float],
    radius: float,
    max_warp: float,
    cell_size: float,
    cell_gap: float,
) -> list[WarpedCell]:
    """Local lens where every source follows its own timeline.

    Args:
        progress_by_source: Index into `cells` of each anomaly source ->
            that source's warp progress. Missing sources count as 0.

    The per-source weights are normalized by the leading progress, the
    summed field is clamped, then scaled by that leading progress. When
    all sources share one progress value this is exactly
    compute_local_lens_warp.
    """
    if not cells:
        return []

    source_progress = np.array([
        min(1.0, max(0.0, float(progress_by_source.get(i, 0.0))))
        for i, cell in enumerate(cells) if _is_anomaly(cell)
    ], dtype=np.float64)
    lead = float(source_progress.max()) if len(source_progress) else 0.0

    if lead <= 0:
        step = cell_step(cell_size, cell_gap)
        origins = _origins(cells, step)
        return _to_warped(cells, origins, np.zeros_like(origins), 0.0)

    origins, displacement = _lens_displacement(
        cells, radius, max_warp, cell_size, cell_gap, weights=source_progress / lead,
    )
    return _to_warped(cells, origins, displacement, lead)


# ─── Derived scalars ───────────────────────────────────────────────

def compute_warp_intensity(warped_cells: Sequence[WarpedCell]) -> list[float]:
    """Displacement magnitude per cell, normalized by the largest one."""
    if not warped_cells:
        return []
    disp = np.array([c.displacement for c in warped_cells], dtype=np.float64)
    magnitude = np.hypot(disp[:, 0], disp[:, 1])
    peak = magnitude.max()
    if peak == 0:
        return [0.0] * len(warped_cells)
    return (magnitude / peak).tolist()


def _source_distances(cells, cell_size, cell_gap):
    """(N, M) pixel distances from every cell to every anomaly source."""
    step = cell_step(cell_size, cell_gap)
    centers = _centers(cells, cell_size, step)
    anomaly = np.array([_is_anomaly(c) for c in cells], dtype=bool)
    sources = centers[anomaly]
    ddx = centers[:, 0:1] - sources[None, :, 0]
    ddy = centers[:, 1:2] - sources[None, :, 1]
    return np.hypot(ddx, ddy), anomaly


def compute_interference(
    cells: Sequence[GridCell],
    radius: float,
    cell_size: float,
    cell_gap: float,
) -> list[float]:
    """Overlap of lens zones per cell, in [0, 1].

    Only non-anomaly cells reached by two or more sources (distance in
    (0, radius]) interfere; their level is the mean of 1 - d / radius.
    """
    if not cells:
        return []
    if radius <= 0:
        return [0.0] * len(cells)

    dist, anomaly = _source_distances(cells, cell_size, cell_gap)
    in_range = (dist > 0) & (dist <= radius)
    contributors = in_range.sum(axis=1)
    closeness = np.where(in_range, 1.0 - dist / radius, 0.0).sum(axis=1)

    mean = closeness / np.maximum(contributors, 1)
    level = np.where((contributors >= 2) & ~anomaly, np.minimum(mean, 1.0), 0.0)
    return level.tolist()


def compute_lens_zone(
    cells: Sequence[GridCell],
    radius: float,
    cell_size: float,
    cell_gap: float,
) -> list[bool]:
    """True for cells within `radius` of any anomaly source (sources included)."""
    if not cells:
        return []
    dist, _ = _source_distances(cells, cell_size, cell_gap)
    return (dist <= radius).any(axis=1).tolist()


def compute_anomaly_activation_delays(
    cells: Sequence[GridCell],
    cell_size: float,
    cell_gap: float,
    max_delay: float = DEFAULT_MAX_DELAY,
) -> list[float]:
    """Per-cell activation delay: linear in column across anomaly sources.

    The rightmost anomaly column gets max_delay, column 0 gets 0 and
    non-anomaly cells always get 0.
    """
    anomaly_cols = [c.col for c in cells if _is_anomaly(c)]
    if not anomaly_cols:
        return [0.0] * len(cells)

    max_col = max(anomaly_cols)
    return [
        compute_activation_delay(c.col, max_col, max_delay) if _is_anomaly(c) else 0.0
        for c in cells
    ]
