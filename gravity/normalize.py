"""
Gravity Lens -- Mass Normalization & Anomaly Classification

Turns raw daily counts into mass-bearing grid cells and flags the
top-percentile cells as lensing sources.

Mass mapping:
    clipped = min(count, p95) / p95
    mass    = clipped ** 0.6     (count > 0)
            = 0                  (count == 0)

The 0.6 exponent compresses the dynamic range so low and mid activity
stays visually distinguishable next to a handful of very busy days.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from gravity.models import AnomalyGridCell, ContributionDay, GridCell, grid_position

MASS_EXPONENT = 0.6
DEFAULT_CLIP_PERCENT = 95.0
DEFAULT_ANOMALY_PERCENT = 10.0


def percentile(values: Sequence[float], p: float) -> float:
    """Linear-interpolated percentile on a sorted copy of values.

    Args:
        values: Any sequence of numbers. Not modified.
        p: Percentile in 0-100.

    Returns:
        The interpolated value, or 0.0 for an empty input.
    """
    if len(values) == 0:
        return 0.0

    ordered = np.sort(np.asarray(values, dtype=np.float64))
    index = (p / 100.0) * (len(ordered) - 1)
    lower = math.floor(index)
    upper = math.ceil(index)

    if lower == upper:
        return float(ordered[lower])

    fraction = index - lower
    return float(ordered[lower] + fraction * (ordered[upper] - ordered[lower]))


def apply_non_linear_mapping(normalized: float) -> float:
    """Power-law compression: x ** 0.6 for x > 0, else 0."""
    if normalized <= 0:
        return 0.0
    return normalized ** MASS_EXPONENT


def normalize_contributions(
    days: Sequence[ContributionDay],
    clip_percent: float = DEFAULT_CLIP_PERCENT,
) -> list[GridCell]:
    """Map contribution days onto the week-major grid with normalized mass.

    Args:
        days: Contribution days in calendar order.
        clip_percent: Percentile used as the saturation point (default 95).
            Counts above it clip to mass 1.0.

    Returns:
        One GridCell per day. All masses are 0 when the clip value is 0.
    """
    if not days:
        return []

    counts = [day.count for day in days]
    max_count = percentile(counts, clip_percent)

    cells = []
    for i, day in enumerate(days):
        row, col = grid_position(i)
        if day.count == 0 or max_count <= 0:
            mass = 0.0
        else:
            mass = apply_non_linear_mapping(min(day.count, max_count) / max_count)
        cells.append(GridCell(row=row, col=col, count=day.count, level=day.level, mass=mass))
    return cells


def detect_anomalies(
    cells: Sequence[GridCell],
    percent: float = DEFAULT_ANOMALY_PERCENT,
) -> list[AnomalyGridCell]:
    """Flag cells in the top `percent` of counts as anomaly sources.

    Ties at the threshold are anomalies. A zero threshold never flags
    anything, so all-zero data has no anomalies regardless of percent.
    """
    if not cells:
        return []

    threshold = percentile([c.count for c in cells], 100.0 - percent)

    flagged = []
    for cell in cells:
        is_anomaly = threshold > 0 and cell.count >= threshold
        flagged.append(AnomalyGridCell(
            row=cell.row,
            col=cell.col,
            count=cell.count,
            level=cell.level,
            mass=cell.mass,
            is_anomaly=is_anomaly,
            anomaly_intensity=cell.mass if is_anomaly else 0.0,
        ))
    return flagged
