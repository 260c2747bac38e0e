"""
Gravity Lens -- Data Model

Immutable records that flow through the simulation core.

    ContributionDay  -> raw input (one calendar day)
    GridCell         -> week-major grid position + normalized mass
    AnomalyGridCell  -> GridCell flagged as a lensing source (or not)
    WarpedCell       -> GridCell with original/warped pixel positions
    Point            -> 2D coordinate (grid or pixel space)
"""

from __future__ import annotations

from dataclasses import dataclass


DAYS_PER_WEEK = 7


@dataclass(frozen=True)
class ContributionDay:
    date: str
    count: int
    level: int


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class GridCell:
    row: int
    col: int
    count: int
    level: int
    mass: float


@dataclass(frozen=True)
class AnomalyGridCell(GridCell):
    is_anomaly: bool = False
    anomaly_intensity: float = 0.0


@dataclass(frozen=True)
class WarpedCell(GridCell):
    original_x: float
    original_y: float
    warped_x: float
    warped_y: float
    is_anomaly: bool = False
    anomaly_intensity: float = 0.0

    @property
    def displacement(self) -> tuple[float, float]:
        return self.warped_x - self.original_x, self.warped_y - self.original_y


def grid_position(index: int) -> tuple[int, int]:
    """Week-major layout: returns (row, col) for the i-th day."""
    return index % DAYS_PER_WEEK, index // DAYS_PER_WEEK
