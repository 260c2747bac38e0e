"""
Conftest: shared fixtures for all Gravity Lens test modules.

1. Day factory — hand-built calendars with known counts
2. Grid factory — cells at explicit grid positions, some flagged as anomalies
3. Demo calendar — one deterministic year, built once per session
"""

import os
import sys
from datetime import date, timedelta

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from gravity.demo_data import count_to_level, generate_demo_data
from gravity.models import AnomalyGridCell, ContributionDay

CELL_SIZE = 11
CELL_GAP = 4
CELL_STEP = CELL_SIZE + CELL_GAP


@pytest.fixture
def make_days():
    """Factory: list of counts -> consecutive ContributionDays from 2024-01-01."""
    def _make(counts, start=date(2024, 1, 1)):
        return [
            ContributionDay(
                date=(start + timedelta(days=i)).isoformat(),
                count=c,
                level=count_to_level(c),
            )
            for i, c in enumerate(counts)
        ]
    return _make


@pytest.fixture
def make_grid():
    """Factory: rows x cols grid of uniform mass, anomalies at given (row, col).

    Anomaly cells get mass 1.0 and anomaly_intensity 1.0.
    """
    def _make(rows, cols, mass=0.5, anomalies=()):
        anomalies = set(anomalies)
        cells = []
        for col in range(cols):
            for row in range(rows):
                is_anomaly = (row, col) in anomalies
                cells.append(AnomalyGridCell(
                    row=row,
                    col=col,
                    count=20 if is_anomaly else 5,
                    level=4 if is_anomaly else 2,
                    mass=1.0 if is_anomaly else mass,
                    is_anomaly=is_anomaly,
                    anomaly_intensity=1.0 if is_anomaly else 0.0,
                ))
        return cells
    return _make


@pytest.fixture(scope="session")
def demo_days():
    """One deterministic year of demo contributions."""
    return generate_demo_data()


def find_cell(cells, row, col):
    """Return (index, cell) at a grid position."""
    for i, cell in enumerate(cells):
        if cell.row == row and cell.col == col:
            return i, cell
    raise LookupError(f"no cell at ({row}, {col})")
