"""
Gravity Lens -- Deterministic Cell Hashing

Per-cell "randomness" (tilt, interference jitter) derived from a pure
integer hash of (row, col). The same cell always gets the same values,
whatever the frame, iteration order or wall clock.
"""

import math

from gravity.models import Point

HASH_MASK = 0xFFFFFFFF
ROW_MULTIPLIER = 73856093
COL_MULTIPLIER = 19349663
MIX_MULTIPLIER = 0x45D9F3B

MIN_ROTATION_DEG = 1.0
MAX_ROTATION_DEG = 2.0
DEFAULT_MAX_JITTER = 0.8


def cell_hash(row: int, col: int) -> int:
    """32-bit hash of a grid position (multiply, xor, mask, then mix)."""
    h = ((row * ROW_MULTIPLIER) ^ (col * COL_MULTIPLIER)) & HASH_MASK
    h = ((h ^ (h >> 16)) * MIX_MULTIPLIER) & HASH_MASK
    h = ((h ^ (h >> 16)) * MIX_MULTIPLIER) & HASH_MASK
    return (h ^ (h >> 16)) & HASH_MASK


def _unit(h: int, shift: int) -> float:
    """Map 10 bits of the hash to [0, 1]."""
    return ((h >> shift) & 0x3FF) / 0x3FF


def get_cell_rotation(row: int, col: int) -> float:
    """Signed tilt in degrees with magnitude in [1, 2]."""
    h = cell_hash(row, col)
    magnitude = MIN_ROTATION_DEG + (MAX_ROTATION_DEG - MIN_ROTATION_DEG) * _unit(h, 1)
    return magnitude if h & 1 else -magnitude


def compute_interference_jitter(
    row: int,
    col: int,
    progress: float,
    level: float,
    max_jitter: float = DEFAULT_MAX_JITTER,
) -> Point:
    """Small pixel offset for cells caught in overlapping lens zones.

    The base direction comes from the cell hash and turns as the pulse
    progresses. Magnitude never exceeds max_jitter * progress * level.
    """
    if progress <= 0 or level <= 0 or max_jitter <= 0:
        return Point(0.0, 0.0)

    h = cell_hash(row, col)
    angle = 2.0 * math.pi * _unit(h, 11) + 4.0 * math.pi * progress
    magnitude = max_jitter * progress * level * (0.5 + 0.5 * _unit(h, 21))
    return Point(math.cos(angle) * magnitude, math.sin(angle) * magnitude)
