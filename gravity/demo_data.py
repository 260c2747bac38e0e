"""
Gravity Lens -- Deterministic Demo Data

A year of synthetic contribution counts for demos and tests. The
generator is an explicit value owned by the caller, so two calls with
the same seed always produce identical calendars.

Shape of the data:
    - six "active weeks" with heavy weekday commits (5-19)
    - ordinary weekdays: 85% chance of 1-12 commits
    - weekends: 60% chance of 1-3 commits
"""

from __future__ import annotations

from datetime import date, timedelta

from gravity.models import ContributionDay

LCG_MULTIPLIER = 1664525
LCG_INCREMENT = 1013904223
LCG_MODULUS = 2 ** 32

DEFAULT_SEED = 42
DEFAULT_START = date(2024, 1, 1)
DEFAULT_DAYS = 365
ACTIVE_WEEKS = frozenset({3, 10, 18, 27, 35, 45})


class LcgRandom:
    """32-bit linear congruential generator.

    state = (state * 1664525 + 1013904223) mod 2**32
    """

    def __init__(self, seed: int = DEFAULT_SEED):
        self.state = seed % LCG_MODULUS

    def next_float(self) -> float:
        """Advance one step. Returns a float in [0, 1)."""
        self.state = (self.state * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS
        return self.state / LCG_MODULUS


def count_to_level(count: int) -> int:
    """GitHub-style intensity bucket (0-4) for a daily count."""
    if count == 0:
        return 0
    if count <= 3:
        return 1
    if count <= 7:
        return 2
    if count <= 12:
        return 3
    return 4


def generate_demo_data(
    seed: int = DEFAULT_SEED,
    start: date = DEFAULT_START,
    days: int = DEFAULT_DAYS,
) -> list[ContributionDay]:
    rand = LcgRandom(seed)
    result = []

    for i in range(days):
        day = start + timedelta(days=i)
        is_weekend = day.weekday() >= 5
        is_active_week = (i // 7) in ACTIVE_WEEKS

        r = rand.next_float()
        if is_active_week and not is_weekend:
            count = 5 + int(r * 15)
        elif is_weekend:
            count = 1 + int(rand.next_float() * 3) if r < 0.6 else 0
        else:
            count = 1 + int(rand.next_float() * 12) if r < 0.85 else 0

        result.append(ContributionDay(
            date=day.isoformat(),
            count=count,
            level=count_to_level(count),
        ))

    return result
