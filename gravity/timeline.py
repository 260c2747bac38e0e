"""
Gravity Lens -- Phase Timelines

Pure functions mapping a looping time value (seconds) to progress
scalars in [0, 1], one per animation channel:

    warp          -> how far cells are displaced
    brightness    -> how strongly anomaly cells glow
    interference  -> shared resonance pulse where lens zones overlap

Every function folds time into [0, duration) first, so negative or
overflowed time behaves exactly like in-range time and any frame can be
re-sampled at will. Nothing here keeps state between calls.

Legacy global cycle (ratios of duration):
    0.000-0.250  rest
    0.250-0.325  brighten          (brightness eases 0->1, warp stays 0)
    0.325-0.625  warp in           (warp eases 0->1)
    0.625-0.800  hold
    0.800-1.000  restore           (both ease 1->0)

Staggered per-source cycle (seconds, duration normally 14):
    fire         2 + delay
    brightness   ramps over 1.2s from fire
    warp         starts 0.5s after fire, ramps over 2.0s
    restore      every source eases back to 0 between 11s and the loop end
    interference sin pulse over [8, 11), independent of any delay
"""

import math

from gravity.easing import cubic_bezier_ease

# Legacy global timeline ratios
REST_END = 0.25
BRIGHTEN_END = 0.325
WARP_IN_END = 0.625
HOLD_END = 0.80

# Staggered timeline (seconds)
FIRE_TIME = 2.0
WARP_LAG = 0.5
WARP_RAMP = 2.0
BRIGHT_RAMP = 1.2
RESTORE_START = 11.0
DEFAULT_MAX_DELAY = 6.0

INTERFERENCE_START = 8.0
INTERFERENCE_END = 11.0


def fold_time(time, duration):
    """Fold time into [0, duration). Zero or negative duration folds to 0."""
    if duration <= 0:
        return 0.0
    return ((time % duration) + duration) % duration


# ─── Legacy global timelines ───────────────────────────────────────

def get_warp_progress(time, duration):
    """Global five-phase warp progress."""
    if duration <= 0:
        return 0.0
    ratio = fold_time(time, duration) / duration

    if ratio < BRIGHTEN_END:
        return 0.0
    if ratio < WARP_IN_END:
        return cubic_bezier_ease((ratio - BRIGHTEN_END) / (WARP_IN_END - BRIGHTEN_END))
    if ratio < HOLD_END:
        return 1.0
    return 1.0 - cubic_bezier_ease((ratio - HOLD_END) / (1.0 - HOLD_END))


def get_brightness_progress(time, duration):
    """Global five-phase brightness progress. Ramps before the warp does."""
    if duration <= 0:
        return 0.0
    ratio = fold_time(time, duration) / duration

    if ratio < REST_END:
        return 0.0
    if ratio < BRIGHTEN_END:
        return cubic_bezier_ease((ratio - REST_END) / (BRIGHTEN_END - REST_END))
    if ratio < HOLD_END:
        return 1.0
    return 1.0 - cubic_bezier_ease((ratio - HOLD_END) / (1.0 - HOLD_END))


# ─── Staggered per-source timelines ────────────────────────────────

def compute_activation_delay(col, max_col, max_delay=DEFAULT_MAX_DELAY):
    """Delay (seconds) linear in column: 0 at col 0, max_delay at max_col."""
    if max_col <= 0:
        return 0.0
    return col / max_col * max_delay


def _ramp(t, start, end):
    if t < start:
        return 0.0
    if t < end:
        return cubic_bezier_ease((t - start) / (end - start))
    return 1.0


def _staggered(t, duration, start, end):
    """Ramp between start and end, hold, then ease out over the restore window.

    The restore scales from the level reached at RESTORE_START, so a
    source that had not finished ramping still fades out continuously.
    """
    if duration > RESTORE_START and t >= RESTORE_START:
        peak = _ramp(RESTORE_START, start, end)
        if peak <= 0:
            return 0.0
        restore_t = (t - RESTORE_START) / (duration - RESTORE_START)
        return peak * (1.0 - cubic_bezier_ease(restore_t))
    return _ramp(t, start, end)


def get_anomaly_warp_progress(time, duration, activation_delay):
    """Warp progress of one anomaly source fired at 2 + activation_delay."""
    if duration <= 0:
        return 0.0
    t = fold_time(time, duration)
    warp_start = FIRE_TIME + activation_delay + WARP_LAG
    return _staggered(t, duration, warp_start, warp_start + WARP_RAMP)


def get_anomaly_brightness_progress(time, duration, activation_delay):
    """Brightness progress of one anomaly source fired at 2 + activation_delay."""
    if duration <= 0:
        return 0.0
    t = fold_time(time, duration)
    bright_start = FIRE_TIME + activation_delay
    return _staggered(t, duration, bright_start, bright_start + BRIGHT_RAMP)


def get_interference_progress(time, duration):
    """Half-sine resonance pulse over [8, 11); zero elsewhere."""
    if duration <= 0:
        return 0.0
    t = fold_time(time, duration)
    if INTERFERENCE_START <= t < INTERFERENCE_END:
        span = INTERFERENCE_END - INTERFERENCE_START
        return math.sin(math.pi * (t - INTERFERENCE_START) / span)
    return 0.0
