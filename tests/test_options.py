"""
Gravity Lens -- Render Options & Safety Tests
Pydantic validation, JSON presets, override merging and preflight limits.

Run with: pytest tests/test_options.py -v
"""

import json
import os
import sys

import pytest
from pydantic import ValidationError

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from gravity.options import (
    RENDER_PRESETS,
    RenderMode,
    RenderOptions,
    apply_overrides,
    load_options,
)
from gravity.safety import MAX_DAYS, SafetyError, preflight_render


class TestRenderOptions:

    def test_defaults(self):
        opts = RenderOptions()
        assert opts.theme == "dark"
        assert opts.strength == 0.5
        assert opts.duration == 14.0
        assert opts.clip_percent == 95.0
        assert opts.anomaly_percent == 10.0
        assert (opts.cell_size, opts.cell_gap, opts.corner_radius) == (11, 4, 2.0)
        assert opts.lens_radius == 60.0
        assert opts.max_delay == 6.0
        assert opts.fps == 12
        assert opts.width is None
        assert opts.mode == RenderMode.LENS

    @pytest.mark.parametrize("field", ["strength", "duration", "clip_percent", "lens_radius"])
    def test_rejects_nan_and_inf(self, field):
        for bad in (float("nan"), float("inf"), float("-inf")):
            with pytest.raises(ValidationError):
                RenderOptions(**{field: bad})

    @pytest.mark.parametrize("kwargs", [
        {"strength": -0.1},
        {"duration": 0},
        {"clip_percent": 0},
        {"anomaly_percent": 101},
        {"fps": 0},
        {"fps": 60},
        {"cell_size": 0},
        {"width": 10},
        {"mode": "wormhole"},
    ])
    def test_rejects_out_of_range(self, kwargs):
        with pytest.raises(ValidationError):
            RenderOptions(**kwargs)

    def test_corner_radius_limited_by_cell(self):
        with pytest.raises(ValidationError, match="corner_radius"):
            RenderOptions(cell_size=6, corner_radius=4)

    def test_mode_from_string(self):
        assert RenderOptions(mode="field").mode == "field"

    def test_frame_count(self):
        assert RenderOptions().frame_count == 168
        # whole frames only, so the encoded loop never outlasts duration
        assert RenderOptions(fps=10, duration=0.25, mode="field").frame_count == 2
        assert RenderOptions(fps=7, duration=14.1).frame_count == 98
        assert RenderOptions(fps=1, duration=0.5, mode="field").frame_count == 1

    @pytest.mark.parametrize("duration", [4.0, 8.0, 11.0])
    def test_lens_loop_too_short(self, duration):
        with pytest.raises(ValidationError, match="too short for lens mode"):
            RenderOptions(duration=duration)

    def test_lens_loop_must_fit_latest_source(self):
        # fire at 2 + 9s delay, ramp ends 2.5s later
        with pytest.raises(ValidationError, match="max_delay=9s"):
            RenderOptions(duration=13.0, max_delay=9.0)
        assert RenderOptions(duration=13.6, max_delay=9.0).duration == 13.6

    @pytest.mark.parametrize("mode", ["field", "attractor"])
    def test_short_loops_allowed_in_global_modes(self, mode):
        assert RenderOptions(duration=4.0, mode=mode).duration == 4.0

    def test_short_lens_loop_rejected_after_override(self):
        with pytest.raises(ValidationError):
            apply_overrides(RenderOptions(mode="field", duration=4.0), mode="lens")

    def test_canvas_size_for_a_year(self):
        # 53 weeks x 15px - 4px gap + 2 x 20px padding
        assert RenderOptions().canvas_size(365) == (831, 181)

    def test_output_size_keeps_aspect(self):
        opts = RenderOptions(width=415)
        assert opts.output_size(365) == (415, 90)
        assert RenderOptions().output_size(365) == (831, 181)


class TestPresets:

    def test_every_preset_validates(self):
        for name in RENDER_PRESETS:
            RenderOptions.from_preset(name)

    def test_unknown_preset(self):
        with pytest.raises(KeyError, match="Unknown preset"):
            RenderOptions.from_preset("nope")


class TestLoadOptions:

    def test_plain_object(self, tmp_path):
        path = tmp_path / "opts.json"
        path.write_text(json.dumps({"theme": "light", "strength": 0.8}))
        opts = load_options(path)
        assert opts.theme == "light"
        assert opts.strength == 0.8
        assert opts.duration == 14.0

    def test_preset_with_overrides(self, tmp_path):
        path = tmp_path / "opts.json"
        path.write_text(json.dumps({"preset": "dramatic", "fps": 8}))
        opts = load_options(path)
        assert opts.strength == RENDER_PRESETS["dramatic"]["strength"]
        assert opts.fps == 8

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "opts.json"
        path.write_text("[1, 2]")
        with pytest.raises(ValueError, match="JSON object"):
            load_options(path)

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "opts.json"
        path.write_text(json.dumps({"strength": -3}))
        with pytest.raises(ValidationError):
            load_options(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_options(tmp_path / "absent.json")


class TestApplyOverrides:

    def test_none_values_ignored(self):
        base = RenderOptions(strength=0.9)
        assert apply_overrides(base, strength=None, theme=None) == base

    def test_merges(self):
        merged = apply_overrides(RenderOptions(strength=0.9), theme="light")
        assert (merged.strength, merged.theme) == (0.9, "light")

    def test_revalidates(self):
        with pytest.raises(ValidationError):
            apply_overrides(RenderOptions(), fps=1000)


class TestPreflight:

    def test_normal_job(self, demo_days):
        job = preflight_render(demo_days, RenderOptions())
        assert job == {"num_days": 365, "frames": 168, "width": 831, "height": 181}

    def test_too_many_days(self, make_days):
        with pytest.raises(SafetyError, match="day limit"):
            preflight_render(make_days([1] * (MAX_DAYS + 1)), RenderOptions())

    def test_too_many_frames(self, demo_days):
        with pytest.raises(SafetyError, match="frame limit"):
            preflight_render(demo_days, RenderOptions(fps=30, duration=60))

    def test_canvas_too_large(self, demo_days):
        with pytest.raises(SafetyError, match="Canvas"):
            preflight_render(demo_days, RenderOptions(width=5000))

    def test_empty_calendar_is_fine(self):
        assert preflight_render([], RenderOptions())["num_days"] == 0
