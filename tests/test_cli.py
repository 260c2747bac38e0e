"""
Gravity Lens -- CLI Tests
Argument parsing, option merging and end-to-end runs of main().
Network access is always patched out.

Run with: pytest tests/test_cli.py -v
"""

import json
import os
import sys
from unittest.mock import patch

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import gravity_lens
from gravity.fetch import FetchError
from gravity_lens import build_options, load_days, main, parse_cli_options


class TestParseCliOptions:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        args = parse_cli_options([])
        assert args.user is None
        assert args.token is None
        assert args.demo is False
        assert args.format == "svg"
        assert args.output == "gravity-lens.svg"
        assert args.strength is None
        assert args.theme is None

    def test_gif_output_name(self):
        assert parse_cli_options(["--format", "gif"]).output == "gravity-lens.gif"

    def test_all_options(self):
        args = parse_cli_options([
            "--user", "octocat", "--token", "tok", "--theme", "light",
            "--strength", "0.8", "--duration", "10", "--clip-percent", "90",
            "--anomaly-percent", "5", "--fps", "8", "--width", "400",
            "--mode", "field", "-o", "out.svg", "-v",
        ])
        assert args.user == "octocat"
        assert args.token == "tok"
        assert args.theme == "light"
        assert args.strength == 0.8
        assert args.duration == 10.0
        assert args.clip_percent == 90.0
        assert args.anomaly_percent == 5.0
        assert args.fps == 8
        assert args.width == 400
        assert args.mode == "field"
        assert args.output == "out.svg"
        assert args.verbose is True

    def test_token_from_environment(self, monkeypatch):
        monkeypatch.setenv("GITHUB_TOKEN", "env-token")
        assert parse_cli_options(["--user", "octocat"]).token == "env-token"
        assert parse_cli_options(["--token", "flag"]).token == "flag"

    def test_rejects_unknown_theme(self):
        with pytest.raises(SystemExit):
            parse_cli_options(["--theme", "neon"])

    def test_rejects_unknown_format(self):
        with pytest.raises(SystemExit):
            parse_cli_options(["--format", "webm"])


class TestBuildOptions:

    def test_defaults(self):
        opts = build_options(parse_cli_options(["--demo"]))
        assert opts.strength == 0.5
        assert opts.duration == 14.0
        assert opts.theme == "dark"

    def test_flags_override_file(self, tmp_path):
        path = tmp_path / "opts.json"
        path.write_text(json.dumps({"theme": "light", "strength": 0.2, "fps": 6}))
        opts = build_options(parse_cli_options(["--options", str(path), "--strength", "0.9"]))
        assert opts.theme == "light"
        assert opts.fps == 6
        assert opts.strength == 0.9


class TestLoadDays:

    def test_demo(self):
        assert len(load_days(parse_cli_options(["--demo"]))) == 365

    def test_requires_user(self):
        with pytest.raises(ValueError, match="--user"):
            load_days(parse_cli_options([]))

    def test_fetches_user(self, make_days):
        days = make_days([1, 2, 3])
        with patch.object(gravity_lens, "fetch_contributions", return_value=days) as fetch:
            assert load_days(parse_cli_options(["--user", "octocat", "--token", "tok"])) == days
        fetch.assert_called_once_with("octocat", "tok")


class TestMain:

    def test_demo_svg(self, tmp_path, capsys):
        out = tmp_path / "lens.svg"
        assert main(["--demo", "-o", str(out)]) == 0
        assert out.read_text().startswith("<svg")
        assert "365 days" in capsys.readouterr().out

    def test_demo_gif(self, tmp_path):
        out = tmp_path / "lens.gif"
        code = main(["--demo", "--format", "gif", "--fps", "1", "--duration", "12", "-o", str(out)])
        assert code == 0
        assert out.read_bytes()[:6] == b"GIF89a"

    def test_missing_user(self, tmp_path, capsys):
        assert main(["-o", str(tmp_path / "x.svg")]) == 1
        assert "--user is required" in capsys.readouterr().err

    def test_fetch_error(self, tmp_path, capsys):
        with patch.object(gravity_lens, "fetch_contributions",
                          side_effect=FetchError("GitHub API error: 401 Unauthorized")):
            code = main(["--user", "octocat", "--token", "bad", "-o", str(tmp_path / "x.svg")])
        assert code == 1
        assert "401" in capsys.readouterr().err
        assert not (tmp_path / "x.svg").exists()

    def test_bad_theme_in_options_file(self, tmp_path, capsys):
        path = tmp_path / "opts.json"
        path.write_text(json.dumps({"theme": "neon"}))
        code = main(["--demo", "--options", str(path), "-o", str(tmp_path / "x.svg")])
        assert code == 1
        err = capsys.readouterr().err
        assert "Unknown theme 'neon'" in err

    def test_invalid_value(self, tmp_path, capsys):
        code = main(["--demo", "--strength", "-1", "-o", str(tmp_path / "x.svg")])
        assert code == 1
        assert "Error:" in capsys.readouterr().err

    def test_safety_limit(self, tmp_path, capsys):
        code = main(["--demo", "--fps", "30", "--duration", "60", "-o", str(tmp_path / "x.svg")])
        assert code == 1
        assert "frame limit" in capsys.readouterr().err

    def test_lens_loop_too_short(self, tmp_path, capsys):
        code = main(["--demo", "--duration", "4", "-o", str(tmp_path / "x.svg")])
        assert code == 1
        assert "too short for lens mode" in capsys.readouterr().err
        assert not (tmp_path / "x.svg").exists()

    def test_short_loop_in_field_mode(self, tmp_path):
        out = tmp_path / "x.svg"
        assert main(["--demo", "--mode", "field", "--duration", "4", "-o", str(out)]) == 0
        assert out.exists()
