#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# tests/unit/cli/test_lark_cli.py
"""Tests for the lark2md command line.

Tests cover:
- Conversion to stdout and to a file
- Option flags reaching the transformer and renderer
- The referenced-assets table
- Exit codes for invalid input and options
- LARK2MD_ environment variable defaults
"""

import json

import pytest
from utils import cleanup_test_dir, create_test_temp_dir, sample_snapshot

from lark2md.cli import EXIT_ERROR, EXIT_INPUT_ERROR, EXIT_SUCCESS, create_parser, get_env_var_value, main


@pytest.mark.unit
@pytest.mark.cli
class TestCliConversion:
    """Tests for successful conversions."""

    def setup_method(self):
        """Set up test environment."""
        self.temp_dir = create_test_temp_dir()
        self.snapshot = self.temp_dir / "blocks.json"
        self.snapshot.write_text(json.dumps({"code": 0, "data": {"items": sample_snapshot()}}), encoding="utf-8")

    def teardown_method(self):
        """Clean up test environment."""
        cleanup_test_dir(self.temp_dir)

    def test_stdout(self, capsys):
        """Test Markdown is written to stdout with a trailing newline."""
        assert main([str(self.snapshot)]) == EXIT_SUCCESS
        out = capsys.readouterr().out
        assert out.startswith("# Overview\n\n")
        assert out.endswith("---\n")

    def test_output_file(self, capsys):
        """Test -o writes the document to a file."""
        target = self.temp_dir / "doc.md"
        assert main([str(self.snapshot), "-o", str(target)]) == EXIT_SUCCESS
        assert target.read_text(encoding="utf-8").startswith("# Overview")
        assert capsys.readouterr().out == ""

    def test_commonmark_flavor(self, capsys):
        """Test --flavor commonmark renders tables as HTML."""
        assert main([str(self.snapshot), "--flavor", "commonmark"]) == EXIT_SUCCESS
        assert "<table>" in capsys.readouterr().out

    def test_front_matter(self, capsys):
        """Test --metadata-frontmatter prepends the page title."""
        assert main([str(self.snapshot), "--metadata-frontmatter"]) == EXIT_SUCCESS
        assert capsys.readouterr().out.startswith("---\ntitle: Release Notes\n")

    def test_list_assets(self, capsys):
        """Test --list-assets prints the asset table to stderr only."""
        assert main([str(self.snapshot), "--list-assets"]) == EXIT_SUCCESS
        captured = capsys.readouterr()
        assert "Referenced Assets" in captured.err
        assert "imgtok" in captured.err
        assert "Referenced Assets" not in captured.out

    def test_list_assets_empty(self, capsys):
        """Test --list-assets with no assets says so."""
        target = self.temp_dir / "plain.json"
        target.write_text(json.dumps([{"block_id": "p", "block_type": 1}]), encoding="utf-8")
        assert main([str(target), "--list-assets"]) == EXIT_SUCCESS
        assert "No assets referenced." in capsys.readouterr().err

    def test_max_depth_flag(self, capsys):
        """Test --max-depth drops deeper subtrees."""
        assert main([str(self.snapshot), "--max-depth", "1"]) == EXIT_SUCCESS
        out = capsys.readouterr().out
        assert "# Overview" in out
        assert "Name" not in out

    @pytest.mark.parametrize("level", ["WARNING", "ERROR"])
    def test_degradation_summary(self, capsys, level):
        """Test degraded blocks are summarised on stderr whatever the log level."""
        blocks = [
            {"block_id": "p", "block_type": 1, "children": ["q1", "q2"]},
            {"block_id": "q1", "block_type": 34, "children": ["s"]},
            {"block_id": "q2", "block_type": 34, "children": ["s"]},
            {"block_id": "s", "block_type": 2, "text": {"elements": [{"text_run": {"content": "S"}}]}},
        ]
        target = self.temp_dir / "shared.json"
        target.write_text(json.dumps(blocks), encoding="utf-8")

        assert main([str(target), "--log-level", level]) == EXIT_SUCCESS
        captured = capsys.readouterr()
        assert captured.out == "> S\n"
        assert "Converted with 1 warning (parsers.lark: 1)" in captured.err


@pytest.mark.unit
@pytest.mark.cli
class TestCliErrors:
    """Tests for error exit codes."""

    def setup_method(self):
        """Set up test environment."""
        self.temp_dir = create_test_temp_dir()

    def teardown_method(self):
        """Clean up test environment."""
        cleanup_test_dir(self.temp_dir)

    def test_missing_file(self, capsys):
        """Test a missing input file exits with the input error code."""
        assert main([str(self.temp_dir / "nope.json")]) == EXIT_INPUT_ERROR
        assert "Error" in capsys.readouterr().err

    def test_invalid_json(self, capsys):
        """Test invalid JSON exits with the input error code."""
        target = self.temp_dir / "bad.json"
        target.write_text("{not json", encoding="utf-8")
        assert main([str(target)]) == EXIT_INPUT_ERROR

    def test_non_page_root(self, capsys):
        """Test a snapshot without a PAGE root exits with the input error code."""
        target = self.temp_dir / "noroot.json"
        target.write_text(json.dumps([{"block_id": "t", "block_type": 2}]), encoding="utf-8")
        assert main([str(target)]) == EXIT_INPUT_ERROR

    def test_cycle(self, capsys):
        """Test a cyclic block tree exits with the input error code."""
        blocks = [
            {"block_id": "p", "block_type": 1, "children": ["q"]},
            {"block_id": "q", "block_type": 34, "children": ["p"]},
        ]
        target = self.temp_dir / "cycle.json"
        target.write_text(json.dumps(blocks), encoding="utf-8")
        assert main([str(target)]) == EXIT_INPUT_ERROR
        assert "p" in capsys.readouterr().err

    def test_invalid_max_depth(self, capsys):
        """Test a non-positive --max-depth is rejected."""
        target = self.temp_dir / "ok.json"
        target.write_text(json.dumps([{"block_id": "p", "block_type": 1}]), encoding="utf-8")
        assert main([str(target), "--max-depth", "0"]) == EXIT_INPUT_ERROR
        assert "Invalid options" in capsys.readouterr().err

    def test_max_depth_above_limit(self, capsys):
        """Test a --max-depth beyond the supported nesting is rejected."""
        target = self.temp_dir / "ok.json"
        target.write_text(json.dumps([{"block_id": "p", "block_type": 1}]), encoding="utf-8")
        assert main([str(target), "--max-depth", "1000"]) == EXIT_INPUT_ERROR
        assert "at most 256" in capsys.readouterr().err

    def test_unwritable_output(self, capsys):
        """Test an unwritable output path exits with the error code."""
        target = self.temp_dir / "ok.json"
        target.write_text(json.dumps([{"block_id": "p", "block_type": 1}]), encoding="utf-8")
        assert main([str(target), "-o", str(self.temp_dir / "missing" / "out.md")]) == EXIT_ERROR

    def test_unknown_flavor(self):
        """Test argparse rejects an unknown flavor."""
        with pytest.raises(SystemExit) as exc_info:
            main(["x.json", "--flavor", "rst"])
        assert exc_info.value.code == 2


@pytest.mark.unit
@pytest.mark.cli
class TestEnvironmentDefaults:
    """Tests for LARK2MD_ environment variables."""

    def test_get_env_var_value(self, monkeypatch):
        """Test names are upper-cased and prefixed."""
        monkeypatch.setenv("LARK2MD_MAX_DEPTH", "7")
        assert get_env_var_value("max-depth") == "7"

    def test_flag_and_choice_defaults(self, monkeypatch):
        """Test env values become argument defaults."""
        monkeypatch.setenv("LARK2MD_FLAVOR", "commonmark")
        monkeypatch.setenv("LARK2MD_FILE", "true")
        monkeypatch.setenv("LARK2MD_FLAT_GRID", "false")
        args = create_parser().parse_args(["x.json"])
        assert args.flavor == "commonmark"
        assert args.file is True
        assert args.flat_grid is False

    def test_invalid_choice_ignored(self, monkeypatch):
        """Test an invalid env choice leaves the default in place."""
        monkeypatch.setenv("LARK2MD_FLAVOR", "rst")
        assert create_parser().parse_args(["x.json"]).flavor == "gfm"

    def test_command_line_wins(self, monkeypatch):
        """Test explicit arguments override env defaults."""
        monkeypatch.setenv("LARK2MD_FLAVOR", "commonmark")
        assert create_parser().parse_args(["x.json", "--flavor", "gfm"]).flavor == "gfm"
