"""
Smoke Tests for CLI Commands.

These tests verify that CLI commands run without errors and produce output.
They don't validate correctness deeply - just that commands work.

Usage:
    pytest tests/smoke/test_cli_commands.py -v
    pytest tests/smoke/test_cli_commands.py -v -m smoke
"""

import json
import subprocess
import sys
from pathlib import Path

import pytest

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

# Project root
PROJECT_ROOT = Path(__file__).parent.parent.parent


def run_cli_command(args: list[str], timeout: int = 60) -> tuple[int, str, str]:
    """
    Run a CLI command and return exit code, stdout, stderr.

    Args:
        args: Arguments after 'python -m chapterlens'
        timeout: Maximum time to wait

    Returns:
        Tuple of (exit_code, stdout, stderr)
    """
    result = subprocess.run(
        [sys.executable, "-m", "chapterlens", *args],
        cwd=PROJECT_ROOT,
        capture_output=True,
        text=True,
        timeout=timeout,
    )

    return result.returncode, result.stdout, result.stderr


class TestCLIHelp:
    """Test that help commands work."""

    def test_main_help(self):
        """Main help should display without errors."""
        code, stdout, stderr = run_cli_command(["--help"])

        assert code == 0, f"Help failed: {stderr}"
        assert "chapterlens" in stdout.lower()
        assert "analyze" in stdout
        assert "extract" in stdout

    @pytest.mark.parametrize("command", ["analyze", "extract", "principles"])
    def test_command_help(self, command):
        """Every command should have help."""
        code, stdout, stderr = run_cli_command([command, "--help"])

        assert code == 0, f"{command} help failed: {stderr}"


class TestCLIPrinciples:
    def test_lists_all_principles(self):
        """Principles command should list the ten principles."""
        code, stdout, stderr = run_cli_command(["principles"])

        assert code == 0, f"Principles failed: {stderr}"
        assert "Deep Processing" in stdout
        assert "Emotion & Relevance" in stdout
        assert "0.95" in stdout


class TestCLIAnalyze:
    """Test analyze command."""

    def test_analyze_runs(self, sample_chapter_file):
        """Analyze should print a report for the sample chapter."""
        code, stdout, stderr = run_cli_command(["analyze", str(sample_chapter_file)])

        assert code == 0, f"Analyze failed: {stderr}"
        assert "Overall score" in stdout
        assert "Learning Principles" in stdout

    def test_analyze_writes_json(self, sample_chapter_file, tmp_path):
        """--output should write a parseable analysis."""
        output = tmp_path / "report.json"
        code, stdout, stderr = run_cli_command(
            ["analyze", str(sample_chapter_file), "--output", str(output), "--workers", "2"]
        )

        assert code == 0, f"Analyze failed: {stderr}"
        payload = json.loads(output.read_text(encoding="utf-8"))
        assert len(payload["principles"]) == 10
        assert 0 <= payload["overall_score"] <= 100

    def test_analyze_json_to_stdout(self, sample_chapter_file):
        code, stdout, stderr = run_cli_command(["analyze", str(sample_chapter_file), "--json"])

        assert code == 0, f"Analyze failed: {stderr}"
        assert '"overall_score"' in stdout

    def test_short_chapter_fails(self, tmp_path):
        """Chapters below the minimum word count exit with an error."""
        path = tmp_path / "short.md"
        path.write_text("# Tiny\n\nNot much here.\n", encoding="utf-8")
        code, stdout, stderr = run_cli_command(["analyze", str(path)])

        assert code == 1
        assert "at least" in stderr

    def test_missing_file_fails(self, tmp_path):
        code, stdout, stderr = run_cli_command(["analyze", str(tmp_path / "missing.md")])

        assert code == 1
        assert "Could not read chapter" in stderr


class TestCLIExtract:
    def test_extract_lists_concepts(self, sample_chapter_file):
        """Extract should list the concepts found in the sample chapter."""
        code, stdout, stderr = run_cli_command(["extract", str(sample_chapter_file), "--limit", "5"])

        assert code == 0, f"Extract failed: {stderr}"
        assert "working memory" in stdout
        assert "relationships" in stdout
