"""
Unit tests for the command-line interface.
"""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner
from lshdedup import __version__
from lshdedup.cli import cli

SCENARIO_ARGS = [
    "--format",
    "lines",
    "--token-size",
    "2",
    "--num-min-hashes",
    "100",
    "--num-bands",
    "100",
    "--threshold",
    "0.8",
    "--seed",
    "42",
    "--log-level",
    "WARNING",
]


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def lines_file(tmp_path: Path) -> Path:
    path = tmp_path / "records.txt"
    path.write_text("abcdef\nabcdeg\nzzzzzz\n")
    return path


@pytest.mark.usefixtures("restore_logging")
class TestDetectCommand:
    """Test the detect command."""

    def test_detect_lines(self, runner, lines_file):
        result = runner.invoke(cli, ["detect", str(lines_file), *SCENARIO_ARGS])

        assert result.exit_code == 0, result.output
        output = json.loads(result.stdout)
        assert output["duplicates"] == [[0, 1]]
        assert output["records"] == 3
        assert output["max_comparisons"] == 3
        assert output["comparisons"] >= 1
        assert 0.0 <= output["candidate_probability_at_threshold"] <= 1.0

    @pytest.mark.parametrize("threshold, expected", [("0.65", []), ("0.55", [[0, 1]])])
    def test_jaccard_follows_token_size(self, runner, lines_file, threshold, expected):
        # Trigram Jaccard of abcdef/abcdeg is 3/5; bigram would be 4/6.
        args = [
            "--format",
            "lines",
            "--similarity",
            "jaccard",
            "--token-size",
            "3",
            "--num-min-hashes",
            "100",
            "--num-bands",
            "100",
            "--threshold",
            threshold,
            "--seed",
            "42",
            "--log-level",
            "WARNING",
        ]

        result = runner.invoke(cli, ["detect", str(lines_file), *args])

        assert result.exit_code == 0, result.output
        output = json.loads(result.stdout)
        assert output["duplicates"] == expected
        assert output["comparisons"] >= 1

    def test_detect_csv(self, runner, tmp_path: Path):
        path = tmp_path / "people.csv"
        path.write_text("name,city\nJohn Smith,London\nJon Smith,London\nWei Zhang,Shanghai\n")

        result = runner.invoke(
            cli,
            ["detect", str(path), "--num-min-hashes", "60", "--num-bands", "30", "--seed", "1", "--log-level", "ERROR"],
        )

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["duplicates"] == [[0, 1]]

    def test_config_file(self, runner, lines_file, tmp_path: Path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text(
            "lsh:\n  token_size: 2\n  num_min_hashes: 100\n  num_bands: 100\n  threshold: 0.8\n  seed: 42\n"
            "monitoring:\n  log_level: WARNING\n  metrics_enabled: false\n"
        )

        result = runner.invoke(cli, ["detect", str(lines_file), "--format", "lines", "--config", str(config_path)])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["duplicates"] == [[0, 1]]

    def test_invalid_band_split(self, runner, lines_file):
        result = runner.invoke(cli, ["detect", str(lines_file), "--num-min-hashes", "10", "--num-bands", "3"])

        assert result.exit_code != 0
        assert "divisible" in result.output

    def test_missing_config_file(self, runner, lines_file, tmp_path: Path):
        result = runner.invoke(cli, ["detect", str(lines_file), "--config", str(tmp_path / "missing.yaml")])

        assert result.exit_code != 0
        assert "Invalid configuration" in result.output

    def test_missing_input(self, runner, tmp_path: Path):
        result = runner.invoke(cli, ["detect", str(tmp_path / "missing.txt")])

        assert result.exit_code != 0


def test_version(runner):
    result = runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output
