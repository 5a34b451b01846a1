"""Command-line interface for lshdedup."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

import click
import structlog

from lshdedup import __version__
from lshdedup.config import Config
from lshdedup.data import Table
from lshdedup.detector import LSHDetector, candidate_probability
from lshdedup.observability import configure_logging
from lshdedup.similarity import SIMILARITY_NAMES, build_similarity

logger = structlog.get_logger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="lshdedup")
def cli() -> None:
    """Near-duplicate record detection with MinHash LSH."""


@cli.command()
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--config", "config_path", type=click.Path(path_type=Path), help="YAML configuration file.")
@click.option(
    "--format",
    "input_format",
    type=click.Choice(["csv", "lines"]),
    default="csv",
    show_default=True,
    help="csv: one record per data row; lines: one record per non-empty line.",
)
@click.option("--no-header", is_flag=True, help="CSV input has no header row.")
@click.option("--token-size", type=int, help="Shingle length in characters.")
@click.option("--num-min-hashes", type=int, help="Number of MinHash rounds.")
@click.option("--num-bands", type=int, help="Number of LSH bands.")
@click.option("--threshold", type=float, help="Similarity cutoff for duplicates.")
@click.option("--seed", type=int, help="Seed for reproducible permutations.")
@click.option("--workers", type=int, help="Worker threads.")
@click.option(
    "--similarity",
    type=click.Choice(SIMILARITY_NAMES),
    default="levenshtein",
    show_default=True,
    help="Similarity measure applied to candidate pairs.",
)
@click.option("--log-level", type=str, help="Override the configured log level.")
def detect(
    input_file: Path,
    config_path: Optional[Path],
    input_format: str,
    no_header: bool,
    token_size: Optional[int],
    num_min_hashes: Optional[int],
    num_bands: Optional[int],
    threshold: Optional[float],
    seed: Optional[int],
    workers: Optional[int],
    similarity: str,
    log_level: Optional[str],
) -> None:
    """Find near-duplicate records in INPUT_FILE and print them as JSON."""
    try:
        config = Config.from_yaml(config_path) if config_path else Config()
    except (FileNotFoundError, ValueError) as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e

    monitoring = config.monitoring
    if log_level:
        monitoring = monitoring.model_copy(update={"log_level": log_level.upper()})
    configure_logging(monitoring)

    overrides: Dict[str, Any] = {
        key: value
        for key, value in {
            "token_size": token_size,
            "num_min_hashes": num_min_hashes,
            "num_bands": num_bands,
            "threshold": threshold,
            "seed": seed,
            "max_workers": workers,
        }.items()
        if value is not None
    }

    try:
        detector = LSHDetector(config.lsh, metrics_enabled=monitoring.metrics_enabled, **overrides)
    except ValueError as e:
        raise click.ClickException(f"Invalid detector settings: {e}") from e

    if input_format == "csv":
        table = Table.from_csv(input_file, has_header=not no_header)
    else:
        table = Table.from_lines(input_file)

    cfg = detector.config
    result = detector.run(table, build_similarity(similarity, token_size=cfg.token_size))
    output = {
        "duplicates": sorted(sorted(pair) for pair in result.pairs()),
        "records": result.stats.num_records,
        "comparisons": result.stats.num_comparisons,
        "max_comparisons": result.stats.max_comparisons,
        "candidate_probability_at_threshold": round(
            candidate_probability(min(max(cfg.threshold, 0.0), 1.0), cfg.num_min_hashes, cfg.num_bands), 6
        ),
    }
    click.echo(json.dumps(output, indent=2))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
