"""
MinHash LSH duplicate detection.

Runs tokenization, MinHash signatures and banding over a table, then compares
every pair of records sharing a bucket with a caller-supplied similarity
measure. Only pairs scoring at or above the threshold are kept.
"""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple, Union
from uuid import uuid4

import structlog

from ..config.config import LSHConfig
from ..observability.metrics import record_run
from ..protocols import DetectionResult, DetectionStats, Duplicate, RecordSimilarity, SimilarityFn, as_similarity_fn
from .banding import BandBuckets, compute_bands
from .minhash import compute_signatures
from .tokenizer import compute_tokens

logger = structlog.get_logger(__name__)


def _compare_bucket(
    table: Sequence[Any], bucket: List[int], similarity: SimilarityFn, threshold: float
) -> Tuple[Set[Duplicate], int]:
    duplicates: Set[Duplicate] = set()
    comparisons = 0
    for i in range(len(bucket)):
        for j in range(i + 1, len(bucket)):
            comparisons += 1
            first = table[bucket[i]]
            second = table[bucket[j]]
            if similarity(first, second) >= threshold:
                duplicates.add(Duplicate(first, second, bucket[i], bucket[j]))
    return duplicates, comparisons


def filter_candidates(
    table: Sequence[Any],
    bands: List[BandBuckets],
    similarity: SimilarityFn,
    threshold: float,
    max_workers: int = 1,
) -> Tuple[Set[Duplicate], int]:
    """
    Compare all record pairs that share a bucket.

    A pair bucketed together in several bands is compared once per band but
    reported once.

    Returns:
        ``(duplicates, comparisons)``
    """
    buckets = [bucket for band in bands for bucket in band.values() if len(bucket) >= 2]

    if max_workers > 1 and len(buckets) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            partials = list(executor.map(lambda b: _compare_bucket(table, b, similarity, threshold), buckets))
    else:
        partials = [_compare_bucket(table, bucket, similarity, threshold) for bucket in buckets]

    duplicates: Set[Duplicate] = set()
    comparisons = 0
    for found, count in partials:
        duplicates |= found
        comparisons += count
    return duplicates, comparisons


class LSHDetector:
    """
    Near-duplicate detection with shingling, MinHash and LSH banding.

    Configuration is validated on construction; an invalid combination
    (e.g. ``num_min_hashes`` not divisible by ``num_bands``) raises
    ``ValueError`` and no detector is created. All matrices are rebuilt on
    every call and owned by that call alone, so one detector can serve
    concurrent ``run`` calls on separate tables.
    """

    def __init__(self, config: Optional[LSHConfig] = None, metrics_enabled: bool = True, **overrides: Any) -> None:
        if config is None:
            config = LSHConfig(**overrides)
        elif overrides:
            config = LSHConfig.model_validate({**config.model_dump(), **overrides})
        self.config = config
        self.metrics_enabled = metrics_enabled
        self.last_stats: Optional[DetectionStats] = None

        logger.debug(
            "Initialized LSHDetector",
            token_size=config.token_size,
            num_min_hashes=config.num_min_hashes,
            num_bands=config.num_bands,
            rows_per_band=config.rows_per_band,
            threshold=config.threshold,
        )

    @property
    def num_comparisons(self) -> int:
        """Comparisons performed by the most recent ``detect`` call."""
        return self.last_stats.num_comparisons if self.last_stats else 0

    def detect(
        self,
        table: Sequence[Any],
        similarity: Union[SimilarityFn, RecordSimilarity],
        threshold: Optional[float] = None,
    ) -> Set[Duplicate]:
        """Return the set of duplicate pairs in ``table``."""
        result = self.run(table, similarity, threshold)
        self.last_stats = result.stats
        return result.duplicates

    def run(
        self,
        table: Sequence[Any],
        similarity: Union[SimilarityFn, RecordSimilarity],
        threshold: Optional[float] = None,
    ) -> DetectionResult:
        """
        Detect duplicates and report run statistics.

        Args:
            table: Ordered records; positions must stay stable during the call.
            similarity: Callable or object with ``compare``; exceptions it
                raises propagate unchanged.
            threshold: Overrides the configured threshold for this call.

        Returns:
            DetectionResult with the duplicate set and counters.
        """
        compare = as_similarity_fn(similarity)
        cutoff = self.config.threshold if threshold is None else threshold
        cfg = self.config
        stats = DetectionStats(num_records=len(table))

        if stats.num_records == 0:
            logger.info("LSH detection skipped empty table")
            return DetectionResult(stats=stats)

        phase_seconds: Dict[str, float] = {}
        started = time.perf_counter()

        with structlog.contextvars.bound_contextvars(run_id=uuid4().hex[:12]):
            mark = time.perf_counter()
            universe, membership = compute_tokens(table, cfg.token_size)
            phase_seconds["tokenize"] = time.perf_counter() - mark

            mark = time.perf_counter()
            signatures = compute_signatures(
                membership, cfg.num_min_hashes, seed=cfg.seed, max_workers=cfg.max_workers
            )
            phase_seconds["minhash"] = time.perf_counter() - mark

            mark = time.perf_counter()
            bands = compute_bands(signatures, cfg.num_bands, max_workers=cfg.max_workers)
            phase_seconds["banding"] = time.perf_counter() - mark

            mark = time.perf_counter()
            duplicates, comparisons = filter_candidates(
                table, bands, compare, cutoff, max_workers=cfg.max_workers
            )
            phase_seconds["filter"] = time.perf_counter() - mark

            stats.num_tokens = len(universe)
            stats.num_buckets = sum(len(band) for band in bands)
            stats.num_candidate_buckets = sum(1 for band in bands for bucket in band.values() if len(bucket) >= 2)
            stats.num_comparisons = comparisons
            stats.num_duplicates = len(duplicates)
            stats.elapsed_seconds = time.perf_counter() - started

            if self.metrics_enabled:
                record_run(comparisons, len(duplicates), phase_seconds)

            logger.info(
                "LSH detection finished",
                records=stats.num_records,
                tokens=stats.num_tokens,
                buckets=stats.num_buckets,
                comparisons=stats.num_comparisons,
                max_comparisons=stats.max_comparisons,
                duplicates=stats.num_duplicates,
                elapsed_seconds=round(stats.elapsed_seconds, 4),
            )

        return DetectionResult(duplicates=duplicates, stats=stats)
