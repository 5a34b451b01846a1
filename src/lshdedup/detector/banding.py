"""
Locality Sensitive Hashing over MinHash signatures.

The signature rows are split into contiguous bands. Within a band, records
whose whole slice hashes to the same bucket id share a bucket (AND within a
band); sharing a bucket in any band makes two records candidates (OR across
bands).
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List

import numpy as np
import structlog

logger = structlog.get_logger(__name__)

# 64-bit FNV offset basis and prime; small multipliers collide on nearby slices
HASH_BASE = 14695981039346656037
HASH_PRIME = 1099511628211
_HASH_MASK = (1 << 64) - 1

BandBuckets = Dict[int, List[int]]


def band_hash(values: Iterable[int]) -> int:
    """Order-sensitive 64-bit polynomial hash of a band slice."""
    result = HASH_BASE
    for value in values:
        result = (result * HASH_PRIME + int(value)) & _HASH_MASK
    return result


def _bucket_band(signatures: np.ndarray, start: int, rows_per_band: int) -> BandBuckets:
    buckets: BandBuckets = {}
    band = signatures[start : start + rows_per_band]
    for record in range(signatures.shape[1]):
        key = band_hash(band[:, record].tolist())
        buckets.setdefault(key, []).append(record)
    return buckets


def candidate_probability(similarity: float, num_min_hashes: int, num_bands: int) -> float:
    """Probability that a pair with the given Jaccard similarity shares a bucket.

    ``1 - (1 - s**r) ** b`` with ``r`` rows per band and ``b`` bands.
    """
    if num_bands < 1 or num_min_hashes % num_bands != 0:
        raise ValueError(f"num_min_hashes ({num_min_hashes}) must be divisible by num_bands ({num_bands})")
    rows_per_band = num_min_hashes // num_bands
    return float(1.0 - (1.0 - similarity**rows_per_band) ** num_bands)


def compute_bands(signatures: np.ndarray, num_bands: int, max_workers: int = 1) -> List[BandBuckets]:
    """
    Bucket record columns of ``signatures`` band by band.

    Args:
        signatures: ``num_min_hashes x records`` signature matrix.
        num_bands: Number of bands; must divide the number of signature rows.
        max_workers: Threads used to bucket bands concurrently.

    Returns:
        One mapping per band from bucket id to the record positions in it,
        positions in ascending order.
    """
    if num_bands < 1:
        raise ValueError(f"num_bands must be >= 1, got {num_bands}")
    signatures = np.asarray(signatures)
    if signatures.ndim != 2:
        raise ValueError(f"signature matrix must be 2-dimensional, got {signatures.ndim} dimensions")
    num_min_hashes = signatures.shape[0]
    if num_min_hashes % num_bands != 0:
        raise ValueError(f"num_min_hashes ({num_min_hashes}) must be divisible by num_bands ({num_bands})")

    rows_per_band = num_min_hashes // num_bands
    starts = [i * rows_per_band for i in range(num_bands)]

    if max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            bands = list(executor.map(lambda start: _bucket_band(signatures, start, rows_per_band), starts))
    else:
        bands = [_bucket_band(signatures, start, rows_per_band) for start in starts]

    logger.debug(
        "Computed LSH buckets",
        bands=num_bands,
        rows_per_band=rows_per_band,
        buckets=sum(len(band) for band in bands),
    )
    return bands
