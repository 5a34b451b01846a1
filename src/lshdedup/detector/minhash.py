"""
MinHash signature estimation over a token membership matrix.

Each round draws a uniformly random permutation of the token rows and
records, per record column, the first permuted row where the record has a
token. The chance that two columns agree in a round equals the Jaccard
similarity of their token sets.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import numpy as np
import structlog

logger = structlog.get_logger(__name__)

# Signature value for a record with no tokens. Strictly greater than any
# valid row index; band hashing works on Python ints so it cannot overflow.
NO_TOKEN: int = int(np.iinfo(np.int64).max)


def _min_hash_round(membership: np.ndarray, seed_seq: np.random.SeedSequence) -> np.ndarray:
    """Signature row for one random permutation of the membership rows."""
    if membership.shape[0] == 0:
        return np.full(membership.shape[1], NO_TOKEN, dtype=np.int64)
    rng = np.random.default_rng(seed_seq)
    permuted = membership[rng.permutation(membership.shape[0])]
    present = permuted.any(axis=0)
    first = permuted.argmax(axis=0)
    return np.where(present, first, NO_TOKEN).astype(np.int64)


def compute_signatures(
    membership: np.ndarray,
    num_min_hashes: int,
    seed: Optional[int] = None,
    max_workers: int = 1,
) -> np.ndarray:
    """
    Compute the ``num_min_hashes x records`` signature matrix.

    Every round gets its own generator spawned from ``seed``, so results are
    reproducible for a given seed regardless of ``max_workers``. Without a
    seed, fresh OS entropy is used.

    Args:
        membership: Boolean token x record matrix (read-only here).
        num_min_hashes: Number of permutation rounds.
        seed: Optional seed for reproducible permutations.
        max_workers: Threads used to run rounds concurrently.

    Returns:
        int64 matrix; cells hold the minimum permuted row index or ``NO_TOKEN``.
    """
    if num_min_hashes < 1:
        raise ValueError(f"num_min_hashes must be >= 1, got {num_min_hashes}")
    membership = np.asarray(membership, dtype=bool)
    if membership.ndim != 2:
        raise ValueError(f"membership matrix must be 2-dimensional, got {membership.ndim} dimensions")
    if membership.shape[1] == 0:
        raise ValueError("membership matrix has no record columns")

    rounds = np.random.SeedSequence(seed).spawn(num_min_hashes)
    signatures = np.empty((num_min_hashes, membership.shape[1]), dtype=np.int64)

    if max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            for i, row in enumerate(executor.map(lambda s: _min_hash_round(membership, s), rounds)):
                signatures[i] = row
    else:
        for i, seed_seq in enumerate(rounds):
            signatures[i] = _min_hash_round(membership, seed_seq)

    logger.debug(
        "Computed MinHash signatures",
        rounds=num_min_hashes,
        records=membership.shape[1],
        tokens=membership.shape[0],
    )
    return signatures


def signature_agreement(signatures: np.ndarray, first: int, second: int) -> float:
    """Fraction of rounds in which two record columns share a signature value.

    This is the MinHash estimate of the Jaccard similarity of the two records.
    """
    if signatures.shape[0] == 0:
        return 0.0
    return float(np.mean(signatures[:, first] == signatures[:, second]))
