"""
MinHash LSH near-duplicate detection.

Pipeline stages, each feeding the next:
- Tokenizer: character shingles and token x record membership matrix
- MinHash: permutation x record signature matrix
- Banding: per-band buckets of records with equal signature slices
- Candidate filter: similarity check of every pair sharing a bucket
"""

from .banding import band_hash, candidate_probability, compute_bands
from .lsh_detection import LSHDetector, filter_candidates
from .minhash import NO_TOKEN, compute_signatures, signature_agreement
from .tokenizer import compute_tokens, shingles

__all__ = [
    # Orchestrator
    "LSHDetector",
    "filter_candidates",
    # Tokenizer
    "compute_tokens",
    "shingles",
    # MinHash
    "compute_signatures",
    "signature_agreement",
    "NO_TOKEN",
    # Banding
    "compute_bands",
    "band_hash",
    "candidate_probability",
]
