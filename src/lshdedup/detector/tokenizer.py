"""
Character shingling for LSH detection.

Builds the token universe (distinct shingles in first-seen order) and the
token x record membership matrix that the MinHash step permutes.
"""

from __future__ import annotations

from typing import Any, Dict, List, Sequence, Tuple

import numpy as np
import structlog

logger = structlog.get_logger(__name__)


def shingles(text: str, token_size: int) -> List[str]:
    """All windows of ``token_size`` characters in ``text``, in order.

    Strings shorter than ``token_size`` yield nothing.
    """
    if token_size < 1:
        raise ValueError(f"token_size must be >= 1, got {token_size}")
    return [text[i : i + token_size] for i in range(len(text) - token_size + 1)]


def compute_tokens(records: Sequence[Any], token_size: int) -> Tuple[List[str], np.ndarray]:
    """
    Derive the token universe and membership matrix for ``records``.

    Membership is tested by substring containment over each record's full
    serialization, so a token counts as present in a record wherever it
    occurs, including records too short to contribute tokens themselves.

    Args:
        records: Ordered records; ``str(record)`` is the tokenized text.
        token_size: Shingle length in characters.

    Returns:
        ``(universe, membership)`` where ``membership[t, r]`` is True iff
        ``universe[t]`` occurs in record ``r``. Shape is
        ``(len(universe), len(records))``.
    """
    if token_size < 1:
        raise ValueError(f"token_size must be >= 1, got {token_size}")

    texts = [str(record) for record in records]

    # dict keeps first-seen order and gives O(1) membership
    seen: Dict[str, None] = {}
    for text in texts:
        for token in shingles(text, token_size):
            seen.setdefault(token, None)
    universe = list(seen)

    membership = np.zeros((len(universe), len(texts)), dtype=bool)
    for t, token in enumerate(universe):
        for r, text in enumerate(texts):
            membership[t, r] = token in text

    logger.debug("Tokenized records", records=len(texts), tokens=len(universe), token_size=token_size)
    return universe, membership
