"""
Core contracts and data structures for lshdedup.

The detector treats records, tables and similarity measures as collaborators:
- A record has a stable identity and a deterministic string serialization
- A table is an ordered, indexable sequence of records
- A similarity measure maps two records to a score, conventionally in [0, 1]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, FrozenSet, Hashable, Optional, Protocol, Set, Tuple, Union, runtime_checkable

# ============================================================================
# Collaborator Protocols
# ============================================================================


@runtime_checkable
class Record(Protocol):
    """A record-like entity with a stable identity.

    ``str(record)`` must be deterministic; it is the text used for
    tokenization and substring containment tests.
    """

    @property
    def record_id(self) -> Hashable: ...

    def __str__(self) -> str: ...


@runtime_checkable
class RecordSimilarity(Protocol):
    """Similarity measure exposed as an object with a single ``compare`` method."""

    def compare(self, first: Any, second: Any) -> float: ...


SimilarityFn = Callable[[Any, Any], float]


def as_similarity_fn(similarity: Union[SimilarityFn, RecordSimilarity]) -> SimilarityFn:
    """Accept either a plain callable or an object with ``compare``."""
    if isinstance(similarity, RecordSimilarity):
        return similarity.compare
    if callable(similarity):
        return similarity
    raise TypeError(f"similarity must be callable or expose compare(), got {type(similarity).__name__}")


# ============================================================================
# Results
# ============================================================================


class Duplicate:
    """Unordered pair of records judged similar.

    ``Duplicate(a, b) == Duplicate(b, a)`` and both hash the same, so a set
    of duplicates never holds both orientations of one pair. A record is
    identified by its ``record_id``; records without one (plain strings,
    say) are identified by their table position, passed as ``first_id`` /
    ``second_id``.
    """

    __slots__ = ("first", "second", "_ids", "_key")

    def __init__(self, first: Any, second: Any, first_id: Optional[int] = None, second_id: Optional[int] = None) -> None:
        self.first = first
        self.second = second
        self._ids: Tuple[Hashable, Hashable] = (_identity(first, first_id), _identity(second, second_id))
        self._key: FrozenSet[Hashable] = frozenset(self._ids)

    @property
    def ids(self) -> Tuple[Hashable, Hashable]:
        """Record ids of the pair, in the order they were given."""
        return self._ids

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Duplicate):
            return NotImplemented
        return self._key == other._key

    def __hash__(self) -> int:
        return hash(self._key)

    def __repr__(self) -> str:
        first_id, second_id = self.ids
        return f"Duplicate({first_id!r}, {second_id!r})"


def _identity(record: Any, position: Optional[int]) -> Hashable:
    record_id = getattr(record, "record_id", None)
    if record_id is not None:
        return record_id
    if position is None:
        raise ValueError(f"{type(record).__name__} has no record_id; its table position is required")
    return position


@dataclass
class DetectionStats:
    """Counters collected during one detection run."""

    num_records: int = 0
    num_tokens: int = 0
    num_buckets: int = 0
    num_candidate_buckets: int = 0
    num_comparisons: int = 0
    num_duplicates: int = 0
    elapsed_seconds: float = 0.0

    @property
    def max_comparisons(self) -> int:
        """Comparisons a full pairwise scan would need."""
        return self.num_records * (self.num_records - 1) // 2

    @property
    def comparison_ratio(self) -> float:
        """Share of the full pairwise scan actually performed (may exceed 1.0
        when a pair shares buckets in several bands)."""
        if self.max_comparisons == 0:
            return 0.0
        return self.num_comparisons / self.max_comparisons


@dataclass
class DetectionResult:
    """Duplicates found by one run plus its statistics."""

    duplicates: Set[Duplicate] = field(default_factory=set)
    stats: DetectionStats = field(default_factory=DetectionStats)

    def pairs(self) -> Set[FrozenSet[Hashable]]:
        """Duplicate pairs as frozensets of record ids."""
        return {frozenset(duplicate.ids) for duplicate in self.duplicates}
