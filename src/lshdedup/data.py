"""
Minimal record and table types for feeding the detector.

The detector only needs ``record_id`` and ``str(record)``; these types give
tests and the command line a concrete table to work with.
"""

from __future__ import annotations

import csv
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Union, overload

import structlog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class TableRecord:
    """A row of string fields identified by its position in the table."""

    record_id: int
    values: Tuple[str, ...]
    separator: str = ","

    def __str__(self) -> str:
        return self.separator.join(self.values)


class Table(Sequence[TableRecord]):
    """Ordered, indexable collection of records with stable positions."""

    def __init__(self, records: Iterable[TableRecord], header: Optional[Sequence[str]] = None) -> None:
        self._records: List[TableRecord] = list(records)
        self.header: Tuple[str, ...] = tuple(header or ())

    @classmethod
    def from_rows(cls, rows: Iterable[Sequence[str]], header: Optional[Sequence[str]] = None) -> Table:
        """Build a table from rows of fields, numbering records from 0."""
        return cls(
            (TableRecord(record_id=i, values=tuple(row)) for i, row in enumerate(rows)),
            header=header,
        )

    @classmethod
    def from_strings(cls, values: Iterable[str]) -> Table:
        """Build a table of single-field records."""
        return cls.from_rows([value] for value in values)

    @classmethod
    def from_csv(cls, path: Union[str, Path], has_header: bool = True, delimiter: str = ",") -> Table:
        """Load a CSV file; each data row becomes one record."""
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"Input file not found: {path}")
        with open(path, "r", encoding="utf-8", newline="") as f:
            reader = csv.reader(f, delimiter=delimiter)
            header = next(reader, None) if has_header else None
            table = cls.from_rows(reader, header=header)
        logger.debug("Loaded CSV table", path=str(path), records=len(table))
        return table

    @classmethod
    def from_lines(cls, path: Union[str, Path]) -> Table:
        """Load a text file; each non-empty line becomes one record."""
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"Input file not found: {path}")
        with open(path, "r", encoding="utf-8") as f:
            lines = [line.rstrip("\n") for line in f if line.strip()]
        logger.debug("Loaded line table", path=str(path), records=len(lines))
        return cls.from_strings(lines)

    @overload
    def __getitem__(self, index: int) -> TableRecord: ...

    @overload
    def __getitem__(self, index: slice) -> List[TableRecord]: ...

    def __getitem__(self, index):  # type: ignore[no-untyped-def]
        return self._records[index]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[TableRecord]:
        return iter(self._records)
