"""
Shared fixtures for the lshdedup test suite.
"""

# Standard library imports
import logging
from typing import Generator, List

# Third-party imports
import numpy as np
import pytest
import structlog

# Local imports
from lshdedup.data import Table
from lshdedup.similarity import levenshtein_similarity, record_similarity


# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests across modules")
    config.addinivalue_line("markers", "slow: Tests that take >10 seconds")


# ============================================================================
# Core Test Fixtures
# ============================================================================


@pytest.fixture
def restore_logging() -> Generator[None, None, None]:
    """Undo global logging changes made by configure_logging."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.fixture
def edit_similarity():
    """Record-level Levenshtein similarity."""
    return record_similarity(levenshtein_similarity)


@pytest.fixture
def scenario_table() -> Table:
    """Two near-duplicates and one unrelated record."""
    return Table.from_strings(["abcdef", "abcdeg", "zzzzzz"])


@pytest.fixture
def people_table() -> Table:
    """Structured records with a few typo-level duplicates."""
    rows: List[List[str]] = [
        ["John Smith", "42 Baker Street", "London"],
        ["Jon Smith", "42 Baker Street", "London"],
        ["Maria Garcia", "7 Calle Mayor", "Madrid"],
        ["Maria Garcia", "7 Calle Mayor", "Madrid."],
        ["Wei Zhang", "88 Nanjing Road", "Shanghai"],
        ["Anna Kowalska", "3 Rynek Glowny", "Krakow"],
        ["Peter Novak", "15 Wenceslas Square", "Prague"],
        ["Peter Novak", "15 Wenceslas Sq", "Prague"],
    ]
    return Table.from_rows(rows, header=["name", "street", "city"])


@pytest.fixture
def jaccard_membership():
    """Builder for token x 2 membership matrices with a given overlap."""

    def _build(shared: int, only_first: int, only_second: int) -> np.ndarray:
        total = shared + only_first + only_second
        matrix = np.zeros((total, 2), dtype=bool)
        matrix[:shared, :] = True
        matrix[shared : shared + only_first, 0] = True
        matrix[shared + only_first :, 1] = True
        return matrix

    return _build
