"""
lshdedup - near-duplicate record detection with MinHash and LSH banding.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .config import Config, LSHConfig
from .data import Table, TableRecord
from .detector import LSHDetector
from .protocols import DetectionResult, DetectionStats, Duplicate

__all__ = [
    "__version__",
    "Config",
    "LSHConfig",
    "LSHDetector",
    "Table",
    "TableRecord",
    "Duplicate",
    "DetectionResult",
    "DetectionStats",
]
