"""
Data models for targets and samples.
"""

from .sample import Sample
from .target import TargetRecord, TargetTable

__all__ = [
    "Sample",
    "TargetRecord",
    "TargetTable",
]
