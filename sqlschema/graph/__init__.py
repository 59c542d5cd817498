"""
Пакет graph: ссылки между таблицами и глубина зависимостей.
"""

from .references import (
    ReferenceMatcher,
    SuffixReferenceMatcher,
    ForeignKeyReferenceMatcher,
    MATCHERS,
    get_matcher,
)
from .depth import DepthCalculator, calculate_depths, sort_by_depth

__all__ = [
    "ReferenceMatcher",
    "SuffixReferenceMatcher",
    "ForeignKeyReferenceMatcher",
    "MATCHERS",
    "get_matcher",
    "DepthCalculator",
    "calculate_depths",
    "sort_by_depth",
]
