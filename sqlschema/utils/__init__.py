"""
utils package: вспомогательные функции (имена, логирование)
"""

from .naming import (
    is_quoted_identifier,
    strip_quotes,
    split_qualified_parts,
    split_qualified_name,
    normalize_reference_name,
    snakeize,
)
from .logger import setup_logger

__all__ = [
    "is_quoted_identifier",
    "strip_quotes",
    "split_qualified_parts",
    "split_qualified_name",
    "normalize_reference_name",
    "snakeize",
    "setup_logger",
]
