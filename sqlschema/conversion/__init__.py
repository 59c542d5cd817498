"""
Пакет conversion: типы, значения по умолчанию и DDL целевого диалекта.

- TypeNormalizer: таблицы типов и литералы DEFAULT
- DialectConverter: генерация CREATE TABLE для MySQL / PostgreSQL / SQLite / SQL Server
"""

from .normalizer import DefaultKind, TypeNormalizer, canonical_dialect, to_dialect_type
from .converter import DialectConverter, convert_table, translate

__all__ = [
    "DefaultKind",
    "TypeNormalizer",
    "canonical_dialect",
    "to_dialect_type",
    "DialectConverter",
    "convert_table",
    "translate",
]
