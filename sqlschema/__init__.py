"""
sqlschema: извлечение схемы из SQL-скриптов и файлов SQLite.

Разбор CREATE TABLE / INSERT в модель таблиц, колонок и строк данных,
перевод DDL между диалектами и упорядочивание таблиц по глубине
зависимостей.
"""

from .core.constants import VERSION
from .core.models import Column, Entity, ParseReport, Statement, StatementResult
from .config import DEFAULT_CONFIG, build_config, load_config
from .parser import SchemaParser, parse_script
from .conversion import DialectConverter, TypeNormalizer
from .graph import DepthCalculator, sort_by_depth
from .loader import SchemaLoader, looks_like_sqlite
from .report import Reporter

__version__ = VERSION

__all__ = [
    "Column",
    "Entity",
    "ParseReport",
    "Statement",
    "StatementResult",
    "DEFAULT_CONFIG",
    "build_config",
    "load_config",
    "SchemaParser",
    "parse_script",
    "DialectConverter",
    "TypeNormalizer",
    "DepthCalculator",
    "sort_by_depth",
    "SchemaLoader",
    "looks_like_sqlite",
    "Reporter",
]
