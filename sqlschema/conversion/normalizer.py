"""
Нормализация типов и значений по умолчанию для четырёх диалектов.

Таблицы соответствия типов берутся из core.constants и не меняются;
сопоставление идёт по префиксу без учёта регистра, первый совпавший
ключ выигрывает. Не найденный тип возвращается без изменений.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from sqlschema.core.constants import (
    BOOLEAN_TYPES,
    DIALECT_ALIASES,
    DIALECT_BOOLEAN_TYPE,
    DIALECT_ENUM_FALLBACK,
    DIALECT_LENGTH_TYPES,
    DIALECT_TYPE_MAPS,
    MYSQL,
    NUMERIC_BOOLEAN_DIALECTS,
    PRECISION_TYPES,
    REAL_TYPES,
    SQLITE,
    SUPPORTED_DIALECTS,
    VALUE_LIST_TYPES,
)
from sqlschema.core.exceptions import UnsupportedDialectError


class DefaultKind(Enum):
    """Класс литерала DEFAULT."""
    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    DATETIME = "datetime"
    FUNCTION = "function"
    STRING = "string"
    EXPRESSION = "expression"


_TYPE_RE = re.compile(r"^\s*([A-Za-z_][\w ]*?)\s*(?:\((.*)\))?\s*$", re.DOTALL)
_NUMBER_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
_INT_PREFIX_RE = re.compile(r"^\s*[+-]?\d+")
_REAL_PREFIX_RE = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_PARAM_RE = re.compile(r"[A-Za-z0-9_]+")
_QUOTED_LITERAL_RE = re.compile(r"'((?:[^'\\]|\\.|'')*)'")
_CAST_RE = re.compile(r"::\s*(?:character\s+varying|varchar|text|bpchar)\b(?:\(\d+\))?", re.IGNORECASE)
_NULL_RE = re.compile(r"\bNULL\b", re.IGNORECASE)
_BIT_LITERAL_RE = re.compile(r"^b'[01]'$", re.IGNORECASE)
_NOW_RE = re.compile(r"^(CURRENT_TIMESTAMP|NOW\(\))$", re.IGNORECASE)
_ON_CLAUSE_RE = re.compile(
    r"^CURRENT_TIMESTAMP\s+ON\s+(UPDATE|INSERT)\s+CURRENT_TIMESTAMP$", re.IGNORECASE
)
_FUNCTION_RE = re.compile(
    r"^(?:[A-Za-z_][\w.]*\s*\(.*\)|CURRENT_TIMESTAMP|CURRENT_DATE|CURRENT_TIME|LOCALTIMESTAMP|LOCALTIME)"
    r"(?:\s+ON\s+(?:UPDATE|INSERT)\s+CURRENT_TIMESTAMP)?$",
    re.IGNORECASE | re.DOTALL,
)

# порядок важен: сначала самые длинные формы
_DATETIME_PATTERNS: Tuple[re.Pattern, ...] = (
    re.compile(r"\d{4}-\d{2}-\d{2}\s+\d{2}:\d{2}:\d{2}\.\d{6}"),
    re.compile(r"\d{4}-\d{2}-\d{2}\s+\d{2}:\d{2}:\d{2}"),
    re.compile(r"\d{4}-\d{2}-\d{2}"),
    re.compile(r"\d{2}:\d{2}:\d{2}"),
)


class TypeNormalizer:
    """
    Перевод типов колонок между диалектами MySQL / PostgreSQL / SQLite /
    SQL Server и нормализация литералов DEFAULT.
    """

    # ==========================================================
    # ДИАЛЕКТЫ
    # ==========================================================

    @classmethod
    def canonical_dialect(cls, dialect: str) -> str:
        key = (dialect or "").strip().lower()
        if key not in DIALECT_ALIASES:
            raise UnsupportedDialectError(dialect, SUPPORTED_DIALECTS)
        return DIALECT_ALIASES[key]

    # ==========================================================
    # ТИПЫ
    # ==========================================================

    @classmethod
    def split_type(cls, type_text: str) -> Tuple[str, Optional[str]]:
        """
        "NVARCHAR(100)"   -> ("NVARCHAR", "100")
        "DECIMAL(10, 2)"  -> ("DECIMAL", "10,2")
        "TEXT"            -> ("TEXT", None)
        """
        m = _TYPE_RE.match(type_text or "")
        if not m:
            return (type_text or "").strip(), None
        base = " ".join(m.group(1).split())
        params = m.group(2)
        if params is None:
            return base, None
        # внутри списка ENUM пробелы значимы
        if base.upper() in VALUE_LIST_TYPES:
            return base, params.strip()
        return base, re.sub(r"\s+", "", params)

    @classmethod
    def is_boolean_type(cls, base_type: str, length: Optional[str] = None) -> bool:
        u = (base_type or "").strip().upper()
        if u == "BIT":
            return length in (None, "", "1")
        if u in BOOLEAN_TYPES or "BOOL" in u:
            return True
        return u == "TINYINT" and str(length).strip() == "1"

    @classmethod
    def lookup_type(cls, type_name: str, dialect: str) -> Optional[str]:
        """Тип диалекта по упорядоченной таблице префиксов; None если не найден."""
        dialect = cls.canonical_dialect(dialect)
        base, _ = cls.split_type(type_name)
        key = base.lower()
        for prefix, target in DIALECT_TYPE_MAPS[dialect]:
            if key.startswith(prefix):
                return target
        return None

    @classmethod
    def to_dialect_type(
        cls,
        type_name: str,
        dialect: str,
        length: Optional[str] = None,
        enum_values: Optional[Sequence[str]] = None,
    ) -> str:
        """
        Полное имя типа в целевом диалекте, с длиной/точностью/литералами.

        Длину можно передать внутри type_name ("VARCHAR(100)") или отдельно.
        """
        dialect = cls.canonical_dialect(dialect)
        base, inline_length = cls.split_type(type_name)
        if length is None:
            length = inline_length
        base_u = base.upper()

        if cls.is_boolean_type(base_u, length):
            return DIALECT_BOOLEAN_TYPE[dialect]

        if base_u in VALUE_LIST_TYPES:
            values = list(enum_values) if enum_values is not None else cls.parse_enum_values(length)
            if dialect == MYSQL:
                return f"{base_u}({cls.quote_literals(values)})"
            return f"{DIALECT_ENUM_FALLBACK[dialect]}({cls.enum_max_length(values) + 2})"

        mapped = cls.lookup_type(base, dialect)
        if mapped is None:
            if length and inline_length is None:
                return f"{base}({length})"
            return (type_name or "").strip()

        if "(" in mapped:
            return mapped

        if mapped in PRECISION_TYPES and length:
            params = cls.parse_numeric_params(length)
            return f"{mapped}({','.join(params)})" if params else mapped

        if mapped in DIALECT_LENGTH_TYPES[dialect] and length and str(length).isdigit():
            return f"{mapped}({length})"

        return mapped

    @classmethod
    def parse_numeric_params(cls, length: Optional[str]) -> List[str]:
        """ "10, 2" -> ["10", "2"] """
        return _PARAM_RE.findall(length or "")

    @classmethod
    def parse_enum_values(cls, text: Optional[str]) -> List[str]:
        """ "'a','b c'" -> ["a", "b c"] """
        return [v.replace("''", "'") for v in _QUOTED_LITERAL_RE.findall(text or "")]

    @classmethod
    def quote_literals(cls, values: Sequence[str]) -> str:
        return ",".join("'" + str(v).replace("'", "''") + "'" for v in values)

    @classmethod
    def enum_max_length(cls, values: Sequence[str]) -> int:
        return max((len(v) for v in values), default=0)

    # ==========================================================
    # ЗНАЧЕНИЯ ПО УМОЛЧАНИЮ
    # ==========================================================

    @classmethod
    def is_number(cls, value: str) -> bool:
        return bool(_NUMBER_RE.match((value or "").strip()))

    @classmethod
    def is_datetime(cls, value: str) -> bool:
        return any(p.search(value or "") for p in _DATETIME_PATTERNS)

    @classmethod
    def classify_default(cls, value: Optional[str]) -> Optional[DefaultKind]:
        if value is None:
            return None
        v = value.strip()

        # NULL ищется как слово в любом месте литерала
        if _NULL_RE.search(v):
            return DefaultKind.NULL
        if cls.is_number(v):
            return DefaultKind.NUMBER
        if _FUNCTION_RE.match(v):
            return DefaultKind.FUNCTION
        if cls.is_datetime(v):
            return DefaultKind.DATETIME
        if re.match(r"TRUE|FALSE", v, re.IGNORECASE) or _BIT_LITERAL_RE.match(v):
            return DefaultKind.BOOLEAN
        if len(v) >= 2 and v[0] == v[-1] and v[0] in ("'", '"'):
            return DefaultKind.STRING
        return DefaultKind.EXPRESSION

    @classmethod
    def normalize_default(
        cls,
        value: Optional[str],
        base_type: str,
        length: Optional[str] = None,
    ) -> Optional[str]:
        """
        Нормализация DEFAULT при разборе CREATE TABLE.

        Булев тип колонки решает всё сам; иначе по классу литерала: число
        оборачивается в кавычки, дата-время перекавычивается,
        CURRENT_TIMESTAMP/NOW() и ON UPDATE приводятся к верхнему регистру.
        """
        if not value or not value.strip():
            return None
        v = value.strip()

        if cls.is_boolean_type(base_type, length):
            return "TRUE" if cls.is_truthy(v) else "FALSE"

        kind = cls.classify_default(v)
        if kind == DefaultKind.NULL:
            return "NULL"
        if kind == DefaultKind.NUMBER:
            return f"'{v}'"
        if kind == DefaultKind.FUNCTION:
            if _NOW_RE.match(v) or _ON_CLAUSE_RE.match(v):
                return " ".join(v.upper().split())
            return v
        if kind == DefaultKind.DATETIME:
            return cls.quote_datetime(v)
        if kind == DefaultKind.BOOLEAN:
            if v.upper().startswith("TRUE"):
                return "TRUE"
            if v.upper().startswith("FALSE"):
                return "FALSE"
        return v

    @classmethod
    def quote_datetime(cls, value: str) -> str:
        v = value.strip()
        if len(v) >= 2 and v[0] in ("'", '"') and v[-1] == v[0]:
            v = v[1:-1]
        else:
            v = v.strip("'\"")
        return f"'{v}'"

    @classmethod
    def is_truthy(cls, value: str) -> bool:
        return "1" in value or "TRUE" in value.upper()

    @classmethod
    def to_boolean_literal(cls, value: str, dialect: str) -> str:
        dialect = cls.canonical_dialect(dialect)
        truthy = cls.is_truthy(value)
        if dialect in NUMERIC_BOOLEAN_DIALECTS:
            return "1" if truthy else "0"
        return "TRUE" if truthy else "FALSE"

    @classmethod
    def render_default(
        cls,
        value: Optional[str],
        base_type: str,
        dialect: str,
        length: Optional[str] = None,
    ) -> Optional[str]:
        """
        Литерал DEFAULT для вывода в целевом диалекте; None, если DEFAULT не выводится.

        Целые колонки получают int(), вещественные float(), булевы берутся из
        словаря диалекта (TRUE/FALSE или 1/0).
        """
        if value is None:
            return None
        dialect = cls.canonical_dialect(dialect)
        v = _CAST_RE.sub("", value).strip()
        if not v:
            return None

        if dialect == SQLITE and "now(" in v.lower():
            return None
        if dialect != MYSQL and _ON_CLAUSE_RE.match(v):
            # ON UPDATE CURRENT_TIMESTAMP есть только в MySQL
            return "CURRENT_TIMESTAMP"
        if v.upper() == "NULL":
            return "NULL"
        if cls.is_boolean_type(base_type, length):
            return cls.to_boolean_literal(v, dialect)

        base_u = (base_type or "").upper()
        unquoted = cls._strip_single_quotes(v)
        if "INT" in base_u:
            if unquoted == "":
                return "0"
            m = _INT_PREFIX_RE.match(unquoted)
            return str(int(m.group(0))) if m else v
        if base_u in REAL_TYPES:
            if unquoted == "":
                return "0"
            m = _REAL_PREFIX_RE.match(unquoted)
            return cls._format_real(float(m.group(0))) if m else v
        return v

    # ==========================================================
    # HELPERS
    # ==========================================================

    @staticmethod
    def _strip_single_quotes(value: str) -> str:
        v = value
        if v.startswith("'"):
            v = v[1:]
        if v.endswith("'"):
            v = v[:-1]
        return v.strip()

    @staticmethod
    def _format_real(number: float) -> str:
        if number.is_integer() and abs(number) < 1e16:
            return str(int(number))
        return repr(number)


def canonical_dialect(dialect: str) -> str:
    return TypeNormalizer.canonical_dialect(dialect)


def to_dialect_type(
    type_name: str,
    dialect: str,
    length: Optional[str] = None,
    enum_values: Optional[Sequence[str]] = None,
) -> str:
    return TypeNormalizer.to_dialect_type(type_name, dialect, length, enum_values)
