"""
Разбор INSERT INTO ... VALUES (...), (...).

Границы строк и значений определяются посимвольным сканером с состоянием
(одинарная кавычка / двойная кавычка / ожидание экранированного символа /
глубина скобок), поэтому запятые, скобки и кавычки внутри литералов не
ломают разбиение.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

from sqlschema.core.models import Row, Scalar, Statement
from sqlschema.utils.naming import split_qualified_name, strip_quotes
from .tokenizer import unescape_literal

logger = logging.getLogger(__name__)

_NAME = r'(?:`[^`]+`|\[[^\]]+\]|"[^"]+"|[\w$]+)'
_INSERT_RE = re.compile(
    rf"INSERT\s+(?:IGNORE\s+)?INTO\s+(?P<table>{_NAME}(?:\s*\.\s*{_NAME})*)\s*"
    r"(?:\((?P<columns>[^)]*?)\))?\s*VALUES\s*(?P<values>.*)",
    re.IGNORECASE | re.DOTALL,
)
_INT_RE = re.compile(r"^[+-]?\d+$")
_FLOAT_RE = re.compile(r"^[+-]?(?:\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?$")


@dataclass
class InsertData:
    """Результат разбора одного INSERT: значения хранятся позиционно."""
    table: str
    columns: List[str] = field(default_factory=list)
    values: List[List[Scalar]] = field(default_factory=list)
    schema: Optional[str] = None

    @property
    def has_columns(self) -> bool:
        return bool(self.columns)

    def to_rows(self, columns: Optional[Sequence[str]] = None) -> List[Row]:
        """
        Связывает позиционные значения с именами колонок.
        Лишние значения отбрасываются, недостающие колонки получают None.
        """
        names = list(columns if columns is not None else self.columns)
        rows: List[Row] = []
        for values in self.values:
            row: Row = {}
            for i, name in enumerate(names):
                row[name] = values[i] if i < len(values) else None
            rows.append(row)
        return rows


class RowTokenizer:
    """Токенизатор строк данных INSERT."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config if config is not None else {}

    # ==========================================================
    # PUBLIC API
    # ==========================================================

    def parse_insert(self, sql: Union[str, Statement]) -> Optional[InsertData]:
        """InsertData или None, если оператор не похож на INSERT ... VALUES."""
        text = sql.text if isinstance(sql, Statement) else sql
        m = _INSERT_RE.search(text or "")
        if m is None:
            return None

        schema, table = split_qualified_name(m.group("table"))
        if not table:
            return None

        columns: List[str] = []
        if m.group("columns"):
            columns = [strip_quotes(c) for c in m.group("columns").split(",") if c.strip()]

        values = [self.parse_row(r) for r in self.extract_row_strings(m.group("values"))]
        return InsertData(table=table, columns=columns, values=values, schema=schema)

    def extract_row_strings(self, values_text: str) -> List[str]:
        """
        Текст каждой группы (...) нулевого уровня без внешних скобок.
        Незакрытая последняя группа отбрасывается.
        """
        rows: List[str] = []
        buffer: List[str] = []
        depth = 0
        in_single = False
        in_double = False
        escaped = False

        text = values_text or ""
        n = len(text)
        i = 0
        while i < n:
            ch = text[i]

            if escaped:
                escaped = False
                if depth > 0:
                    buffer.append(ch)
                i += 1
                continue

            if ch == "\\" and (in_single or in_double):
                escaped = True
                if depth > 0:
                    buffer.append(ch)
                i += 1
                continue

            if in_single or in_double:
                quote = "'" if in_single else '"'
                if ch == quote:
                    if i + 1 < n and text[i + 1] == quote:
                        # удвоенная кавычка остаётся внутри литерала
                        if depth > 0:
                            buffer.append(ch * 2)
                        i += 2
                        continue
                    in_single = in_double = False
                if depth > 0:
                    buffer.append(ch)
                i += 1
                continue

            if ch == "'":
                in_single = True
            elif ch == '"':
                in_double = True
            elif ch == "(":
                depth += 1
                if depth == 1:
                    buffer = []
                    i += 1
                    continue
            elif ch == ")" and depth > 0:
                depth -= 1
                if depth == 0:
                    rows.append("".join(buffer))
                    buffer = []
                    i += 1
                    continue

            if depth > 0:
                buffer.append(ch)
            i += 1

        if depth > 0:
            logger.debug("VALUES: незакрытая группа отброшена (%d символов)", len(buffer))
        return rows

    def parse_row(self, row_text: str) -> List[Scalar]:
        """Делит строку по запятым верхнего уровня и типизирует значения."""
        return [self.parse_value(t) for t in self.split_values(row_text)]

    def split_values(self, row_text: str) -> List[str]:
        parts: List[str] = []
        buffer: List[str] = []
        depth = 0
        in_single = False
        in_double = False
        escaped = False

        text = row_text or ""
        n = len(text)
        i = 0
        while i < n:
            ch = text[i]

            if escaped:
                escaped = False
                buffer.append(ch)
            elif ch == "\\" and (in_single or in_double):
                escaped = True
                buffer.append(ch)
            elif in_single or in_double:
                quote = "'" if in_single else '"'
                if ch == quote and i + 1 < n and text[i + 1] == quote:
                    buffer.append(ch * 2)
                    i += 2
                    continue
                if ch == quote:
                    in_single = in_double = False
                buffer.append(ch)
            elif ch == "'":
                in_single = True
                buffer.append(ch)
            elif ch == '"':
                in_double = True
                buffer.append(ch)
            elif ch == "(":
                depth += 1
                buffer.append(ch)
            elif ch == ")":
                depth = max(0, depth - 1)
                buffer.append(ch)
            elif ch == "," and depth == 0:
                parts.append("".join(buffer))
                buffer = []
            else:
                buffer.append(ch)
            i += 1

        if buffer or parts:
            parts.append("".join(buffer))
        return parts

    @staticmethod
    def parse_value(token: str) -> Scalar:
        v = (token or "").strip()
        if v == "":
            return ""

        u = v.upper()
        if u == "NULL":
            return None
        if u == "TRUE":
            return True
        if u == "FALSE":
            return False

        if len(v) >= 2 and v[0] in ("'", '"') and v[-1] == v[0]:
            return unescape_literal(v[1:-1], v[0])

        if _INT_RE.match(v):
            return int(v)
        if _FLOAT_RE.match(v):
            return float(v)
        return v


# ==========================================================
# Функции модульного уровня
# ==========================================================

_default_tokenizer = RowTokenizer()


def parse_insert(sql: Union[str, Statement]) -> Optional[InsertData]:
    return _default_tokenizer.parse_insert(sql)


def extract_row_strings(values_text: str) -> List[str]:
    return _default_tokenizer.extract_row_strings(values_text)


def parse_row(row_text: str) -> List[Scalar]:
    return _default_tokenizer.parse_row(row_text)
