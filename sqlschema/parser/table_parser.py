"""
Парсер CREATE TABLE.

Тело таблицы разбирается не регулярными выражениями, а по потоку токенов
SQLTokenizer: элементы делятся запятыми нулевой глубины скобок, каждый
элемент либо колонка (имя + тип из белого списка), либо ограничение
(PRIMARY KEY / UNIQUE / KEY / INDEX / CHECK / FOREIGN KEY).

Колонки с неизвестным типом отбрасываются, разбор остальных продолжается.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from sqlschema.conversion.normalizer import TypeNormalizer
from sqlschema.core.constants import (
    AUTO_INCREMENT_MARKERS,
    PRECISION_TYPES,
    SERIAL_TYPES,
    TYPE_ALIASES,
    TYPE_WHITELIST_SET,
    VALUE_LIST_TYPES,
)
from sqlschema.core.exceptions import TableParsingError
from sqlschema.core.models import Column, Entity, ForeignKey, Statement
from sqlschema.utils.naming import split_qualified_name, strip_quotes
from .tokenizer import SQLTokenizer, Token, TokenType, unquote_string

logger = logging.getLogger(__name__)

_IDENT = r'(?:`[^`]+`|"[^"]+"|\[[^\]]+\]|[\w$]+)'
_HEADER_RE = re.compile(
    r"CREATE\s+(?:(?:GLOBAL\s+|LOCAL\s+)?TEMP(?:ORARY)?\s+)?TABLE\s+(?:IF\s+NOT\s+EXISTS\s+)?"
    rf"(?P<name>{_IDENT}(?:\s*\.\s*{_IDENT})*)\s*\(",
    re.IGNORECASE | re.DOTALL,
)

_ALIAS_PATTERNS = tuple((re.compile(p, re.IGNORECASE), repl) for p, repl in TYPE_ALIASES)

# слова, на которых заканчивается выражение DEFAULT
_DEFAULT_STOP_WORDS = frozenset({
    "COMMENT", "PRIMARY", "UNIQUE", "AUTO_INCREMENT", "AUTOINCREMENT",
    "REFERENCES", "CHECK", "CONSTRAINT", "COLLATE", "GENERATED", "IDENTITY",
})

_CONSTRAINT_STARTERS = frozenset({
    "PRIMARY", "UNIQUE", "KEY", "INDEX", "CONSTRAINT", "FOREIGN",
    "CHECK", "FULLTEXT", "SPATIAL", "EXCLUDE",
})


@dataclass
class _ColumnSignals:
    """Синтаксические признаки колонки, которые решаются после прохода."""
    column: Column
    auto_increment: bool = False


@dataclass
class _TableState:
    columns: List[_ColumnSignals] = field(default_factory=list)
    key_names: List[str] = field(default_factory=list)
    foreign_keys: List[ForeignKey] = field(default_factory=list)
    constraints: int = 0
    dropped: List[str] = field(default_factory=list)


class TableParser:
    """
    Разбор одного оператора CREATE TABLE в Entity.

    Результат: имя таблицы (без кавычек и схемы), колонки в порядке
    объявления, первичный ключ (None / имя / список имён).
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config if config is not None else {}
        self.tokenizer = SQLTokenizer(preserve_case=True)

    # ==========================================================
    # PUBLIC API
    # ==========================================================

    def parse(self, sql: Union[str, Statement], index: int = 0) -> Entity:
        text = sql.text if isinstance(sql, Statement) else sql
        text = self.prenormalize(text or "")

        header = _HEADER_RE.search(text)
        if header is None:
            raise TableParsingError("Не найден заголовок CREATE TABLE", sql_fragment=text)

        schema, table_name = split_qualified_name(header.group("name"))
        if not table_name:
            raise TableParsingError("Пустое имя таблицы", sql_fragment=text)

        body = text[header.end() - 1:]
        tokens = self.tokenizer.tokenize(body)

        close = SQLTokenizer.find_matching_paren(tokens, 0)
        if close is None:
            logger.debug("Таблица %s: нет закрывающей скобки, тело до конца оператора", table_name)
            close = len(tokens) - 1

        state = _TableState()
        for element in SQLTokenizer.split_top_level(tokens, 1, close):
            self._parse_element(element, body, state)

        if not state.columns and not state.constraints:
            raise TableParsingError(
                f"В таблице {table_name} не распознано ни одной колонки",
                table_name=table_name,
                sql_fragment=text,
            )

        if state.dropped:
            logger.debug("Таблица %s: пропущены элементы %s", table_name, state.dropped)

        entity = Entity(name=table_name, index=index, schema=schema)
        for signals in state.columns:
            entity.columns.append(signals.column)
        entity.foreign_keys = state.foreign_keys

        self._resolve_primary_key(entity, state)
        self._resolve_auto_increment(entity, state)
        return entity

    @staticmethod
    def prenormalize(text: str) -> str:
        """Сворачивает многословные типы и (N)VARCHAR(MAX) до токенизации."""
        for pattern, replacement in _ALIAS_PATTERNS:
            text = pattern.sub(replacement, text)
        return text

    # ==========================================================
    # ELEMENTS
    # ==========================================================

    def _parse_element(self, element: List[Token], body: str, state: _TableState) -> None:
        first = element[0].upper()

        if self._is_column(element):
            self._parse_column(element, body, state)
            return

        if first == "CONSTRAINT" and len(element) > 2:
            # CONSTRAINT <name> <определение>
            self._parse_constraint(element[2:], state)
            return

        if first in _CONSTRAINT_STARTERS:
            self._parse_constraint(element, state)
            return

        state.dropped.append(" ".join(t.value for t in element[:3]))

    @staticmethod
    def _is_column(element: List[Token]) -> bool:
        if len(element) < 2:
            return False
        if element[0].upper() in ("PRIMARY", "CONSTRAINT", "FOREIGN", "CHECK"):
            return False
        if not (element[0].is_identifier() or element[0].type in (TokenType.KEYWORD, TokenType.TYPE)):
            return False
        if TableParser._is_index_line(element):
            return False
        return strip_quotes(element[1].value).upper() in TYPE_WHITELIST_SET

    @staticmethod
    def _is_index_line(element: List[Token]) -> bool:
        """
        KEY `date` (`date`), INDEX time (a, b): MySQL называет индекс по
        колонке, поэтому имя индекса может совпасть с именем типа.
        """
        head, name = element[0], element[1]
        if head.type == TokenType.QUOTED_IDENTIFIER or head.upper() not in _CONSTRAINT_STARTERS:
            return False
        if name.type == TokenType.QUOTED_IDENTIFIER:
            return True
        if len(element) < 3 or element[2].type != TokenType.LPAREN:
            return False
        # у типа в скобках только числа и строки, у индекса имена колонок
        close = SQLTokenizer.find_matching_paren(element, 2)
        inside = element[3:close] if close is not None else element[3:]
        return any(
            t.is_identifier() or t.type in (TokenType.TYPE, TokenType.KEYWORD)
            for t in inside
        )

    def _parse_constraint(self, element: List[Token], state: _TableState) -> None:
        words = [t.upper() for t in element[:2]]
        state.constraints += 1

        if words == ["PRIMARY", "KEY"]:
            state.key_names.extend(self._column_list_after(element, 2))
            return

        if words == ["FOREIGN", "KEY"]:
            columns = self._column_list_after(element, 2)
            fk = self._references(element, columns)
            if fk is not None:
                state.foreign_keys.append(fk)
            return

        # UNIQUE [KEY|INDEX] / KEY / INDEX / CHECK: распознаются, но ключ не меняют

    # ==========================================================
    # COLUMNS
    # ==========================================================

    def _parse_column(self, element: List[Token], body: str, state: _TableState) -> None:
        name = strip_quotes(element[0].value)
        base_type = strip_quotes(element[1].value).upper()
        length: Optional[str] = None
        enum_values: Optional[List[str]] = None
        i = 2

        if i < len(element) and element[i].type == TokenType.LPAREN:
            close = SQLTokenizer.find_matching_paren(element, i)
            if close is None:
                close = len(element)
            params = element[i + 1:close]
            if base_type in VALUE_LIST_TYPES:
                enum_values = [
                    unquote_string(group[0].value) if len(group) == 1
                    else "".join(t.value for t in group)
                    for group in SQLTokenizer.split_top_level(params, 0, len(params))
                ]
            else:
                length = "".join(t.value for t in params) or None
                if base_type in PRECISION_TYPES and length:
                    enum_values = TypeNormalizer.parse_numeric_params(length)
            i = close + 1

        nullable = True
        inline_key = False
        auto_signal = base_type in SERIAL_TYPES
        raw_default: Optional[str] = None
        comment: Optional[str] = None

        attrs = element[i:]
        j = 0
        while j < len(attrs):
            tok = attrs[j]
            word = tok.upper() if tok.type != TokenType.STRING else ""

            if word == "NOT" and self._peek(attrs, j + 1) == "NULL":
                nullable = False
                j += 2
                continue
            if word == "PRIMARY" and self._peek(attrs, j + 1) == "KEY":
                inline_key = True
                j += 2
                continue
            if word in AUTO_INCREMENT_MARKERS:
                auto_signal = True
                j += 1
                if j < len(attrs) and attrs[j].type == TokenType.LPAREN:
                    j = self._skip_parens(attrs, j)
                continue
            if word == "DEFAULT":
                raw_default, j = self._default_expression(attrs, j + 1, body)
                if raw_default and "NEXTVAL" in raw_default.upper():
                    auto_signal = True
                continue
            if word == "COMMENT":
                nxt = attrs[j + 1] if j + 1 < len(attrs) else None
                if nxt is not None and nxt.type == TokenType.STRING:
                    comment = unquote_string(nxt.value).strip()
                    j += 2
                    continue
            if word == "REFERENCES":
                fk = self._references(attrs[j:], [name], start=0)
                if fk is not None:
                    state.foreign_keys.append(fk)
            if tok.type == TokenType.LPAREN:
                j = self._skip_parens(attrs, j)
                continue
            j += 1

        column = Column(
            name=name,
            base_type=base_type,
            length=length,
            nullable=nullable,
            default=TypeNormalizer.normalize_default(raw_default, base_type, length),
            primary_key=inline_key,
            enum_values=enum_values,
            comment=comment,
        )

        if any(s.column.name.lower() == name.lower() for s in state.columns):
            logger.debug("Повторное объявление колонки %s проигнорировано", name)
            return

        state.columns.append(_ColumnSignals(column=column, auto_increment=auto_signal))

    def _default_expression(self, attrs: List[Token], start: int, body: str) -> Tuple[Optional[str], int]:
        """
        Выражение DEFAULT: исходный текст от первого токена до стоп-слова
        нулевой глубины. Возвращает (текст, индекс следующего токена).
        """
        depth = 0
        j = start
        while j < len(attrs):
            tok = attrs[j]
            if tok.type == TokenType.LPAREN:
                depth += 1
            elif tok.type == TokenType.RPAREN:
                depth -= 1
            elif depth == 0 and tok.type != TokenType.STRING:
                word = tok.upper()
                if word in _DEFAULT_STOP_WORDS:
                    break
                if word == "NOT" and self._peek(attrs, j + 1) == "NULL":
                    break
                if word == "NULL" and j > start:
                    break
            j += 1

        if j == start:
            return None, j
        return body[attrs[start].position:attrs[j - 1].end].strip(), j

    # ==========================================================
    # POST-PROCESSING
    # ==========================================================

    @staticmethod
    def _resolve_primary_key(entity: Entity, state: _TableState) -> None:
        for key_name in state.key_names:
            column = entity.get_column(key_name)
            if column is None:
                logger.debug("PRIMARY KEY ссылается на неизвестную колонку %s.%s", entity.name, key_name)
                continue
            column.mark_primary_key()

        keys = [c.name for c in entity.primary_key_columns()]
        if not keys:
            entity.primary_key = None
        elif len(keys) == 1:
            entity.primary_key = keys[0]
        else:
            entity.primary_key = keys

    @staticmethod
    def _resolve_auto_increment(entity: Entity, state: _TableState) -> None:
        """Только первая помеченная колонка и никогда при составном ключе."""
        composite = entity.has_composite_key()
        assigned = False
        for signals in state.columns:
            if signals.auto_increment and not assigned and not composite:
                signals.column.auto_increment = True
                assigned = True
            else:
                signals.column.auto_increment = False

    # ==========================================================
    # HELPERS
    # ==========================================================

    @staticmethod
    def _peek(tokens: List[Token], index: int) -> str:
        if 0 <= index < len(tokens) and tokens[index].type != TokenType.STRING:
            return tokens[index].upper()
        return ""

    @staticmethod
    def _skip_parens(tokens: List[Token], open_index: int) -> int:
        close = SQLTokenizer.find_matching_paren(tokens, open_index)
        return len(tokens) if close is None else close + 1

    @staticmethod
    def _identifier_list(tokens: List[Token], open_index: int) -> List[str]:
        """Первые идентификаторы групп в скобках: (a, `b`(10), c DESC) -> [a, b, c]."""
        close = SQLTokenizer.find_matching_paren(tokens, open_index)
        if close is None:
            close = len(tokens)
        names = []
        for group in SQLTokenizer.split_top_level(tokens, open_index + 1, close):
            if group[0].type in (TokenType.STRING, TokenType.NUMBER):
                continue
            names.append(strip_quotes(group[0].value))
        return names

    def _column_list_after(self, element: List[Token], start: int) -> List[str]:
        for k in range(start, len(element)):
            if element[k].type == TokenType.LPAREN:
                return self._identifier_list(element, k)
        return []

    def _references(self, tokens: List[Token], columns: List[str], start: Optional[int] = None) -> Optional[ForeignKey]:
        ref_index = start
        if ref_index is None:
            ref_index = next((k for k, t in enumerate(tokens) if t.upper() == "REFERENCES"), None)
            if ref_index is None:
                return None

        name_parts: List[str] = []
        k = ref_index + 1
        while k < len(tokens) and (tokens[k].is_identifier() or tokens[k].type in (TokenType.DOT, TokenType.KEYWORD, TokenType.TYPE)):
            if tokens[k].type != TokenType.DOT and name_parts and tokens[k - 1].type != TokenType.DOT:
                break
            name_parts.append(tokens[k].value)
            k += 1

        _, ref_table = split_qualified_name("".join(name_parts))
        if not ref_table:
            return None

        ref_columns: List[str] = []
        if k < len(tokens) and tokens[k].type == TokenType.LPAREN:
            ref_columns = self._identifier_list(tokens, k)
        return ForeignKey(columns=list(columns), ref_table=ref_table, ref_columns=ref_columns)


def parse_table(sql: Union[str, Statement], index: int = 0) -> Entity:
    return TableParser().parse(sql, index)
