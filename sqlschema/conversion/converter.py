"""
Повторная генерация CREATE TABLE для целевого диалекта.

Вход: Entity после TableParser; типы и DEFAULT проходят через
TypeNormalizer, имена таблиц и колонок экранируются по правилам диалекта.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlschema.core.constants import MYSQL, POSTGRESQL, SQLITE, SQLSERVER
from sqlschema.core.models import Column, Entity, ResultStatus, StatementKind
from .normalizer import TypeNormalizer

logger = logging.getLogger(__name__)

_BIGINT_SOURCES = {"BIGINT", "INT8", "BIGSERIAL", "SERIAL8"}


class DialectConverter:
    """
    Генератор DDL для MySQL / PostgreSQL / SQLite / SQL Server.

    Правила вывода колонки:
      - не ключевая колонка: NULL / NOT NULL;
      - единственный ключ: NOT NULL PRIMARY KEY в строке колонки;
      - составной ключ: NOT NULL, а ключ выводится отдельной строкой;
      - автоинкремент: AUTO_INCREMENT / SERIAL / AUTOINCREMENT / IDENTITY(1,1).
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config if config is not None else {}
        self._init_defaults()

    def _init_defaults(self) -> None:
        defaults = {
            "dialect": MYSQL,
            "drop_table_comments": True,
        }
        for k, v in defaults.items():
            self.config.setdefault(k, v)

    # ==========================================================
    # PUBLIC API
    # ==========================================================

    def render_table(self, entity: Entity, dialect: Optional[str] = None) -> str:
        dialect = TypeNormalizer.canonical_dialect(dialect or self.config["dialect"])
        separate_key = entity.has_composite_key()

        lines = [
            "\t" + self.render_column(column, dialect, separate_key)
            for column in entity.columns
        ]
        if separate_key:
            keys = ", ".join(
                self.quote_column(c.name, dialect) for c in entity.primary_key_columns()
            )
            lines.append(f"\tPRIMARY KEY({keys})")

        header = f"CREATE TABLE IF NOT EXISTS {self.quote_table(entity.name, dialect)} ("
        return header + "\n" + ",\n".join(lines) + "\n);"

    def render_column(self, column: Column, dialect: Optional[str] = None, separate_key: bool = False) -> str:
        dialect = TypeNormalizer.canonical_dialect(dialect or self.config["dialect"])
        name = self.quote_column(column.name, dialect)
        base_u = column.base_type.upper()

        # PostgreSQL: вся колонка заменяется на SERIAL
        if column.auto_increment and dialect == POSTGRESQL:
            serial = "BIGSERIAL" if base_u in _BIGINT_SOURCES else "SERIAL"
            if column.primary_key and not separate_key:
                return f"{name} {serial} NOT NULL PRIMARY KEY"
            return f"{name} {serial} NOT NULL"

        parts = [name, self._render_type(column, dialect)]

        if not column.primary_key:
            parts.append("NULL" if column.nullable else "NOT NULL")
        elif separate_key:
            parts.append("NOT NULL")
        else:
            parts.append("NOT NULL PRIMARY KEY")

        if column.auto_increment:
            parts.append(self._auto_increment_marker(dialect))

        default = self._render_default(column, dialect)
        if default is not None:
            parts.append(f"DEFAULT {default}")

        if column.comment and dialect == MYSQL:
            parts.append(f"COMMENT '{self.escape_comment(column.comment)}'")

        return " ".join(parts)

    def convert_table(self, sql: str, dialect: Optional[str] = None) -> str:
        """Один CREATE TABLE → CREATE TABLE в целевом диалекте."""
        # поздний импорт: parser зависит от conversion.normalizer
        from sqlschema.parser.table_parser import TableParser

        entity = TableParser().parse(sql)
        return self.render_table(entity, dialect)

    def translate(self, script: str, dialect: Optional[str] = None, config: Optional[Dict[str, Any]] = None) -> str:
        """
        Весь скрипт → DDL целевого диалекта.

        Для каждого DROP TABLE IF EXISTS выводится закомментированная строка
        "-- DROP TABLE IF EXISTS t;", затем все разобранные таблицы через
        пустую строку.
        """
        from sqlschema.parser.schema_parser import SchemaParser

        dialect = TypeNormalizer.canonical_dialect(dialect or self.config["dialect"])
        report = SchemaParser(config).parse(script)
        return self.translate_report(report, dialect)

    def translate_report(self, report, dialect: Optional[str] = None) -> str:
        dialect = TypeNormalizer.canonical_dialect(dialect or self.config["dialect"])
        out: List[str] = []

        if self.config.get("drop_table_comments", True):
            for result in report.results:
                if result.kind == StatementKind.DROP_TABLE and result.table:
                    out.append(f"-- DROP TABLE IF EXISTS {self.quote_table(result.table, dialect)};")
            if out:
                out.append("")

        tables = [self.render_table(e, dialect) for e in report.entities]
        out.append("\n\n".join(tables))

        skipped = sum(1 for r in report.results if r.status == ResultStatus.FAILED)
        logger.info("Диалект %s: таблиц %d, пропущено с ошибкой %d", dialect, len(tables), skipped)
        return "\n".join(out)

    # ==========================================================
    # ЭКРАНИРОВАНИЕ
    # ==========================================================

    @staticmethod
    def quote_table(name: str, dialect: str) -> str:
        if dialect == MYSQL:
            return f"`{name}`"
        if dialect == POSTGRESQL:
            return f'"{name}"'
        return name

    @staticmethod
    def quote_column(name: str, dialect: str) -> str:
        if dialect == MYSQL:
            return f"`{name}`"
        return name

    @staticmethod
    def escape_comment(comment: str) -> str:
        return comment.replace("'", "''")

    # ==========================================================
    # INTERNAL METHODS
    # ==========================================================

    def _render_type(self, column: Column, dialect: str) -> str:
        base_u = column.base_type.upper()
        length = column.length
        enum_values = column.enum_values if base_u in ("ENUM", "SET") else None

        if dialect == SQLITE and column.auto_increment and column.primary_key and "INT" in base_u:
            length = None

        return TypeNormalizer.to_dialect_type(column.base_type, dialect, length, enum_values)

    @staticmethod
    def _auto_increment_marker(dialect: str) -> str:
        if dialect == MYSQL:
            return "AUTO_INCREMENT"
        if dialect == SQLITE:
            return "AUTOINCREMENT"
        if dialect == SQLSERVER:
            return "IDENTITY(1,1)"
        return ""

    def _render_default(self, column: Column, dialect: str) -> Optional[str]:
        if column.primary_key or column.default is None:
            return None
        if column.auto_increment and "NEXTVAL" in column.default.upper():
            return None

        value = TypeNormalizer.render_default(column.default, column.base_type, dialect, column.length)
        if value is None or value == "":
            return None
        if value == "NULL" and not column.nullable:
            return None
        return value


def convert_table(sql: str, dialect: str) -> str:
    return DialectConverter().convert_table(sql, dialect)


def translate(script: str, dialect: str) -> str:
    return DialectConverter().translate(script, dialect)
