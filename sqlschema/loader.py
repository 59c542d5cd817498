"""
Загрузка источника схемы: SQL-скрипт или файл базы SQLite.

Тип источника определяется по первым 16 байтам (сигнатура
"SQLite format 3\\0"); всё остальное читается как UTF-8 текст скрипта.
"""

from __future__ import annotations

import logging
import os
import re
import sqlite3
import tempfile
import time
from contextlib import closing
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from sqlschema.conversion.normalizer import TypeNormalizer
from sqlschema.core.constants import SQLITE_IMPORT_TYPE_PATTERNS, SQLITE_MAGIC
from sqlschema.core.exceptions import SourceReadError
from sqlschema.core.models import Column, Entity, ParseReport, Row
from sqlschema.parser.schema_parser import SchemaParser
from sqlschema.utils.naming import snakeize

logger = logging.getLogger(__name__)

_SIZE_RE = re.compile(r"\((\d+)\)")
_IMPORT_PATTERNS = tuple((re.compile(p), t) for p, t in SQLITE_IMPORT_TYPE_PATTERNS)


def looks_like_sqlite(data: bytes) -> bool:
    return bytes(data[: len(SQLITE_MAGIC)]) == SQLITE_MAGIC


def sqlite_to_mysql_type(sqlite_type: Optional[str]) -> str:
    """Тип SQLite → тип MySQL по упорядоченному списку шаблонов."""
    if not sqlite_type:
        return "TEXT"
    u = sqlite_type.strip().upper()
    for pattern, mysql_type in _IMPORT_PATTERNS:
        if pattern.search(u):
            return mysql_type
    return sqlite_type


def sqlite_column_size(sqlite_type: Optional[str]) -> Optional[str]:
    if not sqlite_type:
        return None
    if "BOOL" in sqlite_type.upper():
        return "1"
    m = _SIZE_RE.search(sqlite_type)
    return m.group(1) if m else None


class SchemaLoader:
    """
    Точка входа для файлов: определяет тип источника и возвращает ParseReport.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config if config is not None else {}
        self.schema_parser = SchemaParser(self.config)
        self.depth_calculator = self.schema_parser.depth_calculator

    # ==========================================================
    # PUBLIC API
    # ==========================================================

    def load_file(self, path: Union[str, Path], reverse: Optional[bool] = None) -> ParseReport:
        file_path = Path(path)
        try:
            data = file_path.read_bytes()
        except OSError as e:
            raise SourceReadError(
                f"Не удалось прочитать файл {file_path}: {e}",
                file_path=str(file_path),
                operation="read",
            ) from e

        if looks_like_sqlite(data):
            return self.load_sqlite(file_path, reverse=reverse)
        return self.load_script(self._decode(data, str(file_path)), reverse=reverse)

    def load_bytes(self, data: bytes, name: Optional[str] = None, reverse: Optional[bool] = None) -> ParseReport:
        if not looks_like_sqlite(data):
            return self.load_script(self._decode(data, name), reverse=reverse)

        # sqlite3 открывает только файлы
        fd, tmp_name = tempfile.mkstemp(suffix=".sqlite")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            return self.load_sqlite(tmp_name, reverse=reverse)
        finally:
            os.unlink(tmp_name)

    def load_script(self, script: str, reverse: Optional[bool] = None) -> ParseReport:
        return self.schema_parser.parse(script, reverse=reverse)

    def load_sqlite(self, path: Union[str, Path], reverse: Optional[bool] = None) -> ParseReport:
        """
        Импорт базы SQLite: одна Entity на пользовательскую таблицу,
        колонки из PRAGMA table_info, строки из SELECT *.
        """
        start = time.perf_counter()
        report = ParseReport()

        try:
            with closing(sqlite3.connect(str(path))) as conn:
                tables = [
                    row[0]
                    for row in conn.execute(
                        "SELECT name FROM sqlite_master "
                        "WHERE type = 'table' AND name NOT LIKE 'sqlite_%' ORDER BY rowid"
                    )
                ]
                for index, table in enumerate(tables):
                    entity = self._import_table(conn, table, index)
                    report.entities.append(entity)
                    if entity.rows:
                        report.data[entity.name] = list(entity.rows)
        except sqlite3.Error as e:
            raise SourceReadError(
                f"Ошибка чтения базы SQLite {path}: {e}",
                file_path=str(path),
                operation="sqlite_import",
            ) from e

        self.depth_calculator.calculate(report.entities, reverse=reverse)

        report.stats = {
            "total_time": time.perf_counter() - start,
            "tables": len(report.entities),
            "failed": 0,
        }
        logger.info("Импорт SQLite: таблиц %d", len(report.entities))
        return report

    # ==========================================================
    # INTERNAL METHODS
    # ==========================================================

    def _import_table(self, conn: sqlite3.Connection, table: str, index: int) -> Entity:
        entity = Entity(name=snakeize(table), index=index)
        quoted = '"' + table.replace('"', '""') + '"'

        info = conn.execute(f"PRAGMA table_info({quoted})").fetchall()
        for column in self._columns_from_info(info):
            entity.add_column(column)

        key_columns = [c.name for c in entity.primary_key_columns()]
        if len(key_columns) == 1:
            entity.primary_key = key_columns[0]
        elif key_columns:
            entity.primary_key = key_columns

        entity.set_rows(self._read_rows(conn, quoted))
        logger.debug("SQLite: %s → %s (%d колонок, %d строк)", table, entity.name, len(entity.columns), len(entity.rows))
        return entity

    @staticmethod
    def _columns_from_info(info: List[Tuple]) -> List[Column]:
        # cid, name, type, notnull, dflt_value, pk
        composite = sum(1 for row in info if row[5]) > 1
        has_auto_increment = False

        columns: List[Column] = []
        for _cid, name, declared, notnull, default, pk in info:
            declared = declared or ""
            auto_increment = (
                declared.strip().upper() == "INTEGER"
                and bool(pk)
                and not composite
                and not has_auto_increment
            )
            has_auto_increment = has_auto_increment or auto_increment

            base_type = sqlite_to_mysql_type(declared)
            size = sqlite_column_size(declared)
            if not size and base_type == "BIGINT":
                size = "20"

            columns.append(Column(
                name=snakeize(name),
                base_type=base_type,
                length=size,
                nullable=not notnull,
                default=TypeNormalizer.normalize_default(default, base_type, size) if default is not None else None,
                primary_key=bool(pk),
                auto_increment=auto_increment,
            ))
        return columns

    @staticmethod
    def _read_rows(conn: sqlite3.Connection, quoted_table: str) -> List[Row]:
        cursor = conn.execute(f"SELECT * FROM {quoted_table}")
        names = [snakeize(d[0]) for d in cursor.description]
        rows: List[Row] = []
        for values in cursor:
            rows.append({
                name: (value.hex() if isinstance(value, bytes) else value)
                for name, value in zip(names, values)
            })
        return rows

    @staticmethod
    def _decode(data: bytes, name: Optional[str]) -> str:
        try:
            return data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise SourceReadError(
                f"Источник {name or '<bytes>'} не является текстом UTF-8: {e}",
                file_path=name,
                operation="decode",
            ) from e
