"""
Координатор разбора SQL-скрипта.

Конвейер: разбиение на операторы → CREATE TABLE / INSERT → связывание
строк данных с таблицами → расчёт глубины зависимостей.

Ошибка в одном операторе не прерывает разбор: она попадает в отчёт
(StatementResult со статусом failed), остальные операторы обрабатываются.
"""

from __future__ import annotations

import logging
import re
import time
from typing import Any, Dict, List, Optional, Tuple

from sqlschema.core.exceptions import InsertParsingError, ParsingError
from sqlschema.core.models import (
    ParseReport,
    ResultStatus,
    Statement,
    StatementKind,
    StatementResult,
)
from sqlschema.graph.depth import DepthCalculator
from sqlschema.utils.naming import split_qualified_name
from .row_tokenizer import InsertData, RowTokenizer
from .splitter import StatementSplitter, classify_statement
from .table_parser import TableParser

logger = logging.getLogger(__name__)

_DROP_TABLE_RE = re.compile(
    r"DROP\s+TABLE\s+(?:IF\s+EXISTS\s+)?(?P<name>[^\s,;(]+)", re.IGNORECASE
)


class SchemaParser:
    """
    Разбор скрипта в ParseReport (таблицы, данные, результаты по операторам).

    Экземпляр можно переиспользовать: всё накопленное состояние создаётся
    заново в каждом вызове parse().
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config if config is not None else {}
        self._init_defaults()

        parser_cfg = self.config["parser"]
        self.splitter = StatementSplitter({"delimiter": parser_cfg.get("delimiter", ";")})
        self.table_parser = TableParser(parser_cfg)
        self.row_tokenizer = RowTokenizer(parser_cfg)
        self.depth_calculator = DepthCalculator(self.config["depth"])

        self.stats: Dict[str, float] = {}

    def _init_defaults(self) -> None:
        self.config.setdefault("parser", {})
        self.config.setdefault("depth", {})
        defaults = {
            "delimiter": ";",
            "classify_head_chars": 1024,
            "zip_positional_rows": True,
        }
        for k, v in defaults.items():
            self.config["parser"].setdefault(k, v)

    # ==========================================================
    # PUBLIC API
    # ==========================================================

    def parse(self, script: str, reverse: Optional[bool] = None) -> ParseReport:
        total_start = time.perf_counter()
        self.stats = {
            "split_time": 0.0,
            "parse_time": 0.0,
            "depth_time": 0.0,
            "total_time": 0.0,
        }

        # ---------- Этап 1: Разбиение ----------
        t0 = time.perf_counter()
        statements = self.splitter.split(script)
        self.stats["split_time"] = time.perf_counter() - t0

        # ---------- Этап 2: Операторы ----------
        t0 = time.perf_counter()
        report = ParseReport()
        inserts: List[InsertData] = []

        for statement in statements:
            result, insert = self._process_statement(statement, report)
            report.results.append(result)
            if insert is not None:
                inserts.append(insert)

        self._merge_rows(report, inserts)
        self.stats["parse_time"] = time.perf_counter() - t0

        # ---------- Этап 3: Глубина ----------
        t0 = time.perf_counter()
        self.depth_calculator.calculate(report.entities, reverse=reverse)
        self.stats["depth_time"] = time.perf_counter() - t0

        self.stats["total_time"] = time.perf_counter() - total_start
        report.stats = dict(self.stats)
        report.stats["statements"] = len(statements)
        report.stats["tables"] = len(report.entities)
        report.stats["failed"] = len(report.failed)

        logger.info(
            "Разобрано операторов: %d, таблиц: %d, ошибок: %d",
            len(statements), len(report.entities), len(report.failed),
        )
        return report

    # ==========================================================
    # INTERNAL METHODS
    # ==========================================================

    def _process_statement(
        self,
        statement: Statement,
        report: ParseReport,
    ) -> Tuple[StatementResult, Optional[InsertData]]:
        kind = classify_statement(statement, int(self.config["parser"]["classify_head_chars"]))
        result = StatementResult(index=statement.index, kind=kind, status=ResultStatus.SKIPPED)

        if kind == StatementKind.CREATE_TABLE:
            try:
                entity = self.table_parser.parse(statement, index=len(report.entities))
            except ParsingError as e:
                return self._failed(result, statement, e), None

            result.table = entity.name
            if report.get_entity(entity.name) is not None:
                logger.debug("Таблица %s уже объявлена, повторное CREATE TABLE пропущено", entity.name)
                return result, None

            report.entities.append(entity)
            result.status = ResultStatus.OK
            return result, None

        if kind == StatementKind.INSERT:
            insert = self.row_tokenizer.parse_insert(statement)
            if insert is None:
                error = InsertParsingError("INSERT не соответствует форме INSERT INTO ... VALUES", sql_fragment=statement.text)
                return self._failed(result, statement, error), None
            result.table = insert.table
            result.rows = len(insert.values)
            result.status = ResultStatus.OK
            return result, insert

        if kind == StatementKind.DROP_TABLE:
            m = _DROP_TABLE_RE.search(statement.text)
            if m:
                result.table = split_qualified_name(m.group("name"))[1]

        logger.debug("Оператор #%d (%s) пропущен: %s", statement.index, kind.value, statement.head(60))
        return result, None

    @staticmethod
    def _failed(result: StatementResult, statement: Statement, error: ParsingError) -> StatementResult:
        result.status = ResultStatus.FAILED
        result.error = error.to_dict()
        result.error["details"]["line"] = statement.line
        result.table = error.details.get("table_name")
        logger.warning("Оператор #%d (строка %d): %s", statement.index, statement.line, error)
        return result

    def _merge_rows(self, report: ParseReport, inserts: List[InsertData]) -> None:
        """Строки INSERT → data[table] и Entity.rows (после разбора всех таблиц)."""
        zip_positional = bool(self.config["parser"].get("zip_positional_rows", True))

        for insert in inserts:
            entity = report.get_entity(insert.table)

            if insert.has_columns:
                rows: List[Any] = insert.to_rows()
            elif entity is not None and zip_positional:
                rows = insert.to_rows(entity.column_names())
            else:
                # нет списка колонок: отдаём позиционные значения как есть
                rows = [list(v) for v in insert.values]

            if not rows:
                continue

            key = entity.name if entity is not None else insert.table
            report.data.setdefault(key, []).extend(rows)

        for entity in report.entities:
            if entity.name in report.data:
                entity.set_rows(report.data[entity.name])


def parse_script(script: str, config: Optional[Dict[str, Any]] = None) -> ParseReport:
    return SchemaParser(config).parse(script)
