"""
Разбиение SQL-скрипта на логические операторы.

Построчный сканер:
- окончания строк приводятся к \n;
- строки-комментарии (`-- ...`, `--`) отбрасываются;
- оператор заканчивается, когда накопленный текст оканчивается активным
  разделителем (по умолчанию `;`), разделитель из текста убирается;
- директива `DELIMITER <token>` меняет разделитель для последующих
  операторов и сама в вывод не попадает.

Тип оператора (CREATE TABLE / INSERT / DROP TABLE) определяется через
sqlparse по началу текста.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

import sqlparse

from sqlschema.core.constants import DEFAULT_DELIMITER
from sqlschema.core.models import Statement, StatementKind

logger = logging.getLogger(__name__)

_DELIMITER_RE = re.compile(r"^DELIMITER\s+(\S+)\s*$", re.IGNORECASE)
_LINE_BREAK_RE = re.compile(r"\r\n|\r")


class StatementSplitter:
    """
    Делит скрипт на список Statement.

    Экземпляр можно переиспользовать: всё состояние сканера локально
    для вызова split().
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config if config is not None else {}
        self._init_defaults()

    def _init_defaults(self) -> None:
        defaults = {
            "delimiter": DEFAULT_DELIMITER,
        }
        for k, v in defaults.items():
            self.config.setdefault(k, v)

    # ==========================================================
    # PUBLIC API
    # ==========================================================

    def split(self, script: str) -> List[Statement]:
        text = _LINE_BREAK_RE.sub("\n", script or "")

        delimiter: str = self.config["delimiter"]
        statements: List[Statement] = []
        buffer: List[str] = []
        start_line = 1

        def emit(body: str, active: str) -> None:
            body = body.strip()
            if not body:
                return
            statements.append(Statement(
                text=body,
                delimiter=active,
                index=len(statements),
                line=start_line,
            ))

        for line_no, raw in enumerate(text.split("\n"), start=1):
            trimmed = raw.strip()

            if not buffer:
                # между операторами: пустые строки и любые "--" строки
                if not trimmed or trimmed.startswith("--"):
                    continue
            elif self._is_comment_line(trimmed):
                continue

            directive = _DELIMITER_RE.match(trimmed)
            if directive:
                if buffer:
                    logger.debug("DELIMITER внутри незакрытого оператора (строка %d)", line_no)
                    emit("\n".join(buffer), delimiter)
                    buffer = []
                delimiter = directive.group(1)
                continue

            if not buffer:
                start_line = line_no
            buffer.append(trimmed)

            accumulated = "\n".join(buffer).rstrip()
            if accumulated.endswith(delimiter):
                emit(accumulated[: -len(delimiter)], delimiter)
                buffer = []

        if buffer:
            logger.debug("Незавершённый оператор в конце скрипта (строка %d)", start_line)
            emit("\n".join(buffer), delimiter)

        logger.debug("Скрипт разбит на %d операторов", len(statements))
        return statements

    # ==========================================================
    # HELPERS
    # ==========================================================

    @staticmethod
    def _is_comment_line(trimmed: str) -> bool:
        return trimmed == "--" or trimmed.startswith("-- ")


def split_statements(script: str, delimiter: str = DEFAULT_DELIMITER) -> List[Statement]:
    return StatementSplitter({"delimiter": delimiter}).split(script)


def classify_statement(statement: Statement | str, head_chars: int = 1024) -> StatementKind:
    """
    Определяет вид оператора через sqlparse.

    Разбирается только начало текста: для INSERT с мегабайтами VALUES
    тип определяется по первым ключевым словам.
    """
    text = statement.text if isinstance(statement, Statement) else statement
    head = (text or "")[:head_chars]
    if not head.strip():
        return StatementKind.OTHER

    parsed = sqlparse.parse(head)
    if not parsed:
        return StatementKind.OTHER

    stmt = parsed[0]
    stmt_type = stmt.get_type()

    if stmt_type == "INSERT":
        return StatementKind.INSERT

    if stmt_type in ("CREATE", "DROP"):
        keywords = [t.normalized.upper() for t in stmt.flatten() if t.is_keyword][:4]
        if "TABLE" in keywords:
            return StatementKind.CREATE_TABLE if stmt_type == "CREATE" else StatementKind.DROP_TABLE

    return StatementKind.OTHER
