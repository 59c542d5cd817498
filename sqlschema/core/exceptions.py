"""
Исключения извлечения схемы.

У каждого исключения есть машинный код и словарь подробностей; to_dict()
даёт запись, которая без изменений попадает в отчёт.
"""

from __future__ import annotations
from typing import Any, Dict, Optional, Sequence

# длина фрагмента SQL, сохраняемого в подробностях ошибки
FRAGMENT_LIMIT = 200


def _details(**fields: Any) -> Dict[str, Any]:
    """Только заданные поля: None и пустые строки отбрасываются."""
    return {k: v for k, v in fields.items() if v is not None and v != ""}


class SchemaExtractionError(Exception):
    """Базовое исключение извлечения схемы."""

    code = "UNKNOWN"

    def __init__(self, message: str, code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details: Dict[str, Any] = dict(details or {})

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "code": self.code, "details": self.details}


class ParsingError(SchemaExtractionError):
    """Оператор не удалось разобрать."""

    code = "PARSING_ERROR"

    def __init__(
        self,
        message: str,
        sql_fragment: Optional[str] = None,
        position: Optional[int] = None,
        table_name: Optional[str] = None,
    ):
        fragment = sql_fragment[:FRAGMENT_LIMIT] if sql_fragment else None
        super().__init__(
            message,
            details=_details(table_name=table_name, sql_fragment=fragment, position=position),
        )


class TableParsingError(ParsingError):
    """Ошибка в CREATE TABLE."""

    code = "TABLE_PARSING_ERROR"

    def __init__(self, message: str, table_name: Optional[str] = None, sql_fragment: Optional[str] = None):
        super().__init__(message, sql_fragment=sql_fragment, table_name=table_name)


class InsertParsingError(ParsingError):
    """INSERT не имеет формы INSERT INTO ... VALUES (...)."""

    code = "INSERT_PARSING_ERROR"

    def __init__(self, message: str, table_name: Optional[str] = None, sql_fragment: Optional[str] = None):
        super().__init__(message, sql_fragment=sql_fragment, table_name=table_name)


class UnsupportedDialectError(SchemaExtractionError):
    code = "UNSUPPORTED_DIALECT"

    def __init__(self, dialect: Optional[str], supported: Optional[Sequence[str]] = None):
        super().__init__(
            f"Неподдерживаемый диалект: {dialect}",
            details=_details(dialect=dialect, supported=list(supported) if supported else None),
        )


class ConfigurationError(SchemaExtractionError):
    """Некорректная конфигурация."""

    code = "CONFIGURATION_ERROR"

    def __init__(self, message: str, config_key: Optional[str] = None, config_value: Any = None):
        super().__init__(message, details=_details(config_key=config_key, config_value=config_value))


class SourceReadError(SchemaExtractionError):
    """SQL-скрипт или файл SQLite не прочитан."""

    code = "SOURCE_READ_ERROR"

    def __init__(self, message: str, file_path: Optional[str] = None, operation: Optional[str] = None):
        super().__init__(message, details=_details(file_path=file_path, operation=operation))


def handle_exception(exception: Exception) -> Dict[str, Any]:
    """Любое исключение -> запись об ошибке для отчёта."""
    if isinstance(exception, SchemaExtractionError):
        return exception.to_dict()
    return {
        "error": str(exception),
        "code": "UNKNOWN_ERROR",
        "details": {"exception_type": type(exception).__name__},
    }
