# sqlschema/core/__init__.py

from .models import (
    Column,
    Entity,
    ForeignKey,
    ParseReport,
    ResultStatus,
    Row,
    Statement,
    StatementKind,
    StatementResult,
)

from .exceptions import (
    SchemaExtractionError,
    ParsingError,
    TableParsingError,
    InsertParsingError,
    UnsupportedDialectError,
    ConfigurationError,
    SourceReadError,
    handle_exception,
)

__all__ = [
    # models
    "Column",
    "Entity",
    "ForeignKey",
    "ParseReport",
    "ResultStatus",
    "Row",
    "Statement",
    "StatementKind",
    "StatementResult",

    # exceptions
    "SchemaExtractionError",
    "ParsingError",
    "TableParsingError",
    "InsertParsingError",
    "UnsupportedDialectError",
    "ConfigurationError",
    "SourceReadError",
    "handle_exception",
]
