"""
Константы извлечения схемы: белый список типов, таблицы диалектов,
сигнатура файла SQLite.

Все таблицы неизменяемы (кортежи/frozenset), инициализируются один раз
при импорте и во время работы не меняются.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Tuple

VERSION = "1.0.0"
TOOL_NAME = "SQL Schema Extractor"

# "SQLite format 3\0"
SQLITE_MAGIC: bytes = bytes([
    0x53, 0x51, 0x4C, 0x69,
    0x74, 0x65, 0x20, 0x66,
    0x6F, 0x72, 0x6D, 0x61,
    0x74, 0x20, 0x33, 0x00,
])

DEFAULT_DELIMITER = ";"

# Порядок: от более специфичных к общим (BIGSERIAL раньше SERIAL,
# VARCHAR раньше TEXT и т.д.)
TYPE_WHITELIST: Tuple[str, ...] = (
    "TIMESTAMPTZ", "TIMESTAMP",
    "SERIAL4", "SERIAL8", "BIGSERIAL", "SERIAL",
    "INT2", "INT4", "INT8",
    "TINYINT", "SMALLINT", "MEDIUMINT", "BIGINT",
    "LONGTEXT", "MEDIUMTEXT", "TINYTEXT", "TEXT",
    "NVARCHAR", "VARCHAR",
    "ENUM", "SET",
    "NUMERIC", "DECIMAL",
    "CHAR",
    "REAL", "FLOAT",
    "INTEGER", "INT",
    "DATETIME2", "DATETIME", "DATE",
    "DOUBLE",
    "BOOLEAN", "BOOL",
    "TIME",
    "UUID", "MONEY", "BLOB", "BIT",
    "JSONB", "JSON",
)

TYPE_WHITELIST_SET = frozenset(TYPE_WHITELIST)

SERIAL_TYPES = frozenset({"SERIAL", "SERIAL4", "SERIAL8", "BIGSERIAL", "SMALLSERIAL"})
AUTO_INCREMENT_MARKERS = frozenset({"AUTO_INCREMENT", "AUTOINCREMENT", "IDENTITY"})

# типы, у которых в скобках список литералов / точность
VALUE_LIST_TYPES = frozenset({"ENUM", "SET"})
PRECISION_TYPES = frozenset({"NUMERIC", "DECIMAL"})

BOOLEAN_TYPES = frozenset({"BOOLEAN", "BOOL", "BIT"})
REAL_TYPES = frozenset({"FLOAT", "DOUBLE", "REAL", "DECIMAL", "NUMERIC"})

# Многословные типы сворачиваются до токенизации
TYPE_ALIASES: Tuple[Tuple[str, str], ...] = (
    (r"\btimestamp\s+with\s+time\s+zone\b", "TIMESTAMPTZ"),
    (r"\btimestamp\s+without\s+time\s+zone\b", "TIMESTAMP"),
    (r"\bcharacter\s+varying\b", "VARCHAR"),
    (r"\bdouble\s+precision\b", "DOUBLE"),
    (r"\[?\bn?varchar\]?\s*\(\s*max\s*\)", "TEXT"),
    (r'\s+collate\s+pg_catalog\."default"', ""),
)

# ---------------------------------------------------------------------------
# Диалекты
# ---------------------------------------------------------------------------

MYSQL = "mysql"
POSTGRESQL = "postgresql"
SQLITE = "sqlite"
SQLSERVER = "sqlserver"

SUPPORTED_DIALECTS: Tuple[str, ...] = (MYSQL, POSTGRESQL, SQLITE, SQLSERVER)

DIALECT_ALIASES: Mapping[str, str] = MappingProxyType({
    "mysql": MYSQL,
    "mariadb": MYSQL,
    "postgresql": POSTGRESQL,
    "postgres": POSTGRESQL,
    "pgsql": POSTGRESQL,
    "sqlite": SQLITE,
    "sqlite3": SQLITE,
    "sqlserver": SQLSERVER,
    "sql server": SQLSERVER,
    "mssql": SQLSERVER,
})

# Упорядоченные таблицы "префикс исходного типа -> тип диалекта".
# Первый совпавший префикс выигрывает, поэтому INTEGER стоит раньше INT,
# DATETIME раньше DATE, CHARACTER VARYING раньше CHAR.
SQLITE_TYPE_MAP: Tuple[Tuple[str, str], ...] = (
    ("integer", "INTEGER"),
    ("int", "INTEGER"),
    ("bit", "BOOLEAN"),
    ("tinyint", "INTEGER"),
    ("smallint", "INTEGER"),
    ("mediumint", "INTEGER"),
    ("bigint", "INTEGER"),
    ("bigserial", "INTEGER"),
    ("serial", "INTEGER"),
    ("real", "REAL"),
    ("float", "REAL"),
    ("double", "REAL"),
    ("decimal", "REAL"),
    ("numeric", "REAL"),
    ("money", "REAL"),
    ("nvarchar", "NVARCHAR"),
    ("varchar", "NVARCHAR"),
    ("character varying", "NVARCHAR"),
    ("char", "NVARCHAR"),
    ("tinytext", "TEXT"),
    ("mediumtext", "TEXT"),
    ("longtext", "TEXT"),
    ("text", "TEXT"),
    ("datetime2", "TIMESTAMP"),
    ("datetime", "DATETIME"),
    ("timestamptz", "TIMESTAMP"),
    ("timestamp", "TIMESTAMP"),
    ("date", "DATE"),
    ("time", "TIME"),
    ("year", "INTEGER"),
    ("boolean", "INTEGER"),
    ("jsonb", "TEXT"),
    ("json", "TEXT"),
    ("uuid", "TEXT"),
    ("blob", "BLOB"),
)

MYSQL_TYPE_MAP: Tuple[Tuple[str, str], ...] = (
    ("bigint", "BIGINT"),
    ("bigserial", "BIGINT"),
    ("serial", "BIGINT"),
    ("mediumint", "MEDIUMINT"),
    ("smallint", "SMALLINT"),
    ("integer", "INT"),
    ("double", "DOUBLE"),
    ("float", "FLOAT"),
    ("real", "DOUBLE"),
    ("decimal", "DECIMAL"),
    ("numeric", "NUMERIC"),
    ("money", "DECIMAL"),
    ("tinytext", "TINYTEXT"),
    ("mediumtext", "MEDIUMTEXT"),
    ("longtext", "LONGTEXT"),
    ("text", "TEXT"),
    ("nvarchar", "VARCHAR"),
    ("varchar", "VARCHAR"),
    ("character varying", "VARCHAR"),
    ("tinyint", "TINYINT"),
    ("boolean", "TINYINT(1)"),
    ("bit", "TINYINT(1)"),
    ("int2", "SMALLINT"),
    ("int8", "BIGINT"),
    ("int", "INT"),
    ("datetime2", "TIMESTAMP"),
    ("datetime", "DATETIME"),
    ("date", "DATE"),
    ("timestamptz", "TIMESTAMP"),
    ("timestamp", "TIMESTAMP"),
    ("jsonb", "JSON"),
    ("json", "JSON"),
    ("uuid", "CHAR(36)"),
    ("enum", "ENUM"),
    ("set", "SET"),
    ("char", "CHAR"),
)

POSTGRESQL_TYPE_MAP: Tuple[Tuple[str, str], ...] = (
    ("bigint", "BIGINT"),
    ("bigserial", "BIGSERIAL"),
    ("serial", "SERIAL"),
    ("mediumint", "INTEGER"),
    ("smallint", "SMALLINT"),
    ("tinyint", "INTEGER"),
    ("integer", "INTEGER"),
    ("int2", "SMALLINT"),
    ("int8", "BIGINT"),
    ("int", "INTEGER"),
    ("real", "REAL"),
    ("float", "REAL"),
    ("double", "DOUBLE PRECISION"),
    ("decimal", "NUMERIC"),
    ("numeric", "NUMERIC"),
    ("money", "MONEY"),
    ("longtext", "TEXT"),
    ("mediumtext", "TEXT"),
    ("smalltext", "TEXT"),
    ("tinytext", "TEXT"),
    ("text", "TEXT"),
    ("character varying", "CHARACTER VARYING"),
    ("nvarchar", "CHARACTER VARYING"),
    ("varchar", "CHARACTER VARYING"),
    ("char", "CHARACTER"),
    ("boolean", "BOOLEAN"),
    ("bit", "BOOLEAN"),
    ("datetime2", "TIMESTAMP WITH TIME ZONE"),
    ("datetime", "TIMESTAMP WITHOUT TIME ZONE"),
    ("date", "DATE"),
    ("timestamptz", "TIMESTAMP WITH TIME ZONE"),
    ("timestamp", "TIMESTAMP WITH TIME ZONE"),
    ("time", "TIME"),
    ("jsonb", "JSONB"),
    ("json", "JSONB"),
    ("uuid", "UUID"),
    ("blob", "BYTEA"),
)

SQLSERVER_TYPE_MAP: Tuple[Tuple[str, str], ...] = (
    ("bigint", "BIGINT"),
    ("bigserial", "BIGINT"),
    ("serial", "INT"),
    ("smallint", "SMALLINT"),
    ("mediumint", "INT"),
    ("integer", "INT"),
    ("tinyint", "TINYINT"),
    ("int2", "SMALLINT"),
    ("int8", "BIGINT"),
    ("int", "INT"),
    ("double", "FLOAT"),
    ("float", "FLOAT"),
    ("real", "REAL"),
    ("decimal", "DECIMAL"),
    ("numeric", "NUMERIC"),
    ("money", "MONEY"),
    ("tinytext", "NVARCHAR(MAX)"),
    ("mediumtext", "NVARCHAR(MAX)"),
    ("longtext", "NVARCHAR(MAX)"),
    ("text", "NVARCHAR(MAX)"),
    ("nvarchar", "NVARCHAR"),
    ("varchar", "NVARCHAR"),
    ("character varying", "NVARCHAR"),
    ("char", "NCHAR"),
    ("boolean", "BIT"),
    ("bit", "BIT"),
    ("datetime2", "DATETIME2"),
    ("datetime", "DATETIME"),
    ("date", "DATE"),
    ("timestamptz", "DATETIMEOFFSET"),
    ("timestamp", "DATETIME2"),
    ("time", "TIME"),
    ("jsonb", "NVARCHAR(MAX)"),
    ("json", "NVARCHAR(MAX)"),
    ("uuid", "UNIQUEIDENTIFIER"),
    ("blob", "VARBINARY(MAX)"),
)

DIALECT_TYPE_MAPS: Mapping[str, Tuple[Tuple[str, str], ...]] = MappingProxyType({
    MYSQL: MYSQL_TYPE_MAP,
    POSTGRESQL: POSTGRESQL_TYPE_MAP,
    SQLITE: SQLITE_TYPE_MAP,
    SQLSERVER: SQLSERVER_TYPE_MAP,
})

# Тип колонки-булева для каждого диалекта
DIALECT_BOOLEAN_TYPE: Mapping[str, str] = MappingProxyType({
    MYSQL: "TINYINT(1)",
    POSTGRESQL: "BOOLEAN",
    SQLITE: "BOOLEAN",
    SQLSERVER: "BIT",
})

# Диалекты, где булевы значения пишутся как 1/0
NUMERIC_BOOLEAN_DIALECTS = frozenset({SQLITE, SQLSERVER})

# Типы диалекта, к которым дописывается длина "(n)"
DIALECT_LENGTH_TYPES: Mapping[str, frozenset] = MappingProxyType({
    MYSQL: frozenset({"VARCHAR", "CHAR", "TINYINT", "SMALLINT", "MEDIUMINT", "INT", "BIGINT"}),
    POSTGRESQL: frozenset({"CHARACTER VARYING", "CHARACTER"}),
    SQLITE: frozenset({"NVARCHAR"}),
    SQLSERVER: frozenset({"NVARCHAR", "NCHAR"}),
})

# Текстовый тип для ENUM/SET там, где их нет
DIALECT_ENUM_FALLBACK: Mapping[str, str] = MappingProxyType({
    POSTGRESQL: "CHARACTER VARYING",
    SQLITE: "NVARCHAR",
    SQLSERVER: "NVARCHAR",
})

# Упорядоченные шаблоны SQLite-тип -> MySQL-тип для импорта .sqlite файлов
SQLITE_IMPORT_TYPE_PATTERNS: Tuple[Tuple[str, str], ...] = (
    (r"NVARCHAR", "VARCHAR"),
    (r"INT", "BIGINT"),
    (r"(CHAR|CLOB|TEXT)", "TEXT"),
    (r"BLOB", "BLOB"),
    (r"(REAL|FLOA|DOUB)", "DOUBLE"),
    (r"(NUMERIC|DECIMAL)", "DECIMAL"),
    (r"BOOLEAN", "TINYINT"),
    (r"TIMESTAMP", "TIMESTAMP"),
    (r"(DATE|TIME)", "DATETIME"),
)
