from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

Scalar = Union[None, bool, int, float, str]
Row = Dict[str, Scalar]
PrimaryKey = Union[None, str, List[str]]


class StatementKind(str, Enum):
    CREATE_TABLE = "CREATE_TABLE"
    INSERT = "INSERT"
    DROP_TABLE = "DROP_TABLE"
    OTHER = "OTHER"


class ResultStatus(str, Enum):
    OK = "ok"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class Statement:
    """Один логический оператор скрипта (без завершающего разделителя)."""
    text: str
    delimiter: str = ";"
    index: int = 0
    line: int = 1

    def head(self, size: int = 80) -> str:
        s = " ".join(self.text.split())
        return s if len(s) <= size else s[:size - 3] + "..."


@dataclass
class ForeignKey:
    columns: List[str]
    ref_table: str
    ref_columns: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "columns": list(self.columns),
            "ref_table": self.ref_table,
            "ref_columns": list(self.ref_columns),
        }


@dataclass
class Column:
    name: str
    base_type: str
    length: Optional[str] = None
    nullable: bool = True
    default: Optional[str] = None
    primary_key: bool = False
    auto_increment: bool = False
    enum_values: Optional[List[str]] = None
    comment: Optional[str] = None

    def __post_init__(self):
        # ключ никогда не бывает NULL
        if self.primary_key:
            self.nullable = False

    def mark_primary_key(self) -> None:
        self.primary_key = True
        self.nullable = False

    @property
    def full_type(self) -> str:
        if self.enum_values is not None and self.base_type.upper() in ("ENUM", "SET"):
            literals = ",".join(f"'{v}'" for v in self.enum_values)
            return f"{self.base_type}({literals})"
        if self.length:
            return f"{self.base_type}({self.length})"
        return self.base_type

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "base_type": self.base_type,
            "length": self.length,
            "nullable": self.nullable,
            "default": self.default,
            "primary_key": self.primary_key,
            "auto_increment": self.auto_increment,
            "enum_values": list(self.enum_values) if self.enum_values is not None else None,
            "comment": self.comment,
        }


@dataclass
class Entity:
    """
    Таблица схемы.

    depth заполняется только калькулятором глубины, rows только
    проходом по INSERT.
    """
    name: str
    index: int = 0
    columns: List[Column] = field(default_factory=list)
    primary_key: PrimaryKey = None
    depth: int = 0
    rows: List[Row] = field(default_factory=list)
    schema: Optional[str] = None
    foreign_keys: List[ForeignKey] = field(default_factory=list)

    def add_column(self, column: Column) -> bool:
        """Добавляет колонку; повторное имя игнорируется (первая побеждает)."""
        if self.get_column(column.name) is not None:
            return False
        self.columns.append(column)
        return True

    def get_column(self, name: str) -> Optional[Column]:
        key = name.lower()
        for c in self.columns:
            if c.name.lower() == key:
                return c
        return None

    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    def primary_key_columns(self) -> List[Column]:
        return [c for c in self.columns if c.primary_key]

    def has_composite_key(self) -> bool:
        return len(self.primary_key_columns()) > 1

    def set_rows(self, rows: List[Row]) -> None:
        self.rows = list(rows)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "schema": self.schema,
            "index": self.index,
            "depth": self.depth,
            "primary_key": self.primary_key,
            "columns": [c.to_dict() for c in self.columns],
            "foreign_keys": [fk.to_dict() for fk in self.foreign_keys],
            "rows": len(self.rows),
        }


@dataclass
class StatementResult:
    index: int
    kind: StatementKind
    status: ResultStatus
    table: Optional[str] = None
    rows: int = 0
    error: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "kind": self.kind.value,
            "status": self.status.value,
            "table": self.table,
            "rows": self.rows,
            "error": self.error,
        }


@dataclass
class ParseReport:
    entities: List[Entity] = field(default_factory=list)
    data: Dict[str, List[Row]] = field(default_factory=dict)
    results: List[StatementResult] = field(default_factory=list)
    stats: Dict[str, float] = field(default_factory=dict)

    @property
    def errors(self) -> List[Dict[str, Any]]:
        return [r.error for r in self.results if r.status == ResultStatus.FAILED and r.error]

    @property
    def failed(self) -> List[StatementResult]:
        return [r for r in self.results if r.status == ResultStatus.FAILED]

    def get_entity(self, name: str) -> Optional[Entity]:
        key = name.lower()
        for e in self.entities:
            if e.name.lower() == key:
                return e
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entities": [e.to_dict() for e in self.entities],
            "data": {k: list(v) for k, v in self.data.items()},
            "results": [r.to_dict() for r in self.results],
            "errors": self.errors,
            "stats": dict(self.stats),
        }
