"""
report.py

Построение и экспорт отчёта об извлечённой схеме.

Отчёт: словарь с разделами metadata / summary / entities / data /
statements / errors / performance (и ddl, если запрошен перевод в диалект).
Экспорт: json / text / markdown.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import json

from sqlschema.core.constants import TOOL_NAME, VERSION
from sqlschema.core.models import ParseReport, ResultStatus
from sqlschema.graph.depth import sort_by_depth


class Reporter:
    """
    Построитель и экспортёр отчётов.

    Таблицы в отчёте упорядочены по глубине (стабильно), т.е. в порядке,
    пригодном для создания: сначала таблицы без зависимостей.
    """

    FORMATS = ("json", "text", "markdown")

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config if config is not None else {}
        self.tool_name = self.config.get("tool_name", TOOL_NAME)
        self.version = self.config.get("version", VERSION)
        self.include_rows = bool(self.config.get("include_rows", False))

    # ---------------------------------------------------------------------
    # 1) BUILD
    # ---------------------------------------------------------------------

    def build_report(
            self,
            parse_report: ParseReport,
            *,
            source: Optional[str] = None,
            ddl: Optional[str] = None,
            dialect: Optional[str] = None,
            descending: bool = False,
            metadata_overrides: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Формирует единый отчёт-словарь из ParseReport.

        Args:
            parse_report: результат SchemaParser / SchemaLoader
            source: имя входного файла
            ddl: DDL в целевом диалекте (если был перевод)
            dialect: целевой диалект
            descending: порядок сортировки по глубине
        """
        ordered = sort_by_depth(parse_report.entities, descending=descending)

        statuses = {s.value: 0 for s in ResultStatus}
        for r in parse_report.results:
            statuses[r.status.value] += 1

        metadata = {
            "timestamp": datetime.now().isoformat(),
            "version": self.version,
            "tool": self.tool_name,
            "source": source,
        }
        if metadata_overrides:
            metadata.update(metadata_overrides)

        report: Dict[str, Any] = {
            "metadata": metadata,
            "summary": {
                "tables": len(parse_report.entities),
                "columns": sum(len(e.columns) for e in parse_report.entities),
                "rows": sum(len(v) for v in parse_report.data.values()),
                "statements": len(parse_report.results),
                "statements_ok": statuses[ResultStatus.OK.value],
                "statements_skipped": statuses[ResultStatus.SKIPPED.value],
                "statements_failed": statuses[ResultStatus.FAILED.value],
                "max_depth": max((e.depth for e in parse_report.entities), default=0),
            },
            "entities": [e.to_dict() for e in ordered],
            "statements": [r.to_dict() for r in parse_report.results],
            "errors": parse_report.errors,
            "performance": {k: v for k, v in parse_report.stats.items() if k.endswith("_time")},
        }

        if self.include_rows:
            report["data"] = {k: list(v) for k, v in parse_report.data.items()}

        if ddl is not None:
            report["ddl"] = {"dialect": dialect, "sql": ddl}

        return report

    def build_error_report(self, error: Dict[str, Any], *, source: Optional[str] = None) -> Dict[str, Any]:
        """Отчёт о фатальной ошибке (источник не прочитан, неверная конфигурация)."""
        return {
            "metadata": {
                "timestamp": datetime.now().isoformat(),
                "status": "ERROR",
                "version": self.version,
                "tool": self.tool_name,
                "source": source,
            },
            "summary": {"tables": 0, "columns": 0, "rows": 0, "statements": 0,
                        "statements_ok": 0, "statements_skipped": 0, "statements_failed": 0,
                        "max_depth": 0},
            "entities": [],
            "statements": [],
            "errors": [error],
            "performance": {},
        }

    # ---------------------------------------------------------------------
    # 2) EXPORT
    # ---------------------------------------------------------------------

    def export(
            self,
            report: Dict[str, Any],
            *,
            format: str = "json",
            output_file: Optional[Union[str, Path]] = None
    ) -> str:
        """
        Экспорт отчёта в заданном формате.

        Args:
            report: отчёт
            format: json | text | markdown
            output_file: если задан, сохраняет в файл и возвращает пустую строку
        """
        fmt = (format or "json").lower().strip()

        if fmt == "json":
            output = self._export_json(report)
        elif fmt == "text":
            output = self._export_text(report)
        elif fmt == "markdown":
            output = self._export_markdown(report)
        else:
            raise ValueError(f"Неподдерживаемый формат: {format}. Доступные: {', '.join(self.FORMATS)}")

        if output_file:
            path = Path(output_file)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(output, encoding="utf-8")
            return ""
        return output

    def _export_json(self, report: Dict[str, Any]) -> str:
        return json.dumps(report, indent=2, ensure_ascii=False, default=str)

    def _export_text(self, report: Dict[str, Any]) -> str:
        summary = report.get("summary", {}) or {}
        metadata = report.get("metadata", {}) or {}

        out: List[str] = []
        out.append("=" * 70)
        out.append("ОТЧЁТ ОБ ИЗВЛЕЧЁННОЙ СХЕМЕ")
        out.append("=" * 70)
        out.append("")
        out.append("МЕТАДАННЫЕ:")
        out.append(f"  Время анализа: {metadata.get('timestamp', 'N/A')}")
        out.append(f"  Версия инструмента: {metadata.get('version', 'N/A')}")
        out.append(f"  Источник: {metadata.get('source') or 'N/A'}")
        out.append("")
        out.append("СВОДКА:")
        out.append(f"  Таблиц: {summary.get('tables', 0)}")
        out.append(f"  Колонок: {summary.get('columns', 0)}")
        out.append(f"  Строк данных: {summary.get('rows', 0)}")
        out.append(
            f"  Операторов: {summary.get('statements', 0)} "
            f"(ok: {summary.get('statements_ok', 0)}, "
            f"пропущено: {summary.get('statements_skipped', 0)}, "
            f"ошибок: {summary.get('statements_failed', 0)})"
        )
        out.append("")

        entities = report.get("entities", [])
        if not entities:
            out.append("ТАБЛИЦ НЕ НАЙДЕНО")
        else:
            out.append("ТАБЛИЦЫ (по глубине):")
            for e in entities:
                out.append(f"\n  [{e['depth']}] {e['name']} (строк: {e['rows']})")
                for c in e["columns"]:
                    out.append(f"     - {self._format_column(c)}")

        errors = report.get("errors", [])
        if errors:
            out.append("\n" + "=" * 70)
            out.append(f"ОШИБКИ ({len(errors)}):")
            for i, err in enumerate(errors, 1):
                message = err.get("error", "N/A")
                if len(message) > 100:
                    message = message[:97] + "..."
                line = (err.get("details") or {}).get("line")
                where = f" (строка {line})" if line else ""
                out.append(f"  {i}. [{err.get('code', '')}] {message}{where}")

        ddl = report.get("ddl")
        if ddl:
            out.append("\n" + "=" * 70)
            out.append(f"DDL ({ddl.get('dialect')}):")
            out.append(ddl.get("sql", ""))

        perf = report.get("performance", {})
        if perf:
            out.append("\n" + "=" * 70)
            out.append("ПРОИЗВОДИТЕЛЬНОСТЬ:")
            out.append(f"  Общее время: {perf.get('total_time', 0):.4f}с")
            out.append(f"  Разбиение: {perf.get('split_time', 0):.4f}с")
            out.append(f"  Разбор: {perf.get('parse_time', 0):.4f}с")
            out.append(f"  Глубина: {perf.get('depth_time', 0):.4f}с")

        out.append("\n" + "=" * 70)
        return "\n".join(out)

    def _export_markdown(self, report: Dict[str, Any]) -> str:
        """Экспорт в Markdown формат."""
        summary = report.get("summary", {}) or {}
        metadata = report.get("metadata", {}) or {}

        out: List[str] = []
        out.append("# Отчёт об извлечённой схеме")
        out.append("")

        out.append("## Метаданные")
        out.append(f"- **Время анализа:** {metadata.get('timestamp', 'N/A')}")
        out.append(f"- **Версия инструмента:** {metadata.get('version', 'N/A')}")
        out.append(f"- **Источник:** {metadata.get('source') or 'N/A'}")
        out.append("")

        out.append("## Сводка")
        out.append(f"- **Таблиц:** {summary.get('tables', 0)}")
        out.append(f"- **Строк данных:** {summary.get('rows', 0)}")
        out.append(f"- **Ошибок разбора:** {summary.get('statements_failed', 0)}")
        out.append("")

        out.append("## Таблицы")
        entities = report.get("entities", [])
        if not entities:
            out.append("Таблиц не найдено.")
        for e in entities:
            out.append(f"### {e['name']} (глубина {e['depth']})")
            out.append("")
            out.append("| Колонка | Тип | NULL | Ключ | По умолчанию |")
            out.append("|---|---|---|---|---|")
            for c in e["columns"]:
                key = "PK" + (", AI" if c["auto_increment"] else "") if c["primary_key"] else ""
                default = "" if c["default"] is None else f"`{c['default']}`"
                out.append(
                    f"| {c['name']} | `{self._format_type(c)}` | "
                    f"{'да' if c['nullable'] else 'нет'} | {key} | {default} |"
                )
            out.append("")

        errors = report.get("errors", [])
        if errors:
            out.append("## Ошибки")
            for i, err in enumerate(errors, 1):
                out.append(f"{i}. **{err.get('code', '')}**: {err.get('error', 'N/A')}")
                for key, value in (err.get("details") or {}).items():
                    out.append(f"   - {key}: `{value}`")
            out.append("")

        ddl = report.get("ddl")
        if ddl:
            out.append(f"## DDL ({ddl.get('dialect')})")
            out.append("```sql")
            out.append(ddl.get("sql", ""))
            out.append("```")
            out.append("")

        return "\n".join(out)

    # ---------------------------------------------------------------------
    # 3) HELPERS
    # ---------------------------------------------------------------------

    @staticmethod
    def _format_type(column: Dict[str, Any]) -> str:
        if column.get("enum_values") is not None and column["base_type"].upper() in ("ENUM", "SET"):
            return f"{column['base_type']}({','.join(column['enum_values'])})"
        if column.get("length"):
            return f"{column['base_type']}({column['length']})"
        return column["base_type"]

    def _format_column(self, column: Dict[str, Any]) -> str:
        parts = [column["name"], self._format_type(column)]
        if column["primary_key"]:
            parts.append("PK")
        if column["auto_increment"]:
            parts.append("AUTO")
        if not column["nullable"]:
            parts.append("NOT NULL")
        if column["default"] is not None:
            parts.append(f"DEFAULT {column['default']}")
        return " ".join(parts)
