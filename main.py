"""
main.py

Точка входа в систему извлечения схемы из SQL-скриптов и файлов SQLite.

Запуск:
    python main.py --input dump.sql
    python main.py --input dump.sql --dialect postgresql --format text
    python main.py --input app.sqlite --reverse --format markdown --out report.md
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from sqlschema.config import load_config
from sqlschema.conversion import DialectConverter
from sqlschema.core.exceptions import SchemaExtractionError, handle_exception
from sqlschema.loader import SchemaLoader
from sqlschema.report import Reporter
from sqlschema.utils.logger import setup_logger


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="SQL Schema Extractor: таблицы, колонки, строки данных и глубина зависимостей"
    )

    parser.add_argument(
        "--input",
        required=True,
        help="SQL-скрипт или файл базы SQLite",
    )

    parser.add_argument(
        "--dialect",
        help="Перевести CREATE TABLE в диалект (mysql, postgresql, sqlite, sqlserver)",
    )

    parser.add_argument(
        "--reverse",
        action="store_true",
        help="Обратная глубина: таблицы без зависимостей получают наибольшее значение",
    )

    parser.add_argument(
        "--format",
        choices=list(Reporter.FORMATS),
        help="Формат отчёта (по умолчанию: из конфигурации, json)",
    )

    parser.add_argument(
        "--config",
        help="YAML-файл конфигурации",
    )

    parser.add_argument(
        "--out",
        help="Файл для сохранения отчёта (если не указан, вывод в stdout)",
    )

    return parser.parse_args()


def main() -> int:
    args = parse_args()

    # --- Конфигурация ---
    try:
        config = load_config(args.config)
    except SchemaExtractionError as e:
        print(f"Ошибка конфигурации: {e}", file=sys.stderr)
        return 2

    logger = setup_logger("sqlschema", config)
    reporter = Reporter({**config["report"]})
    fmt = args.format or config["report"].get("format", "json")
    reverse = True if args.reverse else None

    # --- Разбор ---
    try:
        parse_report = SchemaLoader(config).load_file(args.input, reverse=reverse)
        ddl = None
        dialect = None
        if args.dialect:
            dialect = args.dialect
            ddl = DialectConverter(config["converter"]).translate_report(parse_report, dialect)
    except SchemaExtractionError as e:
        logger.error("Критическая ошибка: %s", e)
        report = reporter.build_error_report(handle_exception(e), source=args.input)
        output = reporter.export(report, format=fmt, output_file=args.out)
        if output:
            print(output)
        return 1

    # --- Отчёт ---
    report = reporter.build_report(
        parse_report,
        source=Path(args.input).name,
        ddl=ddl,
        dialect=dialect,
        descending=bool(args.reverse or config["depth"].get("reverse")),
    )
    output = reporter.export(report, format=fmt, output_file=args.out)

    if output:
        print(output)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
