"""Tests for report building and export."""

from __future__ import annotations

import json

import pytest

from sqlschema.conversion.converter import DialectConverter
from sqlschema.core.exceptions import SourceReadError
from sqlschema.parser.schema_parser import parse_script
from sqlschema.report import Reporter


@pytest.fixture
def parse_report(shop_script):
    return parse_script(shop_script + "CREATE TABLE broken (x GEOMETRY);\n")


@pytest.fixture
def reporter():
    return Reporter({"include_rows": True})


class TestBuildReport:
    def test_summary(self, reporter, parse_report):
        summary = reporter.build_report(parse_report, source="shop.sql")["summary"]
        assert summary == {
            "tables": 2,
            "columns": 4,
            "rows": 2,
            "statements": 6,
            "statements_ok": 3,
            "statements_skipped": 2,
            "statements_failed": 1,
            "max_depth": 2,
        }

    def test_entities_ordered_by_depth(self, reporter, parse_report):
        report = reporter.build_report(parse_report)
        assert [e["name"] for e in report["entities"]] == ["customers", "orders"]

        report = reporter.build_report(parse_report, descending=True)
        assert [e["name"] for e in report["entities"]] == ["orders", "customers"]

    def test_sections(self, reporter, parse_report):
        report = reporter.build_report(parse_report, source="shop.sql")
        assert report["metadata"]["source"] == "shop.sql"
        assert report["data"]["orders"][0] == {"id": 1, "customer_id": 1}
        assert report["errors"][0]["code"] == "TABLE_PARSING_ERROR"
        assert set(report["performance"]) == {"split_time", "parse_time", "depth_time", "total_time"}
        assert "ddl" not in report

    def test_rows_excluded_by_default(self, parse_report):
        assert "data" not in Reporter().build_report(parse_report)

    def test_ddl_section(self, reporter, parse_report):
        ddl = DialectConverter().translate_report(parse_report, "sqlite")
        report = reporter.build_report(parse_report, ddl=ddl, dialect="sqlite")
        assert report["ddl"]["dialect"] == "sqlite"
        assert "CREATE TABLE IF NOT EXISTS orders (" in report["ddl"]["sql"]

    def test_metadata_overrides(self, reporter, parse_report):
        report = reporter.build_report(parse_report, metadata_overrides={"tool": "custom"})
        assert report["metadata"]["tool"] == "custom"

    def test_error_report(self, reporter):
        error = SourceReadError("нет файла", file_path="x.sql", operation="read").to_dict()
        report = reporter.build_error_report(error, source="x.sql")
        assert report["metadata"]["status"] == "ERROR"
        assert report["errors"] == [error]
        assert report["summary"]["tables"] == 0


class TestExport:
    def test_json(self, reporter, parse_report):
        report = reporter.build_report(parse_report)
        assert json.loads(reporter.export(report, format="json"))["summary"]["tables"] == 2

    def test_text(self, reporter, parse_report):
        out = reporter.export(reporter.build_report(parse_report), format="text")
        assert "[1] customers (строк: 0)" in out
        assert "[2] orders (строк: 2)" in out
        assert "id INTEGER PK AUTO NOT NULL" in out
        assert "TABLE_PARSING_ERROR" in out

    def test_markdown(self, reporter, parse_report):
        ddl = DialectConverter().translate_report(parse_report, "mysql")
        out = reporter.export(
            reporter.build_report(parse_report, ddl=ddl, dialect="mysql"),
            format="markdown",
        )
        assert "### orders (глубина 2)" in out
        assert "| id | `INTEGER` | нет | PK, AI |  |" in out
        assert "```sql" in out

    def test_output_file(self, reporter, parse_report, tmp_path):
        target = tmp_path / "out" / "report.json"
        result = reporter.export(reporter.build_report(parse_report), format="json", output_file=target)
        assert result == ""
        assert json.loads(target.read_text(encoding="utf-8"))["summary"]["rows"] == 2

    def test_unknown_format(self, reporter, parse_report):
        with pytest.raises(ValueError):
            reporter.export(reporter.build_report(parse_report), format="xml")
