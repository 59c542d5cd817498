"""Tests for statement splitting and classification."""

from __future__ import annotations

import pytest

from sqlschema.core.models import StatementKind
from sqlschema.parser.splitter import StatementSplitter, classify_statement, split_statements


@pytest.fixture
def splitter():
    return StatementSplitter()


class TestSplitting:
    def test_statements_are_split_on_delimiter(self, splitter):
        statements = splitter.split("CREATE TABLE a(id INT);\nINSERT INTO a VALUES (1);\n")
        assert [s.text for s in statements] == [
            "CREATE TABLE a(id INT)",
            "INSERT INTO a VALUES (1)",
        ]
        assert [s.index for s in statements] == [0, 1]

    def test_multiline_statement_keeps_line_breaks(self, splitter):
        statements = splitter.split("CREATE TABLE a(\n  id INT,\n  name TEXT\n);")
        assert len(statements) == 1
        assert statements[0].text == "CREATE TABLE a(\nid INT,\nname TEXT\n)"

    def test_comment_lines_are_dropped(self, splitter):
        script = "-- header\nCREATE TABLE a(\n-- inline note\nid INT\n--\n);"
        statements = splitter.split(script)
        assert statements[0].text == "CREATE TABLE a(\nid INT\n)"

    def test_dump_style_comment_between_statements(self, splitter):
        statements = splitter.split("--------\nSELECT 1;\n--comment\nSELECT 2;")
        assert [s.text for s in statements] == ["SELECT 1", "SELECT 2"]

    def test_crlf_line_endings(self, splitter):
        statements = splitter.split("SELECT 1;\r\nSELECT 2;\rSELECT 3;")
        assert [s.text for s in statements] == ["SELECT 1", "SELECT 2", "SELECT 3"]

    def test_delimiter_directive(self, splitter):
        script = (
            "DELIMITER $$\n"
            "CREATE TRIGGER t BEFORE INSERT ON a FOR EACH ROW BEGIN SET x = 1; END$$\n"
            "DELIMITER ;\n"
            "SELECT 1;\n"
        )
        statements = splitter.split(script)
        assert len(statements) == 2
        assert statements[0].text.endswith("SET x = 1; END")
        assert statements[0].delimiter == "$$"
        assert statements[1].text == "SELECT 1"
        assert statements[1].delimiter == ";"

    def test_unterminated_tail_is_kept(self, splitter):
        statements = splitter.split("SELECT 1;\nSELECT 2")
        assert [s.text for s in statements] == ["SELECT 1", "SELECT 2"]

    def test_unclosed_statement_does_not_discard_previous(self, splitter):
        statements = splitter.split("CREATE TABLE a(id INT);\nCREATE TABLE b(\nid INT")
        assert statements[0].text == "CREATE TABLE a(id INT)"
        assert len(statements) == 2

    def test_empty_statements_are_skipped(self, splitter):
        assert [s.text for s in splitter.split(";\n;\nSELECT 1;")] == ["SELECT 1"]

    def test_start_line_is_recorded(self, splitter):
        statements = splitter.split("\n\nSELECT 1;\n\nSELECT\n2;")
        assert [s.line for s in statements] == [3, 5]

    def test_splitter_is_reusable(self, splitter):
        splitter.split("DELIMITER //\nSELECT 1//")
        assert [s.text for s in splitter.split("SELECT 2;")] == ["SELECT 2"]

    def test_custom_default_delimiter(self):
        statements = split_statements("SELECT 1 GO\nSELECT 2 GO", delimiter="GO")
        assert [s.text for s in statements] == ["SELECT 1", "SELECT 2"]


class TestClassification:
    @pytest.mark.parametrize("text,kind", [
        ("CREATE TABLE a(id INT)", StatementKind.CREATE_TABLE),
        ("create table if not exists a(id int)", StatementKind.CREATE_TABLE),
        ("CREATE TEMPORARY TABLE a(id INT)", StatementKind.CREATE_TABLE),
        ("INSERT INTO a VALUES (1)", StatementKind.INSERT),
        ("DROP TABLE IF EXISTS a", StatementKind.DROP_TABLE),
        ("CREATE INDEX i ON a(id)", StatementKind.OTHER),
        ("SET NAMES utf8", StatementKind.OTHER),
        ("", StatementKind.OTHER),
    ])
    def test_kinds(self, text, kind):
        assert classify_statement(text) == kind

    def test_accepts_statement_objects(self, splitter):
        statement = splitter.split("INSERT INTO a VALUES (1);")[0]
        assert classify_statement(statement) == StatementKind.INSERT
