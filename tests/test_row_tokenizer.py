"""Tests for INSERT ... VALUES tokenizing."""

from __future__ import annotations

import pytest

from sqlschema.parser.row_tokenizer import (
    InsertData,
    RowTokenizer,
    extract_row_strings,
    parse_insert,
    parse_row,
)


@pytest.fixture
def tokenizer():
    return RowTokenizer()


class TestRowBoundaries:
    def test_counts_top_level_groups(self):
        assert extract_row_strings("(1,'a'),(2,'b'),(3,'c')") == ["1,'a'", "2,'b'", "3,'c'"]

    def test_parens_and_commas_inside_literals(self):
        values = "(1, 'a (b), c'), (2, \"x)y(\"), (3, 'it''s (ok)')"
        rows = extract_row_strings(values)
        assert len(rows) == 3
        assert rows[0] == "1, 'a (b), c'"
        assert rows[2] == "3, 'it''s (ok)'"

    def test_backslash_escaped_quote(self):
        rows = extract_row_strings(r"(1, 'a\')b'), (2, 'c')")
        assert len(rows) == 2

    def test_nested_function_call_stays_in_row(self):
        rows = extract_row_strings("(1, NOW()), (2, COALESCE(NULL, 3))")
        assert rows == ["1, NOW()", "2, COALESCE(NULL, 3)"]

    def test_unclosed_group_is_dropped(self):
        assert extract_row_strings("(1,2),(3,") == ["1,2"]

    def test_text_outside_groups_is_ignored(self):
        assert extract_row_strings(" (1) , (2) ON DUPLICATE KEY UPDATE x=1") == ["1", "2"]


class TestValueParsing:
    def test_documented_row(self):
        assert parse_row("1, 'Alice, Jr', NULL, TRUE") == [1, "Alice, Jr", None, True]

    @pytest.mark.parametrize("token,expected", [
        ("", ""),
        ("  ", ""),
        ("null", None),
        ("False", False),
        ("42", 42),
        ("-7", -7),
        ("3.25", 3.25),
        ("1e3", 1000.0),
        ("'O''Brien'", "O'Brien"),
        ("'a\\'b'", "a'b"),
        ('"double ""quoted"""', 'double "quoted"'),
        ("NOW()", "NOW()"),
        ("0x1F", "0x1F"),
    ])
    def test_scalar_classification(self, tokenizer, token, expected):
        value = tokenizer.parse_value(token)
        assert value == expected
        assert type(value) is type(expected)

    def test_empty_positions(self, tokenizer):
        assert tokenizer.parse_row("1,,3") == [1, "", 3]

    def test_empty_row(self, tokenizer):
        assert tokenizer.parse_row("") == []


class TestInsertStatements:
    def test_table_columns_and_rows(self, tokenizer):
        data = tokenizer.parse_insert("INSERT INTO `users` (`id`, `name`) VALUES (1, 'a'), (2, 'b')")
        assert data.table == "users"
        assert data.columns == ["id", "name"]
        assert data.to_rows() == [{"id": 1, "name": "a"}, {"id": 2, "name": "b"}]

    @pytest.mark.parametrize("sql,schema,table", [
        ('INSERT INTO "public"."orders" VALUES (1)', "public", "orders"),
        ("INSERT INTO [dbo].[orders] VALUES (1)", "dbo", "orders"),
        ("insert ignore into db.orders values (1)", "db", "orders"),
    ])
    def test_qualified_names(self, tokenizer, sql, schema, table):
        data = tokenizer.parse_insert(sql)
        assert (data.schema, data.table) == (schema, table)
        assert not data.has_columns

    def test_non_matching_statement_returns_none(self, tokenizer):
        assert tokenizer.parse_insert("INSERT INTO t SELECT * FROM s") is None
        assert parse_insert("UPDATE t SET a = 1") is None

    def test_rows_padded_and_truncated(self):
        data = InsertData(table="t", columns=["a", "b"], values=[[1], [1, 2, 3]])
        assert data.to_rows() == [{"a": 1, "b": None}, {"a": 1, "b": 2}]

    def test_positional_rows_zip_against_given_columns(self):
        data = parse_insert("INSERT INTO t VALUES (1, 'x')")
        assert data.values == [[1, "x"]]
        assert data.to_rows(["id", "name"]) == [{"id": 1, "name": "x"}]
