"""Tests for source loading: SQL scripts and SQLite database files."""

from __future__ import annotations

import sqlite3
from contextlib import closing

import pytest

from sqlschema.core.constants import SQLITE_MAGIC
from sqlschema.core.exceptions import SourceReadError
from sqlschema.loader import (
    SchemaLoader,
    looks_like_sqlite,
    sqlite_column_size,
    sqlite_to_mysql_type,
)


@pytest.fixture
def sqlite_file(tmp_path):
    path = tmp_path / "shop.sqlite"
    with closing(sqlite3.connect(str(path))) as conn:
        conn.executescript(
            """
            CREATE TABLE Customers (
                id INTEGER PRIMARY KEY,
                FullName TEXT NOT NULL,
                active BOOLEAN DEFAULT 1,
                avatar BLOB
            );
            CREATE TABLE orders (
                id INTEGER PRIMARY KEY,
                customer_id INTEGER,
                total REAL,
                created_at DATETIME DEFAULT CURRENT_TIMESTAMP
            );
            CREATE TABLE LineItems (
                OrderId INTEGER NOT NULL,
                sku NVARCHAR(20) NOT NULL,
                PRIMARY KEY (OrderId, sku)
            );
            INSERT INTO Customers VALUES (1, 'Ann', 1, x'0102');
            INSERT INTO orders VALUES (10, 1, 9.5, '2024-01-01 00:00:00');
            """
        )
        conn.commit()
    return path


@pytest.fixture
def loader():
    return SchemaLoader()


class TestTypeMapping:
    @pytest.mark.parametrize(
        "sqlite_type, expected",
        [
            (None, "TEXT"),
            ("", "TEXT"),
            ("INTEGER", "BIGINT"),
            ("nvarchar(20)", "VARCHAR"),
            ("VARCHAR(10)", "TEXT"),
            ("CLOB", "TEXT"),
            ("BLOB", "BLOB"),
            ("DOUBLE PRECISION", "DOUBLE"),
            ("FLOAT", "DOUBLE"),
            ("DECIMAL(10,2)", "DECIMAL"),
            ("BOOLEAN", "TINYINT"),
            ("TIMESTAMP", "TIMESTAMP"),
            ("DATE", "DATETIME"),
            ("GEOMETRY", "GEOMETRY"),
        ],
    )
    def test_sqlite_to_mysql_type(self, sqlite_type, expected):
        assert sqlite_to_mysql_type(sqlite_type) == expected

    def test_column_size(self):
        assert sqlite_column_size("NVARCHAR(20)") == "20"
        assert sqlite_column_size("boolean") == "1"
        assert sqlite_column_size("TEXT") is None
        assert sqlite_column_size(None) is None

    def test_magic(self):
        assert looks_like_sqlite(SQLITE_MAGIC + b"\x00" * 84)
        assert not looks_like_sqlite(b"CREATE TABLE t (a INT);")
        assert not looks_like_sqlite(b"")


class TestSqliteImport:
    def test_tables_are_snakeized(self, loader, sqlite_file):
        report = loader.load_file(sqlite_file)
        assert [e.name for e in report.entities] == ["customers", "orders", "line_items"]

    def test_columns(self, loader, sqlite_file):
        customers = loader.load_file(sqlite_file).get_entity("customers")
        id_col, name_col, active_col, avatar_col = customers.columns

        assert (id_col.base_type, id_col.length) == ("BIGINT", "20")
        assert id_col.primary_key and id_col.auto_increment
        assert id_col.nullable is False
        assert customers.primary_key == "id"

        assert name_col.name == "full_name"
        assert name_col.base_type == "TEXT"
        assert name_col.nullable is False

        assert (active_col.base_type, active_col.length) == ("TINYINT", "1")
        assert active_col.default == "TRUE"
        assert active_col.nullable is True

        assert avatar_col.base_type == "BLOB"

    def test_datetime_default(self, loader, sqlite_file):
        orders = loader.load_file(sqlite_file).get_entity("orders")
        created = orders.get_column("created_at")
        assert created.base_type == "DATETIME"
        assert created.default == "CURRENT_TIMESTAMP"
        assert orders.get_column("total").base_type == "DOUBLE"

    def test_composite_key_has_no_auto_increment(self, loader, sqlite_file):
        items = loader.load_file(sqlite_file).get_entity("line_items")
        assert items.primary_key == ["order_id", "sku"]
        assert not any(c.auto_increment for c in items.columns)
        assert items.get_column("sku").length == "20"

    def test_rows(self, loader, sqlite_file):
        report = loader.load_file(sqlite_file)
        assert report.data["customers"] == [
            {"id": 1, "full_name": "Ann", "active": 1, "avatar": "0102"},
        ]
        assert report.data["orders"] == [
            {"id": 10, "customer_id": 1, "total": 9.5, "created_at": "2024-01-01 00:00:00"},
        ]
        assert "line_items" not in report.data

    def test_depths(self, loader, sqlite_file):
        report = loader.load_file(sqlite_file)
        depths = {e.name: e.depth for e in report.entities}
        assert depths == {"customers": 1, "orders": 2, "line_items": 3}

    def test_reverse(self, loader, sqlite_file):
        report = loader.load_file(sqlite_file, reverse=True)
        assert {e.name: e.depth for e in report.entities}["line_items"] == 0

    def test_stats(self, loader, sqlite_file):
        report = loader.load_file(sqlite_file)
        assert report.stats["tables"] == 3
        assert report.stats["failed"] == 0
        assert report.results == []

    def test_load_bytes(self, loader, sqlite_file):
        report = loader.load_bytes(sqlite_file.read_bytes(), name="shop.sqlite")
        assert len(report.entities) == 3

    def test_broken_database(self, loader):
        with pytest.raises(SourceReadError) as exc:
            loader.load_bytes(SQLITE_MAGIC + b"\x00" * 200)
        assert exc.value.details["operation"] == "sqlite_import"


class TestScripts:
    def test_script_file(self, loader, tmp_path, shop_script):
        path = tmp_path / "shop.sql"
        path.write_text(shop_script, encoding="utf-8")
        report = loader.load_file(path)
        assert [e.name for e in report.entities] == ["customers", "orders"]

    def test_byte_order_mark_is_dropped(self, loader):
        report = loader.load_bytes("\ufeffCREATE TABLE t (id INT);".encode("utf-8"))
        assert [e.name for e in report.entities] == ["t"]

    def test_load_script(self, loader):
        assert loader.load_script("CREATE TABLE t (id INT);").entities[0].name == "t"

    def test_missing_file(self, loader, tmp_path):
        with pytest.raises(SourceReadError) as exc:
            loader.load_file(tmp_path / "missing.sql")
        assert exc.value.code == "SOURCE_READ_ERROR"
        assert exc.value.details["operation"] == "read"

    def test_not_utf8(self, loader):
        with pytest.raises(SourceReadError) as exc:
            loader.load_bytes(b"\xff\xfe\xfa bad", name="dump.sql")
        assert exc.value.details["operation"] == "decode"
        assert exc.value.details["file_path"] == "dump.sql"
