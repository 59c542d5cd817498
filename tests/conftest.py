"""Shared fixtures for the sqlschema test suite."""

from __future__ import annotations

import pytest


SHOP_SCRIPT = """\
-- shop dump
DROP TABLE IF EXISTS orders;
DROP TABLE IF EXISTS customers;

CREATE TABLE customers(
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  name TEXT NOT NULL
);

CREATE TABLE orders(
  id INTEGER PRIMARY KEY,
  customer_id INTEGER
);

INSERT INTO orders (id, customer_id) VALUES (1,1),(2,1);
"""


@pytest.fixture
def shop_script() -> str:
    return SHOP_SCRIPT
