"""
parser package: разбор SQL-скриптов (CREATE TABLE / INSERT)
"""

from .tokenizer import SQLTokenizer, Token, TokenType, unescape_literal, unquote_string
from .splitter import StatementSplitter, split_statements, classify_statement
from .table_parser import TableParser, parse_table
from .row_tokenizer import InsertData, RowTokenizer, parse_insert, extract_row_strings, parse_row
from .schema_parser import SchemaParser, parse_script

__all__ = [
    "SQLTokenizer",
    "Token",
    "TokenType",
    "unescape_literal",
    "unquote_string",
    "StatementSplitter",
    "split_statements",
    "classify_statement",
    "TableParser",
    "parse_table",
    "InsertData",
    "RowTokenizer",
    "parse_insert",
    "extract_row_strings",
    "parse_row",
    "SchemaParser",
    "parse_script",
]
