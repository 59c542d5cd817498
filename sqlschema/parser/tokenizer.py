from __future__ import annotations

import re
from bisect import bisect_right
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from sqlschema.core.constants import TYPE_WHITELIST_SET


class TokenType(str, Enum):
    KEYWORD = "KEYWORD"
    IDENTIFIER = "IDENTIFIER"
    QUOTED_IDENTIFIER = "QUOTED_IDENTIFIER"
    STRING = "STRING"
    NUMBER = "NUMBER"

    TYPE = "TYPE"

    OPERATOR = "OPERATOR"
    COMMA = "COMMA"
    DOT = "DOT"
    SEMICOLON = "SEMICOLON"
    LPAREN = "LPAREN"
    RPAREN = "RPAREN"

    WHITESPACE = "WHITESPACE"
    COMMENT = "COMMENT"

    EOF = "EOF"


@dataclass
class Token:
    type: TokenType
    value: str
    line: int
    column: int
    position: int

    @property
    def end(self) -> int:
        return self.position + len(self.value)

    def upper(self) -> str:
        return self.value.upper()

    def is_identifier(self) -> bool:
        return self.type in (TokenType.IDENTIFIER, TokenType.QUOTED_IDENTIFIER)


class SQLTokenizer:
    """
    Лексер для тел CREATE TABLE и строк INSERT. У каждого токена есть
    строка, колонка и смещение в исходном тексте.

    Классы токенов: идентификатор (в т.ч. `x`, "x", [x]), ключевое слово,
    тип из белого списка, скобки, запятая, строковый литерал, число, оператор.
    """

    KEYWORDS = {
        "CREATE", "TABLE", "TEMPORARY", "IF", "NOT", "EXISTS", "DROP",
        "CONSTRAINT", "PRIMARY", "KEY", "FOREIGN", "REFERENCES",
        "UNIQUE", "INDEX", "CHECK", "DEFAULT", "NULL",
        "COMMENT", "AUTO_INCREMENT", "AUTOINCREMENT", "IDENTITY",
        "COLLATE", "GENERATED", "ALWAYS", "AS",
        "ON", "DELETE", "UPDATE", "CASCADE", "RESTRICT",
        "INSERT", "IGNORE", "INTO", "VALUES",
        "UNSIGNED", "ZEROFILL", "CHARACTER",
    }

    TYPE_KEYWORDS = TYPE_WHITELIST_SET

    # Порядок важен: комментарии раньше операторов ('-' и '/'),
    # дробные числа раньше целых, идентификатор последним.
    _LEXEMES: Tuple[Tuple[TokenType, str], ...] = (
        (TokenType.COMMENT, r"--[^\n]*|/\*[\s\S]*?\*/"),
        (TokenType.WHITESPACE, r"\s+"),

        # '' и \' внутри строки не закрывают литерал
        (TokenType.STRING, r"'(?:[^'\\]|\\.|'')*'"),
        (TokenType.QUOTED_IDENTIFIER, r'"(?:[^"\\]|\\.|"")*"|`(?:[^`]|``)*`|\[[^\]\n]*\]'),

        (TokenType.NUMBER, r"\d+\.\d*(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?|\d+(?:[eE][+-]?\d+)?(?![A-Za-z_])"),
        (TokenType.OPERATOR, r"::|<=|>=|<>|!=|\|\||[=<>!@#%^&|*/+\-:~]"),

        (TokenType.COMMA, r","),
        (TokenType.DOT, r"\."),
        (TokenType.SEMICOLON, r";"),
        (TokenType.LPAREN, r"\("),
        (TokenType.RPAREN, r"\)"),

        (TokenType.IDENTIFIER, r"[A-Za-z_$0-9][A-Za-z0-9_$]*"),
    )

    _SKIPPED = frozenset({TokenType.WHITESPACE, TokenType.COMMENT})

    def __init__(self, preserve_case: bool = True):
        self.preserve_case = preserve_case
        self._pattern = re.compile(
            "|".join(f"(?P<{kind.value}>{regex})" for kind, regex in self._LEXEMES),
            re.IGNORECASE,
        )

    def tokenize(self, sql_text: str) -> List[Token]:
        """
        Один проход по тексту. Пробелы и комментарии не попадают в результат,
        в конце всегда EOF.
        """
        text = sql_text or ""
        line_starts = [0] + [m.end() for m in re.finditer(r"\n", text)]

        def locate(offset: int) -> Tuple[int, int]:
            line = bisect_right(line_starts, offset)
            return line, offset - line_starts[line - 1] + 1

        tokens: List[Token] = []
        pos = 0
        while pos < len(text):
            m = self._pattern.match(text, pos)
            if m is None:
                # незакрытая кавычка и прочий мусор: один символ
                kind, value, end = TokenType.OPERATOR, text[pos], pos + 1
            else:
                kind, value, end = TokenType(m.lastgroup), m.group(), m.end()

            if kind not in self._SKIPPED:
                kind = self.classify_word(value) if kind == TokenType.IDENTIFIER else kind
                line, column = locate(pos)
                tokens.append(Token(kind, self._fold_case(kind, value), line, column, pos))
            pos = end

        line, column = locate(len(text))
        tokens.append(Token(TokenType.EOF, "", line, column, len(text)))
        return tokens

    def classify_word(self, word: str) -> TokenType:
        """Голое слово: тип из белого списка, ключевое слово или идентификатор."""
        u = word.upper()
        # SET здесь тип колонки, а не ключевое слово
        if u in self.TYPE_KEYWORDS:
            return TokenType.TYPE
        if u in self.KEYWORDS:
            return TokenType.KEYWORD
        return TokenType.IDENTIFIER

    def _fold_case(self, kind: TokenType, value: str) -> str:
        if self.preserve_case:
            return value
        if kind in (TokenType.KEYWORD, TokenType.TYPE):
            return value.upper()
        if kind == TokenType.IDENTIFIER:
            return value.lower()
        return value

    # ==========================================================
    # HELPERS ДЛЯ РАЗБОРА ПОТОКА ТОКЕНОВ
    # ==========================================================

    @staticmethod
    def find_matching_paren(tokens: List[Token], open_index: int) -> Optional[int]:
        """Индекс RPAREN, закрывающей LPAREN с индексом open_index."""
        depth = 0
        for i in range(open_index, len(tokens)):
            t = tokens[i].type
            if t == TokenType.LPAREN:
                depth += 1
            elif t == TokenType.RPAREN:
                depth -= 1
                if depth == 0:
                    return i
        return None

    @staticmethod
    def split_top_level(tokens: List[Token], start: int, end: int) -> List[List[Token]]:
        """
        Делит tokens[start:end] по запятым нулевой глубины скобок.
        Пустые элементы не возвращаются.
        """
        groups: List[List[Token]] = []
        current: List[Token] = []
        depth = 0

        for tok in tokens[start:end]:
            if tok.type == TokenType.LPAREN:
                depth += 1
            elif tok.type == TokenType.RPAREN:
                depth -= 1
            elif tok.type == TokenType.COMMA and depth == 0:
                if current:
                    groups.append(current)
                current = []
                continue
            current.append(tok)

        if current:
            groups.append(current)
        return groups


_BACKSLASH_ESCAPE_RE = re.compile(r"\\([\"'\\])")


def unescape_literal(body: str, quote: str = "'") -> str:
    """
    Снимает экранирование внутри строкового литерала (без внешних кавычек):
    удвоенные кавычки ('' и "") и обратный слэш перед кавычкой или слэшем.
    """
    text = body.replace("''", "'")
    if quote == '"':
        text = text.replace('""', '"')
    return _BACKSLASH_ESCAPE_RE.sub(r"\1", text)


def unquote_string(token_value: str) -> str:
    """'it''s' -> it's ; "x" -> x ; прочее без изменений."""
    v = token_value or ""
    if len(v) >= 2 and v[0] in ("'", '"') and v[-1] == v[0]:
        return unescape_literal(v[1:-1], v[0])
    return v
