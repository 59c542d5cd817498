"""
utils/naming.py

Утилиты для работы с именами таблиц и колонок.
Нужны для:
- снятия кавычек с идентификаторов разных диалектов (`x`, "x", [x]),
- разделения schema.table,
- сопоставления имён при выводе ссылок (<name>_id -> таблица name),
- приведения имён из SQLite-файлов к snake_case.
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple


_QUOTE_PAIRS = {"`": "`", '"': '"', "[": "]"}
_WS_RE = re.compile(r"\s+")
_SEPARATORS_RE = re.compile(r"[\s_\-]+")
_CAMEL_RE = re.compile(r"([a-z])([A-Z])")
_NON_ALNUM_SPACE_RE = re.compile(r"[^a-zA-Z0-9 ]+")


def is_quoted_identifier(identifier: str) -> bool:
    """True если идентификатор заключён в `...`, "..." или [...]."""
    s = (identifier or "").strip()
    if len(s) < 2:
        return False
    closing = _QUOTE_PAIRS.get(s[0])
    return closing is not None and s[-1] == closing


def strip_quotes(identifier: str) -> str:
    """Убирает внешние кавычки любого диалекта, если они есть."""
    s = (identifier or "").strip()
    if is_quoted_identifier(s):
        return s[1:-1]
    return s


def split_qualified_parts(name: str) -> List[str]:
    """
    Делит имя по точкам, не трогая точки внутри кавычек.
      '"public"."orders"' -> ['public', 'orders']
      '[dbo].[t.x]'       -> ['dbo', 't.x']
    """
    parts: List[str] = []
    buf: List[str] = []
    closing: Optional[str] = None

    for ch in (name or "").strip():
        if closing is not None:
            buf.append(ch)
            if ch == closing:
                closing = None
            continue
        if ch in _QUOTE_PAIRS:
            closing = _QUOTE_PAIRS[ch]
            buf.append(ch)
            continue
        if ch == ".":
            parts.append(strip_quotes("".join(buf)))
            buf = []
            continue
        buf.append(ch)

    parts.append(strip_quotes("".join(buf)))
    return [p for p in parts if p]


def split_qualified_name(name: str) -> Tuple[Optional[str], str]:
    """
    Делит имя на (schema, table).
    Примеры:
      "public.users" -> ("public", "users")
      "`users`"      -> (None, "users")
    """
    parts = split_qualified_parts(name)
    if not parts:
        return None, ""
    if len(parts) == 1:
        return None, parts[0]
    return parts[-2], parts[-1]


def normalize_reference_name(name: str) -> str:
    """
    Ключ сравнения для вывода ссылок: casefold + без разделителей.
      "Order_Item" -> "orderitem"
    """
    return _SEPARATORS_RE.sub("", (name or "").casefold())


def snakeize(name: str) -> str:
    """
    Приводит произвольное имя к snake_case.
      "CustomerOrders" -> "customer_orders"
      "order-items"    -> "order_items"
    """
    s = re.sub(r"[_\-]+", " ", name or "")
    s = _CAMEL_RE.sub(r"\1 \2", s)
    s = _NON_ALNUM_SPACE_RE.sub("", s).lower()
    s = _WS_RE.sub("_", s.strip())
    return re.sub(r"__+", "_", s).strip("_")


__all__ = [
    "is_quoted_identifier",
    "strip_quotes",
    "split_qualified_parts",
    "split_qualified_name",
    "normalize_reference_name",
    "snakeize",
]
