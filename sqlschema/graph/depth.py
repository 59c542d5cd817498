"""
Калькулятор глубины зависимостей.

depth(E) = 1, если E ни на кого не ссылается, иначе
depth(E) = 1 + max(depth(зависимостей)).

Считается DFS с мемоизацией; повторный заход в таблицу, уже лежащую на
текущем пути, считается циклом, такая ветка даёт 0. Обход начинается с таблиц в
порядке входного списка, поэтому в цикле A <-> B первая из них получает
большую глубину.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Set

from sqlschema.core.models import Entity
from .references import ReferenceMatcher, get_matcher

logger = logging.getLogger(__name__)


class DepthCalculator:
    """
    Проставляет Entity.depth. Мемо и множество пути создаются заново
    при каждом вызове calculate().
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None, matcher: Optional[ReferenceMatcher] = None):
        self.config = config if config is not None else {}
        self._init_defaults()
        self.matcher = matcher or get_matcher(self.config["matcher"], self.config.get("matchers", {}).get(self.config["matcher"]))

    def _init_defaults(self) -> None:
        defaults = {
            "reverse": False,
            "matcher": "suffix",
        }
        for k, v in defaults.items():
            self.config.setdefault(k, v)

    # ==========================================================
    # PUBLIC API
    # ==========================================================

    def calculate(self, entities: List[Entity], reverse: Optional[bool] = None) -> List[int]:
        """Считает и записывает глубины; возвращает их в порядке входа."""
        if reverse is None:
            reverse = bool(self.config.get("reverse", False))
        if not entities:
            return []

        adjacency = self.matcher.build_adjacency(entities)
        memo: Dict[int, int] = {}
        on_path: Set[int] = set()
        cycles = 0

        def visit(root: int) -> int:
            nonlocal cycles
            if root in memo:
                return memo[root]

            # явный стек (позиция, итератор зависимостей): цепочки ссылок
            # могут быть длиннее предела рекурсии
            stack = [(root, iter(adjacency[root]))]
            best: Dict[int, int] = {root: 0}
            on_path.add(root)

            while stack:
                pos, deps = stack[-1]
                for dep in deps:
                    if dep in memo:
                        best[pos] = max(best[pos], memo[dep])
                    elif dep in on_path:
                        cycles += 1
                    else:
                        on_path.add(dep)
                        best[dep] = 0
                        stack.append((dep, iter(adjacency[dep])))
                        break
                else:
                    stack.pop()
                    on_path.discard(pos)
                    memo[pos] = 1 + best.pop(pos)
                    if stack:
                        parent = stack[-1][0]
                        best[parent] = max(best[parent], memo[pos])

            return memo[root]

        depths = [visit(pos) for pos in range(len(entities))]

        if reverse:
            top = max(depths)
            depths = [top - d for d in depths]

        for entity, depth in zip(entities, depths):
            entity.depth = depth

        if cycles:
            logger.info("Глубина: разорвано циклических ссылок: %d", cycles)
        logger.debug("Глубины: %s", {e.name: e.depth for e in entities})
        return depths

    def dependencies(self, entities: List[Entity]) -> Dict[str, List[str]]:
        """Имена таблиц, от которых зависит каждая таблица."""
        adjacency = self.matcher.build_adjacency(entities)
        return {
            entities[pos].name: [entities[dep].name for dep in deps]
            for pos, deps in enumerate(adjacency)
        }


def calculate_depths(entities: List[Entity], reverse: bool = False, matcher: str = "suffix") -> List[int]:
    return DepthCalculator({"reverse": reverse, "matcher": matcher}).calculate(entities)


def sort_by_depth(entities: List[Entity], descending: bool = False) -> List[Entity]:
    """Стабильная сортировка по depth (по возрастанию или по убыванию)."""
    if descending:
        return sorted(entities, key=lambda e: -e.depth)
    return sorted(entities, key=lambda e: e.depth)
