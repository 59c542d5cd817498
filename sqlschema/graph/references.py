"""
Стратегии вывода ссылок между таблицами.

Калькулятор глубины не знает, как именно найдены ссылки: он получает
стратегию ReferenceMatcher и спрашивает у неё список таблиц, от которых
зависит данная.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Type

from sqlschema.core.exceptions import ConfigurationError
from sqlschema.core.models import Entity
from sqlschema.utils.naming import normalize_reference_name


class ReferenceMatcher(ABC):
    """
    Абстрактная стратегия: find_references(A, все таблицы) → позиции B,
    на которые ссылается A. Ссылка на саму себя не возвращается.
    """

    MATCHER_ID: str = ""
    MATCHER_NAME: str = ""
    MATCHER_DESCRIPTION: str = ""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config if config is not None else {}
        self._init_config()

    def _init_config(self) -> None:
        pass

    @abstractmethod
    def find_references(self, entity: Entity, entities: List[Entity]) -> List[int]:
        raise NotImplementedError

    def build_adjacency(self, entities: List[Entity]) -> List[List[int]]:
        """Список смежности по позициям во входном списке."""
        return [self.find_references(e, entities) for e in entities]

    def get_info(self) -> Dict[str, Any]:
        return {
            "id": self.MATCHER_ID,
            "name": self.MATCHER_NAME,
            "description": self.MATCHER_DESCRIPTION,
            "config": self.config,
            "class_name": self.__class__.__name__,
        }

    @staticmethod
    def _name_positions(entities: List[Entity]) -> Dict[str, List[int]]:
        index: Dict[str, List[int]] = {}
        for pos, e in enumerate(entities):
            index.setdefault(normalize_reference_name(e.name), []).append(pos)
        return index

    def __repr__(self) -> str:
        return f"<ReferenceMatcher {self.MATCHER_ID}: {self.__class__.__name__}>"


class SuffixReferenceMatcher(ReferenceMatcher):
    """
    A → B, если у A есть колонка <x>_id и нормализованное x совпадает
    с именем B (или с именем B в единственном числе: customer_id → customers).
    """

    MATCHER_ID = "suffix"
    MATCHER_NAME = "Суффикс _id"
    MATCHER_DESCRIPTION = "Ссылки по соглашению об именовании <таблица>_id"

    def _init_config(self) -> None:
        defaults = {
            "suffix": "_id",
            "match_plurals": True,
        }
        for k, v in defaults.items():
            self.config.setdefault(k, v)

    def find_references(self, entity: Entity, entities: List[Entity]) -> List[int]:
        suffix = str(self.config["suffix"]).lower()
        targets = self._target_keys(entities)

        found: List[int] = []
        for column in entity.columns:
            name = column.name
            if not name.lower().endswith(suffix):
                continue
            prefix = normalize_reference_name(name[: -len(suffix)])
            if not prefix:
                continue
            for pos in targets.get(prefix, []):
                if entities[pos] is entity or pos in found:
                    continue
                found.append(pos)
        return found

    def _target_keys(self, entities: List[Entity]) -> Dict[str, List[int]]:
        keys = self._name_positions(entities)
        if not self.config.get("match_plurals", True):
            return keys

        result: Dict[str, List[int]] = {k: list(v) for k, v in keys.items()}
        for key, positions in keys.items():
            for singular in self._singular_forms(key):
                bucket = result.setdefault(singular, [])
                bucket.extend(p for p in positions if p not in bucket)
        return result

    @staticmethod
    def _singular_forms(name: str) -> List[str]:
        forms = []
        if name.endswith("ies") and len(name) > 3:
            forms.append(name[:-3] + "y")
        if name.endswith("es") and len(name) > 2:
            forms.append(name[:-2])
        if name.endswith("s") and len(name) > 1:
            forms.append(name[:-1])
        return forms


class ForeignKeyReferenceMatcher(ReferenceMatcher):
    """A → B по объявленным FOREIGN KEY / REFERENCES."""

    MATCHER_ID = "foreign_key"
    MATCHER_NAME = "Объявленные внешние ключи"
    MATCHER_DESCRIPTION = "Ссылки из FOREIGN KEY (...) REFERENCES t(...) и inline REFERENCES"

    def find_references(self, entity: Entity, entities: List[Entity]) -> List[int]:
        names = self._name_positions(entities)
        found: List[int] = []
        for fk in entity.foreign_keys:
            for pos in names.get(normalize_reference_name(fk.ref_table), []):
                if entities[pos] is entity or pos in found:
                    continue
                found.append(pos)
        return found


MATCHERS: Dict[str, Type[ReferenceMatcher]] = {
    SuffixReferenceMatcher.MATCHER_ID: SuffixReferenceMatcher,
    ForeignKeyReferenceMatcher.MATCHER_ID: ForeignKeyReferenceMatcher,
}


def get_matcher(name: str = "suffix", config: Optional[Dict[str, Any]] = None) -> ReferenceMatcher:
    matcher_class = MATCHERS.get((name or "").strip().lower())
    if matcher_class is None:
        raise ConfigurationError(
            f"Неизвестная стратегия ссылок '{name}', доступны: {', '.join(MATCHERS)}",
            config_key="depth.matcher",
            config_value=name,
        )
    return matcher_class(dict(config or {}))
