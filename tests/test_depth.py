"""Tests for reference matching and dependency depth."""

from __future__ import annotations

import pytest

from sqlschema.core.exceptions import ConfigurationError
from sqlschema.core.models import Column, Entity, ForeignKey
from sqlschema.graph.depth import DepthCalculator, calculate_depths, sort_by_depth
from sqlschema.graph.references import (
    ForeignKeyReferenceMatcher,
    SuffixReferenceMatcher,
    get_matcher,
)


def make_entity(name, *columns, index=0):
    return Entity(
        name=name,
        index=index,
        columns=[Column(name="id", base_type="INT", primary_key=True)]
        + [Column(name=c, base_type="INT") for c in columns],
    )


@pytest.fixture
def diamond():
    return [
        make_entity("a"),
        make_entity("b", "a_id"),
        make_entity("c", "a_id"),
        make_entity("d", "b_id", "c_id"),
    ]


class TestSuffixMatcher:
    def test_finds_referenced_positions(self, diamond):
        matcher = SuffixReferenceMatcher()
        assert matcher.build_adjacency(diamond) == [[], [0], [0], [1, 2]]

    def test_self_reference_is_ignored(self):
        tree = make_entity("node", "node_id")
        assert SuffixReferenceMatcher().find_references(tree, [tree]) == []

    def test_plural_table_names(self):
        entities = [make_entity("customers"), make_entity("orders", "customer_id")]
        assert SuffixReferenceMatcher().find_references(entities[1], entities) == [0]

    def test_plural_matching_can_be_disabled(self):
        entities = [make_entity("customers"), make_entity("orders", "customer_id")]
        matcher = SuffixReferenceMatcher({"match_plurals": False})
        assert matcher.find_references(entities[1], entities) == []

    def test_name_separators_and_case_are_ignored(self):
        entities = [make_entity("OrderItem"), make_entity("notes", "order_item_id")]
        assert SuffixReferenceMatcher().find_references(entities[1], entities) == [0]

    def test_plain_id_column_is_not_a_reference(self):
        entities = [make_entity("i"), make_entity("t")]
        assert SuffixReferenceMatcher().build_adjacency(entities) == [[], []]

    def test_info(self):
        info = SuffixReferenceMatcher().get_info()
        assert info["id"] == "suffix"
        assert info["config"]["suffix"] == "_id"


class TestForeignKeyMatcher:
    def test_uses_declared_keys_only(self):
        customers = make_entity("customers")
        orders = make_entity("orders", "buyer")
        orders.foreign_keys = [ForeignKey(columns=["buyer"], ref_table="customers", ref_columns=["id"])]
        audit = make_entity("audit", "customers_id")

        matcher = ForeignKeyReferenceMatcher()
        entities = [customers, orders, audit]
        assert matcher.build_adjacency(entities) == [[], [0], []]

    def test_registry(self):
        assert isinstance(get_matcher("foreign_key"), ForeignKeyReferenceMatcher)
        assert isinstance(get_matcher(" Suffix "), SuffixReferenceMatcher)

    def test_unknown_matcher(self):
        with pytest.raises(ConfigurationError) as exc:
            get_matcher("guess")
        assert exc.value.details["config_key"] == "depth.matcher"


class TestDepth:
    def test_diamond(self, diamond):
        depths = DepthCalculator().calculate(diamond)
        assert depths == [1, 2, 2, 3]
        assert [e.depth for e in diamond] == [1, 2, 2, 3]

    def test_entity_without_references_has_depth_one(self):
        entities = [make_entity("x"), make_entity("y")]
        assert calculate_depths(entities) == [1, 1]

    def test_empty_input(self):
        assert DepthCalculator().calculate([]) == []

    def test_cycle_first_entity_is_deeper(self):
        entities = [make_entity("a", "b_id"), make_entity("b", "a_id")]
        assert DepthCalculator().calculate(entities) == [2, 1]

    def test_cycle_follows_input_order(self):
        entities = [make_entity("b", "a_id"), make_entity("a", "b_id")]
        assert DepthCalculator().calculate(entities) == [2, 1]

    def test_long_chain_deepest_first(self):
        entities = [make_entity("t0")] + [make_entity(f"t{i}", f"t{i - 1}_id") for i in range(1, 700)]
        entities.reverse()

        depths = DepthCalculator().calculate(entities)

        assert depths[0] == 700
        assert depths[-1] == 1
        assert depths == list(range(700, 0, -1))

    def test_cycle_inside_chain(self):
        entities = [
            make_entity("c", "b_id"),
            make_entity("b", "a_id"),
            make_entity("a", "b_id"),
        ]
        assert DepthCalculator().calculate(entities) == [3, 2, 1]

    def test_reverse(self, diamond):
        assert DepthCalculator().calculate(diamond, reverse=True) == [2, 1, 1, 0]

    def test_reverse_from_config(self, diamond):
        calculator = DepthCalculator({"reverse": True})
        assert calculator.calculate(diamond) == [2, 1, 1, 0]
        assert calculator.calculate(diamond, reverse=False) == [1, 2, 2, 3]

    def test_state_is_fresh_per_call(self):
        calculator = DepthCalculator()
        calculator.calculate([make_entity("a"), make_entity("b", "a_id"), make_entity("c", "b_id")])

        # те же позиции, другие таблицы
        assert calculator.calculate([make_entity("p"), make_entity("q")]) == [1, 1]

    def test_matcher_from_config(self):
        entities = [make_entity("customers"), make_entity("orders", "customer_id")]
        calculator = DepthCalculator({"matchers": {"suffix": {"match_plurals": False}}})
        assert calculator.calculate(entities) == [1, 1]

    def test_defaults_fill_given_section(self):
        section = {}
        DepthCalculator(section)
        assert section == {"reverse": False, "matcher": "suffix"}

    def test_unknown_matcher_in_config(self):
        with pytest.raises(ConfigurationError):
            DepthCalculator({"matcher": "nope"})

    def test_dependencies(self, diamond):
        deps = DepthCalculator().dependencies(diamond)
        assert deps == {"a": [], "b": ["a"], "c": ["a"], "d": ["b", "c"]}


class TestSortByDepth:
    @pytest.fixture
    def entities(self):
        result = []
        for name, depth in (("w", 2), ("x", 1), ("y", 2), ("z", 1)):
            entity = make_entity(name)
            entity.depth = depth
            result.append(entity)
        return result

    def test_ascending_is_stable(self, entities):
        assert [e.name for e in sort_by_depth(entities)] == ["x", "z", "w", "y"]

    def test_descending_is_stable(self, entities):
        assert [e.name for e in sort_by_depth(entities, descending=True)] == ["w", "y", "x", "z"]

    def test_input_is_not_modified(self, entities):
        sort_by_depth(entities)
        assert [e.name for e in entities] == ["w", "x", "y", "z"]
