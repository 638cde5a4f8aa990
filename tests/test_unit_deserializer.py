"""
Tests for wire format to tree deserialization.

These tests verify:
- Structural disambiguation of conditions, groups and implicit groups
- Fresh ids for every node
- Graceful degradation on malformed input
- Round trips in both directions
"""

import logging

import pytest

from segment_filters.compiler.deserializer import (
    deserialize,
    deserialize_segment_data,
    is_condition_array,
    is_group_array,
    loads,
)
from segment_filters.compiler.serializer import serialize
from segment_filters.core.errors import SerializationError
from segment_filters.core.validators import MAX_WIRE_DEPTH
from segment_filters.domain.enums import Connector, NodeKind
from segment_filters.tree.traversal import count_conditions, iter_conditions, iter_nodes

EXAMPLE_WIRE = [
    "and",
    [
        ["is", "country", ["US"]],
        ["or", [["is", "device", ["Mobile"]], ["is", "device", ["Tablet"]]]],
    ],
]


class TestShapeDetection:
    """Test the structural classifiers."""

    @pytest.mark.anyio
    @pytest.mark.parametrize(
        "item",
        [["is", "country", ["US"]], ["contains", "page", ["/"], {"case_sensitive": True}]],
    )
    async def test_condition_arrays(self, item):
        assert is_condition_array(item)
        assert not is_group_array(item)

    @pytest.mark.anyio
    @pytest.mark.parametrize("item", [["and", []], ["OR", [["is", "a", ["b"]]]]])
    async def test_group_arrays(self, item):
        assert is_group_array(item)
        assert not is_condition_array(item)

    @pytest.mark.anyio
    @pytest.mark.parametrize("item", [["is", "country"], ["and", "x", "y"], [1, 2, 3], "is", None])
    async def test_neither(self, item):
        assert not is_condition_array(item)
        assert not is_group_array(item)


class TestDeserialize:
    """Test deserialize."""

    @pytest.mark.anyio
    async def test_example(self, ids):
        tree = deserialize(EXAMPLE_WIRE, ids=ids)

        root = tree.root
        assert root.is_root
        assert root.connector is Connector.AND
        country, devices = root.children
        assert (country.attribute, country.operator, country.value) == ("country", "is", ("US",))
        assert devices.kind is NodeKind.GROUP
        assert devices.connector is Connector.OR
        assert [c.value for c in devices.children] == [("Mobile",), ("Tablet",)]

    @pytest.mark.anyio
    async def test_every_node_gets_a_fresh_unique_id(self, ids):
        tree = deserialize(EXAMPLE_WIRE, ids=ids)

        node_ids = [tree.root.id] + [node.id for node, _ in iter_nodes(tree.root)]
        assert len(set(node_ids)) == 5
        assert all(node_id.startswith("n-") for node_id in node_ids)

    @pytest.mark.anyio
    async def test_single_condition_becomes_root_with_one_child(self, ids):
        tree = deserialize(["is", "country", ["US"]], ids=ids)

        assert tree.root.connector is Connector.AND
        assert len(tree.root.children) == 1
        assert tree.root.children[0].attribute == "country"

    @pytest.mark.anyio
    async def test_bare_list_of_arrays_is_an_and_group(self, ids):
        tree = deserialize([["is", "country", ["US"]], ["is", "device", ["Mobile"]]], ids=ids)

        assert tree.root.connector is Connector.AND
        assert [c.attribute for c in tree.root.children] == ["country", "device"]

    @pytest.mark.anyio
    async def test_nested_bare_list_is_an_and_group(self, ids):
        wire = ["or", [["is", "a", ["1"]], [["is", "b", ["2"]], ["is", "c", ["3"]]]]]
        tree = deserialize(wire, ids=ids)

        nested = tree.root.children[1]
        assert nested.kind is NodeKind.GROUP
        assert nested.connector is Connector.AND
        assert len(nested.children) == 2

    @pytest.mark.anyio
    async def test_modifier_and_scalar_value(self, ids):
        tree = deserialize(["contains", "page", "/blog", {"case_sensitive": True}], ids=ids)

        condition = tree.root.children[0]
        assert condition.value == ("/blog",)
        assert condition.modifier == {"case_sensitive": True}

    @pytest.mark.anyio
    async def test_non_mapping_modifier_is_ignored(self, ids):
        tree = deserialize(["contains", "page", ["/"], "nope"], ids=ids)
        assert tree.root.children[0].modifier is None

    @pytest.mark.anyio
    async def test_labels_are_attached(self, ids):
        tree = deserialize(["is", "country", ["US"]], {"US": "United States"}, ids=ids)
        assert tree.labels == {"US": "United States"}


class TestDegradation:
    """Test graceful handling of malformed payloads."""

    @pytest.mark.anyio
    @pytest.mark.parametrize("wire", [None, [], "garbage", 42, {"and": []}, ["is", "country"]])
    async def test_unrecognized_payload_gives_empty_tree(self, ids, wire):
        tree = deserialize(wire, ids=ids)

        assert tree.root.is_root
        assert tree.root.children == ()

    @pytest.mark.anyio
    async def test_unrecognized_items_are_dropped_with_warning(self, ids, caplog):
        caplog.set_level(logging.WARNING, logger="segment_filters")
        wire = ["and", [["is", "country", ["US"]], "junk", ["is", "device", ["Mobile"]]]]

        tree = deserialize(wire, ids=ids)

        assert [c.attribute for c in tree.root.children] == ["country", "device"]
        assert "Dropping unrecognized filter item" in caplog.text

    @pytest.mark.anyio
    async def test_loads_invalid_json_degrades(self, ids):
        tree = loads("{not json", ids=ids)
        assert tree.root.children == ()

    @pytest.mark.anyio
    async def test_loads_strict_raises(self, ids):
        with pytest.raises(SerializationError):
            loads("{not json", strict=True, ids=ids)
        with pytest.raises(SerializationError):
            loads('["and", [["is", "a", ["b"]], 7]]', strict=True, ids=ids)

    @pytest.mark.anyio
    async def test_loads_valid_text(self, ids):
        tree = loads('["is","country",["US"]]', ids=ids)
        assert tree.root.children[0].value == ("US",)

    @pytest.mark.anyio
    async def test_segment_data(self, ids):
        tree = deserialize_segment_data(
            {"filters": ["is", "country", ["US"]], "labels": {"US": "United States"}}, ids=ids
        )
        assert tree.labels == {"US": "United States"}
        assert deserialize_segment_data("nope", ids=ids).root.children == ()

    @pytest.mark.anyio
    async def test_deeply_nested_payload_is_truncated(self, ids, caplog):
        caplog.set_level(logging.WARNING, logger="segment_filters")
        wire: list = ["is", "page", ["/deepest"]]
        for index in range(3000):
            wire = ["and", [["is", "page", [f"/{index}"]], wire]]

        tree = deserialize(wire, ids=ids)

        assert count_conditions(tree) == MAX_WIRE_DEPTH
        assert "nested deeper than" in caplog.text

    @pytest.mark.anyio
    async def test_deeply_nested_segment_data_does_not_raise(self, ids):
        wire: list = ["is", "page", ["/"]]
        for _ in range(3000):
            wire = [wire]

        tree = deserialize_segment_data({"filters": wire}, ids=ids)

        assert tree.root.is_root
        assert count_conditions(tree) == 0

    @pytest.mark.anyio
    async def test_loads_deeply_nested_text(self, ids):
        text = "[" * 100_000 + "]" * 100_000

        assert loads(text, ids=ids).root.children == ()
        with pytest.raises(SerializationError):
            loads(text, strict=True, ids=ids)


class TestRoundTrips:
    """Test serialize/deserialize round trips."""

    @pytest.mark.anyio
    @pytest.mark.parametrize(
        "wire",
        [
            EXAMPLE_WIRE,
            ["is", "country", ["US"]],
            ["or", [["is_set", "utm_source", []], ["contains", "page", ["/a", "/b"], {"x": 1}]]],
            [
                "and",
                [
                    ["or", [["is", "a", ["1"]], ["and", [["is", "b", [2]], ["is", "c", [3]]]]]],
                    ["greater_than", "pageviews", [5]],
                ],
            ],
            ["and", [["is", "country", ["US"], {}], ["is", "device", ["Mobile"]]]],
        ],
    )
    async def test_wire_round_trip(self, ids, wire):
        assert serialize(deserialize(wire, ids=ids)) == wire

    @pytest.mark.anyio
    async def test_tree_round_trip_preserves_content(self, example_tree, ids):
        restored = deserialize(serialize(example_tree), ids=ids)

        def content(tree):
            return [(c.attribute, c.operator, c.value) for c in iter_conditions(tree)]

        assert content(restored) == content(example_tree)
        assert restored.root.children[1].connector is Connector.OR
