"""
Tests for human-readable tree rendering.

These tests verify:
- Attribute and operator labels
- Parentheses around nested multi-child groups
- Presence operators render without values
- Value labels are applied
"""

import pytest

from segment_filters.domain.enums import Connector, Operator
from segment_filters.tree.summary import OPERATOR_LABELS, describe, operator_label


class TestOperatorLabel:
    """Test operator_label."""

    @pytest.mark.anyio
    async def test_every_operator_has_a_label(self):
        assert set(OPERATOR_LABELS) == set(Operator)

    @pytest.mark.anyio
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("is", "is"),
            ("does_not_contain", "does not contain"),
            ("greater_or_equal", "is at least"),
            ("sounds_like", "sounds_like"),
        ],
    )
    async def test_labels(self, name, expected):
        assert operator_label(name) == expected


class TestDescribe:
    """Test describe."""

    @pytest.mark.anyio
    async def test_example_tree(self, example_tree, catalog):
        assert describe(example_tree, catalog=catalog) == (
            "Country is US and (Device is Mobile or Device is Tablet)"
        )

    @pytest.mark.anyio
    async def test_value_labels(self, factory, catalog):
        tree = factory.tree(
            Connector.AND,
            factory.condition("country", "is", "US", "DE"),
            labels={"US": "United States", "DE": "Germany"},
        )
        assert describe(tree, catalog=catalog) == "Country is United States or Germany"

    @pytest.mark.anyio
    async def test_presence_operator_omits_values(self, factory, catalog):
        condition = factory.condition("utm_source", "is_set", "ignored")
        assert describe(condition, catalog=catalog) == "UTM Source is set"

    @pytest.mark.anyio
    async def test_negated_condition(self, factory, catalog):
        condition = factory.condition("page", "contains", "/blog", negated=True)
        assert describe(condition, catalog=catalog) == "Page does not contain /blog"

    @pytest.mark.anyio
    async def test_single_child_group_is_not_parenthesised(self, factory, catalog):
        tree = factory.tree(
            Connector.OR,
            factory.condition("browser", "is", "Firefox"),
            factory.group(Connector.AND, factory.condition("os", "is", "Linux")),
        )
        assert describe(tree, catalog=catalog) == "Browser is Firefox or Operating System is Linux"

    @pytest.mark.anyio
    async def test_empty_parts_are_skipped(self, factory, catalog):
        tree = factory.tree(
            Connector.AND,
            factory.group(Connector.OR),
            factory.condition("device", "is", "Mobile"),
        )
        assert describe(tree, catalog=catalog) == "Device is Mobile"

    @pytest.mark.anyio
    async def test_empty_tree(self, factory, catalog):
        assert describe(factory.tree(), catalog=catalog) == ""

    @pytest.mark.anyio
    async def test_unknown_attribute_uses_key(self, factory, catalog):
        assert describe(factory.condition("plan", "is", "pro"), catalog=catalog) == "plan is pro"
