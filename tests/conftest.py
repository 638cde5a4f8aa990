"""
Pytest configuration and shared fixtures for the filter core tests.

Provides:
- anyio backend selection for ``@pytest.mark.anyio`` tests
- Deterministic id generators (``CounterIdGenerator``)
- Default tree limits and attribute catalog
- A tree factory for building nodes tersely
- Sample trees used across modules
"""

from __future__ import annotations

import logging
from typing import Any

import pytest

from segment_filters.core.ids import CounterIdGenerator
from segment_filters.domain.catalog import DEFAULT_CATALOG, AttributeCatalog
from segment_filters.domain.enums import Connector
from segment_filters.domain.nodes import Condition, Group, Node, Tree, TreeLimits


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def ids() -> CounterIdGenerator:
    return CounterIdGenerator("n")


@pytest.fixture
def limits() -> TreeLimits:
    return TreeLimits(max_depth=3, max_conditions=20)


@pytest.fixture
def catalog() -> AttributeCatalog:
    return DEFAULT_CATALOG


class TreeFactory:
    """Builds nodes with deterministic ids (``c-1``, ``g-1``, ...)."""

    def __init__(self) -> None:
        self._condition_ids = CounterIdGenerator("c")
        self._group_ids = CounterIdGenerator("g")

    def condition(
        self,
        attribute: str = "country",
        operator: str = "is",
        *values: Any,
        modifier: dict[str, Any] | None = None,
        negated: bool = False,
        id: str | None = None,
    ) -> Condition:
        return Condition(
            id=id or self._condition_ids(),
            attribute=attribute,
            operator=operator,
            value=values,
            modifier=modifier,
            negated=negated,
        )

    def group(self, connector: Connector | str, *children: Node, id: str | None = None) -> Group:
        return Group(id=id or self._group_ids(), connector=connector, children=children)

    def tree(
        self,
        connector: Connector | str = Connector.AND,
        *children: Node,
        labels: dict[str, str] | None = None,
    ) -> Tree:
        root = Group(id="root", connector=connector, children=children, is_root=True)
        return Tree(root=root, labels=labels or {})

    def flat(self, count: int) -> Tree:
        """Root AND group with ``count`` filled-in conditions."""
        return self.tree(
            Connector.AND, *(self.condition("page", "is", f"/p{i}") for i in range(count))
        )

    def nested(self, depth: int) -> Tree:
        """A tree whose deepest group sits at ``depth`` (root is depth 1)."""
        node: Node = self.condition("country", "is", "US")
        for _ in range(depth - 1):
            node = self.group(Connector.AND, node, self.condition("device", "is", "Mobile"))
        return self.tree(Connector.AND, node, self.condition("browser", "is", "Chrome"))


@pytest.fixture
def factory() -> TreeFactory:
    return TreeFactory()


@pytest.fixture
def example_tree(factory: TreeFactory) -> Tree:
    """country is US AND (device is Mobile OR device is Tablet)."""
    return factory.tree(
        Connector.AND,
        factory.condition("country", "is", "US", id="country"),
        factory.group(
            Connector.OR,
            factory.condition("device", "is", "Mobile", id="mobile"),
            factory.condition("device", "is", "Tablet", id="tablet"),
            id="devices",
        ),
    )


@pytest.fixture
def caplog_debug(caplog: pytest.LogCaptureFixture) -> pytest.LogCaptureFixture:
    caplog.set_level(logging.DEBUG, logger="segment_filters")
    return caplog
