"""Tests for deterministic JSON text of wire payloads."""

import pytest

from segment_filters.compiler.canonicalizer import (
    canonicalize_json,
    to_canonical_json_pretty,
    to_canonical_json_string,
)


class TestCanonicalizeJson:
    """Test canonicalize_json."""

    @pytest.mark.anyio
    async def test_mapping_keys_are_sorted(self):
        result = canonicalize_json(["is", "page", ["/"], {"z": 1, "a": {"y": 2, "b": 3}}])
        assert list(result[3]) == ["a", "z"]
        assert list(result[3]["a"]) == ["b", "y"]

    @pytest.mark.anyio
    async def test_array_order_is_preserved(self):
        assert canonicalize_json(("or", (["is", "b", ["2"]], ["is", "a", ["1"]]))) == [
            "or",
            [["is", "b", ["2"]], ["is", "a", ["1"]]],
        ]


class TestCanonicalStrings:
    """Test text output."""

    @pytest.mark.anyio
    async def test_compact_and_stable(self):
        first = to_canonical_json_string(["is", "page", ["/"], {"b": True, "a": False}])
        second = to_canonical_json_string(["is", "page", ["/"], {"a": False, "b": True}])
        assert first == second == '["is","page",["/"],{"a":false,"b":true}]'

    @pytest.mark.anyio
    async def test_non_ascii_is_kept(self):
        assert to_canonical_json_string(["is", "city", ["Zürich"]]) == '["is","city",["Zürich"]]'

    @pytest.mark.anyio
    async def test_pretty(self):
        text = to_canonical_json_pretty(["is", "country", ["US"]])
        assert text.startswith("[\n  ")
