"""
Wire format compiler for filter trees.

Key Components:
- serializer: tree to compact positional wire arrays (with the collapsing rule)
- deserializer: wire arrays back to a tree, degrading on malformed input
- validator: collects every structural violation of a tree
- canonicalizer: deterministic JSON text of the wire form

Design Principles:
- Determinism: the same tree always produces byte-for-byte identical text
- Graceful degradation: corrupt payloads open as blank trees, never raise
- Explicitness: violations are reported with paths, not inferred by callers
"""

from segment_filters.compiler.canonicalizer import canonicalize_json, to_canonical_json_string
from segment_filters.compiler.deserializer import deserialize, deserialize_segment_data, loads
from segment_filters.compiler.serializer import dumps, serialize, serialize_segment_data
from segment_filters.compiler.validator import ensure_valid, validate

__all__ = [
    "serialize",
    "serialize_segment_data",
    "dumps",
    "deserialize",
    "deserialize_segment_data",
    "loads",
    "validate",
    "ensure_valid",
    "canonicalize_json",
    "to_canonical_json_string",
]
