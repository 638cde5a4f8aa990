"""
JSON canonicalization for deterministic wire text.

The same tree must always produce byte-for-byte identical ``filters`` text so
it can be used as a preview query parameter and as a cache key. Condition
modifiers are the only mappings in the wire format; their keys are sorted.
Array order is meaningful (child order, value order) and is preserved.
"""

import json
from typing import Any


def canonicalize_json(obj: Any) -> dict | list | Any:
    """
    Produce a deterministic, canonical representation of a JSON object.

    Args:
        obj: Python object (dict, list, tuple or primitive) to canonicalize

    Returns:
        Canonicalized version with sorted keys at all levels; tuples become lists

    Example:
        >>> canonicalize_json(["is", "page", ["/"], {"z": 1, "a": 2}])
        ['is', 'page', ['/'], {'a': 2, 'z': 1}]
    """
    if isinstance(obj, dict):
        return {k: canonicalize_json(v) for k, v in sorted(obj.items())}

    elif isinstance(obj, list | tuple):
        # Preserve order but canonicalize each element
        return [canonicalize_json(item) for item in obj]

    else:
        # Primitives (str, int, float, bool, None) pass through unchanged
        return obj


def to_canonical_json_string(obj: Any) -> str:
    """
    Convert a Python object to a canonical JSON string.

    Example:
        >>> to_canonical_json_string(["is", "country", ["US"]])
        '["is","country",["US"]]'
    """
    canonical = canonicalize_json(obj)

    # separators=(',', ':') removes spaces after commas and colons
    return json.dumps(canonical, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def to_canonical_json_pretty(obj: Any) -> str:
    """Pretty-printed canonical JSON (2-space indent) for logs and debugging."""
    canonical = canonicalize_json(obj)
    return json.dumps(canonical, sort_keys=True, indent=2, ensure_ascii=False)
