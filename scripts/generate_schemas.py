#!/usr/bin/env python3
"""
Generate JSON schemas for the segment and preview payloads.

Usage:
  python scripts/generate_schemas.py [output_dir]
"""

import json
import sys
from pathlib import Path

from segment_filters.api.schemas import (
    PreviewRequest,
    PreviewResult,
    SegmentCreate,
    SegmentResponse,
    SegmentUpdate,
)

SCHEMAS = {
    "segment_create": SegmentCreate,
    "segment_update": SegmentUpdate,
    "segment_response": SegmentResponse,
    "preview_request": PreviewRequest,
    "preview_result": PreviewResult,
}


def main():
    """Write one JSON schema file per payload model (default: docs/schemas/)."""
    output_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("docs") / "schemas"
    output_dir.mkdir(parents=True, exist_ok=True)

    for name, model in SCHEMAS.items():
        output_file = output_dir / f"{name}.json"
        with open(output_file, "w", encoding="utf-8") as f:
            json.dump(model.model_json_schema(), f, indent=2, sort_keys=True)
            f.write("\n")  # Add trailing newline
        print(f"[OK] {model.__name__:16} -> {output_file}")


if __name__ == "__main__":
    main()
