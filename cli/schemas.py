"""CLI wrapper: Generate JSON schemas for segment payloads."""

from __future__ import annotations

import sys
from pathlib import Path

from cli._runner import run


def main() -> None:
    script = Path(__file__).parent.parent / "scripts" / "generate_schemas.py"
    run([sys.executable, str(script), *sys.argv[1:]])
