#!/usr/bin/env python
"""Export the FastAPI OpenAPI schema to openapi.yaml at the repository root."""

from __future__ import annotations

import argparse
from pathlib import Path

import yaml


def main() -> None:
    repo_root = Path(__file__).resolve().parent.parent
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--output", type=Path, default=repo_root / "openapi.yaml")
    args = parser.parse_args()

    from ella.main import app  # noqa: WPS433

    schema = app.openapi()
    document = yaml.safe_dump(schema, sort_keys=False, allow_unicode=True)
    args.output.write_text(document, encoding="utf-8")
    print(f"Wrote {args.output} ({len(schema.get('paths', {}))} paths)")


if __name__ == "__main__":
    main()
