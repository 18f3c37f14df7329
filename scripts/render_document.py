#!/usr/bin/env python3
"""
CLI entry point for rendering a document from a JSON record.

Usage:
    python -m scripts.render_document invoice record.json
    python -m scripts.render_document jobsheet record.json --format thermal --copy both
    python -m scripts.render_document estimate record.json --output estimate.pdf   # bytes only
"""

import argparse
import json
import sys
from pathlib import Path

# Ensure project root is on path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

KINDS = {
    "jobsheet": "job_sheet",
    "invoice": "invoice",
    "estimate": "estimate",
}


def main(argv=None):
    parser = argparse.ArgumentParser(description="Print Engine - render a document")
    parser.add_argument("kind", choices=sorted(KINDS), help="Document type")
    parser.add_argument("record", type=Path, help="JSON file holding the record")
    parser.add_argument(
        "--format",
        default="a4",
        help="Paper format: a4, a5, thermal, thermal-2 (default: a4)",
    )
    parser.add_argument("--copy", default=None, help="Copy type (default depends on document type)")
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the PDF here instead of the storage root",
    )
    parser.add_argument("--show-config", action="store_true", help="Print configuration first")
    args = parser.parse_args(argv)

    from config.logging_config import setup_logging
    from config.settings import settings
    from pydantic import ValidationError

    from core.print_engine import DocumentEngine, DocumentKind, PrintEngineError

    setup_logging()
    if args.show_config:
        settings.print_config()

    try:
        record = json.loads(args.record.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        print(f"Cannot read record {args.record}: {e}", file=sys.stderr)
        return 2

    kind = DocumentKind(KINDS[args.kind])
    engine = DocumentEngine()

    try:
        if args.output:
            built = engine.build(kind, record, args.format, args.copy)
            try:
                args.output.write_bytes(built.data)
            except OSError as e:
                print(f"Error: cannot write {args.output}: {e}", file=sys.stderr)
                return 1
            print(f"{args.output} ({built.page_count} page(s))")
        else:
            result = engine.render(kind, record, args.format, args.copy)
            print(result.locator)
    except ValidationError as e:
        print(f"Invalid {args.kind} record:\n{e}", file=sys.stderr)
        return 2
    except PrintEngineError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
