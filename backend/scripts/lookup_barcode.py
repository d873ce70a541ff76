#!/usr/bin/env python3
"""
Resolve one barcode through the provider chain and print the product with its score.
Usage: cd backend && python scripts/lookup_barcode.py 8901063010437 [--no-cache] [--json]
Exit 0 when found, 1 when not found, 2 on an invalid barcode.
"""
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Ensure backend is on path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from dotenv import load_dotenv
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

logger = logging.getLogger(__name__)


def format_result(result) -> str:
    """Human-readable summary of a LookupResult."""
    if not result.found:
        return "Product not found in any source."
    p, s = result.product, result.score
    lines = [
        f"{p.name} ({p.brand or 'unknown brand'})  [{result.source}]",
        f"Score: {s.score}/100  Grade: {s.grade.letter} ({s.grade.label})",
        f"Penalties: additives={s.penalties.additive} nutrition={s.penalties.nutrition} "
        f"processing={s.penalties.processing} ingredients={s.penalties.ingredient_count}",
    ]
    for a in s.ingredients:
        lines.append(f"  - {a.name}: {a.label}")
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Look up a packaged-food barcode and score it")
    parser.add_argument("barcode", help="EAN-8, UPC-A or EAN-13 barcode")
    parser.add_argument("--no-cache", action="store_true", help="Do not read or write the local product cache")
    parser.add_argument("--json", action="store_true", help="Print the full result as JSON")
    parser.add_argument("--verbose", action="store_true", help="Log provider activity")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    from bitecheck.external_apis import SourceFallbackResolver
    from bitecheck.scanner import is_valid_barcode
    from bitecheck.storage import ProductStore

    barcode = args.barcode.strip()
    if not is_valid_barcode(barcode):
        print(f"Invalid barcode: {barcode}", file=sys.stderr)
        return 2

    store = None if args.no_cache else ProductStore()
    with SourceFallbackResolver(store=store) as resolver:
        result = resolver.resolve(barcode)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(format_result(result))
    return 0 if result.found else 1


if __name__ == "__main__":
    sys.exit(main())
