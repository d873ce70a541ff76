#!/usr/bin/env python3
"""
Check which product data providers are reachable, using a well-known barcode.
Run from backend: python scripts/check_external_apis.py [barcode]
Exit 0 if at least one provider returns a product; 1 if all fail or none configured.
"""
import sys
from pathlib import Path
from typing import List, Optional, Tuple

# Add backend to path when run as script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from dotenv import load_dotenv
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

# Nutella 400g; present in every provider's catalogue
KNOWN_BARCODE = "3017620422003"
# Short timeout for health check
HEALTH_TIMEOUT = 8


def check_provider(provider, barcode: str = KNOWN_BARCODE) -> Tuple[bool, str]:
    """Return (success, message)."""
    if not provider.is_configured():
        return False, "not configured"
    product = provider.fetch(barcode)
    if product is not None:
        return True, f"ok ({product.name[:40]})"
    return False, "no result"


def main(argv: Optional[List[str]] = None) -> int:
    from bitecheck.external_apis import build_default_providers
    args = sys.argv[1:] if argv is None else argv
    barcode = args[0] if args else KNOWN_BARCODE
    print(f"Checking product providers with barcode {barcode}...")
    any_ok = False
    for provider in build_default_providers(timeout=HEALTH_TIMEOUT):
        ok, msg = check_provider(provider, barcode)
        print(f"  {provider.name:<16} {'OK' if ok else 'FAIL'} - {msg}")
        any_ok = any_ok or ok
    if any_ok:
        print("At least one provider is working.")
        return 0
    print("All configured providers failed or none configured.")
    return 1


if __name__ == "__main__":
    sys.exit(main())
