"""
Local product cache keyed by barcode, plus user submissions.
- Backend: JSON file (data/products.json under repo root) loaded once, rewritten after each change.
- Upsert keeps created_at and refreshes updated_at; last writer wins.
- persist=False keeps everything in memory (tests, one-off CLI lookups).
"""
import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, List, Optional, Union

from bitecheck.config import get_product_cache_path
from bitecheck.models.product import Product

logger = logging.getLogger(__name__)

DEFAULT_SOURCE = "open_food_facts"
USER_SOURCE = "user"
SEED_SOURCE = "seed"
API_SOURCES = ("open_food_facts", "fatsecret", "upcitemdb", "edamam")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _sort_key(p: Product) -> str:
    return (p.name or "").lower()


class ProductStore:
    def __init__(self, path: Optional[Union[str, Path]] = None, persist: bool = True):
        self.path = Path(path) if path is not None else get_product_cache_path()
        self.persist = persist
        self._lock = threading.Lock()
        self._products: dict[str, dict] = {}
        self._submissions: List[dict] = []
        if persist:
            self._load()

    def _load(self) -> None:
        if not self.path.exists():
            return
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("STORE failed to load path=%s error=%s", self.path, e)
            return
        products, submissions = None, None
        if isinstance(data, dict):
            products = data.get("products") or {}
            submissions = data.get("submissions") or []
        if not isinstance(products, dict) or not isinstance(submissions, list):
            logger.warning("STORE failed to load path=%s error=unexpected layout %s", self.path, type(data).__name__)
            return
        self._products = products
        self._submissions = submissions
        logger.info("STORE loaded products=%s submissions=%s", len(self._products), len(self._submissions))

    def _save(self) -> None:
        if not self.persist:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump({"products": self._products, "submissions": self._submissions}, f, indent=2)

    def get(self, barcode: str) -> Optional[Product]:
        with self._lock:
            raw = self._products.get(str(barcode))
        return Product.from_dict(raw) if raw is not None else None

    def _upsert(self, product: Product) -> Product:
        """Caller holds the lock."""
        existing = self._products.get(product.barcode) or {}
        now = _now()
        stored = product.with_updates(
            source=product.source or DEFAULT_SOURCE,
            created_at=existing.get("created_at") or product.created_at or now,
            updated_at=now,
        )
        self._products[stored.barcode] = stored.to_dict()
        return stored

    def put(self, product: Product) -> None:
        with self._lock:
            stored = self._upsert(product)
            self._save()
        logger.info("STORE put barcode=%s source=%s", stored.barcode, stored.source)

    def submit_product(self, submission: dict[str, Any]) -> Product:
        """Record a user-entered product. barcode and name are required."""
        barcode = str(submission.get("barcode") or "").strip()
        name = str(submission.get("name") or "").strip()
        if not barcode or not name:
            raise ValueError("submission requires barcode and name")
        product = Product.from_dict({**submission, "barcode": barcode, "name": name, "source": USER_SOURCE})
        entry = {
            "barcode": barcode,
            "name": name,
            "brand": submission.get("brand"),
            "ingredients_text": submission.get("ingredients_text"),
            "submitted_at": _now(),
            "synced": False,
        }
        with self._lock:
            self._submissions.insert(0, entry)
            stored = self._upsert(product)
            self._save()
        logger.info("STORE submission barcode=%s name=%s", barcode, name[:60])
        return stored

    def all_products(self) -> List[Product]:
        with self._lock:
            raws = list(self._products.values())
        return sorted((Product.from_dict(r) for r in raws), key=_sort_key)

    def search(self, query: str, limit: int = 20) -> List[Product]:
        """Case-insensitive substring match on name or brand, sorted by name."""
        q = (query or "").strip().lower()
        matches = [
            p for p in self.all_products()
            if q in (p.name or "").lower() or q in (p.brand or "").lower()
        ]
        return matches[:limit]

    def recent_submissions(self, limit: int = 10) -> List[dict]:
        with self._lock:
            return [dict(s) for s in self._submissions[:limit]]

    def stats(self) -> dict[str, int]:
        with self._lock:
            sources = [p.get("source") for p in self._products.values()]
            total_submissions = len(self._submissions)
        return {
            "total_products": len(sources),
            "total_submissions": total_submissions,
            "seed_products": sum(1 for s in sources if s == SEED_SOURCE),
            "api_cached": sum(1 for s in sources if s in API_SOURCES),
            "user_submitted": sum(1 for s in sources if s == USER_SOURCE),
        }

    def seed(self, products: Iterable[Product]) -> int:
        """Insert seed products whose barcode is not yet stored. Returns how many were added."""
        added = 0
        with self._lock:
            for product in products:
                if product.barcode in self._products:
                    continue
                self._upsert(product.with_updates(source=SEED_SOURCE))
                added += 1
            if added:
                self._save()
        logger.info("STORE seed added=%s", added)
        return added

    def __len__(self) -> int:
        with self._lock:
            return len(self._products)
