"""
UPC ItemDB trial API (no key, ~100 requests/day). Identifies products but has no nutrition.
"""
import logging
from typing import Any, Optional, TypedDict

from bitecheck.external_apis.base import ProductProvider
from bitecheck.models.product import Product, UNKNOWN_PRODUCT_NAME

logger = logging.getLogger(__name__)

UPCITEMDB_LOOKUP_URL = "https://api.upcitemdb.com/prod/trial/lookup"


class UpcItem(TypedDict, total=False):
    ean: str
    title: str
    brand: str
    category: str
    description: str
    images: list


def normalize_upc_item(item: UpcItem, barcode: str) -> Product:
    images = item.get("images") or []
    return Product(
        barcode=barcode,
        name=item.get("title") or UNKNOWN_PRODUCT_NAME,
        brand=item.get("brand") or None,
        category=item.get("category") or None,
        # description is the closest thing this source has to an ingredient list
        ingredients_text=item.get("description") or None,
        image_url=images[0] if images else None,
        source=UpcItemDbProvider.source,
    )


class UpcItemDbProvider(ProductProvider):
    name = "UPC ItemDB"
    source = "upcitemdb"

    def __init__(self, enabled: bool = True, **kwargs: Any):
        super().__init__(**kwargs)
        self.enabled = enabled

    def is_configured(self) -> bool:
        return self.enabled

    def fetch(self, barcode: str) -> Optional[Product]:
        if not self.enabled:
            return None
        data = self._get_json(
            UPCITEMDB_LOOKUP_URL,
            params={"upc": barcode},
            headers={"Accept": "application/json"},
        )
        if not isinstance(data, dict):
            return None
        items = data.get("items") or []
        if data.get("code") != "OK" or not items:
            logger.info("UPCITEMDB not found barcode=%s code=%s", barcode, data.get("code"))
            return None
        try:
            product = normalize_upc_item(items[0], barcode)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning("UPCITEMDB malformed payload barcode=%s error=%s", barcode, e)
            return None
        logger.info("UPCITEMDB success barcode=%s name=%s", barcode, product.name[:60])
        return product
