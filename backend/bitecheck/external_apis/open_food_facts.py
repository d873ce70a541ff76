"""
Open Food Facts product API (no key required). Primary source.
Product: https://world.openfoodfacts.org/api/v0/product/{barcode}.json
"""
import logging
from typing import Any, Optional, TypedDict

from bitecheck.external_apis.base import ProductProvider, parse_float
from bitecheck.models.product import Product, UNKNOWN_PRODUCT_NAME

logger = logging.getLogger(__name__)

OFF_PRODUCT_URL = "https://world.openfoodfacts.org/api/v0/product"
USER_AGENT = "BiteCheck - Packaged Food Scanner - Version 1.0"

# canonical nutrient prefix -> OFF nutriment key
_NUTRIMENT_KEYS = {
    "sugar": "sugars",
    "salt": "salt",
    "saturated_fat": "saturated-fat",
    "calories": "energy-kcal",
    "protein": "proteins",
    "carbs": "carbohydrates",
    "fat": "fat",
    "fiber": "fiber",
}


class OffProduct(TypedDict, total=False):
    product_name: str
    product_name_en: str
    brands: str
    categories_tags: list
    pnns_groups_1: str
    ingredients_text: str
    ingredients_text_en: str
    nutriments: dict
    serving_size: str
    image_front_url: str
    image_url: str
    nutriscore_grade: str
    nova_group: int
    additives_tags: list
    allergens: str
    quantity: str
    packaging: str
    countries: str


class OffResponse(TypedDict, total=False):
    status: int
    product: OffProduct


def _category(p: OffProduct) -> Optional[str]:
    tags = p.get("categories_tags") or []
    if tags:
        return str(tags[0]).replace("en:", "", 1) or None
    return p.get("pnns_groups_1") or None


def _per_100g(nutriments: dict, off_key: str) -> Optional[float]:
    value = nutriments.get(f"{off_key}_100g")
    if value is None:
        value = nutriments.get(off_key)
    return parse_float(value)


def normalize_off_product(p: OffProduct, barcode: str) -> Product:
    """Map an OFF product payload to the canonical Product."""
    nutriments = p.get("nutriments") or {}
    values: dict[str, Any] = {}
    for prefix, off_key in _NUTRIMENT_KEYS.items():
        values[f"{prefix}_100g"] = _per_100g(nutriments, off_key)
        values[f"{prefix}_serving"] = parse_float(nutriments.get(f"{off_key}_serving"))

    return Product(
        barcode=barcode,
        name=(p.get("product_name") or p.get("product_name_en") or UNKNOWN_PRODUCT_NAME).strip(),
        brand=p.get("brands") or None,
        category=_category(p),
        ingredients_text=p.get("ingredients_text") or p.get("ingredients_text_en") or None,
        serving_size=p.get("serving_size") or None,
        image_url=p.get("image_front_url") or p.get("image_url") or None,
        source=OpenFoodFactsProvider.source,
        extra={
            "nutriscore_grade": p.get("nutriscore_grade") or None,
            "nova_group": p.get("nova_group") or None,
            "additives_tags": list(p.get("additives_tags") or []),
            "allergens": p.get("allergens") or "",
            "quantity": p.get("quantity") or "",
            "packaging": p.get("packaging") or "",
            "countries": p.get("countries") or "",
        },
        **values,
    )


class OpenFoodFactsProvider(ProductProvider):
    name = "Open Food Facts"
    source = "open_food_facts"

    def __init__(self, enabled: bool = True, **kwargs: Any):
        super().__init__(**kwargs)
        self.enabled = enabled

    def is_configured(self) -> bool:
        return self.enabled

    def fetch(self, barcode: str) -> Optional[Product]:
        if not self.enabled:
            logger.debug("OPEN_FOOD_FACTS disabled; skip barcode=%s", barcode)
            return None
        data: Optional[OffResponse] = self._get_json(
            f"{OFF_PRODUCT_URL}/{barcode}.json",
            headers={"User-Agent": USER_AGENT},
        )
        if not isinstance(data, dict):
            return None
        if data.get("status") != 1 or not data.get("product"):
            logger.info("OPEN_FOOD_FACTS not found barcode=%s", barcode)
            return None
        try:
            product = normalize_off_product(data["product"], barcode)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning("OPEN_FOOD_FACTS malformed payload barcode=%s error=%s", barcode, e)
            return None
        logger.info("OPEN_FOOD_FACTS success barcode=%s name=%s", barcode, product.name[:60])
        return product
