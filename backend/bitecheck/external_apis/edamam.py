"""
Edamam Food Database parser API, UPC lookup. Nutrients are per 100g; no per-serving data.
"""
import logging
from typing import Any, Optional, TypedDict

from bitecheck.config import get_edamam_credentials
from bitecheck.external_apis.base import ProductProvider, parse_float, sodium_mg_to_salt_g
from bitecheck.models.product import Product, UNKNOWN_PRODUCT_NAME

logger = logging.getLogger(__name__)

EDAMAM_PARSER_URL = "https://api.edamam.com/api/food-database/v2/parser"


class EdamamFood(TypedDict, total=False):
    foodId: str
    label: str
    knownAs: str
    brand: str
    category: str
    image: str
    nutrients: dict


def normalize_edamam_food(food: EdamamFood, barcode: str) -> Product:
    n = food.get("nutrients") or {}
    return Product(
        barcode=barcode,
        name=food.get("label") or food.get("knownAs") or UNKNOWN_PRODUCT_NAME,
        brand=food.get("brand") or None,
        category=food.get("category") or None,
        sugar_100g=parse_float(n.get("SUGAR")),
        salt_100g=sodium_mg_to_salt_g(parse_float(n.get("NA"))),
        saturated_fat_100g=parse_float(n.get("FASAT")),
        calories_100g=parse_float(n.get("ENERC_KCAL")),
        protein_100g=parse_float(n.get("PROCNT")),
        carbs_100g=parse_float(n.get("CHOCDF")),
        fat_100g=parse_float(n.get("FAT")),
        fiber_100g=parse_float(n.get("FIBTG")),
        image_url=food.get("image") or None,
        source=EdamamProvider.source,
    )


class EdamamProvider(ProductProvider):
    name = "Edamam"
    source = "edamam"

    def __init__(self, app_id: Optional[str] = None, app_key: Optional[str] = None, **kwargs: Any):
        super().__init__(**kwargs)
        if app_id is None or app_key is None:
            env_id, env_key = get_edamam_credentials()
            app_id = env_id if app_id is None else app_id
            app_key = env_key if app_key is None else app_key
        self.app_id = app_id
        self.app_key = app_key

    def is_configured(self) -> bool:
        return bool(self.app_id) and bool(self.app_key)

    def fetch(self, barcode: str) -> Optional[Product]:
        if not self.is_configured():
            logger.debug("EDAMAM not configured; skip barcode=%s", barcode)
            return None
        data = self._get_json(
            EDAMAM_PARSER_URL,
            params={"upc": barcode, "app_id": self.app_id, "app_key": self.app_key},
            headers={"Accept": "application/json"},
        )
        if not isinstance(data, dict):
            return None
        hints = data.get("hints") or []
        food = hints[0].get("food") if hints and isinstance(hints[0], dict) else None
        if not food:
            logger.info("EDAMAM not found barcode=%s", barcode)
            return None
        try:
            product = normalize_edamam_food(food, barcode)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning("EDAMAM malformed payload barcode=%s error=%s", barcode, e)
            return None
        logger.info("EDAMAM success barcode=%s name=%s", barcode, product.name[:60])
        return product
