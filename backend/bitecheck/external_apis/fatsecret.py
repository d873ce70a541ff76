"""
FatSecret Platform API (OAuth 2.0 client credentials). Secondary source with good Indian coverage.
Token: https://oauth.fatsecret.com/connect/token
API:   https://platform.fatsecret.com/rest/server.api
"""
import logging
import time
from typing import Any, Callable, List, Optional, TypedDict, Union

import requests

from bitecheck.config import get_fatsecret_credentials
from bitecheck.external_apis.base import ProductProvider, parse_float, round1, sodium_mg_to_salt_g
from bitecheck.external_apis.http_retry import request_with_retries
from bitecheck.models.product import Product, UNKNOWN_PRODUCT_NAME

logger = logging.getLogger(__name__)

TOKEN_URL = "https://oauth.fatsecret.com/connect/token"
API_URL = "https://platform.fatsecret.com/rest/server.api"
TOKEN_EXPIRY_MARGIN_SECONDS = 60


class FatSecretServing(TypedDict, total=False):
    serving_description: str
    metric_serving_amount: str
    metric_serving_unit: str
    calories: str
    protein: str
    carbohydrate: str
    fat: str
    fiber: str
    sugar: str
    sodium: str
    saturated_fat: str


class FatSecretFood(TypedDict, total=False):
    food_id: str
    food_name: str
    brand_name: str
    food_type: str
    servings: dict


class FatSecretError(Exception):
    """Token request failed (bad credentials or upstream error)."""


class FatSecretClient:
    """
    Holds credentials and the bearer token for one FatSecret account.
    The token is reused until TOKEN_EXPIRY_MARGIN_SECONDS before it expires.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        timeout: float = 4.0,
        max_retries: int = 1,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.timeout = timeout
        self.max_retries = max_retries
        self.session = session
        self._clock = clock
        self._token: Optional[str] = None
        self._token_expiry = 0.0

    def is_configured(self) -> bool:
        return bool(self.client_id) and bool(self.client_secret)

    def access_token(self) -> str:
        if self._token and self._clock() < self._token_expiry:
            return self._token
        resp, err = request_with_retries(
            "POST",
            TOKEN_URL,
            data={
                "grant_type": "client_credentials",
                "client_id": self.client_id,
                "client_secret": self.client_secret,
            },
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            timeout=self.timeout,
            max_retries=self.max_retries,
            session=self.session,
        )
        if err is not None:
            raise FatSecretError(f"token request failed: {err}")
        if not resp.ok:
            raise FatSecretError(f"token error: {resp.status_code}")
        data = resp.json()
        self._token = data["access_token"]
        expires_in = float(data.get("expires_in") or 0)
        self._token_expiry = self._clock() + expires_in - TOKEN_EXPIRY_MARGIN_SECONDS
        logger.info("FATSECRET token refreshed expires_in=%s", expires_in)
        return self._token

    def api_call(self, method: str, **params: Any) -> Optional[dict]:
        """Call one API method. None on transport error or non-2xx status."""
        token = self.access_token()
        query = {"method": method, "format": "json", **params}
        resp, err = request_with_retries(
            "GET",
            API_URL,
            params=query,
            headers={"Authorization": f"Bearer {token}"},
            timeout=self.timeout,
            max_retries=self.max_retries,
            session=self.session,
        )
        if err is not None:
            logger.warning("FATSECRET %s failed error=%s", method, err)
            return None
        if not resp.ok:
            logger.warning("FATSECRET %s status=%s", method, resp.status_code)
            return None
        return resp.json()

    def find_food_id(self, barcode: str) -> Optional[str]:
        data = self.api_call("food.find_id_for_barcode", barcode=barcode) or {}
        value = (data.get("food_id") or {}).get("value")
        if not value or str(value) == "0":
            return None
        return str(value)

    def get_food(self, food_id: str) -> Optional[FatSecretFood]:
        data = self.api_call("food.get.v4", food_id=food_id) or {}
        return data.get("food") or None


def _serving_list(food: FatSecretFood) -> List[FatSecretServing]:
    servings: Union[list, dict, None] = (food.get("servings") or {}).get("serving")
    if isinstance(servings, list):
        return servings
    return [servings] if servings else []


def _is_100g(serving: FatSecretServing) -> bool:
    return serving.get("metric_serving_unit") == "g" and parse_float(serving.get("metric_serving_amount")) == 100


def normalize_fatsecret_food(food: FatSecretFood, barcode: str) -> Product:
    """
    Per-100g values come from the 100 g metric serving when present, else the first
    serving scaled to 100 g. Per-serving values come from the first serving.
    """
    base = Product(
        barcode=barcode,
        name=food.get("food_name") or UNKNOWN_PRODUCT_NAME,
        brand=food.get("brand_name") or None,
        category=food.get("food_type") or None,
        source=FatSecretProvider.source,
        extra={"fatsecret_food_id": food.get("food_id")},
    )
    servings = _serving_list(food)
    if not servings:
        return base

    default = servings[0]
    per_100g = next((s for s in servings if _is_100g(s)), None)
    serving = per_100g or default
    if per_100g is not None:
        scale: Optional[float] = 1.0
    else:
        amount = parse_float(serving.get("metric_serving_amount")) or 0
        scale = 100 / amount if amount > 0 else None

    def scaled(key: str) -> Optional[float]:
        n = parse_float(serving.get(key))
        if n is None or scale is None:
            return None
        return round1(n * scale)

    def direct(key: str) -> Optional[float]:
        return parse_float(default.get(key))

    return base.with_updates(
        sugar_100g=scaled("sugar"),
        salt_100g=sodium_mg_to_salt_g(scaled("sodium")),
        saturated_fat_100g=scaled("saturated_fat"),
        calories_100g=scaled("calories"),
        protein_100g=scaled("protein"),
        carbs_100g=scaled("carbohydrate"),
        fat_100g=scaled("fat"),
        fiber_100g=scaled("fiber"),
        serving_size=default.get("serving_description") or None,
        calories_serving=direct("calories"),
        protein_serving=direct("protein"),
        carbs_serving=direct("carbohydrate"),
        fat_serving=direct("fat"),
        fiber_serving=direct("fiber"),
        sugar_serving=direct("sugar"),
        salt_serving=sodium_mg_to_salt_g(direct("sodium")),
        saturated_fat_serving=direct("saturated_fat"),
    )


class FatSecretProvider(ProductProvider):
    name = "FatSecret"
    source = "fatsecret"

    def __init__(self, client: Optional[FatSecretClient] = None, **kwargs: Any):
        super().__init__(**kwargs)
        if client is None:
            client_id, client_secret = get_fatsecret_credentials()
            client = FatSecretClient(
                client_id,
                client_secret,
                timeout=self.timeout,
                max_retries=self.max_retries,
                session=self.session,
            )
        self.client = client

    def is_configured(self) -> bool:
        return self.client.is_configured()

    def fetch(self, barcode: str) -> Optional[Product]:
        if not self.is_configured():
            logger.debug("FATSECRET not configured; skip barcode=%s", barcode)
            return None
        try:
            food_id = self.client.find_food_id(barcode)
            if not food_id:
                logger.info("FATSECRET not found barcode=%s", barcode)
                return None
            food = self.client.get_food(food_id)
            if not food:
                return None
            product = normalize_fatsecret_food(food, barcode)
        except FatSecretError as e:
            logger.warning("FATSECRET auth failed barcode=%s error=%s", barcode, e)
            return None
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning("FATSECRET malformed payload barcode=%s error=%s", barcode, e)
            return None
        logger.info("FATSECRET success barcode=%s name=%s", barcode, product.name[:60])
        return product
