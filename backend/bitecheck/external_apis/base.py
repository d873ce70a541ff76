"""
Types and helpers shared by product data providers.
Each provider owns its HTTP session, credentials and timeouts; nothing is module-global.
"""
import logging
import math
from abc import ABC, abstractmethod
from typing import Any, Optional

import requests

from bitecheck.config import get_http_timeout, get_provider_max_retries
from bitecheck.external_apis.http_retry import get_with_retries
from bitecheck.models.product import Product

logger = logging.getLogger(__name__)


def parse_float(value: Any) -> Optional[float]:
    """Provider numbers arrive as floats, ints or strings; None when unusable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def round1(value: Optional[float]) -> Optional[float]:
    """Round half up to one decimal."""
    if value is None:
        return None
    return math.floor(value * 10 + 0.5) / 10


def sodium_mg_to_salt_g(sodium_mg: Optional[float]) -> Optional[float]:
    """Salt (g) = sodium (mg) / 1000 * 2.5, one decimal."""
    if sodium_mg is None:
        return None
    return round1(sodium_mg / 1000 * 2.5)


class ProductProvider(ABC):
    """
    One external product source. fetch() returns a canonical Product or None;
    transport and parse failures are logged and reported as None.
    """

    name: str = ""    # human-readable, for logs
    source: str = ""  # provenance label stored on the product

    def __init__(
        self,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        self.timeout = timeout if timeout is not None else get_http_timeout()
        self.max_retries = max_retries if max_retries is not None else get_provider_max_retries()
        self.session = session

    def is_configured(self) -> bool:
        return True

    @abstractmethod
    def fetch(self, barcode: str) -> Optional[Product]:
        raise NotImplementedError

    def _get_json(
        self,
        url: str,
        params: Optional[dict] = None,
        headers: Optional[dict] = None,
    ) -> Optional[Any]:
        """GET and decode JSON. None on transport error, non-2xx status or invalid JSON."""
        resp, err = get_with_retries(
            url,
            params=params,
            headers=headers,
            timeout=self.timeout,
            max_retries=self.max_retries,
            session=self.session,
        )
        if err is not None:
            logger.warning("PROVIDER %s fetch failed after retries error=%s", self.source, err)
            return None
        try:
            resp.raise_for_status()
            return resp.json()
        except requests.RequestException as e:
            logger.warning("PROVIDER %s response error=%s", self.source, e)
            return None
        except ValueError as e:
            logger.warning("PROVIDER %s invalid JSON error=%s", self.source, e)
            return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(source={self.source!r})"
