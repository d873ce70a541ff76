"""
Source-fallback product lookup: Open Food Facts -> FatSecret -> UPC ItemDB -> Edamam -> local cache -> not found.
Each provider call is bounded by a per-source timeout so one slow source cannot stall the chain.
"""
import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from bitecheck.config import (
    get_open_food_facts_enabled,
    get_resolver_concurrent,
    get_source_timeout,
    get_upcitemdb_enabled,
)
from bitecheck.evaluation.classifier import IngredientClassifier
from bitecheck.evaluation.scoring_engine import score_product
from bitecheck.external_apis.base import ProductProvider
from bitecheck.external_apis.edamam import EdamamProvider
from bitecheck.external_apis.fatsecret import FatSecretProvider
from bitecheck.external_apis.open_food_facts import OpenFoodFactsProvider
from bitecheck.external_apis.upc_itemdb import UpcItemDbProvider
from bitecheck.models.product import Product
from bitecheck.models.score import ScoreResult

logger = logging.getLogger(__name__)

LOCAL_SOURCE = "local"


@dataclass
class LookupResult:
    product: Optional[Product]
    score: Optional[ScoreResult]
    source: Optional[str]

    @property
    def found(self) -> bool:
        return self.product is not None

    @classmethod
    def not_found(cls) -> "LookupResult":
        return cls(product=None, score=None, source=None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "found": self.found,
            "product": self.product.to_dict() if self.product else None,
            "score": self.score.to_dict() if self.score else None,
            "source": self.source,
        }


def build_default_providers(**kwargs: Any) -> List[ProductProvider]:
    """Providers in priority order, configured from the environment."""
    return [
        OpenFoodFactsProvider(enabled=get_open_food_facts_enabled(), **kwargs),
        FatSecretProvider(**kwargs),
        UpcItemDbProvider(enabled=get_upcitemdb_enabled(), **kwargs),
        EdamamProvider(**kwargs),
    ]


class SourceFallbackResolver:
    """
    Resolve a barcode against providers in priority order.

    store needs get(barcode) and put(product); pass None to skip caching.
    The executor is owned by the resolver unless one is passed in.
    """

    def __init__(
        self,
        providers: Optional[Sequence[ProductProvider]] = None,
        store: Any = None,
        timeout: Optional[float] = None,
        concurrent: Optional[bool] = None,
        executor: Optional[ThreadPoolExecutor] = None,
        classifier: Optional[IngredientClassifier] = None,
    ):
        self.providers = list(providers) if providers is not None else build_default_providers()
        self.store = store
        self.timeout = timeout if timeout is not None else get_source_timeout()
        self.concurrent = concurrent if concurrent is not None else get_resolver_concurrent()
        self.classifier = classifier
        self._owns_executor = executor is None
        # Timed-out calls keep their worker until they return; leave room for the next source.
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max(2, len(self.providers) * 2),
            thread_name_prefix="bitecheck-resolver",
        )

    def resolve(self, barcode: str) -> LookupResult:
        barcode = str(barcode).strip()
        started = time.monotonic()
        if self.concurrent:
            hit = self._resolve_concurrent(barcode)
        else:
            hit = self._resolve_sequential(barcode)

        if hit is not None:
            provider, product = hit
            if not product.source:
                product = product.with_updates(source=provider.source)
            self._cache_put(product)
            result = LookupResult(product, self._score(product), product.source)
            logger.info(
                "RESOLVER resolved barcode=%s source=%s elapsed=%.2fs",
                barcode, result.source, time.monotonic() - started,
            )
            return result

        cached = self._cache_get(barcode)
        if cached is not None:
            logger.info("RESOLVER cache fallback barcode=%s source=%s", barcode, cached.source or LOCAL_SOURCE)
            return LookupResult(cached, self._score(cached), cached.source or LOCAL_SOURCE)

        logger.info("RESOLVER not found barcode=%s elapsed=%.2fs", barcode, time.monotonic() - started)
        return LookupResult.not_found()

    def _resolve_sequential(self, barcode: str):
        for provider in self.providers:
            future = self._executor.submit(provider.fetch, barcode)
            product = self._await(provider, future, barcode, self.timeout)
            if product is not None:
                return provider, product
        return None

    def _resolve_concurrent(self, barcode: str):
        deadline = time.monotonic() + self.timeout
        futures = [(p, self._executor.submit(p.fetch, barcode)) for p in self.providers]
        try:
            for provider, future in futures:
                remaining = max(0.0, deadline - time.monotonic())
                product = self._await(provider, future, barcode, remaining)
                if product is not None:
                    return provider, product
            return None
        finally:
            for _, future in futures:
                future.cancel()

    def _await(self, provider: ProductProvider, future: Future, barcode: str, timeout: float) -> Optional[Product]:
        try:
            product = future.result(timeout=timeout)
        except FutureTimeout:
            logger.warning("RESOLVER skip provider=%s barcode=%s error=timeout after %.1fs", provider.source, barcode, timeout)
            return None
        except Exception as e:
            logger.warning("RESOLVER skip provider=%s barcode=%s error=%s: %s", provider.source, barcode, type(e).__name__, e)
            return None
        if product is None:
            logger.debug("RESOLVER miss source=%s barcode=%s", provider.source, barcode)
        return product

    def _score(self, product: Product) -> ScoreResult:
        return score_product(product, classifier=self.classifier)

    def _cache_put(self, product: Product) -> None:
        if self.store is None:
            return
        try:
            self.store.put(product)
        except Exception as e:
            logger.warning("RESOLVER cache write failed barcode=%s error=%s", product.barcode, e)

    def _cache_get(self, barcode: str) -> Optional[Product]:
        if self.store is None:
            return None
        try:
            return self.store.get(barcode)
        except Exception as e:
            logger.warning("RESOLVER cache read failed barcode=%s error=%s", barcode, e)
            return None

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)

    def __enter__(self) -> "SourceFallbackResolver":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
