"""
Product data providers and the source-fallback resolver.
Open Food Facts and UPC ItemDB are free; FatSecret and Edamam need credentials.
"""
from .base import ProductProvider
from .edamam import EdamamProvider
from .fatsecret import FatSecretClient, FatSecretProvider
from .open_food_facts import OpenFoodFactsProvider
from .resolver import LookupResult, SourceFallbackResolver, build_default_providers
from .upc_itemdb import UpcItemDbProvider

__all__ = [
    "ProductProvider",
    "OpenFoodFactsProvider",
    "FatSecretClient",
    "FatSecretProvider",
    "UpcItemDbProvider",
    "EdamamProvider",
    "LookupResult",
    "SourceFallbackResolver",
    "build_default_providers",
]
