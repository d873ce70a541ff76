"""
Additive knowledge base: INS-coded additives with risk levels.
"""
from .additive_schema import Additive
from .additive_registry import AdditiveRegistry, get_default_registry

__all__ = [
    "Additive",
    "AdditiveRegistry",
    "get_default_registry",
]
