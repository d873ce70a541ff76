"""
Canonical product record shared by every provider, the cache and the scoring engine.
Unknown fields are None, never omitted.
"""
from dataclasses import dataclass, field, fields, replace
from typing import Any, Optional

# Per-100g nutrient fields used by scoring and breakdown.
NUTRIENTS_100G = (
    "sugar_100g",
    "salt_100g",
    "saturated_fat_100g",
    "calories_100g",
    "protein_100g",
    "carbs_100g",
    "fat_100g",
    "fiber_100g",
)

NUTRIENTS_SERVING = (
    "sugar_serving",
    "salt_serving",
    "saturated_fat_serving",
    "calories_serving",
    "protein_serving",
    "carbs_serving",
    "fat_serving",
    "fiber_serving",
)

UNKNOWN_PRODUCT_NAME = "Unknown Product"


@dataclass
class Product:
    barcode: str
    name: str = UNKNOWN_PRODUCT_NAME
    brand: Optional[str] = None
    category: Optional[str] = None
    ingredients_text: Optional[str] = None
    # Per 100g
    sugar_100g: Optional[float] = None
    salt_100g: Optional[float] = None
    saturated_fat_100g: Optional[float] = None
    calories_100g: Optional[float] = None
    protein_100g: Optional[float] = None
    carbs_100g: Optional[float] = None
    fat_100g: Optional[float] = None
    fiber_100g: Optional[float] = None
    # Per serving
    serving_size: Optional[str] = None
    sugar_serving: Optional[float] = None
    salt_serving: Optional[float] = None
    saturated_fat_serving: Optional[float] = None
    calories_serving: Optional[float] = None
    protein_serving: Optional[float] = None
    carbs_serving: Optional[float] = None
    fat_serving: Optional[float] = None
    fiber_serving: Optional[float] = None
    image_url: Optional[str] = None
    # Explicit additive count from a source; overrides detected count when non-zero.
    additives_count: Optional[int] = None
    source: Optional[str] = None  # provenance label, e.g. "open_food_facts", "user"
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    # Provider-specific display fields (nutriscore_grade, nova_group, ...)
    extra: dict[str, Any] = field(default_factory=dict)

    def with_updates(self, **changes: Any) -> "Product":
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            out[f.name] = dict(value) if f.name == "extra" else value
        return out

    @classmethod
    def from_dict(cls, d: dict) -> "Product":
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in d.items() if k in known}
        kwargs["barcode"] = str(d["barcode"])
        if not kwargs.get("name"):
            kwargs["name"] = UNKNOWN_PRODUCT_NAME
        kwargs["extra"] = dict(d.get("extra") or {})
        return cls(**kwargs)
