from .product import Product, NUTRIENTS_100G, NUTRIENTS_SERVING, UNKNOWN_PRODUCT_NAME
from .score import (
    AdditiveRef,
    Grade,
    GRADES,
    IngredientAssessment,
    NutrientLevel,
    NutritionBreakdown,
    PenaltyBreakdown,
    RISK_COLORS,
    RISK_LABELS,
    ScoreResult,
    ScoreStats,
)

__all__ = [
    "Product",
    "NUTRIENTS_100G",
    "NUTRIENTS_SERVING",
    "UNKNOWN_PRODUCT_NAME",
    "AdditiveRef",
    "Grade",
    "GRADES",
    "IngredientAssessment",
    "NutrientLevel",
    "NutritionBreakdown",
    "PenaltyBreakdown",
    "RISK_COLORS",
    "RISK_LABELS",
    "ScoreResult",
    "ScoreStats",
]
