"""
Product health score: 100 minus four penalties, mapped to a grade A-E.

Penalties:
- additive:         +10 per harmful (risk 3), +5 per concerning (risk 2) ingredient, max 40
- nutrition:        sugar/salt/saturated fat per 100g through 11-band tables (0-10 each), max 30
- processing:       coded additive count (or explicit count) 0/2/5/10/15
- ingredient count: >10 -> 5, >15 -> 10, >20 -> 15

Pure: no I/O, same input -> same ScoreResult. Missing or non-numeric nutrients contribute 0.
"""
import math
import logging
from typing import Any, Mapping, Optional, Sequence, Tuple, Union

from bitecheck.evaluation.classifier import IngredientClassifier, get_default_classifier
from bitecheck.models.product import Product
from bitecheck.models.score import (
    GRADES,
    Grade,
    NutrientLevel,
    NutritionBreakdown,
    PenaltyBreakdown,
    ScoreResult,
    ScoreStats,
)

logger = logging.getLogger(__name__)

# (upper bound inclusive, points); values above the last finite bound score 10.
Bands = Sequence[Tuple[float, int]]

SUGAR_BANDS: Bands = (
    (4.5, 0), (9, 1), (13.5, 2), (18, 3), (22.5, 4), (27, 5),
    (31, 6), (36, 7), (40, 8), (45, 9), (math.inf, 10),
)
SALT_BANDS: Bands = (
    (0.2, 0), (0.4, 1), (0.6, 2), (0.8, 3), (1.0, 4), (1.2, 5),
    (1.4, 6), (1.6, 7), (1.8, 8), (2.0, 9), (math.inf, 10),
)
SAT_FAT_BANDS: Bands = (
    (1, 0), (2, 1), (3, 2), (4, 3), (5, 4), (6, 5),
    (7, 6), (8, 7), (9, 8), (10, 9), (math.inf, 10),
)

NUTRIENT_MAX_POINTS = 10
MAX_ADDITIVE_PENALTY = 40
MAX_NUTRITION_PENALTY = 30

ProductLike = Union[Product, Mapping[str, Any]]


def as_number(value: Any) -> Optional[float]:
    """Coerce a nutrient value to float; None for missing, bool, NaN, infinite or non-numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def band_points(value: Any, bands: Bands) -> int:
    number = as_number(value)
    if number is None:
        return 0
    for upper, points in bands:
        if number <= upper:
            return points
    return NUTRIENT_MAX_POINTS


def processing_penalty(additive_count: int) -> int:
    if additive_count >= 8:
        return 15
    if additive_count >= 5:
        return 10
    if additive_count >= 3:
        return 5
    if additive_count >= 1:
        return 2
    return 0


def ingredient_count_penalty(count: int) -> int:
    if count > 20:
        return 15
    if count > 15:
        return 10
    if count > 10:
        return 5
    return 0


def grade_for_score(score: float) -> Grade:
    """Highest grade whose threshold is <= score."""
    for grade in GRADES:
        if score >= grade.min_score:
            return grade
    return GRADES[-1]


def _points_level(points: int) -> str:
    if points <= 3:
        return "low"
    if points <= 6:
        return "moderate"
    return "high"


def _level_above(value: Optional[float], high: float, moderate: float) -> Optional[str]:
    """Strict cut points: > high -> high, > moderate -> moderate."""
    if value is None:
        return None
    if value > high:
        return "high"
    if value > moderate:
        return "moderate"
    return "low"


def _level_at_least(value: Optional[float], high: float, moderate: float) -> Optional[str]:
    """Inclusive cut points for favorable nutrients: >= high -> high."""
    if value is None:
        return None
    if value >= high:
        return "high"
    if value >= moderate:
        return "moderate"
    return "low"


def _additive_level(count: int) -> str:
    if count <= 2:
        return "low"
    if count <= 5:
        return "moderate"
    return "high"


def _as_mapping(product: ProductLike) -> Mapping[str, Any]:
    if isinstance(product, Product):
        return product.to_dict()
    return product or {}


def _explicit_additive_count(value: Any) -> int:
    number = as_number(value)
    if number is None or number <= 0 or math.isinf(number):
        return 0
    return int(number)


def score_product(
    product: ProductLike,
    classifier: Optional[IngredientClassifier] = None,
) -> ScoreResult:
    """Score a Product (or a mapping with the same keys)."""
    p = _as_mapping(product)
    clf = classifier or get_default_classifier()

    ingredients_text = p.get("ingredients_text")
    if not isinstance(ingredients_text, str):
        ingredients_text = ""
    analyzed = clf.analyze_all(ingredients_text)

    # 1. Additive penalty
    harmful = sum(1 for i in analyzed if i.risk == 3)
    concerning = sum(1 for i in analyzed if i.risk == 2)
    additive_pen = min(harmful * 10 + concerning * 5, MAX_ADDITIVE_PENALTY)

    # 2. Nutrition penalty
    sugar_pts = band_points(p.get("sugar_100g"), SUGAR_BANDS)
    salt_pts = band_points(p.get("salt_100g"), SALT_BANDS)
    sat_fat_pts = band_points(p.get("saturated_fat_100g"), SAT_FAT_BANDS)
    nutrition_pen = min(sugar_pts + salt_pts + sat_fat_pts, MAX_NUTRITION_PENALTY)

    # 3. Processing penalty; an explicit non-zero count wins over detection
    detected = sum(1 for i in analyzed if i.is_coded_additive)
    total_additives = _explicit_additive_count(p.get("additives_count")) or detected
    processing_pen = processing_penalty(total_additives)

    # 4. Ingredient count penalty
    count_pen = ingredient_count_penalty(len(analyzed))

    penalties = PenaltyBreakdown(
        additive=additive_pen,
        nutrition=nutrition_pen,
        processing=processing_pen,
        ingredient_count=count_pen,
    )
    score = int(max(0, min(100, 100 - penalties.total)))
    grade = grade_for_score(score)

    nutrition = _nutrition_breakdown(p, sugar_pts, salt_pts, sat_fat_pts, total_additives)
    stats = ScoreStats(
        total_ingredients=len(analyzed),
        harmful_additives=harmful,
        concerning_additives=concerning,
        total_additives=total_additives,
    )
    logger.debug(
        "SCORE barcode=%s score=%d grade=%s penalties=%s",
        p.get("barcode"), score, grade.letter, penalties.to_dict(),
    )
    return ScoreResult(
        score=score,
        grade=grade,
        ingredients=analyzed,
        nutrition=nutrition,
        penalties=penalties,
        stats=stats,
    )


def _nutrition_breakdown(
    p: Mapping[str, Any],
    sugar_pts: int,
    salt_pts: int,
    sat_fat_pts: int,
    total_additives: int,
) -> NutritionBreakdown:
    """Display levels only; none of this feeds the score."""

    def num(key: str) -> Optional[float]:
        return as_number(p.get(key))

    def penalized(key: str, points: int) -> NutrientLevel:
        value = num(f"{key}_100g")
        return NutrientLevel(
            value=value,
            value_serving=num(f"{key}_serving"),
            level=_points_level(points) if value is not None else None,
            points=points,
            max_points=NUTRIENT_MAX_POINTS,
        )

    calories = num("calories_100g")
    protein = num("protein_100g")
    carbs = num("carbs_100g")
    fat = num("fat_100g")
    fiber = num("fiber_100g")

    nutrients = {
        "calories": NutrientLevel(calories, _level_above(calories, 400, 200), num("calories_serving")),
        "protein": NutrientLevel(protein, _level_at_least(protein, 8, 3), num("protein_serving"), inverted=True),
        "carbs": NutrientLevel(carbs, _level_above(carbs, 60, 30), num("carbs_serving")),
        "fat": NutrientLevel(fat, _level_above(fat, 17, 7), num("fat_serving")),
        "fiber": NutrientLevel(fiber, _level_at_least(fiber, 8, 3), num("fiber_serving"), inverted=True),
        "sugar": penalized("sugar", sugar_pts),
        "salt": penalized("salt", salt_pts),
        "saturated_fat": penalized("saturated_fat", sat_fat_pts),
    }
    serving_size = p.get("serving_size")
    return NutritionBreakdown(
        serving_size=serving_size or None,
        nutrients=nutrients,
        additives_count=total_additives,
        additives_level=_additive_level(total_additives),
    )
