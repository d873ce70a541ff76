"""
Structured scoring output. Derived from a Product on demand; never persisted.
"""
from dataclasses import dataclass, field
from typing import Any, Optional

RISK_LABELS = ("Good", "Neutral", "Concerning", "Harmful")

RISK_COLORS = {
    0: "#4CAF50",  # green
    1: "#8BC34A",  # light green
    2: "#FF9800",  # orange
    3: "#F44336",  # red
}


@dataclass(frozen=True)
class Grade:
    letter: str
    label: str
    color: str
    bg_color: str
    min_score: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "letter": self.letter,
            "label": self.label,
            "color": self.color,
            "bg_color": self.bg_color,
            "min_score": self.min_score,
        }


# Ordered by descending threshold.
GRADES: tuple[Grade, ...] = (
    Grade("A", "Excellent", "#1B8A2A", "#E8F5E9", 80),
    Grade("B", "Good", "#85BB2F", "#F1F8E9", 60),
    Grade("C", "Mediocre", "#FECB02", "#FFFDE7", 40),
    Grade("D", "Poor", "#EE8100", "#FFF3E0", 20),
    Grade("E", "Bad", "#E63E11", "#FBE9E7", 0),
)

GRADES_BY_LETTER = {g.letter: g for g in GRADES}


@dataclass(frozen=True)
class AdditiveRef:
    code: str
    official_name: str
    category: str
    description: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "official_name": self.official_name,
            "category": self.category,
            "description": self.description,
        }


@dataclass(frozen=True)
class IngredientAssessment:
    name: str
    risk: int
    label: str
    color: str
    description: Optional[str] = None
    additive: Optional[AdditiveRef] = None

    @property
    def is_coded_additive(self) -> bool:
        return self.additive is not None and bool(self.additive.code)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "risk": self.risk,
            "label": self.label,
            "color": self.color,
            "description": self.description,
            "additive": self.additive.to_dict() if self.additive else None,
        }


@dataclass(frozen=True)
class NutrientLevel:
    value: Optional[float]
    level: Optional[str]  # "low" | "moderate" | "high" | None (no data)
    value_serving: Optional[float] = None
    inverted: bool = False  # high value is favorable (protein, fiber)
    points: Optional[int] = None
    max_points: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "value": self.value,
            "value_serving": self.value_serving,
            "level": self.level,
            "inverted": self.inverted,
            "points": self.points,
            "max_points": self.max_points,
        }


@dataclass(frozen=True)
class NutritionBreakdown:
    serving_size: Optional[str]
    nutrients: dict[str, NutrientLevel]
    additives_count: int
    additives_level: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "serving_size": self.serving_size,
            "nutrients": {k: v.to_dict() for k, v in self.nutrients.items()},
            "additives": {"value": self.additives_count, "unit": "count", "level": self.additives_level},
        }


@dataclass(frozen=True)
class PenaltyBreakdown:
    additive: int
    nutrition: int
    processing: int
    ingredient_count: int

    @property
    def total(self) -> int:
        return self.additive + self.nutrition + self.processing + self.ingredient_count

    def to_dict(self) -> dict[str, int]:
        return {
            "additive": self.additive,
            "nutrition": self.nutrition,
            "processing": self.processing,
            "ingredient_count": self.ingredient_count,
            "total": self.total,
        }


@dataclass(frozen=True)
class ScoreStats:
    total_ingredients: int
    harmful_additives: int
    concerning_additives: int
    total_additives: int

    def to_dict(self) -> dict[str, int]:
        return {
            "total_ingredients": self.total_ingredients,
            "harmful_additives": self.harmful_additives,
            "concerning_additives": self.concerning_additives,
            "total_additives": self.total_additives,
        }


@dataclass(frozen=True)
class ScoreResult:
    score: int
    grade: Grade
    ingredients: list[IngredientAssessment] = field(default_factory=list)
    nutrition: Optional[NutritionBreakdown] = None
    penalties: Optional[PenaltyBreakdown] = None
    stats: Optional[ScoreStats] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "grade": self.grade.to_dict(),
            "ingredients": [i.to_dict() for i in self.ingredients],
            "nutrition": self.nutrition.to_dict() if self.nutrition else None,
            "penalties": self.penalties.to_dict() if self.penalties else None,
            "stats": self.stats.to_dict() if self.stats else None,
        }
