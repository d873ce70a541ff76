"""
Assign a risk assessment to each ingredient token.
Order: additive knowledge base -> concerning keywords -> good keywords -> neutral default.
Rule lists are ordered; the first matching rule wins.
"""
import re
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional, Pattern

from bitecheck.knowledge.additive_registry import AdditiveRegistry, get_default_registry
from bitecheck.models.score import AdditiveRef, IngredientAssessment, RISK_COLORS, RISK_LABELS
from bitecheck.parsing.ingredient_parser import parse_ingredients

logger = logging.getLogger(__name__)

NEUTRAL_RISK = 1


@dataclass(frozen=True)
class KeywordRule:
    pattern: Pattern[str]
    risk: int
    description: str


def _rule(pattern: str, risk: int, description: str) -> KeywordRule:
    return KeywordRule(re.compile(pattern, re.IGNORECASE), risk, description)


# Ingredients of concern that are not coded additives.
CONCERNING_KEYWORDS: List[KeywordRule] = [
    # more specific rule first
    _rule(r"partially hydrogenated", 3,
          "Partially hydrogenated oils are the primary source of artificial trans fats, a major cardiovascular risk factor."),
    _rule(r"hydrogenated", 3,
          "Hydrogenated fats contain trans fats linked to heart disease, increased LDL cholesterol, and stroke."),
    _rule(r"high fructose corn syrup|hfcs", 2,
          "Heavily processed sweetener linked to obesity, insulin resistance, and fatty liver disease."),
    _rule(r"palm oil", 1,
          "High in saturated fat. Environmental concerns regarding deforestation."),
    _rule(r"refined", 1,
          "Refined ingredients have been stripped of fiber and nutrients during processing."),
    _rule(r"bleached", 1,
          "Bleaching is a chemical process that removes nutrients and may leave residues."),
    _rule(r"artificial\s*(flavou?r|colou?r)", 2,
          "Artificial flavors/colors are synthetic chemicals. Some are linked to hyperactivity in children."),
    _rule(r"maida|refined wheat flour|refined flour", 1,
          "Refined flour stripped of fiber and nutrients. High glycemic index, spikes blood sugar."),
    _rule(r"inverted sugar|invert sugar", 1,
          "Processed sugar that is more quickly absorbed. Contributes to sugar intake."),
]

# Whole foods, traditional spices, dairy, pulses, nuts and natural sweeteners.
GOOD_KEYWORDS: List[Pattern[str]] = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"whole\s*(wheat|grain)",
        r"organic",
        r"\bwater\b",
        r"\bsalt\b$",
        r"\bsugar\b$",
        r"\bmilk\b",
        r"\bbutter\b",
        r"\bghee\b",
        r"\bcurd\b|yogh?urt",
        r"\bspice",
        r"\bmasala\b",
        r"\bturmeric\b|\bhaldi\b",
        r"\bcumin\b|\bjeera\b",
        r"\bcoriander\b|\bdhania\b",
        r"\bchilli\b|\bchili\b|\bmirch\b",
        r"\bpepper\b",
        r"\bgarlic\b|\blahsun\b",
        r"\bginger\b|\badrak\b",
        r"\bonion\b",
        r"\btomato\b",
        r"\brice\b",
        r"\bwheat\b",
        r"\bflour\b|\batta\b",
        r"\bdal\b|\blentil",
        r"\bchickpea\b|\bchana\b",
        r"\bcoconut",
        r"\bjaggery\b|\bgur\b",
        r"\bhoney\b",
        r"\bsesame\b|\btil\b",
        r"\bmustard",
        r"\bgroundnut\b|\bpeanut",
        r"\bcashew\b|\bkaju\b",
        r"\balmond\b|\bbadam\b",
        r"\bcardamom\b|\belaichi\b",
        r"\bclove\b|\blaung\b",
        r"\bcinnamon\b|\bdalchini\b",
        r"\bfenugreek\b|\bmethi\b",
        r"\bfennel\b|\bsaunf\b",
        r"\basafoetida\b|\bhing\b",
    )
]


def _assessment(name: str, risk: int, description: Optional[str] = None,
                additive: Optional[AdditiveRef] = None) -> IngredientAssessment:
    return IngredientAssessment(
        name=name,
        risk=risk,
        label=RISK_LABELS[risk],
        color=RISK_COLORS[risk],
        description=description,
        additive=additive,
    )


class IngredientClassifier:
    """Stateless after construction; safe to share across threads."""

    def __init__(self, registry: Optional[AdditiveRegistry] = None):
        self._registry = registry or get_default_registry()

    @property
    def registry(self) -> AdditiveRegistry:
        return self._registry

    def classify(self, token: str) -> IngredientAssessment:
        cleaned = (token or "").strip()
        if not cleaned:
            return _assessment("", NEUTRAL_RISK)

        additive = self._registry.lookup(cleaned)
        if additive is not None:
            return _assessment(
                cleaned,
                additive.risk,
                additive.description,
                AdditiveRef(
                    code=additive.code,
                    official_name=additive.name,
                    category=additive.category,
                    description=additive.description,
                ),
            )

        for rule in CONCERNING_KEYWORDS:
            if rule.pattern.search(cleaned):
                return _assessment(cleaned, rule.risk, rule.description)

        lowered = cleaned.lower()
        for pattern in GOOD_KEYWORDS:
            if pattern.search(lowered):
                return _assessment(cleaned, 0)

        return _assessment(cleaned, NEUTRAL_RISK)

    def analyze_all(self, ingredients_text: Optional[str]) -> List[IngredientAssessment]:
        return [self.classify(t) for t in parse_ingredients(ingredients_text)]


@lru_cache(maxsize=1)
def get_default_classifier() -> IngredientClassifier:
    return IngredientClassifier()


def classify(token: str) -> IngredientAssessment:
    """Classify one ingredient token with the default additive table."""
    return get_default_classifier().classify(token)


def analyze_all_ingredients(ingredients_text: Optional[str]) -> List[IngredientAssessment]:
    """Parse an ingredient label and classify every token, preserving order."""
    return get_default_classifier().analyze_all(ingredients_text)
