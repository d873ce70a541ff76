"""
Ingredient classification and product scoring.
"""
from .classifier import IngredientClassifier, analyze_all_ingredients, classify, get_default_classifier
from .nutrient_tags import ingredient_nutrient_tags
from .scoring_engine import grade_for_score, score_product

__all__ = [
    "IngredientClassifier",
    "analyze_all_ingredients",
    "classify",
    "get_default_classifier",
    "ingredient_nutrient_tags",
    "grade_for_score",
    "score_product",
]
