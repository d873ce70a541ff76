"""
Map parsed ingredients to the nutrient they mainly contribute (for display next to the breakdown).
An ingredient may appear under several nutrients; at most once per nutrient.
"""
import re
from typing import Dict, List, Optional, Pattern

from bitecheck.parsing.ingredient_parser import parse_ingredients


def _compile(*patterns: str) -> List[Pattern[str]]:
    return [re.compile(p, re.IGNORECASE) for p in patterns]


NUTRIENT_KEYWORDS: Dict[str, List[Pattern[str]]] = {
    "sugar": _compile(r"sugar", r"jaggery", r"honey", r"syrup", r"fructose", r"glucose",
                      r"sucrose", r"dextrose", r"molasses"),
    "salt": _compile(r"\bsalt\b", r"sodium"),
    "saturated_fat": _compile(r"palm oil", r"coconut oil", r"\bbutter\b", r"\bghee\b", r"\blard\b",
                              r"\bcream\b", r"cocoa butter"),
    "protein": _compile(r"\bmilk\b", r"\bwhey\b", r"\bcasein\b", r"\bsoy\b", r"\bdal\b", r"\blentil",
                        r"chickpea", r"\bpeanut", r"\balmond", r"\bcashew", r"\begg\b", r"\bpaneer\b"),
    "fiber": _compile(r"whole wheat", r"whole grain", r"\boat", r"\bbran\b", r"fib(?:er|re)",
                      r"\bdal\b", r"\blentil", r"chickpea"),
    "carbs": _compile(r"wheat flour", r"\bmaida\b", r"\batta\b", r"\brice\b", r"\bcorn\b", r"starch",
                      r"sugar", r"maltodextrin", r"semolina"),
    "fat": _compile(r"\boil\b", r"\bfat\b", r"\bbutter\b", r"\bghee\b", r"\bcream\b", r"margarine",
                    r"shortening"),
}


def ingredient_nutrient_tags(ingredients_text: Optional[str]) -> Dict[str, List[str]]:
    """{'sugar': ['Sugar', 'Invert Syrup'], 'protein': ['Milk Solids'], ...}; every key present."""
    tags: Dict[str, List[str]] = {k: [] for k in NUTRIENT_KEYWORDS}
    for ingredient in parse_ingredients(ingredients_text):
        for nutrient, patterns in NUTRIENT_KEYWORDS.items():
            if any(p.search(ingredient) for p in patterns):
                tags[nutrient].append(ingredient)
    return tags
