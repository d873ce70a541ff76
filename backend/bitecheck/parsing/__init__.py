from .ingredient_parser import parse_ingredients

__all__ = ["parse_ingredients"]
