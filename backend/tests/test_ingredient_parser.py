"""
Unit tests: ingredient label tokenization (top-level commas, parenthetical stripping).
Run from backend: python -m pytest tests/test_ingredient_parser.py -v
"""
import pytest


def test_commas_inside_parentheses_do_not_split():
    """'Flavoring (INS 627, 631), Sugar' -> two tokens, parenthetical dropped."""
    from bitecheck.parsing import parse_ingredients
    assert parse_ingredients("Flavoring (INS 627, 631), Sugar") == ["Flavoring", "Sugar"]


def test_order_preserved_and_whitespace_trimmed():
    from bitecheck.parsing import parse_ingredients
    out = parse_ingredients("  Wheat Flour ,Sugar,   Edible Vegetable Oil  ")
    assert out == ["Wheat Flour", "Sugar", "Edible Vegetable Oil"]


def test_nested_parentheses():
    from bitecheck.parsing import parse_ingredients
    raw = "Chocolate (Sugar, Cocoa Butter (Emulsifier (INS 322))), Salt"
    assert parse_ingredients(raw) == ["Chocolate", "Salt"]


def test_empty_tokens_dropped():
    from bitecheck.parsing import parse_ingredients
    assert parse_ingredients("Sugar,, ,Salt,") == ["Sugar", "Salt"]
    assert parse_ingredients("(contains 2% or less)") == []


@pytest.mark.parametrize("raw", [None, "", "   ", 42, ["Sugar"]])
def test_empty_or_non_string_input(raw):
    from bitecheck.parsing import parse_ingredients
    assert parse_ingredients(raw) == []


def test_unbalanced_parentheses_tolerated():
    """A stray ')' is ignored; an unclosed '(' swallows the rest of its token only."""
    from bitecheck.parsing import parse_ingredients
    assert parse_ingredients("Sugar), Salt") == ["Sugar", "Salt"]
    assert parse_ingredients("Spices (Chilli, Cumin") == ["Spices"]


def test_inner_whitespace_collapsed():
    from bitecheck.parsing import parse_ingredients
    assert parse_ingredients("Milk   Solids (10%)  Powder") == ["Milk Solids Powder"]
