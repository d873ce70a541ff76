"""
Unit tests: ingredient risk classification (additives, concerning keywords, good keywords, neutral).
Run from backend: python -m pytest tests/test_classifier.py -v
"""
import pytest


def test_coded_additive_carries_reference():
    """INS code resolves to the additive's risk, label, color and reference."""
    from bitecheck.evaluation import classify
    a = classify("INS 211")
    assert a.risk == 3
    assert a.label == "Harmful"
    assert a.color == "#F44336"
    assert a.additive is not None
    assert a.additive.code == "211"
    assert a.additive.official_name == "Sodium Benzoate"
    assert a.is_coded_additive


def test_additive_by_name():
    from bitecheck.evaluation import classify
    a = classify("Citric Acid")
    assert a.risk == 0
    assert a.additive.code == "330"


@pytest.mark.parametrize("token,risk", [
    ("Partially Hydrogenated Soybean Oil", 3),
    ("Hydrogenated Vegetable Fat", 3),
    ("High Fructose Corn Syrup", 2),
    ("Artificial Flavour", 2),
    ("Palm Oil", 1),
    ("Refined Wheat Flour", 1),
    ("Maida", 1),
    ("Invert Sugar", 1),
])
def test_concerning_keywords(token, risk):
    """Keyword rules apply when no additive matches; first rule in order wins."""
    from bitecheck.evaluation import classify
    a = classify(token)
    assert a.risk == risk
    assert a.additive is None
    assert a.description


def test_partially_hydrogenated_rule_precedes_hydrogenated():
    """The more specific trans-fat rule wins over the generic one."""
    from bitecheck.evaluation import classify
    assert classify("Partially Hydrogenated Soybean Oil").description.startswith("Partially hydrogenated oils")
    assert classify("Hydrogenated Vegetable Fat").description.startswith("Hydrogenated fats")


@pytest.mark.parametrize("token", [
    "Whole Wheat Flour", "Water", "Salt", "Sugar", "Milk", "Haldi", "Jeera", "Peanuts", "Jaggery",
])
def test_good_keywords(token):
    from bitecheck.evaluation import classify
    a = classify(token)
    assert a.risk == 0
    assert a.label == "Good"
    assert a.additive is None


def test_salt_and_sugar_anchor_at_end():
    """'Salt'/'Sugar' only count as good at the end of the token."""
    from bitecheck.evaluation import classify
    assert classify("Iodised Salt").risk == 0
    assert classify("Sugar Syrup Solids").risk == 1


def test_unknown_is_neutral():
    from bitecheck.evaluation import classify
    a = classify("Edible Vegetable Oil")
    assert a.risk == 1
    assert a.label == "Neutral"
    assert a.description is None


def test_empty_token_is_neutral():
    from bitecheck.evaluation import classify
    a = classify("   ")
    assert a.risk == 1
    assert a.name == ""


def test_analyze_all_preserves_order():
    from bitecheck.evaluation import analyze_all_ingredients
    out = analyze_all_ingredients("Sugar, Salt, INS 211, INS 621")
    assert [a.name for a in out] == ["Sugar", "Salt", "INS 211", "INS 621"]
    assert [a.risk for a in out] == [0, 0, 3, 1]
    assert analyze_all_ingredients("") == []


def test_classifier_with_custom_registry(tmp_path):
    """Classifier uses the registry it is given, not the default table."""
    import json
    from bitecheck.evaluation import IngredientClassifier
    from bitecheck.knowledge import AdditiveRegistry
    path = tmp_path / "additives.json"
    path.write_text(json.dumps({"additives": [{"code": "211", "name": "Sodium Benzoate", "risk": 1}]}))
    clf = IngredientClassifier(AdditiveRegistry(path))
    assert clf.classify("INS 211").risk == 1
    assert clf.classify("INS 621").additive is None


def test_assessment_to_dict():
    from bitecheck.evaluation import classify
    d = classify("INS 621").to_dict()
    assert d["name"] == "INS 621"
    assert d["risk"] == 1
    assert d["additive"]["code"] == "621"
