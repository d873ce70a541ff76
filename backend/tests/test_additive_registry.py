"""
Unit tests: additive table loading and code / name / alias / partial lookup.
Run from backend: python -m pytest tests/test_additive_registry.py -v
"""
import json
import tempfile
import pytest
from pathlib import Path


def test_default_table_loads():
    """Packaged table has the INS additives with valid risk levels."""
    from bitecheck.knowledge import get_default_registry
    reg = get_default_registry()
    assert len(reg) >= 80
    assert reg.get_version() == "1.0"
    assert all(a.risk in (0, 1, 2, 3) for a in reg.all_additives())


def test_code_prefix_variants_resolve_same_additive():
    """'INS 211', 'E211', 'e-211' and '211' are the same additive."""
    from bitecheck.knowledge import get_default_registry
    reg = get_default_registry()
    target = reg.lookup("211")
    assert target is not None
    assert target.name == "Sodium Benzoate"
    for q in ("INS 211", "E211", "e-211", "ins211", " INS  211 "):
        assert reg.lookup(q) is target, q


def test_letter_suffixed_code():
    from bitecheck.knowledge import get_default_registry
    reg = get_default_registry()
    assert reg.lookup("INS 150d").name == "Sulfite Ammonia Caramel"
    assert reg.lookup("E150A").name == "Plain Caramel"


def test_exact_name_and_alias_case_insensitive():
    from bitecheck.knowledge import get_default_registry
    reg = get_default_registry()
    assert reg.lookup("MSG").code == "621"
    assert reg.lookup("Monosodium Glutamate").code == "621"
    assert reg.lookup("tartrazine").risk == 3


def test_partial_alias_inside_token():
    """An alias that appears as a word inside the token matches."""
    from bitecheck.knowledge import get_default_registry
    reg = get_default_registry()
    assert reg.lookup("Emulsifier Soy Lecithin").code == "322"
    assert reg.lookup("Preservative Sodium Benzoate").code == "211"


def test_plain_foods_do_not_match_additives():
    """Everyday ingredients never hit an additive by accidental substring."""
    from bitecheck.knowledge import get_default_registry
    reg = get_default_registry()
    for q in ("Salt", "Sugar", "Water", "Wheat Flour", "Milk Solids"):
        assert reg.lookup(q) is None, q


def test_unknown_and_empty():
    from bitecheck.knowledge import get_default_registry
    reg = get_default_registry()
    assert reg.lookup("") is None
    assert reg.lookup("   ") is None
    assert reg.lookup("INS 99999") is None


def test_custom_table_and_invalid_risk():
    """Registry loads any table path; a risk outside 0-3 is rejected."""
    from bitecheck.knowledge import AdditiveRegistry
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "additives.json"
        path.write_text(json.dumps({
            "additives_version": "test",
            "additives": [{"code": "999", "name": "Testium", "aliases": ["test gum"], "risk": 2}],
        }))
        reg = AdditiveRegistry(path)
        assert reg.get_version() == "test"
        assert reg.lookup("INS 999").name == "Testium"
        assert reg.lookup("Test Gum").code == "999"
        assert reg.get_by_code("999").risk == 2

        path.write_text(json.dumps({"additives": [{"code": "1", "name": "Bad", "risk": 7}]}))
        with pytest.raises(ValueError):
            AdditiveRegistry(path)


def test_missing_table_gives_empty_registry():
    from bitecheck.knowledge import AdditiveRegistry
    reg = AdditiveRegistry(Path("/nonexistent/additives.json"))
    assert len(reg) == 0
    assert reg.lookup("211") is None
