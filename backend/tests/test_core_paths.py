"""
Unit tests for config path resolution and env getters. Run from backend directory:
  cd backend && python -m pytest tests/test_core_paths.py -v
"""
import pytest
from pathlib import Path


def test_backend_is_current_or_on_path():
    """Ensure tests run with backend as cwd or on path so 'bitecheck' resolves."""
    try:
        from bitecheck import config
    except ImportError:
        pytest.skip("Run tests from backend directory: cd backend && python -m pytest ...")
        return
    assert config._BACKEND_DIR.is_dir()
    assert (config._BACKEND_DIR / "bitecheck").is_dir()
    assert config._REPO_ROOT.is_dir()
    assert config._REPO_ROOT.name != "bitecheck"


def test_additives_path_is_packaged(monkeypatch):
    """Additive table ships inside the package and exists."""
    from bitecheck.config import get_additives_path, _PACKAGE_DIR
    monkeypatch.delenv("ADDITIVES_PATH", raising=False)
    path = get_additives_path()
    assert path == _PACKAGE_DIR / "knowledge" / "data" / "additives.json"
    assert path.exists()


def test_product_cache_path_resolution(monkeypatch):
    """Product cache defaults to repo_root/data/products.json; env overrides it."""
    from bitecheck.config import get_product_cache_path, _REPO_ROOT
    monkeypatch.delenv("PRODUCT_CACHE_PATH", raising=False)
    assert get_product_cache_path() == _REPO_ROOT / "data" / "products.json"
    monkeypatch.setenv("PRODUCT_CACHE_PATH", "/tmp/bitecheck-products.json")
    assert get_product_cache_path() == Path("/tmp/bitecheck-products.json")


def test_timeout_defaults(monkeypatch):
    """Source timeout 5s, HTTP timeout 4s, one attempt per provider."""
    from bitecheck.config import get_source_timeout, get_http_timeout, get_provider_max_retries
    for name in ("SOURCE_TIMEOUT_SECONDS", "PROVIDER_HTTP_TIMEOUT_SECONDS", "PROVIDER_MAX_RETRIES"):
        monkeypatch.delenv(name, raising=False)
    assert get_source_timeout() == 5.0
    assert get_http_timeout() == 4.0
    assert get_provider_max_retries() == 1


def test_invalid_number_falls_back_to_default(monkeypatch):
    """Garbage in numeric env vars logs and keeps the default."""
    from bitecheck.config import get_source_timeout, get_scan_min_votes
    monkeypatch.setenv("SOURCE_TIMEOUT_SECONDS", "fast")
    monkeypatch.setenv("SCAN_MIN_VOTES", "three")
    assert get_source_timeout() == 5.0
    assert get_scan_min_votes() == 3


def test_max_retries_never_below_one(monkeypatch):
    from bitecheck.config import get_provider_max_retries
    monkeypatch.setenv("PROVIDER_MAX_RETRIES", "0")
    assert get_provider_max_retries() == 1


def test_flags_and_credentials(monkeypatch):
    """Flags accept 1/true/yes; credentials are stripped strings."""
    from bitecheck.config import (
        get_resolver_concurrent,
        get_open_food_facts_enabled,
        get_fatsecret_credentials,
        get_edamam_credentials,
    )
    monkeypatch.setenv("RESOLVER_CONCURRENT", "yes")
    monkeypatch.setenv("OPEN_FOOD_FACTS_ENABLED", "false")
    monkeypatch.setenv("FATSECRET_CLIENT_ID", " id ")
    monkeypatch.setenv("FATSECRET_CLIENT_SECRET", "secret")
    monkeypatch.delenv("EDAMAM_APP_ID", raising=False)
    monkeypatch.delenv("EDAMAM_APP_KEY", raising=False)
    assert get_resolver_concurrent() is True
    assert get_open_food_facts_enabled() is False
    assert get_fatsecret_credentials() == ("id", "secret")
    assert get_edamam_credentials() == ("", "")


def test_scanner_defaults(monkeypatch):
    from bitecheck.config import (
        get_scan_settle_seconds,
        get_scan_vote_window_seconds,
        get_scan_min_votes,
        get_scan_rounds_needed,
    )
    for name in ("SCAN_SETTLE_SECONDS", "SCAN_VOTE_WINDOW_SECONDS", "SCAN_MIN_VOTES", "SCAN_ROUNDS_NEEDED"):
        monkeypatch.delenv(name, raising=False)
    assert get_scan_settle_seconds() == 1.0
    assert get_scan_vote_window_seconds() == 1.2
    assert get_scan_min_votes() == 3
    assert get_scan_rounds_needed() == 2
